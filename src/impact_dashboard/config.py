from __future__ import annotations

import os
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_COLORS = ["#3c78d8", "#cc0000", "#ff9900", "#b6d7a8", "#9c27b0"]


class TimeConfig(BaseModel):
    # None buckets days in the host's local time.
    timezone: str | None = None


class ChartConfig(BaseModel):
    colors: list[str] = Field(default_factory=lambda: list(DEFAULT_COLORS), min_length=1)
    height: int = Field(default=700, ge=1)
    width: int = Field(default=1000, ge=1)
    animation_duration: int = Field(default=250, ge=0)
    animation_easing: Literal["linear", "in", "out", "inAndOut", "ease-in-out"] = "ease-in-out"
    animation_startup: bool = True
    legend_position: str = "none"
    gridline_color: str = "white"
    point_size: int = Field(default=10, ge=1)
    alignment: Literal["padded", "positional"] = "padded"


class FetchConfig(BaseModel):
    use_fake: bool = True
    base_url: str = ""
    timeout_seconds: float = Field(default=30.0, gt=0.0)


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"
    figures_format: str = "png"
    plot: bool = True


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    time: TimeConfig = Field(default_factory=TimeConfig)
    chart: ChartConfig = Field(default_factory=ChartConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def validate_timezone(timezone_name: str | None) -> str | None:
    if timezone_name is None:
        return None
    try:
        ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"invalid timezone: {timezone_name}") from exc
    return timezone_name


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    config.time.timezone = validate_timezone(
        os.getenv("IMPACT_DASHBOARD_TIMEZONE") or config.time.timezone
    )
    config.fetch.base_url = os.getenv("IMPACT_DASHBOARD_BASE_URL") or config.fetch.base_url
    return config
