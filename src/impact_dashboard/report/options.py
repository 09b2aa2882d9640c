from __future__ import annotations

from collections.abc import Sequence
from copy import deepcopy
from datetime import datetime
from typing import Any

from impact_dashboard.config import ChartConfig
from impact_dashboard.models import ProjectGraphData


def series_color(colors: Sequence[str], ordinal: int) -> str:
    return colors[ordinal % len(colors)]


def build_options(
    graph_data: Sequence[ProjectGraphData],
    colors: Sequence[str] | None = None,
    *,
    height: int | None = None,
    width: int | None = None,
    chart: ChartConfig | None = None,
) -> dict[str, Any]:
    """Line chart options with one series color per project ordinal."""
    chart = chart or ChartConfig()
    palette = list(colors) if colors else list(chart.colors)
    options: dict[str, Any] = {
        "animation": {
            "duration": chart.animation_duration,
            "easing": chart.animation_easing,
            "startup": chart.animation_startup,
        },
        "legend": {"position": chart.legend_position},
        "height": chart.height if height is None else height,
        "width": chart.width if width is None else width,
        "hAxis": {"gridlines": {"color": chart.gridline_color}},
        "vAxis": {"minorGridlines": {"color": chart.gridline_color}},
        "series": {},
    }
    for ordinal, _ in enumerate(graph_data):
        options["series"][ordinal] = {"color": series_color(palette, ordinal)}
    return options


def apply_date_range(options: dict[str, Any], start: datetime, end: datetime) -> dict[str, Any]:
    if start > end:
        raise ValueError("date range start must be <= end")
    updated = deepcopy(options)
    updated.setdefault("hAxis", {})["viewWindow"] = {"min": start, "max": end}
    return updated
