from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

import pandas as pd

from impact_dashboard.config import ChartConfig
from impact_dashboard.models import ProjectGraphData
from impact_dashboard.report.options import build_options
from impact_dashboard.report.table import build_table, graph_table_frame


@dataclass
class GraphProperties:
    rows: list[list[Any]] = field(default_factory=list)
    columns: list[Any] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "rows": json_safe(self.rows),
            "columns": json_safe(self.columns),
            "options": json_safe(self.options),
        }

    def to_frame(self) -> pd.DataFrame:
        return graph_table_frame(self.rows, self.columns)


def json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value]
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return value.isoformat()
    if hasattr(value, "item"):
        try:
            value = value.item()
        except (TypeError, ValueError):
            pass
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    return value


def init_properties(chart: ChartConfig | None = None) -> GraphProperties:
    return GraphProperties(rows=[], columns=[], options=build_options([], chart=chart))


def build_graph_properties(
    graph_data: Sequence[ProjectGraphData],
    colors: Sequence[str] | None = None,
    *,
    chart: ChartConfig | None = None,
    timezone: str | None = None,
) -> GraphProperties:
    """Rows, column headers and options for a multi-project IAM bindings chart."""
    chart = chart or ChartConfig()
    palette = list(colors) if colors else list(chart.colors)
    table = build_table(
        graph_data,
        palette,
        timezone=timezone,
        alignment=chart.alignment,
        point_size=chart.point_size,
    )
    return GraphProperties(
        rows=table.rows,
        columns=table.columns,
        options=build_options(graph_data, palette, chart=chart),
    )
