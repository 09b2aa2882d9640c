from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

import pandas as pd

from impact_dashboard.config import DEFAULT_COLORS
from impact_dashboard.features.days import unique_day_millis
from impact_dashboard.features.recommendations import (
    DEFAULT_POINT_SIZE,
    format_tooltip,
    matching_recommendations,
    point_style_for,
)
from impact_dashboard.models import ProjectGraphData
from impact_dashboard.preprocess.time import day_from_millis, truncate_to_day

LOGGER = logging.getLogger(__name__)

Alignment = Literal["padded", "positional"]
CELLS_PER_PROJECT = 3
TIME_COLUMN = "Time"
TOOLTIP_COLUMN: dict[str, str] = {"type": "string", "role": "tooltip"}
STYLE_COLUMN: dict[str, str] = {"type": "string", "role": "style"}
EMPTY_TRIPLET: tuple[None, None, None] = (None, None, None)


@dataclass(frozen=True)
class GraphTable:
    rows: list[list[Any]]
    columns: list[Any]


def point_color(colors: Sequence[str], ordinal: int) -> str | None:
    # Points index the palette directly; series colors in build_options cycle.
    if ordinal < len(colors):
        return colors[ordinal]
    return None


def _triplet(
    timestamp: int,
    count: int,
    data: ProjectGraphData,
    color: str | None,
    timezone: str | None,
    point_size: int,
) -> tuple[int, str, str | None]:
    matching = matching_recommendations(timestamp, data.daily_recommendations, timezone)
    return (
        count,
        format_tooltip(count, matching),
        point_style_for(matching, color, size=point_size),
    )


def _row_index(day_index: dict[int, int], day: int, project_id: str) -> int:
    try:
        return day_index[day]
    except KeyError as exc:
        raise RuntimeError(
            f"No table row for day {day} of project '{project_id}'; day bucketing is inconsistent"
        ) from exc


def build_rows(
    graph_data: Sequence[ProjectGraphData],
    colors: Sequence[str] | None = None,
    *,
    timezone: str | None = None,
    alignment: Alignment = "padded",
    point_size: int = DEFAULT_POINT_SIZE,
) -> list[list[Any]]:
    """Build one row per calendar day: ``[day, count, tooltip, style, ...]``.

    ``padded`` writes every project into its own three-cell slot and fills days a
    project has no data for with ``None``. ``positional`` appends triplets in
    iteration order, so sparse projects shift later projects' cells left.
    """
    if alignment not in ("padded", "positional"):
        raise ValueError(f"Unsupported alignment: {alignment}")
    palette = list(colors) if colors else list(DEFAULT_COLORS)
    days = unique_day_millis(graph_data, timezone)
    day_index = {day: index for index, day in enumerate(days)}

    if alignment == "positional":
        rows: list[list[Any]] = [[day_from_millis(day, timezone)] for day in days]
        for ordinal, data in enumerate(graph_data):
            color = point_color(palette, ordinal)
            for key, count in data.daily_counts.items():
                timestamp = int(key)
                day = truncate_to_day(timestamp, timezone)
                row = rows[_row_index(day_index, day, data.project_id)]
                row.extend(_triplet(timestamp, count, data, color, timezone, point_size))
        return rows

    slots: list[list[tuple[Any, Any, Any]]] = [
        [EMPTY_TRIPLET] * len(graph_data) for _ in days
    ]
    for ordinal, data in enumerate(graph_data):
        color = point_color(palette, ordinal)
        latest: dict[int, tuple[int, int]] = {}
        entries = sorted(
            ((int(key), count) for key, count in data.daily_counts.items()),
            key=lambda item: item[0],
        )
        for timestamp, count in entries:
            day = truncate_to_day(timestamp, timezone)
            if day in latest:
                LOGGER.debug(
                    "Project %s has several counts on day %s; keeping timestamp %s",
                    data.project_id,
                    day,
                    timestamp,
                )
            latest[day] = (timestamp, count)
        for day, (timestamp, count) in latest.items():
            row_index = _row_index(day_index, day, data.project_id)
            slots[row_index][ordinal] = _triplet(
                timestamp, count, data, color, timezone, point_size
            )

    rows = []
    for day, day_slots in zip(days, slots):
        row: list[Any] = [day_from_millis(day, timezone)]
        for triplet in day_slots:
            row.extend(triplet)
        rows.append(row)
    LOGGER.debug("Built %d rows for %d projects", len(rows), len(graph_data))
    return rows


def build_columns(graph_data: Sequence[ProjectGraphData]) -> list[Any]:
    columns: list[Any] = [TIME_COLUMN]
    for data in graph_data:
        columns.extend([data.project_id, dict(TOOLTIP_COLUMN), dict(STYLE_COLUMN)])
    return columns


def build_table(
    graph_data: Sequence[ProjectGraphData],
    colors: Sequence[str] | None = None,
    *,
    timezone: str | None = None,
    alignment: Alignment = "padded",
    point_size: int = DEFAULT_POINT_SIZE,
) -> GraphTable:
    return GraphTable(
        rows=build_rows(
            graph_data,
            colors,
            timezone=timezone,
            alignment=alignment,
            point_size=point_size,
        ),
        columns=build_columns(graph_data),
    )


def _frame_column_names(columns: Sequence[Any]) -> list[str]:
    names: list[str] = [TIME_COLUMN]
    project_ids = [
        str(column)
        for index, column in enumerate(columns[1:])
        if index % CELLS_PER_PROJECT == 0
    ]
    duplicated = sorted(
        {project_id for project_id in project_ids if project_ids.count(project_id) > 1}
    )
    if duplicated:
        raise ValueError(f"Duplicate project columns: {duplicated}")
    for project_id in project_ids:
        names.extend([project_id, f"{project_id}.tooltip", f"{project_id}.style"])
    return names


def graph_table_frame(rows: Sequence[Sequence[Any]], columns: Sequence[Any]) -> pd.DataFrame:
    """Flat table export; positional rows are cut or padded to the header width."""
    names = _frame_column_names(columns)
    records = [list(row[: len(names)]) + [None] * (len(names) - len(row)) for row in rows]
    return pd.DataFrame(records, columns=names)
