from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from impact_dashboard.config import AppConfig
from impact_dashboard.io.fetch import fetch_graph_data
from impact_dashboard.models import Project, ProjectGraphData
from impact_dashboard.report.options import apply_date_range
from impact_dashboard.report.render import (
    GraphProperties,
    build_graph_properties,
    init_properties,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionChange:
    added: list[Project]
    removed: list[Project]


def unique_projects(projects: Sequence[Project]) -> list[Project]:
    """Drop repeated project ids, keeping the first occurrence."""
    unique: dict[str, Project] = {}
    for project in projects:
        unique.setdefault(project.project_id, project)
    return list(unique.values())


def selection_changes(
    previous: Sequence[Project],
    current: Sequence[Project],
) -> SelectionChange:
    previous_ids = {project.project_id for project in previous}
    current_ids = {project.project_id for project in current}
    return SelectionChange(
        added=[project for project in current if project.project_id not in previous_ids],
        removed=[project for project in previous if project.project_id not in current_ids],
    )


class GraphSession:
    """Tracks the selected projects and rebuilds the graph on every change."""

    def __init__(self, config: AppConfig, **request_kwargs: Any) -> None:
        self.config = config
        self.request_kwargs = request_kwargs
        self.selected: list[Project] = []
        self.graph_data: dict[str, ProjectGraphData] = {}
        self.date_range: tuple[datetime, datetime] | None = None
        self.properties: GraphProperties = init_properties(config.chart)

    @property
    def should_show_chart(self) -> bool:
        return bool(self.selected)

    async def apply_selection(self, projects: Sequence[Project]) -> GraphProperties:
        projects = unique_projects(projects)
        change = selection_changes(self.selected, projects)
        fetched = await fetch_graph_data(
            [project.project_id for project in change.added],
            **self.request_kwargs,
        )
        for data in fetched:
            self.graph_data[data.project_id] = data
        for project in change.removed:
            self.graph_data.pop(project.project_id, None)
        self.selected = projects
        LOGGER.info(
            "Selection changed: %d added, %d removed, %d shown",
            len(change.added),
            len(change.removed),
            len(self.selected),
        )
        return self._rebuild()

    def set_date_range(self, start: datetime, end: datetime) -> GraphProperties:
        self.date_range = (start, end)
        return self._rebuild()

    def _rebuild(self) -> GraphProperties:
        ordered = [
            self.graph_data[project.project_id]
            for project in self.selected
            if project.project_id in self.graph_data
        ]
        properties = build_graph_properties(
            ordered,
            chart=self.config.chart,
            timezone=self.config.time.timezone,
        )
        if self.date_range is not None:
            properties.options = apply_date_range(properties.options, *self.date_range)
        self.properties = properties
        return properties
