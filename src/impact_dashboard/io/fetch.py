from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from impact_dashboard.io.fake import PROJECT_SUMMARIES_URL, project_data_url, request
from impact_dashboard.models import (
    Project,
    ProjectGraphData,
    parse_project,
    parse_project_graph_data,
)

LOGGER = logging.getLogger(__name__)


async def fetch_project_graph_data(project_id: str, **request_kwargs: Any) -> ProjectGraphData:
    response = await request(project_data_url(project_id), "GET", **request_kwargs)
    data = parse_project_graph_data(response.json())
    if data.project_id != project_id:
        raise ValueError(
            f"Requested project '{project_id}' but response describes '{data.project_id}'"
        )
    return data


async def fetch_graph_data(
    project_ids: Sequence[str],
    **request_kwargs: Any,
) -> list[ProjectGraphData]:
    """Fetch every project concurrently; results follow ``project_ids`` order."""
    if not project_ids:
        return []
    LOGGER.info("Fetching graph data for %d projects", len(project_ids))
    results = await asyncio.gather(
        *(fetch_project_graph_data(project_id, **request_kwargs) for project_id in project_ids)
    )
    return list(results)


async def list_project_summaries(**request_kwargs: Any) -> list[Project]:
    response = await request(PROJECT_SUMMARIES_URL, "GET", **request_kwargs)
    payload = response.json()
    if not isinstance(payload, list):
        raise ValueError("project summaries payload must be a list")
    return [parse_project(item) for item in payload]
