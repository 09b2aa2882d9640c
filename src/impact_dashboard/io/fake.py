from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import requests

from impact_dashboard.models import (
    Project,
    ProjectGraphData,
    ProjectMetaData,
    Recommendation,
    RecommenderType,
)

LOGGER = logging.getLogger(__name__)

PROJECT_SUMMARIES_URL = "/list-project-summaries"


def project_data_url(project_id: str) -> str:
    return f'/get-project-data?id="{project_id}"'


@dataclass
class FakeResponses:
    """Canned responses keyed by request URL, scoped to whoever holds the object."""

    responses: dict[str, Any] = field(default_factory=dict)

    def set_response(self, key: str, value: Any) -> None:
        self.responses[key] = value

    def get(self, key: str) -> Any:
        try:
            return self.responses[key]
        except KeyError as exc:
            raise KeyError(f"No fake response registered for {key}") from exc

    def __contains__(self, key: object) -> bool:
        return key in self.responses


@dataclass(frozen=True)
class FakeResponse:
    value: Any

    def json(self) -> Any:
        return self.value


def _send(
    url: str,
    method: str,
    body: Any,
    timeout: float,
) -> requests.Response:
    with requests.Session() as session:
        response = session.request(
            method,
            url,
            json=body,
            headers={"content-type": "application/json"},
            timeout=timeout,
        )
    response.raise_for_status()
    return response


async def request(
    url: str,
    method: str,
    body: Any = None,
    use_fake: bool = True,
    *,
    responses: FakeResponses | None = None,
    base_url: str = "",
    timeout: float = 30.0,
) -> FakeResponse | requests.Response:
    """Send a request, or resolve it from ``responses`` when ``use_fake`` is set.

    Both paths return an object whose ``json()`` yields the decoded payload.
    """
    if use_fake:
        if responses is None:
            raise ValueError("use_fake requires a FakeResponses store")
        # Yield once so fake requests complete out of submission order like real ones.
        await asyncio.sleep(0)
        return FakeResponse(responses.get(url))

    target = f"{base_url.rstrip('/')}{url}" if base_url else url
    LOGGER.info("%s %s", method.upper(), target)
    return await asyncio.to_thread(_send, target, method.upper(), body, timeout)


def _utc_day(day: int) -> int:
    return int(datetime(2020, 6, day, tzinfo=timezone.utc).timestamp()) * 1000


def _fake_graph_data(
    project_id: str,
    counts: list[int],
    recommendation_days: list[int],
    doubled_day: int,
) -> ProjectGraphData:
    daily_counts = {_utc_day(day): count for day, count in zip(range(1, 21), counts)}
    daily_recommendations: dict[int, Recommendation] = {}
    for index, day in enumerate(recommendation_days, start=1):
        timestamp = _utc_day(day)
        daily_recommendations[timestamp] = Recommendation(
            project_id, f"Rec {index}", RecommenderType.IAM_BINDING, timestamp
        )
    # Two recommendations on one day.
    doubled = _utc_day(doubled_day) + 1
    daily_recommendations[doubled] = Recommendation(
        project_id,
        f"Rec {len(recommendation_days) + 1}",
        RecommenderType.IAM_BINDING,
        doubled,
    )
    return ProjectGraphData(project_id, daily_counts, daily_recommendations)


def fake_project_graph_data() -> list[ProjectGraphData]:
    return [
        _fake_graph_data(
            "project-1",
            [131, 56, 84, 101, 100, 90, 66, 136, 108, 50,
             92, 136, 55, 148, 141, 64, 102, 139, 87, 57],
            recommendation_days=[5, 9, 17],
            doubled_day=17,
        ),
        _fake_graph_data(
            "project-2",
            [28, 36, 22, 62, 60, 41, 52, 27, 55, 38,
             28, 38, 34, 18, 12, 48, 47, 60, 20, 61],
            recommendation_days=[1, 9, 20],
            doubled_day=20,
        ),
    ]


def fake_project_summaries() -> list[Project]:
    return [
        Project("Project 1", "project-1", 1, ProjectMetaData(100)),
        Project("Project 2", "project-2", 2, ProjectMetaData(70)),
    ]


def fake_projects(responses: FakeResponses) -> FakeResponses:
    """Register the dev dashboard's two canned projects on ``responses``."""
    responses.set_response(PROJECT_SUMMARIES_URL, fake_project_summaries())
    for data in fake_project_graph_data():
        responses.set_response(project_data_url(data.project_id), data)
    return responses
