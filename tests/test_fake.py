from __future__ import annotations

import asyncio

import pytest

from impact_dashboard.io import fake as fake_module
from impact_dashboard.io.fake import (
    PROJECT_SUMMARIES_URL,
    FakeResponses,
    fake_project_graph_data,
    fake_projects,
    project_data_url,
    request,
)


def test_request_returns_faked_response() -> None:
    responses = FakeResponses()
    payload = {"value": False, "integer": 7}
    responses.set_response("/faked", payload)

    response = asyncio.run(request("/faked", "GET", None, True, responses=responses))

    assert response.json() is payload


def test_fake_stores_are_isolated() -> None:
    first = FakeResponses()
    second = FakeResponses()
    first.set_response("/faked", 1)

    assert "/faked" in first
    assert "/faked" not in second
    with pytest.raises(KeyError, match="/faked"):
        asyncio.run(request("/faked", "GET", responses=second))


def test_fake_request_requires_a_store() -> None:
    with pytest.raises(ValueError, match="FakeResponses"):
        asyncio.run(request("/faked", "GET"))


def test_real_request_goes_through_http(monkeypatch) -> None:
    captured: dict[str, object] = {}

    class _Response:
        def json(self) -> dict[str, int]:
            return {"ok": 1}

    def _fake_send(url: str, method: str, body: object, timeout: float) -> _Response:
        captured.update(url=url, method=method, body=body, timeout=timeout)
        return _Response()

    monkeypatch.setattr(fake_module, "_send", _fake_send)

    response = asyncio.run(
        request(
            "/list-project-summaries",
            "post",
            {"id": 1},
            False,
            base_url="http://dashboard.test/",
            timeout=5.0,
        )
    )

    assert response.json() == {"ok": 1}
    assert captured == {
        "url": "http://dashboard.test/list-project-summaries",
        "method": "POST",
        "body": {"id": 1},
        "timeout": 5.0,
    }


def test_fake_projects_registers_listing_and_project_data() -> None:
    responses = fake_projects(FakeResponses())

    summaries = responses.get(PROJECT_SUMMARIES_URL)
    assert [project.project_id for project in summaries] == ["project-1", "project-2"]
    assert project_data_url("project-1") == '/get-project-data?id="project-1"'
    project_1 = responses.get(project_data_url("project-1"))
    assert len(project_1.daily_counts) == 20
    assert len(project_1.daily_recommendations) == 4


def test_fake_project_graph_data_doubles_up_one_day() -> None:
    project_1, project_2 = fake_project_graph_data()

    descriptions = [rec.description for rec in project_1.daily_recommendations.values()]
    assert descriptions == ["Rec 1", "Rec 2", "Rec 3", "Rec 4"]
    timestamps = sorted(project_2.daily_recommendations)
    assert timestamps[-1] - timestamps[-2] == 1
