from __future__ import annotations

import pytest

from impact_dashboard.models import (
    Project,
    ProjectMetaData,
    RecommenderType,
    SortBy,
    SortDirection,
    parse_project,
    parse_project_graph_data,
    project_graph_data_payload,
    sort_projects,
)

PROJECTS = [
    Project("beta", "prj-b", 2, ProjectMetaData(70)),
    Project("Alpha", "prj-c", 3, ProjectMetaData(100)),
    Project("gamma", "prj-a", 1, ProjectMetaData(85)),
]


@pytest.mark.parametrize(
    ("field_name", "direction", "expected"),
    [
        (SortBy.iam_bindings, SortDirection.descending, ["prj-c", "prj-a", "prj-b"]),
        (SortBy.iam_bindings, SortDirection.ascending, ["prj-b", "prj-a", "prj-c"]),
        (SortBy.name, SortDirection.ascending, ["prj-c", "prj-b", "prj-a"]),
        (SortBy.project_id, SortDirection.descending, ["prj-c", "prj-b", "prj-a"]),
        (SortBy.project_number, SortDirection.ascending, ["prj-a", "prj-b", "prj-c"]),
    ],
)
def test_sort_projects(field_name: SortBy, direction: SortDirection, expected: list[str]) -> None:
    result = sort_projects(PROJECTS, field_name, direction)

    assert [project.project_id for project in result] == expected


def test_parse_project_graph_data_converts_string_keys() -> None:
    data = parse_project_graph_data(
        {
            "projectId": "prj-1",
            "dateToNumberIAMBindings": {"1000": 5, "2000": "7"},
            "dateToRecommendationTaken": {"2000": {"description": "Rec-1"}},
        }
    )

    assert data.daily_counts == {1000: 5, 2000: 7}
    recommendation = data.daily_recommendations[2000]
    assert recommendation.timestamp == 2000
    assert recommendation.category is RecommenderType.IAM_BINDING


def test_parse_project_graph_data_rejects_bad_payloads() -> None:
    with pytest.raises(ValueError, match="projectId"):
        parse_project_graph_data({"dateToNumberIAMBindings": {}})
    with pytest.raises(ValueError, match="dateToNumberIAMBindings"):
        parse_project_graph_data({"projectId": "p", "dateToNumberIAMBindings": {"x": 1}})
    with pytest.raises(ValueError, match="recommenderType"):
        parse_project_graph_data(
            {
                "projectId": "p",
                "dateToRecommendationTaken": {
                    "1": {"description": "d", "recommenderType": "FIREWALL"}
                },
            }
        )


def test_graph_data_payload_round_trips_through_parser() -> None:
    data = parse_project_graph_data(
        {
            "projectId": "prj-1",
            "dateToNumberIAMBindings": {"1000": 5},
            "dateToRecommendationTaken": {"1000": {"projectId": "prj-1", "description": "Rec"}},
        }
    )

    assert parse_project_graph_data(project_graph_data_payload(data)) == data


def test_parse_project_reads_metadata() -> None:
    project = parse_project(
        {
            "name": "Project 1",
            "projectId": "project-1",
            "projectNumber": "1",
            "metaData": {"averageIAMBindingsInPastYear": 100},
        }
    )

    assert project == Project("Project 1", "project-1", 1, ProjectMetaData(100.0))


def test_parse_project_graph_data_rejects_fractional_numbers() -> None:
    with pytest.raises(ValueError, match=r"dateToNumberIAMBindings\[0\]"):
        parse_project_graph_data({"projectId": "a", "dateToNumberIAMBindings": {"0": 150.9}})
    with pytest.raises(ValueError, match="acceptedTimestamp"):
        parse_project_graph_data(
            {
                "projectId": "a",
                "dateToRecommendationTaken": {
                    "0": {"description": "d", "acceptedTimestamp": 1.5}
                },
            }
        )

    data = parse_project_graph_data({"projectId": "a", "dateToNumberIAMBindings": {"0": 150.0}})
    assert data.daily_counts == {0: 150}
