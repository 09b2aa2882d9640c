from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RecommenderType(str, Enum):
    IAM_BINDING = "IAM_BINDING"


@dataclass(frozen=True)
class Recommendation:
    project_id: str
    description: str
    category: RecommenderType
    timestamp: int


@dataclass(frozen=True)
class ProjectGraphData:
    """One project's daily IAM binding counts and the recommendations taken."""

    project_id: str
    daily_counts: Mapping[int, int] = field(default_factory=dict)
    daily_recommendations: Mapping[int, Recommendation] = field(default_factory=dict)


@dataclass(frozen=True)
class ProjectMetaData:
    average_iam_bindings_in_past_year: float


@dataclass(frozen=True)
class Project:
    name: str
    project_id: str
    project_number: int
    metadata: ProjectMetaData


class SortDirection(str, Enum):
    ascending = "ascending"
    descending = "descending"


class SortBy(str, Enum):
    iam_bindings = "iam_bindings"
    name = "name"
    project_id = "project_id"
    project_number = "project_number"


SORT_KEYS: dict[SortBy, Callable[[Project], Any]] = {
    SortBy.iam_bindings: lambda project: project.metadata.average_iam_bindings_in_past_year,
    SortBy.name: lambda project: project.name.casefold(),
    SortBy.project_id: lambda project: project.project_id.casefold(),
    SortBy.project_number: lambda project: project.project_number,
}


def sort_projects(
    projects: list[Project],
    field_name: SortBy,
    direction: SortDirection = SortDirection.ascending,
) -> list[Project]:
    return sorted(
        projects,
        key=SORT_KEYS[field_name],
        reverse=direction == SortDirection.descending,
    )


def _require_string(value: Any, *, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"payload field '{field_name}' must be a string")
    return value


def _require_int(value: Any, *, field_name: str) -> int:
    # JSON object keys arrive as strings, so numeric strings are accepted.
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"payload field '{field_name}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"payload field '{field_name}' must be an integer") from exc


def _require_mapping(value: Any, *, field_name: str) -> Mapping[Any, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"payload field '{field_name}' must be a mapping/object")
    return value


def parse_recommendation(payload: Mapping[str, Any], *, default_timestamp: int) -> Recommendation:
    raw_type = payload.get("recommenderType", RecommenderType.IAM_BINDING.value)
    try:
        category = RecommenderType(raw_type)
    except ValueError as exc:
        raise ValueError(f"unsupported recommenderType: {raw_type!r}") from exc
    raw_timestamp = payload.get("acceptedTimestamp")
    return Recommendation(
        project_id=_require_string(payload.get("projectId", ""), field_name="projectId"),
        description=_require_string(payload.get("description"), field_name="description"),
        category=category,
        timestamp=(
            default_timestamp
            if raw_timestamp is None
            else _require_int(raw_timestamp, field_name="acceptedTimestamp")
        ),
    )


def parse_project_graph_data(payload: Mapping[str, Any] | ProjectGraphData) -> ProjectGraphData:
    """Build ``ProjectGraphData`` from the fetch layer's JSON payload."""
    if isinstance(payload, ProjectGraphData):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError("project graph data payload must be a mapping/object")

    project_id = _require_string(payload.get("projectId"), field_name="projectId")
    raw_counts = _require_mapping(
        payload.get("dateToNumberIAMBindings"), field_name="dateToNumberIAMBindings"
    )
    raw_recommendations = _require_mapping(
        payload.get("dateToRecommendationTaken"), field_name="dateToRecommendationTaken"
    )

    daily_counts = {
        _require_int(key, field_name="dateToNumberIAMBindings key"): _require_int(
            value, field_name=f"dateToNumberIAMBindings[{key}]"
        )
        for key, value in raw_counts.items()
    }
    daily_recommendations: dict[int, Recommendation] = {}
    for key, value in raw_recommendations.items():
        timestamp = _require_int(key, field_name="dateToRecommendationTaken key")
        if isinstance(value, Recommendation):
            daily_recommendations[timestamp] = value
            continue
        if not isinstance(value, Mapping):
            raise ValueError(f"recommendation at {timestamp} must be a mapping/object")
        daily_recommendations[timestamp] = parse_recommendation(
            value, default_timestamp=timestamp
        )
    return ProjectGraphData(
        project_id=project_id,
        daily_counts=daily_counts,
        daily_recommendations=daily_recommendations,
    )


def parse_project(payload: Mapping[str, Any] | Project) -> Project:
    if isinstance(payload, Project):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError("project payload must be a mapping/object")
    metadata = _require_mapping(payload.get("metaData"), field_name="metaData")
    average = metadata.get("averageIAMBindingsInPastYear", 0)
    if isinstance(average, bool) or not isinstance(average, (int, float)):
        raise ValueError("payload field 'averageIAMBindingsInPastYear' must be numeric")
    return Project(
        name=_require_string(payload.get("name"), field_name="name"),
        project_id=_require_string(payload.get("projectId"), field_name="projectId"),
        project_number=_require_int(payload.get("projectNumber"), field_name="projectNumber"),
        metadata=ProjectMetaData(average_iam_bindings_in_past_year=float(average)),
    )


def recommendation_payload(recommendation: Recommendation) -> dict[str, Any]:
    return {
        "projectId": recommendation.project_id,
        "description": recommendation.description,
        "recommenderType": recommendation.category.value,
        "acceptedTimestamp": recommendation.timestamp,
    }


def project_graph_data_payload(data: ProjectGraphData) -> dict[str, Any]:
    return {
        "projectId": data.project_id,
        "dateToNumberIAMBindings": {str(key): value for key, value in data.daily_counts.items()},
        "dateToRecommendationTaken": {
            str(key): recommendation_payload(value)
            for key, value in data.daily_recommendations.items()
        },
    }


def project_payload(project: Project) -> dict[str, Any]:
    return {
        "name": project.name,
        "projectId": project.project_id,
        "projectNumber": project.project_number,
        "metaData": {
            "averageIAMBindingsInPastYear": project.metadata.average_iam_bindings_in_past_year
        },
    }
