from __future__ import annotations

from collections.abc import Mapping

from impact_dashboard.models import Recommendation
from impact_dashboard.preprocess.time import truncate_to_day

DEFAULT_POINT_SIZE = 10


def matching_recommendations(
    timestamp: int,
    recommendations_by_timestamp: Mapping[int, Recommendation],
    timezone: str | None = None,
) -> list[Recommendation]:
    """Recommendations taken on the same local day as ``timestamp``, oldest first."""
    day = truncate_to_day(timestamp, timezone)
    matches = [
        (int(key), recommendation)
        for key, recommendation in recommendations_by_timestamp.items()
        if truncate_to_day(int(key), timezone) == day
    ]
    # sorted() is stable, so equal timestamps keep insertion order.
    matches = sorted(matches, key=lambda item: item[0])
    return [recommendation for _, recommendation in matches]


def format_tooltip(count: int, matching: list[Recommendation]) -> str:
    if not matching:
        return f"IAM Bindings: {count}"
    return "\n".join(recommendation.description for recommendation in matching)


def tooltip_for(
    timestamp: int,
    count: int,
    recommendations_by_timestamp: Mapping[int, Recommendation],
    timezone: str | None = None,
) -> str:
    return format_tooltip(
        count,
        matching_recommendations(timestamp, recommendations_by_timestamp, timezone),
    )


def point_style_for(
    matching: list[Recommendation],
    color: str | None,
    size: int = DEFAULT_POINT_SIZE,
) -> str | None:
    if not matching:
        return None
    if color is None:
        return f"point {{ size: {size}; shape-type: circle; visible: true; }}"
    return f"point {{ size: {size}; shape-type: circle; fill-color: {color}; visible: true; }}"
