from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import pandas as pd

from impact_dashboard.models import ProjectGraphData
from impact_dashboard.preprocess.time import day_from_millis, truncate_to_day


def unique_day_millis(
    graph_data: Sequence[ProjectGraphData],
    timezone: str | None = None,
) -> list[int]:
    truncated = pd.Series(
        [
            truncate_to_day(int(timestamp), timezone)
            for data in graph_data
            for timestamp in data.daily_counts
        ],
        dtype="int64",
    )
    ordered = truncated.drop_duplicates().sort_values(kind="stable")
    return [int(value) for value in ordered.tolist()]


def unique_days(
    graph_data: Sequence[ProjectGraphData],
    timezone: str | None = None,
) -> list[datetime]:
    """Sorted union of calendar days across every project's daily counts."""
    return [day_from_millis(millis, timezone) for millis in unique_day_millis(graph_data, timezone)]
