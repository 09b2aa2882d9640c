from __future__ import annotations

from datetime import datetime, tzinfo

import pandas as pd
from dateutil import tz

from impact_dashboard.config import validate_timezone

NANOS_PER_MILLI = 10**6
LOCAL_ZONE = tz.tzlocal()


def resolve_timezone(timezone: str | None) -> str | tzinfo:
    """Return the zone for ``timezone``; ``None`` stands for host local time."""
    if timezone is None:
        return LOCAL_ZONE
    return validate_timezone(timezone)


def _local_moment(millis: int, timezone: str | None) -> pd.Timestamp:
    return pd.to_datetime(millis, unit="ms", utc=True).tz_convert(resolve_timezone(timezone))


def _as_reported(value: pd.Timestamp, timezone: str | None) -> pd.Timestamp:
    # Host local time is reported as naive wall-clock time.
    return value.tz_localize(None) if timezone is None else value


def day_from_millis(millis: int, timezone: str | None = None) -> pd.Timestamp:
    return _as_reported(_local_moment(millis, timezone), timezone)


def _local_midnight(timestamp: int, timezone: str | None) -> pd.Timestamp:
    moment = _local_moment(timestamp, timezone)
    # Normalising the wall-clock date keeps 23 and 25 hour DST days intact; a
    # midnight skipped by a transition moves forward to the first valid instant.
    return moment.tz_localize(None).normalize().tz_localize(
        moment.tz,
        nonexistent="shift_forward",
        ambiguous=True,
    )


def start_of_day(timestamp: int, timezone: str | None = None) -> pd.Timestamp:
    """Local midnight of the calendar date ``timestamp`` (epoch millis) falls on."""
    return _as_reported(_local_midnight(timestamp, timezone), timezone)


def to_millis(value: datetime) -> int:
    stamp = pd.Timestamp(value)
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize(LOCAL_ZONE, nonexistent="shift_forward", ambiguous=True)
    return stamp.value // NANOS_PER_MILLI


def truncate_to_day(timestamp: int, timezone: str | None = None) -> int:
    return _local_midnight(timestamp, timezone).value // NANOS_PER_MILLI


def fall_on_same_day(time1: int, time2: int, timezone: str | None = None) -> bool:
    return truncate_to_day(time1, timezone) == truncate_to_day(time2, timezone)
