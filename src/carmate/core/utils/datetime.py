"""Datetime utilities for consistent parsing, day arithmetic and formatting."""

import math
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from dateutil.parser import isoparse

SECONDS_PER_DAY = timedelta(days=1).total_seconds()


def parse_iso_datetime(value: str | datetime | None) -> datetime | None:
    """
    Parse an ISO 8601 datetime string into a timezone-aware datetime.

    Naive values are interpreted as UTC.

    Args:
        value: An ISO 8601 datetime string, a datetime object, or None.

    Returns:
        A timezone-aware datetime, or None if parsing fails.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    if not isinstance(value, str):
        return None

    try:
        dt = isoparse(value)
    except (ValueError, TypeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def whole_days_between(start: datetime, end: datetime) -> int:
    """Number of whole days from ``start`` to ``end``, floored (negative when ``end`` is earlier)."""
    start = parse_iso_datetime(start)
    end = parse_iso_datetime(end)
    return math.floor((end - start).total_seconds() / SECONDS_PER_DAY)


def format_day_month_year(value: datetime, tz: str | ZoneInfo | None = None) -> str:
    """Format as ``DD/MM/YYYY``, converting to ``tz`` first when given."""
    value = parse_iso_datetime(value)
    if tz is not None:
        value = value.astimezone(ZoneInfo(tz) if isinstance(tz, str) else tz)
    return value.strftime("%d/%m/%Y")
