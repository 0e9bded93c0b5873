"""
Date utilities for budget calculations.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to timezone-aware UTC.

    Naive datetimes (e.g. as returned by SQLite) are interpreted as UTC.

    Args:
        value: Datetime to normalize, may be None

    Returns:
        Aware UTC datetime, or None if value was None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def whole_days(delta: timedelta) -> int:
    """
    Convert a timedelta to whole days, truncating toward zero.

    A span of -5 hours is 0 days, not -1.
    """
    return int(delta.total_seconds() / SECONDS_PER_DAY)


def days_until(end: datetime, now: datetime) -> int:
    """Whole days from now until end, never negative."""
    if end < now:
        return 0
    return whole_days(end - now)
