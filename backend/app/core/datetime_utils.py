"""
Datetime helpers for timezone-aware timestamps and aggregate freshness.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Return the current datetime in UTC.

    Token issuance and freshness checks call this instead of
    datetime.now(timezone.utc) directly so tests can patch the clock.

    Returns:
        A timezone-aware datetime in UTC.
    """
    return datetime.now(timezone.utc)


def ensure_timezone_aware(dt: Optional[datetime]) -> datetime:
    """
    Ensure a datetime is timezone-aware (UTC).

    SQLite returns naive datetimes even for timezone-aware columns.

    Args:
        dt: The datetime to normalize

    Returns:
        A timezone-aware datetime in UTC

    Raises:
        ValueError: If dt is None
    """
    if dt is None:
        raise ValueError("datetime cannot be None")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def is_stale(
    as_of: Optional[datetime],
    max_age: timedelta,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check whether an aggregate snapshot is older than its refresh interval.

    A snapshot with no timestamp is treated as fresh: the source simply does
    not report its refresh time.

    Args:
        as_of: When the snapshot was last refreshed, if known
        max_age: Expected refresh interval
        now: Reference time (defaults to utc_now())

    Returns:
        True if the snapshot is known to be older than max_age
    """
    if as_of is None:
        return False
    reference = now or utc_now()
    return reference - ensure_timezone_aware(as_of) > max_age
