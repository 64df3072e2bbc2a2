"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of datetime.now() (naive, local timezone) or
    datetime.utcnow() (naive, deprecated in Python 3.12).

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes
    (SQLite returns naive values even for timezone=True columns).

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def utc_day_bounds(dt: datetime) -> tuple[datetime, datetime]:
    """
    Return the [start, end) bounds of the UTC calendar day containing dt.

    Args:
        dt: Any datetime (naive values are treated as UTC)

    Returns:
        Tuple of (midnight of that day, midnight of the next day), both UTC-aware
    """
    aware = ensure_utc(dt)
    start = aware.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)
