"""Date arithmetic for recurring tasks.

Pure functions, no I/O. Occurrences are anchored on the parent's due date:
the k-th occurrence is ``advance(due_date, pattern, k)``, so a month that
clamps (Jan 31 -> Feb 29) does not shift later months (Mar 31 stays Mar 31).
"""

import calendar
from collections.abc import Iterator
from datetime import datetime, timedelta

from app.domain.enums import RecurringPattern

DEFAULT_WINDOW_DAYS = 90


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the last day of the target month.

    Time of day and tzinfo are preserved.

    Args:
        value: Starting datetime.
        months: Number of months to add (may be negative).

    Returns:
        Shifted datetime (e.g. 2024-01-31 + 1 month = 2024-02-29).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def advance(value: datetime, pattern: RecurringPattern, steps: int = 1) -> datetime:
    """Move ``value`` forward by ``steps`` periods of ``pattern``.

    Raises:
        ValueError: If pattern is NONE (no period to advance by).
    """
    if pattern == RecurringPattern.DAILY:
        return value + timedelta(days=steps)
    if pattern == RecurringPattern.WEEKLY:
        return value + timedelta(weeks=steps)
    if pattern == RecurringPattern.MONTHLY:
        return add_months(value, steps)
    raise ValueError(f"Cannot advance a date by recurring pattern {pattern!r}")


def default_end_date(
    due_date: datetime, window_days: int = DEFAULT_WINDOW_DAYS
) -> datetime:
    """Generation bound used when a recurring task has no explicit end date."""
    return due_date + timedelta(days=window_days)


def occurrence_dates(
    due_date: datetime,
    pattern: RecurringPattern,
    end_date: datetime,
) -> Iterator[datetime]:
    """Yield occurrence dates strictly after ``due_date`` and not after ``end_date``.

    The due date itself is never yielded. Nothing is yielded when
    ``end_date`` is before ``due_date`` or pattern is NONE.
    """
    if pattern == RecurringPattern.NONE or end_date < due_date:
        return
    step = 1
    current = advance(due_date, pattern, step)
    while current <= end_date:
        yield current
        step += 1
        current = advance(due_date, pattern, step)
