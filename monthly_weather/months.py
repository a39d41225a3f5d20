# ABOUTME: Month name table and date-range resolution for historical lookups.
# ABOUTME: Resolves a month to the local midnights of its most recent past occurrence.

import calendar
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone, tzinfo

from monthly_weather.errors import InvalidMonth

MONTHS: dict[str, int] = {
    "January": 0,
    "February": 1,
    "March": 2,
    "April": 3,
    "May": 4,
    "June": 5,
    "July": 6,
    "August": 7,
    "September": 8,
    "October": 9,
    "November": 10,
    "December": 11,
}


def resolve_month(month: str | int) -> int:
    """Map a month name ("January") or index (0-11) to its index."""
    if isinstance(month, bool):
        raise InvalidMonth(month)
    if isinstance(month, int):
        if 0 <= month < 12:
            return month
        raise InvalidMonth(month)
    try:
        return MONTHS[month]
    except (KeyError, TypeError):
        raise InvalidMonth(month) from None


def days_of_month(month: str | int, now: datetime | None = None, tz: tzinfo = timezone.utc) -> Iterator[datetime]:
    """Return the start of each day of the most recent occurrence of ``month``.

    Only past data is of interest: a month that has not started yet this year
    resolves to last year, while the current month resolves to this year's
    (partial) month. The final day of the month is not included.

    Args:
        month: Month name or index.
        now: Timezone-aware reference instant, defaults to the current time.
        tz: Timezone the calendar days are taken in.

    Raises:
        InvalidMonth: ``month`` is not a known month.
        ValueError: ``now`` is a naive datetime.
    """
    requested = resolve_month(month)
    if now is not None and now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    now = now.astimezone(tz) if now is not None else datetime.now(tz)

    year = now.year
    if now.month - 1 < requested:
        year -= 1

    start_of_month = datetime(year, requested + 1, 1, tzinfo=tz)
    last_day = calendar.monthrange(year, requested + 1)[1]
    end_of_month = datetime(year, requested + 1, last_day, tzinfo=tz)
    return _step_days(start_of_month, end_of_month)


def _step_days(start: datetime, end: datetime) -> Iterator[datetime]:
    # Wall-clock arithmetic on a shared tzinfo keeps local midnight across DST changes.
    day = start
    while day < end:
        yield day
        day += timedelta(days=1)
