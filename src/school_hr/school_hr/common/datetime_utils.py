from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Optional

_HHMM = re.compile(r"(\d{1,2}):(\d{2})")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value))


def parse_hhmm_minutes(value: Optional[str]) -> Optional[int]:
    """Minutes since midnight for an 'HH:MM' string; None when missing or unreadable."""
    if not value:
        return None
    match = _HHMM.search(str(value))
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end]; nothing when end < start."""
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def inclusive_days(start: date, end: date) -> int:
    if end < start:
        return 0
    return (end - start).days + 1


def month_bounds(month: int, year: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def count_overlap_days(start: date, end: date, month: int, year: int) -> int:
    month_start, month_end = month_bounds(month, year)
    return inclusive_days(max(start, month_start), min(end, month_end))


def working_days_in_month(month: int, year: int, *, weekend_days: Iterable[int]) -> int:
    weekend = set(weekend_days)
    month_start, month_end = month_bounds(month, year)
    return sum(1 for d in iter_dates(month_start, month_end) if d.weekday() not in weekend)


def full_years_between(start: date, end: date) -> int:
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return max(years, 0)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
