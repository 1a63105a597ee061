"""Calendar date arithmetic.

Week boundaries are Monday-Sunday regardless of locale. Months are 0-based
(0 = January) wherever a (year, month) pair is passed around, matching the
calendar grid contract. All functions work on datetime.date values; there is
no time-of-day or timezone component anywhere.

Supported calendar dates run from MIN_DATE to MAX_DATE: every date in that
range has a representable week and month grid. Dates outside it, and
arithmetic that would leave it, raise DateOutOfRangeError.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterator
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from app.calendar.errors import DateOutOfRangeError, InvalidDateFormatError
from app.config.settings import settings

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

# 0001-01-01 is a Monday. The December 9999 grid would end in year 10000.
MIN_DATE = date(1, 1, 1)
MAX_DATE = date(9999, 11, 30)


def check_date(d: date) -> date:
    """Return d if it is a supported calendar date, else raise DateOutOfRangeError."""
    if not MIN_DATE <= d <= MAX_DATE:
        raise DateOutOfRangeError(d, MIN_DATE, MAX_DATE)
    return d


def week_start(d: date) -> date:
    """Return Monday of the calendar week containing d."""
    return add_days(d, -d.weekday())


def week_end(d: date) -> date:
    """Return Sunday of the calendar week containing d."""
    return add_days(week_start(d), 6)


def format_date(d: date) -> str:
    """Format a calendar date as YYYY-MM-DD."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string.

    Raises:
        InvalidDateFormatError: If value is not a string of that exact shape
            or names a day that does not exist (e.g. 2024-02-30).
        DateOutOfRangeError: If the day exists but is outside MIN_DATE..MAX_DATE.
    """
    if not isinstance(value, str) or not _DATE_RE.fullmatch(value):
        raise InvalidDateFormatError(value)
    year, month, day = (int(part) for part in value.split("-"))
    try:
        parsed = date(year, month, day)
    except ValueError as e:
        raise InvalidDateFormatError(value) from e
    return check_date(parsed)


def as_date(value: date | str) -> date:
    """Accept a date or a YYYY-MM-DD string at an ingestion boundary."""
    if isinstance(value, datetime):
        return check_date(value.date())
    if isinstance(value, date):
        return check_date(value)
    return parse_date(value)


def today_local(tz: ZoneInfo | None = None) -> date:
    """Today's calendar date in the configured calendar timezone."""
    return datetime.now(tz or settings.tzinfo).date()


def same_day(a: date, b: date) -> bool:
    """Calendar-date equality. Datetimes are reduced to their date part."""
    if isinstance(a, datetime):
        a = a.date()
    if isinstance(b, datetime):
        b = b.date()
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def is_today(d: date, today: date | None = None) -> bool:
    return same_day(d, today or today_local())


def add_days(d: date, n: int) -> date:
    try:
        return d + timedelta(days=n)
    except OverflowError as e:
        raise DateOutOfRangeError(f"{format_date(d)} {n:+d} days", MIN_DATE, MAX_DATE) from e


def add_weeks(d: date, n: int) -> date:
    return add_days(d, 7 * n)


def previous_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) of the month before; month is 0-based."""
    if month == 0:
        return year - 1, 11
    return year, month - 1


def next_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) of the month after; month is 0-based."""
    if month == 11:
        return year + 1, 0
    return year, month + 1


def first_of_month(d: date) -> date:
    return d.replace(day=1)


def month_start(year: int, month: int) -> date:
    """Day 1 of a 0-based month.

    Raises:
        ValueError: If month is outside 0..11
        DateOutOfRangeError: If the month is outside the supported range
    """
    if not 0 <= month <= 11:
        raise ValueError(f"Month must be between 0 and 11, got {month}")
    if not MIN_DATE.year <= year <= MAX_DATE.year:
        raise DateOutOfRangeError(f"{year:04d}-{month + 1:02d}", MIN_DATE, MAX_DATE)
    return check_date(date(year, month + 1, 1))


def last_of_month(year: int, month: int) -> date:
    """Last day of a 0-based month."""
    return date(year, month + 1, calendar.monthrange(year, month + 1)[1])


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a 0-based month inside the supported range."""
    return month_start(year, month), last_of_month(year, month)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end, inclusive."""
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)
