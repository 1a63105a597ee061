"""Calendar grid construction.

Builds week and month grids from a reference date and a sparse
date -> WorkoutSummary map. Pure transformations: no I/O, no clock reads
beyond resolving "today" when the caller does not supply it.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date

from app.calendar.date_math import (
    add_days,
    check_date,
    is_today,
    iter_days,
    month_bounds,
    today_local,
    week_end,
    week_start,
)
from app.calendar.models import CalendarDay, CalendarMonth, CalendarWeek, WorkoutSummary

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

DAY_NAMES: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
DAY_NAMES_SHORT: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

WorkoutMap = Mapping[date, WorkoutSummary]


def day_names(short: bool = False) -> list[str]:
    """Monday-first column headers for a calendar grid."""
    return list(DAY_NAMES_SHORT if short else DAY_NAMES)


def _build_day(d: date, today: date, workouts: WorkoutMap, *, is_current_period: bool) -> CalendarDay:
    return CalendarDay(
        date=d,
        day_of_week=d.weekday(),
        is_today=is_today(d, today),
        is_current_period=is_current_period,
        workout=workouts.get(d),
    )


def build_week(
    anchor: date,
    workouts: WorkoutMap | None = None,
    today: date | None = None,
    week_index: int = 1,
) -> CalendarWeek:
    """Build the Monday-Sunday week containing anchor.

    In week view every day belongs to the current period.

    Args:
        anchor: Any supported date inside the requested week
        workouts: Workouts keyed by calendar date; days without an entry get no workout
        today: Date to flag as today (defaults to today in the calendar timezone)
        week_index: 1-based position of the week in its enclosing grid

    Returns:
        CalendarWeek with exactly 7 days starting on Monday

    Raises:
        DateOutOfRangeError: If anchor is outside the supported date range
    """
    workouts = workouts or {}
    today = today or today_local()
    start = week_start(check_date(anchor))
    days = tuple(
        _build_day(add_days(start, offset), today, workouts, is_current_period=True) for offset in range(7)
    )
    return CalendarWeek(week_index=week_index, days=days, start_date=start, end_date=week_end(anchor))


def build_month(
    year: int,
    month: int,
    workouts: WorkoutMap | None = None,
    today: date | None = None,
) -> CalendarMonth:
    """Build the month grid for a 0-based month.

    The grid runs from the Monday on or before the 1st to the Sunday on or
    after the last day, so every week is complete. Days outside the month
    are included with is_current_period=False.

    Args:
        year: Calendar year
        month: 0-based month (0 = January)
        workouts: Workouts keyed by calendar date
        today: Date to flag as today (defaults to today in the calendar timezone)

    Returns:
        CalendarMonth with 4, 5 or 6 complete weeks

    Raises:
        ValueError: If month is outside 0..11
        DateOutOfRangeError: If the month is outside the supported date range
    """
    workouts = workouts or {}
    today = today or today_local()
    first, last = month_bounds(year, month)
    calendar_start = week_start(first)
    calendar_end = week_end(last)

    weeks: list[CalendarWeek] = []
    current_days: list[CalendarDay] = []
    for d in iter_days(calendar_start, calendar_end):
        current_days.append(_build_day(d, today, workouts, is_current_period=d.month == month + 1))
        if len(current_days) == 7:
            weeks.append(
                CalendarWeek(
                    week_index=len(weeks) + 1,
                    days=tuple(current_days),
                    start_date=current_days[0].date,
                    end_date=current_days[-1].date,
                )
            )
            current_days = []

    return CalendarMonth(
        year=year,
        month=month,
        month_name=MONTH_NAMES[month],
        weeks=tuple(weeks),
        total_days=last.day,
    )


def week_range_label(start: date) -> str:
    """Short label for a week header, e.g. "Mon 1 - 7" or "Mon 29 - Sun 4"."""
    start = week_start(start)
    end = week_end(start)
    start_label = f"{DAY_NAMES_SHORT[start.weekday()]} {start.day}"
    if start.month == end.month:
        return f"{start_label} - {end.day}"
    return f"{start_label} - {DAY_NAMES_SHORT[end.weekday()]} {end.day}"
