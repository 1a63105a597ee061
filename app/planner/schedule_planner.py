"""Weekly schedule planner.

Places the sessions of a weekly template onto concrete dates of a 7-day
planning horizon. The placement is a fixed business rule, not derived from
locale or randomness: for a given frequency and horizon start the same
dates always come out, which keeps re-planning idempotent.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timedelta

from loguru import logger

from app.calendar.date_math import add_days
from app.calendar.models import ScheduleAssignment
from app.config.settings import settings
from app.planner.errors import EmptyTemplateError, InvalidFrequencyError

HORIZON_DAYS = 7

# Day indices relative to the horizon start (0 = first horizon day) that
# receive a session, by weekly frequency.
DAY_SELECTION: dict[int, frozenset[int]] = {
    1: frozenset({1}),
    2: frozenset({1, 4}),
    3: frozenset({1, 3, 5}),
    4: frozenset({1, 2, 4, 5}),
    5: frozenset({1, 2, 3, 4, 5}),
    6: frozenset({1, 2, 3, 4, 5, 6}),
    7: frozenset({0, 1, 2, 3, 4, 5, 6}),
}


def validate_frequency(frequency: object) -> int:
    """Return frequency as an int, or raise InvalidFrequencyError."""
    if isinstance(frequency, bool) or not isinstance(frequency, int) or frequency not in DAY_SELECTION:
        raise InvalidFrequencyError(frequency)
    return frequency


def should_schedule(day_index: int, frequency: int) -> bool:
    """Whether the horizon day at day_index receives a session."""
    return day_index in DAY_SELECTION[validate_frequency(frequency)]


def horizon_start(now: datetime | None = None, cutoff_hour: int | None = None) -> date:
    """First day of the planning horizon.

    Plans created before the cutoff hour start today; later plans start
    tomorrow. now is interpreted as wall-clock time in the calendar
    timezone; aware datetimes are converted to it first.

    Args:
        now: Current time (defaults to now in the calendar timezone)
        cutoff_hour: Local hour boundary (defaults to PLANNER_HORIZON_CUTOFF_HOUR)

    Returns:
        Horizon start date
    """
    tz = settings.tzinfo
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is not None:
        now = now.astimezone(tz)
    if cutoff_hour is None:
        cutoff_hour = settings.planner_horizon_cutoff_hour
    if now.hour < cutoff_hour:
        return now.date()
    return now.date() + timedelta(days=1)


def assign(frequency: int, slots: Sequence[str], start: date) -> list[ScheduleAssignment]:
    """Assign template slots to dates of the 7-day horizon beginning at start.

    Walks horizon days 0..6 in order; each selected day takes the next slot
    in round-robin order, wrapping when there are fewer slots than sessions.

    Args:
        frequency: Sessions per week (1-7)
        slots: Ordered slot names of the weekly template (e.g. "Upper A", "Lower A")
        start: First day of the horizon

    Returns:
        Exactly `frequency` assignments on pairwise-distinct dates, in date order

    Raises:
        InvalidFrequencyError: If frequency is outside 1..7
        EmptyTemplateError: If slots is empty
    """
    frequency = validate_frequency(frequency)
    if not slots:
        raise EmptyTemplateError()

    selected_days = DAY_SELECTION[frequency]
    assignments: list[ScheduleAssignment] = []
    for day_index in range(HORIZON_DAYS):
        if day_index not in selected_days:
            continue
        slot_name = slots[len(assignments) % len(slots)]
        assignments.append(ScheduleAssignment(date=add_days(start, day_index), slot_name=slot_name))

    logger.debug(
        "[PLANNER] Assigned weekly template",
        frequency=frequency,
        slots=len(slots),
        horizon_start=start.isoformat(),
        dates=[a.date.isoformat() for a in assignments],
    )
    return assignments


plan = assign
