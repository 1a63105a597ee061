"""Tests for calendar loading and stale fetch handling."""

from datetime import date

import pytest

from app.calendar.errors import UpstreamFailureError
from app.calendar.loader import CalendarLoader, build_view
from app.calendar.models import CalendarMonth, CalendarWeek, ViewMode, WorkoutStatus, WorkoutSummary
from app.calendar.navigation import NavigationController, NavigationState
from app.calendar.status import resolve_status

TODAY = date(2024, 1, 17)


class _NavigatingRepository:
    """Fetch stub that moves the view while the fetch is in flight."""

    def __init__(self, controller: NavigationController):
        self.controller = controller
        self.calls: list[tuple[date, date]] = []

    def fetch_workouts(self, user_id, start, end):
        self.calls.append((start, end))
        if len(self.calls) == 1:
            self.controller.go_to_next()
        return {}


class _FailingRepository:
    def fetch_workouts(self, user_id, start, end):
        raise TimeoutError("fetch timed out")


def test_build_view_week_and_month():
    week_state = NavigationState.create(date(2024, 1, 17))
    assert isinstance(build_view(week_state, {}, today=TODAY), CalendarWeek)

    month_state = NavigationState.create(date(2024, 1, 17), ViewMode.MONTH)
    month = build_view(month_state, {}, today=TODAY)
    assert isinstance(month, CalendarMonth)
    assert (month.year, month.month) == (2024, 0)


@pytest.mark.asyncio
async def test_load_week_from_repository(repository, user_id):
    workout_id = repository.create_workout(user_id, date(2024, 1, 16), "Upper A", exercises=["Bench"])
    controller = NavigationController(initial_date=TODAY)
    loader = CalendarLoader(repository, controller, user_id)

    week = await loader.load(today=TODAY)

    assert isinstance(week, CalendarWeek)
    tuesday = week.days[1]
    assert tuesday.workout is not None
    assert tuesday.workout.id == workout_id
    assert resolve_status(tuesday) == WorkoutStatus.SCHEDULED
    assert [d.date for d in week.days if d.is_today] == [TODAY]


@pytest.mark.asyncio
async def test_load_month_includes_adjacent_days(repository, user_id):
    repository.create_workout(user_id, date(2024, 1, 30), "Lower A")
    controller = NavigationController(initial_date=date(2024, 2, 10), view_mode=ViewMode.MONTH)
    loader = CalendarLoader(repository, controller, user_id)

    month = await loader.load(today=TODAY)

    assert isinstance(month, CalendarMonth)
    day = month.weeks[0].days[1]
    assert day.date == date(2024, 1, 30)
    assert day.workout is not None
    assert resolve_status(day) == WorkoutStatus.REST


@pytest.mark.asyncio
async def test_stale_fetch_is_discarded(user_id):
    controller = NavigationController(initial_date=TODAY)
    repository = _NavigatingRepository(controller)
    loader = CalendarLoader(repository, controller, user_id)

    assert await loader.load(today=TODAY) is None

    week = await loader.load(today=TODAY)
    assert isinstance(week, CalendarWeek)
    assert week.start_date == date(2024, 1, 22)
    assert repository.calls == [
        (date(2024, 1, 15), date(2024, 1, 21)),
        (date(2024, 1, 22), date(2024, 1, 28)),
    ]


@pytest.mark.asyncio
async def test_fetch_failure_is_upstream_failure(user_id):
    loader = CalendarLoader(_FailingRepository(), NavigationController(initial_date=TODAY), user_id)
    with pytest.raises(UpstreamFailureError):
        await loader.load(today=TODAY)


def test_summary_attached_unchanged():
    summary = WorkoutSummary(id=3, title="Upper B", is_completed=True, exercise_count=5)
    state = NavigationState.create(date(2024, 1, 17))
    week = build_view(state, {date(2024, 1, 18): summary}, today=TODAY)
    assert week.days[3].workout == summary
