"""Tests for workout statistics."""

import pytest

from app.calendar.models import WorkoutSummary
from app.calendar.stats import summarize_workouts


def test_empty_range():
    stats = summarize_workouts([])
    assert stats.total_workouts == 0
    assert stats.completion_rate == 0.0
    assert stats.average_duration == 0.0


def test_rates_and_durations():
    workouts = [
        WorkoutSummary(id=1, title="Upper A", is_completed=True, duration_minutes=60),
        WorkoutSummary(id=2, title="Lower A", is_completed=True, duration_minutes=45),
        WorkoutSummary(id=3, title="Upper B"),
        WorkoutSummary(id=4, title="Lower B"),
    ]
    stats = summarize_workouts(workouts)
    assert stats.total_workouts == 4
    assert stats.completed_workouts == 2
    assert stats.completion_rate == pytest.approx(50.0)
    assert stats.total_duration == 105
    assert stats.average_duration == pytest.approx(52.5)


def test_accepts_any_iterable():
    stats = summarize_workouts(w for w in [WorkoutSummary(id=1, title="A", is_completed=True)])
    assert stats.completion_rate == pytest.approx(100.0)
