"""Workout status for calendar cells."""

from __future__ import annotations

from app.calendar.models import CalendarDay, WorkoutStatus, WorkoutSummary


def resolve_status(day: CalendarDay) -> WorkoutStatus:
    """Derive the display status of a calendar cell.

    Checks run in a fixed order, so completion outranks the rest-day check:
    a completed workout with zero exercises is COMPLETED, not REST.
    """
    workout = day.workout
    if workout is None:
        return WorkoutStatus.NONE
    if workout.is_completed:
        return WorkoutStatus.COMPLETED
    # A workout record with no exercises is a designated rest day
    if workout.exercise_count == 0:
        return WorkoutStatus.REST
    return WorkoutStatus.SCHEDULED


def completion_rate(workout: WorkoutSummary) -> int:
    """Completion percentage; falls back to 100/0 from is_completed when not reported."""
    if workout.completion_rate is not None:
        return workout.completion_rate
    return 100 if workout.is_completed else 0
