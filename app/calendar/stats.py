"""Workout statistics over a date range."""

from __future__ import annotations

from collections.abc import Iterable

from app.calendar.models import WorkoutStats, WorkoutSummary


def summarize_workouts(workouts: Iterable[WorkoutSummary]) -> WorkoutStats:
    """Aggregate counts and durations.

    completion_rate is the percentage of workouts completed. average_duration
    is averaged over completed workouts only, since only those log a duration.
    """
    total = 0
    completed = 0
    total_duration = 0
    for workout in workouts:
        total += 1
        if workout.is_completed:
            completed += 1
        total_duration += workout.duration_minutes or 0

    return WorkoutStats(
        total_workouts=total,
        completed_workouts=completed,
        completion_rate=(completed / total) * 100 if total else 0.0,
        total_duration=total_duration,
        average_duration=total_duration / completed if completed else 0.0,
    )
