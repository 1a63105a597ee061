"""Plan persistence: first-week workouts for a new weekly plan.

Turns a weekly template into a plan record plus one workout per scheduled
date of the planning horizon. Dates that already hold a workout are skipped
and reported, never overwritten.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from app.calendar.conflicts import Conflict, conflicting_dates, detect_date_conflicts
from app.calendar.date_math import add_days
from app.calendar.errors import CalendarError, DateConflictError, UpstreamFailureError
from app.calendar.repository import ExerciseInput, WorkoutRepository
from app.calendar.reschedule import RescheduleCoordinator
from app.planner.schedule_planner import HORIZON_DAYS, assign, horizon_start, validate_frequency


@dataclass
class PersistResult:
    """Result of persisting a plan's first week.

    Attributes:
        plan_id: ID of the created plan record
        created: Number of workouts created
        skipped: Number of assignments skipped because their date was taken
        workout_ids: IDs of created workouts, in date order
        conflicts: Conflicts detected before or during the write
    """

    plan_id: int
    created: int
    skipped: int
    workout_ids: list[int] = field(default_factory=list)
    conflicts: list[Conflict] = field(default_factory=list)


async def persist_first_week(
    repository: WorkoutRepository,
    user_id: str,
    plan_name: str,
    frequency: int,
    slots: Sequence[str],
    *,
    now: datetime | None = None,
    cutoff_hour: int | None = None,
    exercises_by_slot: Mapping[str, Sequence[ExerciseInput]] | None = None,
) -> PersistResult:
    """Create a plan and schedule its first week of workouts.

    Args:
        repository: Workout repository
        user_id: Owner of the plan
        plan_name: Template name, recorded on the plan and in workout notes
        frequency: Sessions per week (1-7)
        slots: Ordered slot names of the weekly template
        now: Plan creation time (defaults to now in the calendar timezone)
        cutoff_hour: Horizon cutoff hour (defaults to PLANNER_HORIZON_CUTOFF_HOUR)
        exercises_by_slot: Exercises (names or ExerciseTarget) to attach to each slot's workouts

    Returns:
        PersistResult with created/skipped counts

    Raises:
        InvalidFrequencyError: If frequency is outside 1..7
        EmptyTemplateError: If slots is empty
        UpstreamFailureError: If the repository fails
    """
    frequency = validate_frequency(frequency)
    start = horizon_start(now, cutoff_hour)
    assignments = assign(frequency, slots, start)
    horizon_end = add_days(start, HORIZON_DAYS - 1)

    try:
        existing = await asyncio.to_thread(repository.fetch_workouts, user_id, start, horizon_end)
        plan_id = await asyncio.to_thread(repository.create_plan, user_id, plan_name, frequency)
    except CalendarError:
        raise
    except Exception as e:
        raise UpstreamFailureError("persist_first_week", str(e)) from e

    conflicts = detect_date_conflicts(existing, assignments)
    blocked = conflicting_dates(conflicts)
    coordinator = RescheduleCoordinator(repository)
    exercises_by_slot = exercises_by_slot or {}

    result = PersistResult(
        plan_id=plan_id,
        created=0,
        skipped=sum(1 for a in assignments if a.date in blocked),
        conflicts=list(conflicts),
    )
    for assignment in assignments:
        if assignment.date in blocked:
            continue
        try:
            workout_id = await coordinator.create(
                user_id,
                assignment.date,
                assignment.slot_name,
                plan_id=plan_id,
                notes=f"Generated from {plan_name} template",
                exercises=exercises_by_slot.get(assignment.slot_name),
            )
        except DateConflictError as e:
            # Lost a race with a concurrent write after the range fetch
            result.skipped += 1
            result.conflicts.append(
                Conflict(
                    date=assignment.date,
                    existing_workout_id=e.existing_workout_id,
                    existing_title="",
                    candidate_title=assignment.slot_name,
                    reason="date_occupied",
                )
            )
            continue
        result.created += 1
        result.workout_ids.append(workout_id)

    logger.info(
        "[PLANNER] First week persisted",
        user_id=user_id,
        plan_id=plan_id,
        horizon_start=start.isoformat(),
        horizon_end=horizon_end.isoformat(),
        created=result.created,
        skipped=result.skipped,
    )
    return result
