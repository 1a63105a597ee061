"""Reschedule coordinator.

Single entry point for workout mutations from the display layer. Each
operation re-checks the one-workout-per-date invariant immediately before
delegating the write to the repository.

The check here is optimistic: two requests for the same date can both pass
it. The repository's unique (user_id, date) constraint is what finally
rejects the loser, and that rejection surfaces as the same DateConflictError.
No locking is attempted in this layer.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from datetime import date
from typing import TypeVar

from loguru import logger

from app.calendar.date_math import as_date, format_date
from app.calendar.errors import CalendarError, DateConflictError, UpstreamFailureError, WorkoutNotFoundError
from app.calendar.repository import ExerciseInput, WorkoutRepository

T = TypeVar("T")


def build_reschedule_note(from_date: date, to_date: date, reason: str | None = None) -> str:
    """Human-readable audit note attached to a rescheduled workout."""
    note = f"Rescheduled from {format_date(from_date)} to {format_date(to_date)}"
    if reason and reason.strip():
        note = f"{note}: {reason.strip()}"
    return note


class RescheduleCoordinator:
    """Create, reschedule, delete and complete workouts without breaking the date invariant."""

    def __init__(self, repository: WorkoutRepository):
        self._repository = repository

    async def _call(self, operation: str, func: Callable[..., T], *args, **kwargs) -> T:
        """Run a repository call off the event loop and normalize its failures."""
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except (DateConflictError, WorkoutNotFoundError) as e:
            logger.warning(f"[CALENDAR] {operation} rejected ({e.code}): {e.message}")
            raise
        except CalendarError:
            raise
        except Exception as e:
            logger.error(f"[CALENDAR] {operation} failed upstream: {e!r}")
            raise UpstreamFailureError(operation, str(e)) from e

    async def create(
        self,
        user_id: str,
        workout_date: date | str,
        title: str,
        *,
        plan_id: int | None = None,
        notes: str | None = None,
        exercises: Sequence[ExerciseInput] | None = None,
    ) -> int:
        """Create a workout on a free date.

        Raises:
            DateConflictError: If the user already has a workout on workout_date
            UpstreamFailureError: If the repository call fails
        """
        workout_date = as_date(workout_date)
        existing_id = await self._call("create", self._repository.find_by_date, user_id, workout_date)
        if existing_id is not None:
            logger.warning(
                "[CALENDAR] Create rejected: date occupied",
                user_id=user_id,
                date=format_date(workout_date),
                existing_workout_id=existing_id,
            )
            raise DateConflictError(workout_date, existing_id)

        return await self._call(
            "create",
            self._repository.create_workout,
            user_id,
            workout_date,
            title,
            plan_id=plan_id,
            notes=notes,
            exercises=exercises,
        )

    async def reschedule(
        self,
        user_id: str,
        workout_id: int,
        from_date: date | str,
        to_date: date | str,
        reason: str | None = None,
    ) -> None:
        """Move a workout to another date and attach an audit note.

        from_date is what the caller believes the current date is. If storage
        disagrees, the stored date wins and a warning is logged.

        Raises:
            WorkoutNotFoundError: If the workout does not exist for the user
            DateConflictError: If another workout already occupies to_date
            UpstreamFailureError: If the repository call fails
        """
        from_date = as_date(from_date)
        to_date = as_date(to_date)

        record = await self._call("reschedule", self._repository.get_workout, user_id, workout_id)
        if record.date != from_date:
            logger.warning(
                "[CALENDAR] Reschedule from_date does not match stored date",
                workout_id=workout_id,
                from_date=format_date(from_date),
                stored_date=format_date(record.date),
            )
        if record.date == to_date:
            logger.debug("[CALENDAR] Reschedule target equals current date, nothing to do", workout_id=workout_id)
            return

        occupant_id = await self._call("reschedule", self._repository.find_by_date, user_id, to_date)
        if occupant_id is not None and occupant_id != workout_id:
            logger.warning(
                "[CALENDAR] Reschedule rejected: date occupied",
                user_id=user_id,
                workout_id=workout_id,
                to_date=format_date(to_date),
                existing_workout_id=occupant_id,
            )
            raise DateConflictError(to_date, occupant_id)

        note = build_reschedule_note(record.date, to_date, reason)
        await self._call("reschedule", self._repository.reschedule_workout, user_id, workout_id, to_date, note)
        logger.info(
            "[CALENDAR] Workout rescheduled",
            user_id=user_id,
            workout_id=workout_id,
            from_date=format_date(record.date),
            to_date=format_date(to_date),
        )

    async def delete(self, user_id: str, workout_id: int, *, missing_ok: bool = False) -> None:
        """Delete a workout.

        Args:
            missing_ok: Treat an unknown id as already deleted instead of raising

        Raises:
            WorkoutNotFoundError: If the workout does not exist and missing_ok is False
        """
        try:
            await self._call("delete", self._repository.delete_workout, user_id, workout_id)
        except WorkoutNotFoundError:
            if not missing_ok:
                raise
            logger.debug("[CALENDAR] Delete of missing workout tolerated", workout_id=workout_id)
            return
        logger.info("[CALENDAR] Workout deleted", user_id=user_id, workout_id=workout_id)

    async def mark_completed(self, user_id: str, workout_id: int) -> None:
        await self._call("mark_completed", self._repository.mark_completed, user_id, workout_id)
        logger.info("[CALENDAR] Workout marked completed", user_id=user_id, workout_id=workout_id)
