"""Workout persistence for the calendar engine.

WorkoutRepository is the contract the calendar core needs from storage.
SqlWorkoutRepository implements it with SQLAlchemy. All methods are
synchronous; async callers run them in a worker thread.

Failures leave this module as typed calendar errors:
- unique (user_id, date) violations -> DateConflictError
- unknown or foreign workout ids -> WorkoutNotFoundError
- exercises outside the referenced workout -> ExerciseNotFoundError
- any other database failure -> UpstreamFailureError
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.calendar.errors import DateConflictError, ExerciseNotFoundError, UpstreamFailureError, WorkoutNotFoundError
from app.calendar.models import ExercisePreview, ExerciseTarget, WorkoutPreview, WorkoutStats, WorkoutSummary
from app.calendar.stats import summarize_workouts
from app.db.models import Exercise, ExerciseSet, Workout, WorkoutPlan
from app.db.session import get_session

SessionFactory = Callable[[], AbstractContextManager[Session]]
ExerciseInput = str | ExerciseTarget


@dataclass(frozen=True)
class WorkoutRecord:
    """Stored workout fields the coordinator needs to validate a mutation."""

    id: int
    user_id: str
    date: date
    title: str
    is_completed: bool
    notes: str | None


class WorkoutRepository(Protocol):
    """Persistence contract consumed by the calendar core."""

    def fetch_workouts(self, user_id: str, start: date, end: date) -> dict[date, WorkoutSummary]: ...

    def find_by_date(self, user_id: str, workout_date: date) -> int | None: ...

    def get_workout(self, user_id: str, workout_id: int) -> WorkoutRecord: ...

    def get_workout_preview(self, user_id: str, workout_id: int) -> WorkoutPreview: ...

    def create_workout(
        self,
        user_id: str,
        workout_date: date,
        title: str,
        *,
        plan_id: int | None = None,
        notes: str | None = None,
        exercises: Sequence[ExerciseInput] | None = None,
    ) -> int: ...

    def reschedule_workout(self, user_id: str, workout_id: int, to_date: date, note: str) -> None: ...

    def delete_workout(self, user_id: str, workout_id: int) -> None: ...

    def mark_completed(self, user_id: str, workout_id: int) -> None: ...

    def record_set(
        self,
        user_id: str,
        workout_id: int,
        exercise_id: int,
        set_index: int,
        *,
        weight: float | None = None,
        reps: int | None = None,
    ) -> int: ...

    def create_plan(self, user_id: str, name: str, frequency: int) -> int: ...

    def workout_stats(self, user_id: str, start: date, end: date) -> WorkoutStats: ...


def _is_unique_violation(error: IntegrityError) -> bool:
    error_msg = str(error).lower()
    return "unique" in error_msg or "duplicate" in error_msg


def _append_note(existing: str | None, note: str) -> str:
    if not existing:
        return note
    return f"{existing}\n{note}"


def _build_exercise(order_index: int, spec: ExerciseInput) -> Exercise:
    if isinstance(spec, str):
        return Exercise(name=spec, order_index=order_index)
    return Exercise(
        name=spec.name,
        order_index=order_index,
        target_sets=spec.target_sets,
        target_reps=spec.target_reps,
    )


def _completed_sets(exercise: Exercise) -> int:
    return sum(1 for logged in exercise.sets if logged.weight and logged.reps)


class SqlWorkoutRepository:
    """SQLAlchemy-backed workout repository."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory or get_session

    @staticmethod
    def _load(session: Session, user_id: str, workout_id: int) -> Workout:
        workout = session.execute(
            select(Workout).where(Workout.id == workout_id, Workout.user_id == user_id)
        ).scalar_one_or_none()
        if workout is None:
            raise WorkoutNotFoundError(workout_id)
        return workout

    def fetch_workouts(self, user_id: str, start: date, end: date) -> dict[date, WorkoutSummary]:
        """Get workouts between start and end (inclusive), keyed by date."""
        stmt = (
            select(Workout, func.count(Exercise.id))
            .outerjoin(Exercise, Exercise.workout_id == Workout.id)
            .where(Workout.user_id == user_id, Workout.date >= start, Workout.date <= end)
            .group_by(Workout.id)
            .order_by(Workout.date)
        )
        try:
            with self._session_factory() as session:
                rows = session.execute(stmt).all()
                workouts = {
                    workout.date: WorkoutSummary(
                        id=workout.id,
                        title=workout.title,
                        is_completed=workout.is_completed,
                        exercise_count=exercise_count,
                        duration_minutes=workout.duration_minutes,
                        completion_rate=100 if workout.is_completed else None,
                    )
                    for workout, exercise_count in rows
                }
        except SQLAlchemyError as e:
            logger.error("[CALENDAR] Range fetch failed", user_id=user_id, error=repr(e))
            raise UpstreamFailureError("fetch_workouts", str(e)) from e

        logger.debug(
            f"[CALENDAR] Fetched {len(workouts)} workouts",
            user_id=user_id,
            start=start.isoformat(),
            end=end.isoformat(),
        )
        return workouts

    def find_by_date(self, user_id: str, workout_date: date) -> int | None:
        try:
            with self._session_factory() as session:
                return session.execute(
                    select(Workout.id).where(Workout.user_id == user_id, Workout.date == workout_date)
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise UpstreamFailureError("find_by_date", str(e)) from e

    def get_workout(self, user_id: str, workout_id: int) -> WorkoutRecord:
        try:
            with self._session_factory() as session:
                workout = self._load(session, user_id, workout_id)
                return WorkoutRecord(
                    id=workout.id,
                    user_id=workout.user_id,
                    date=workout.date,
                    title=workout.title,
                    is_completed=workout.is_completed,
                    notes=workout.notes,
                )
        except SQLAlchemyError as e:
            raise UpstreamFailureError("get_workout", str(e)) from e

    def get_workout_preview(self, user_id: str, workout_id: int) -> WorkoutPreview:
        """Get one workout with its exercises, targets and completed-set counts.

        A set counts as completed once both its weight and reps are logged.

        Raises:
            WorkoutNotFoundError: If the workout does not exist or belongs to another user
        """
        stmt = (
            select(Workout)
            .options(selectinload(Workout.exercises).selectinload(Exercise.sets))
            .where(Workout.id == workout_id, Workout.user_id == user_id)
        )
        try:
            with self._session_factory() as session:
                workout = session.execute(stmt).scalar_one_or_none()
                if workout is None:
                    raise WorkoutNotFoundError(workout_id)
                return WorkoutPreview(
                    id=workout.id,
                    title=workout.title,
                    date=workout.date,
                    is_completed=workout.is_completed,
                    duration_minutes=workout.duration_minutes,
                    notes=workout.notes,
                    exercises=tuple(
                        ExercisePreview(
                            id=exercise.id,
                            name=exercise.name,
                            target_sets=exercise.target_sets,
                            target_reps=exercise.target_reps,
                            completed_sets=_completed_sets(exercise),
                        )
                        for exercise in workout.exercises
                    ),
                )
        except SQLAlchemyError as e:
            logger.error("[CALENDAR] Workout preview failed", user_id=user_id, workout_id=workout_id, error=repr(e))
            raise UpstreamFailureError("get_workout_preview", str(e)) from e

    def create_workout(
        self,
        user_id: str,
        workout_date: date,
        title: str,
        *,
        plan_id: int | None = None,
        notes: str | None = None,
        exercises: Sequence[ExerciseInput] | None = None,
    ) -> int:
        """Insert a workout. The (user_id, date) unique constraint rejects a second workout on the date."""
        try:
            with self._session_factory() as session:
                workout = Workout(
                    user_id=user_id,
                    plan_id=plan_id,
                    date=workout_date,
                    title=title,
                    is_completed=False,
                    notes=notes,
                    exercises=[_build_exercise(index, spec) for index, spec in enumerate(exercises or [])],
                )
                session.add(workout)
                session.flush()
                workout_id = workout.id
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise DateConflictError(workout_date) from e
            raise UpstreamFailureError("create_workout", str(e)) from e
        except SQLAlchemyError as e:
            raise UpstreamFailureError("create_workout", str(e)) from e

        logger.info("[CALENDAR] Workout created", user_id=user_id, workout_id=workout_id, date=workout_date.isoformat())
        return workout_id

    def reschedule_workout(self, user_id: str, workout_id: int, to_date: date, note: str) -> None:
        try:
            with self._session_factory() as session:
                workout = self._load(session, user_id, workout_id)
                workout.date = to_date
                workout.notes = _append_note(workout.notes, note)
                session.flush()
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise DateConflictError(to_date) from e
            raise UpstreamFailureError("reschedule_workout", str(e)) from e
        except SQLAlchemyError as e:
            raise UpstreamFailureError("reschedule_workout", str(e)) from e

    def delete_workout(self, user_id: str, workout_id: int) -> None:
        try:
            with self._session_factory() as session:
                workout = self._load(session, user_id, workout_id)
                session.delete(workout)
        except SQLAlchemyError as e:
            raise UpstreamFailureError("delete_workout", str(e)) from e

    def mark_completed(self, user_id: str, workout_id: int) -> None:
        try:
            with self._session_factory() as session:
                workout = self._load(session, user_id, workout_id)
                workout.is_completed = True
        except SQLAlchemyError as e:
            raise UpstreamFailureError("mark_completed", str(e)) from e

    def record_set(
        self,
        user_id: str,
        workout_id: int,
        exercise_id: int,
        set_index: int,
        *,
        weight: float | None = None,
        reps: int | None = None,
    ) -> int:
        """Log weight and reps for one set of an exercise, replacing any earlier values for that set.

        Raises:
            ExerciseNotFoundError: If the exercise is not part of the user's workout
        """
        try:
            with self._session_factory() as session:
                exercise = session.execute(
                    select(Exercise)
                    .join(Workout, Exercise.workout_id == Workout.id)
                    .where(Exercise.id == exercise_id, Workout.id == workout_id, Workout.user_id == user_id)
                ).scalar_one_or_none()
                if exercise is None:
                    raise ExerciseNotFoundError(workout_id, exercise_id)

                logged = session.execute(
                    select(ExerciseSet).where(ExerciseSet.exercise_id == exercise_id, ExerciseSet.set_index == set_index)
                ).scalar_one_or_none()
                if logged is None:
                    logged = ExerciseSet(exercise_id=exercise_id, set_index=set_index)
                    session.add(logged)
                logged.weight = weight
                logged.reps = reps
                session.flush()
                set_id = logged.id
        except SQLAlchemyError as e:
            raise UpstreamFailureError("record_set", str(e)) from e

        logger.debug("[CALENDAR] Set recorded", user_id=user_id, exercise_id=exercise_id, set_index=set_index)
        return set_id

    def create_plan(self, user_id: str, name: str, frequency: int) -> int:
        try:
            with self._session_factory() as session:
                plan = WorkoutPlan(user_id=user_id, name=name, frequency=frequency)
                session.add(plan)
                session.flush()
                return plan.id
        except SQLAlchemyError as e:
            raise UpstreamFailureError("create_plan", str(e)) from e

    def workout_stats(self, user_id: str, start: date, end: date) -> WorkoutStats:
        return summarize_workouts(self.fetch_workouts(user_id, start, end).values())
