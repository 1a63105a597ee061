from __future__ import annotations

from datetime import date as date_type
from datetime import datetime, timezone

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""


class WorkoutPlan(Base):
    """A weekly training plan created from a template.

    Stores:
    - name: Template name (e.g. "Upper/Lower Split")
    - frequency: Sessions per week (1-7)
    """

    __tablename__ = "workout_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    frequency: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    workouts: Mapped[list[Workout]] = relationship(back_populates="plan")


class Workout(Base):
    """A workout scheduled on a calendar date.

    At most one workout exists per (user_id, date). The unique constraint is
    the storage-level enforcement point for that invariant; application-level
    checks only exist to produce friendlier errors earlier.
    """

    __tablename__ = "workouts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    plan_id: Mapped[int | None] = mapped_column(ForeignKey("workout_plans.id", ondelete="SET NULL"), nullable=True)

    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    plan: Mapped[WorkoutPlan | None] = relationship(back_populates="workouts")
    exercises: Mapped[list[Exercise]] = relationship(
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="Exercise.order_index",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_workouts_user_date"),
        Index("idx_workouts_user_date", "user_id", "date"),
    )


class Exercise(Base):
    """An exercise inside a workout. A workout with no exercises is a rest day."""

    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    target_sets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)

    workout: Mapped[Workout] = relationship(back_populates="exercises")
    sets: Mapped[list[ExerciseSet]] = relationship(
        back_populates="exercise",
        cascade="all, delete-orphan",
        order_by="ExerciseSet.set_index",
    )


class ExerciseSet(Base):
    """A logged set of an exercise. A set counts as completed once it has both weight and reps."""

    __tablename__ = "exercise_sets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False, index=True)
    set_index: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    reps: Mapped[int | None] = mapped_column(Integer, nullable=True)

    exercise: Mapped[Exercise] = relationship(back_populates="sets")

    __table_args__ = (UniqueConstraint("exercise_id", "set_index", name="uq_exercise_sets_exercise_index"),)
