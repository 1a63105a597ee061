"""Calendar view models.

These are ephemeral values recomputed on every navigation or data refresh.
They are never stored and never mutated after construction.

Day of week follows date.weekday(): 0 = Monday ... 6 = Sunday.
"""

from __future__ import annotations

from datetime import date as date_type
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ViewMode(StrEnum):
    """Calendar view granularity."""

    WEEK = "week"
    MONTH = "month"


class WorkoutStatus(StrEnum):
    """Display status of a calendar cell."""

    NONE = "none"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    REST = "rest"


class WorkoutSummary(BaseModel):
    """Summary of a persisted workout, as returned by a range fetch.

    Attributes:
        id: Workout record ID
        title: Workout title (template slot name or user-entered)
        is_completed: Whether the workout was marked completed
        exercise_count: Number of exercises attached; 0 marks a rest day
        duration_minutes: Logged duration, if any
        completion_rate: Percentage of the workout completed (0-100), if known
    """

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    is_completed: bool = False
    exercise_count: int = Field(default=0, ge=0)
    duration_minutes: int | None = Field(default=None, ge=0)
    completion_rate: int | None = Field(default=None, ge=0, le=100)


class CalendarDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date_type
    day_of_week: int = Field(ge=0, le=6)
    is_today: bool
    is_current_period: bool
    workout: WorkoutSummary | None = None


class CalendarWeek(BaseModel):
    """One Monday-Sunday row of a calendar grid."""

    model_config = ConfigDict(frozen=True)

    week_index: int = Field(ge=1)
    days: tuple[CalendarDay, ...]
    start_date: date_type
    end_date: date_type

    @model_validator(mode="after")
    def _check_complete_week(self) -> CalendarWeek:
        if len(self.days) != 7:
            raise ValueError(f"A calendar week must have 7 days, got {len(self.days)}")
        if self.days[0].day_of_week != 0:
            raise ValueError(f"A calendar week must start on Monday, got {self.days[0].date}")
        if self.days[0].date != self.start_date or self.days[-1].date != self.end_date:
            raise ValueError("Week start/end dates do not match its days")
        return self


class CalendarMonth(BaseModel):
    """A month grid: complete weeks covering every day of the month.

    Attributes:
        year: Calendar year
        month: 0-based month (0 = January)
        month_name: English month name
        weeks: 4 to 6 complete weeks; leading/trailing days may belong to adjacent months
        total_days: Number of days in the month
    """

    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(ge=0, le=11)
    month_name: str
    weeks: tuple[CalendarWeek, ...] = Field(min_length=4, max_length=6)
    total_days: int

    @property
    def days(self) -> list[CalendarDay]:
        return [day for week in self.weeks for day in week.days]


class ScheduleAssignment(BaseModel):
    """One planned session: a template slot placed on a concrete date."""

    model_config = ConfigDict(frozen=True)

    date: date_type
    slot_name: str


class WorkoutStats(BaseModel):
    """Aggregate workout statistics for a date range."""

    total_workouts: int = 0
    completed_workouts: int = 0
    completion_rate: float = 0.0
    total_duration: int = 0
    average_duration: float = 0.0


class ExerciseTarget(BaseModel):
    """An exercise to attach to a new workout, with optional targets."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    target_sets: int | None = Field(default=None, ge=1)
    target_reps: int | None = Field(default=None, ge=1)


class ExercisePreview(BaseModel):
    """One exercise of a workout preview.

    completed_sets counts logged sets that carry both a weight and a rep count.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    target_sets: int | None = None
    target_reps: int | None = None
    completed_sets: int = Field(default=0, ge=0)


class WorkoutPreview(BaseModel):
    """Detailed view of a single workout, shown when a calendar cell is opened."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    date: date_type
    is_completed: bool
    duration_minutes: int | None = None
    notes: str | None = None
    exercises: tuple[ExercisePreview, ...] = ()
