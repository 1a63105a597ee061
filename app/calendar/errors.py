"""Typed errors raised by the calendar engine.

Every failure that crosses the engine boundary is one of these types.
Expected, user-actionable outcomes (DATE_CONFLICT, NOT_FOUND) are kept
separate from UPSTREAM_FAILURE so callers can choose whether to retry.

Error codes:
- INVALID_DATE_FORMAT: A date string is not a valid YYYY-MM-DD calendar date
- DATE_OUT_OF_RANGE: A valid date whose week or month grid cannot be represented
- DATE_CONFLICT: The target date already holds a workout for the user
- NOT_FOUND: The referenced workout or exercise does not exist for the user
- UPSTREAM_FAILURE: The persistence layer failed or timed out
"""

from __future__ import annotations

from datetime import date


class CalendarError(Exception):
    """Base exception for all calendar engine errors.

    Attributes:
        code: Stable machine-readable error code
        message: Human-readable description
    """

    code = "CALENDAR_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidDateFormatError(CalendarError, ValueError):
    """Raised when a string is not a valid YYYY-MM-DD calendar date."""

    code = "INVALID_DATE_FORMAT"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid calendar date {value!r}: expected YYYY-MM-DD")


class DateOutOfRangeError(InvalidDateFormatError):
    """Raised when a date is valid but its calendar week or month grid cannot be represented."""

    code = "DATE_OUT_OF_RANGE"

    def __init__(self, value: object, earliest: date, latest: date):
        self.value = value
        CalendarError.__init__(
            self,
            f"Calendar date {value} is outside the supported range {earliest.isoformat()} to {latest.isoformat()}",
        )


class DateConflictError(CalendarError):
    """Raised when a create or reschedule targets a date that already holds a workout."""

    code = "DATE_CONFLICT"

    def __init__(self, conflict_date: date, existing_workout_id: int | None = None):
        self.date = conflict_date
        self.existing_workout_id = existing_workout_id
        super().__init__(f"A workout is already scheduled for {conflict_date.isoformat()}")


class WorkoutNotFoundError(CalendarError):
    """Raised when an operation references a workout the user does not own or that does not exist."""

    code = "NOT_FOUND"

    def __init__(self, workout_id: int):
        self.workout_id = workout_id
        super().__init__(f"Workout not found: {workout_id}")


class ExerciseNotFoundError(CalendarError):
    """Raised when an exercise does not exist inside the referenced workout of the user."""

    code = "NOT_FOUND"

    def __init__(self, workout_id: int, exercise_id: int):
        self.workout_id = workout_id
        self.exercise_id = exercise_id
        super().__init__(f"Exercise {exercise_id} not found in workout {workout_id}")


class UpstreamFailureError(CalendarError):
    """Raised when the persistence layer fails. The original error is chained as __cause__."""

    code = "UPSTREAM_FAILURE"

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        message = f"Persistence call failed during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
