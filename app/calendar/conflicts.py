"""Date conflict detection for calendar workouts.

A user may hold at most one workout per calendar date. This module finds
every candidate that would break that rule, so a batch write can report all
clashes at once instead of failing on the first one.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date as date_type
from typing import Literal

from pydantic import BaseModel, Field

from app.calendar.models import ScheduleAssignment, WorkoutSummary


class Conflict(BaseModel):
    """Represents a candidate workout that cannot be placed on its date."""

    date: date_type = Field(description="Date of the conflict")
    existing_workout_id: int | None = Field(default=None, description="ID of the workout already on that date (if persisted)")
    existing_title: str = Field(description="Title of the workout or candidate already holding the date")
    candidate_title: str = Field(description="Title of the candidate that was rejected")
    reason: Literal["date_occupied", "duplicate_candidate"] = Field(description="Reason for the conflict")


def detect_date_conflicts(
    existing: Mapping[date_type, WorkoutSummary],
    candidates: Sequence[ScheduleAssignment],
) -> list[Conflict]:
    """Detect candidates whose date is already taken.

    A candidate conflicts if a persisted workout exists on its date, or if an
    earlier candidate in the same batch already claimed the date.

    Args:
        existing: Persisted workouts keyed by date (already filtered by user)
        candidates: Assignments to place, in priority order

    Returns:
        List of conflicts, in candidate order
    """
    conflicts: list[Conflict] = []
    claimed: dict[date_type, str] = {}

    for candidate in candidates:
        occupant = existing.get(candidate.date)
        if occupant is not None:
            conflicts.append(
                Conflict(
                    date=candidate.date,
                    existing_workout_id=occupant.id,
                    existing_title=occupant.title,
                    candidate_title=candidate.slot_name,
                    reason="date_occupied",
                )
            )
            continue

        if candidate.date in claimed:
            conflicts.append(
                Conflict(
                    date=candidate.date,
                    existing_title=claimed[candidate.date],
                    candidate_title=candidate.slot_name,
                    reason="duplicate_candidate",
                )
            )
            continue

        claimed[candidate.date] = candidate.slot_name

    return conflicts


def conflicting_dates(conflicts: Sequence[Conflict]) -> set[date_type]:
    return {c.date for c in conflicts}
