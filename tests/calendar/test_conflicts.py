"""Tests for calendar date conflict detection."""

from datetime import date

from app.calendar.conflicts import Conflict, conflicting_dates, detect_date_conflicts
from app.calendar.models import ScheduleAssignment, WorkoutSummary


class TestDetectDateConflicts:
    """Tests for detect_date_conflicts."""

    def test_no_conflicts_on_free_dates(self):
        """Test candidates on empty dates produce no conflicts."""
        candidates = [
            ScheduleAssignment(date=date(2024, 1, 2), slot_name="Upper A"),
            ScheduleAssignment(date=date(2024, 1, 4), slot_name="Lower A"),
        ]
        assert detect_date_conflicts({}, candidates) == []

    def test_occupied_date_conflicts(self):
        """Test a candidate on a date holding a persisted workout."""
        existing = {date(2024, 1, 4): WorkoutSummary(id=7, title="Deadlift Day", exercise_count=3)}
        candidates = [
            ScheduleAssignment(date=date(2024, 1, 2), slot_name="Upper A"),
            ScheduleAssignment(date=date(2024, 1, 4), slot_name="Lower A"),
        ]
        conflicts = detect_date_conflicts(existing, candidates)
        assert conflicts == [
            Conflict(
                date=date(2024, 1, 4),
                existing_workout_id=7,
                existing_title="Deadlift Day",
                candidate_title="Lower A",
                reason="date_occupied",
            )
        ]

    def test_duplicate_candidates_conflict(self):
        """Test the second candidate for the same date loses to the first."""
        candidates = [
            ScheduleAssignment(date=date(2024, 1, 2), slot_name="Upper A"),
            ScheduleAssignment(date=date(2024, 1, 2), slot_name="Upper B"),
        ]
        conflicts = detect_date_conflicts({}, candidates)
        assert len(conflicts) == 1
        assert conflicts[0].reason == "duplicate_candidate"
        assert conflicts[0].existing_title == "Upper A"
        assert conflicts[0].existing_workout_id is None

    def test_all_conflicts_reported(self):
        """Test every clash is reported, not only the first."""
        existing = {
            date(2024, 1, 2): WorkoutSummary(id=1, title="A"),
            date(2024, 1, 4): WorkoutSummary(id=2, title="B"),
        }
        candidates = [
            ScheduleAssignment(date=date(2024, 1, 2), slot_name="Upper A"),
            ScheduleAssignment(date=date(2024, 1, 4), slot_name="Lower A"),
            ScheduleAssignment(date=date(2024, 1, 6), slot_name="Upper B"),
        ]
        conflicts = detect_date_conflicts(existing, candidates)
        assert conflicting_dates(conflicts) == {date(2024, 1, 2), date(2024, 1, 4)}
