"""Tests for calendar API endpoints."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.calendar.api import get_repository
from app.calendar.errors import UpstreamFailureError
from app.main import app

HEADERS = {"X-User-Id": "user-1"}


@pytest.fixture
def client(repository):
    app.dependency_overrides[get_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_missing_user_header(client):
    response = client.get("/calendar/week", params={"date": "2024-01-03"})
    assert response.status_code == 401


def test_week_view(client, repository):
    repository.create_workout("user-1", date(2024, 1, 2), "Upper A", exercises=["Bench"])
    repository.create_workout("user-1", date(2024, 1, 4), "Rest")

    response = client.get("/calendar/week", params={"date": "2024-01-03"}, headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["start_date"] == "2024-01-01"
    assert data["end_date"] == "2024-01-07"
    assert data["label"] == "Mon 1 - 7"
    assert [d["status"] for d in data["days"]] == ["none", "scheduled", "none", "rest", "none", "none", "none"]
    assert data["days"][1]["workout"]["title"] == "Upper A"


def test_week_view_invalid_date(client):
    response = client.get("/calendar/week", params={"date": "2024-02-30"}, headers=HEADERS)
    assert response.status_code == 422
    assert response.json()["error_code"] == "INVALID_DATE_FORMAT"


def test_month_view(client, repository):
    repository.create_workout("user-1", date(2024, 1, 30), "Lower A", exercises=["Squat"])

    response = client.get("/calendar/month", params={"year": 2024, "month": 1}, headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["month_name"] == "February"
    assert data["total_days"] == 29
    first_week = data["weeks"][0]
    assert first_week["start_date"] == "2024-01-29"
    assert first_week["days"][1]["status"] == "scheduled"
    assert first_week["days"][1]["is_current_period"] is False


def test_month_out_of_range(client):
    response = client.get("/calendar/month", params={"year": 2024, "month": 12}, headers=HEADERS)
    assert response.status_code == 422


def test_week_view_past_supported_range(client):
    response = client.get("/calendar/week", params={"date": "9999-12-31"}, headers=HEADERS)
    assert response.status_code == 422
    assert response.json()["error_code"] == "DATE_OUT_OF_RANGE"


def test_month_view_at_range_edges(client):
    assert client.get("/calendar/month", params={"year": 9999, "month": 10}, headers=HEADERS).status_code == 200
    assert client.get("/calendar/month", params={"year": 1, "month": 0}, headers=HEADERS).status_code == 200

    response = client.get("/calendar/month", params={"year": 9999, "month": 11}, headers=HEADERS)
    assert response.status_code == 422
    assert response.json()["error_code"] == "DATE_OUT_OF_RANGE"


def test_create_and_conflict(client):
    response = client.post("/calendar/workouts", json={"date": "2024-01-02", "title": "Upper A"}, headers=HEADERS)
    assert response.status_code == 201
    assert isinstance(response.json()["id"], int)

    response = client.post("/calendar/workouts", json={"date": "2024-01-02", "title": "Upper B"}, headers=HEADERS)
    assert response.status_code == 409
    assert response.json()["error_code"] == "DATE_CONFLICT"


def test_reschedule_delete_complete(client, repository):
    workout_id = repository.create_workout("user-1", date(2024, 1, 2), "Upper A")
    blocking_id = repository.create_workout("user-1", date(2024, 1, 4), "Lower A")

    response = client.post(
        f"/calendar/workouts/{workout_id}/reschedule",
        json={"from_date": "2024-01-02", "to_date": "2024-01-04"},
        headers=HEADERS,
    )
    assert response.status_code == 409

    response = client.post(
        f"/calendar/workouts/{workout_id}/reschedule",
        json={"from_date": "2024-01-02", "to_date": "2024-01-03", "reason": "travel"},
        headers=HEADERS,
    )
    assert response.status_code == 204
    assert repository.get_workout("user-1", workout_id).date == date(2024, 1, 3)

    assert client.post(f"/calendar/workouts/{blocking_id}/complete", headers=HEADERS).status_code == 204
    assert repository.get_workout("user-1", blocking_id).is_completed is True

    assert client.delete(f"/calendar/workouts/{workout_id}", headers=HEADERS).status_code == 204
    response = client.delete(f"/calendar/workouts/{workout_id}", headers=HEADERS)
    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"


def test_other_users_workout_not_found(client, repository):
    workout_id = repository.create_workout("user-2", date(2024, 1, 2), "Upper A")
    response = client.post(f"/calendar/workouts/{workout_id}/complete", headers=HEADERS)
    assert response.status_code == 404


def test_workout_preview_and_sets(client, repository):
    response = client.post(
        "/calendar/workouts",
        json={
            "date": "2024-01-02",
            "title": "Upper A",
            "exercises": [{"name": "Bench", "target_sets": 3, "target_reps": 5}, "Row"],
        },
        headers=HEADERS,
    )
    workout_id = response.json()["id"]
    bench_id = repository.get_workout_preview("user-1", workout_id).exercises[0].id

    response = client.put(
        f"/calendar/workouts/{workout_id}/exercises/{bench_id}/sets/0",
        json={"weight": 100, "reps": 5},
        headers=HEADERS,
    )
    assert response.status_code == 200
    assert isinstance(response.json()["id"], int)

    response = client.get(f"/calendar/workouts/{workout_id}", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Upper A"
    assert data["date"] == "2024-01-02"
    assert [e["name"] for e in data["exercises"]] == ["Bench", "Row"]
    assert data["exercises"][0]["target_sets"] == 3
    assert data["exercises"][0]["target_reps"] == 5
    assert data["exercises"][0]["completed_sets"] == 1
    assert data["exercises"][1]["completed_sets"] == 0


def test_other_users_workout_preview_not_found(client, repository):
    workout_id = repository.create_workout("user-2", date(2024, 1, 2), "Upper A", exercises=["Bench"])
    exercise_id = repository.get_workout_preview("user-2", workout_id).exercises[0].id

    response = client.get(f"/calendar/workouts/{workout_id}", headers=HEADERS)
    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"

    response = client.put(
        f"/calendar/workouts/{workout_id}/exercises/{exercise_id}/sets/0",
        json={"weight": 100, "reps": 5},
        headers=HEADERS,
    )
    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"


def test_stats(client, repository):
    first = repository.create_workout("user-1", date(2024, 1, 2), "Upper A")
    repository.create_workout("user-1", date(2024, 1, 4), "Lower A")
    repository.mark_completed("user-1", first)

    response = client.get("/calendar/stats", params={"start": "2024-01-01", "end": "2024-01-07"}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["total_workouts"] == 2
    assert response.json()["completion_rate"] == pytest.approx(50.0)


def test_create_plan(client):
    response = client.post(
        "/calendar/plans",
        json={"name": "Upper/Lower", "frequency": 4, "slots": ["Upper", "Lower"]},
        headers=HEADERS,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["created"] + data["skipped"] == 4
    assert len(data["workout_ids"]) == data["created"]


def test_create_plan_invalid_frequency(client):
    response = client.post(
        "/calendar/plans",
        json={"name": "Upper/Lower", "frequency": 8, "slots": ["Upper", "Lower"]},
        headers=HEADERS,
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "INVALID_FREQUENCY"


class _UnavailableRepository:
    def fetch_workouts(self, user_id, start, end):
        raise UpstreamFailureError("fetch_workouts", "connection refused")


def test_upstream_failure_is_503():
    app.dependency_overrides[get_repository] = lambda: _UnavailableRepository()
    try:
        response = TestClient(app).get("/calendar/week", params={"date": "2024-01-03"}, headers=HEADERS)
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 503
    assert response.json()["error_code"] == "UPSTREAM_FAILURE"
