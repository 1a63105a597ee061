"""Calendar API endpoints.

Thin HTTP layer over the calendar engine: grids, stats, workout mutations
and plan creation. Dates travel as YYYY-MM-DD strings and are parsed once,
here. Engine errors map to HTTP status codes in register_exception_handlers.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Query, Request, Response, status
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from app.api.dependencies.auth import get_current_user_id
from app.calendar.date_math import month_bounds, parse_date, week_end, week_start
from app.calendar.errors import (
    CalendarError,
    DateConflictError,
    ExerciseNotFoundError,
    InvalidDateFormatError,
    UpstreamFailureError,
    WorkoutNotFoundError,
)
from app.calendar.grid import build_month, build_week, day_names, week_range_label
from app.calendar.models import CalendarMonth, CalendarWeek, ExerciseTarget, WorkoutPreview, WorkoutStats
from app.calendar.repository import SqlWorkoutRepository, WorkoutRepository
from app.calendar.reschedule import RescheduleCoordinator
from app.calendar.status import resolve_status
from app.planner.calendar_persistence import persist_first_week
from app.planner.errors import PlannerError

router = APIRouter(prefix="/calendar", tags=["calendar"])


class CreateWorkoutRequest(BaseModel):
    date: str = Field(description="Workout date (YYYY-MM-DD)")
    title: str = Field(min_length=1)
    exercises: list[str | ExerciseTarget] = Field(default_factory=list)


class CreateWorkoutResponse(BaseModel):
    id: int


class RecordSetRequest(BaseModel):
    weight: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)


class RecordSetResponse(BaseModel):
    id: int


class RescheduleRequest(BaseModel):
    from_date: str = Field(description="Current workout date (YYYY-MM-DD)")
    to_date: str = Field(description="Target date (YYYY-MM-DD)")
    reason: str | None = None


class CreatePlanRequest(BaseModel):
    name: str = Field(min_length=1)
    frequency: int
    slots: list[str]
    exercises_by_slot: dict[str, list[str | ExerciseTarget]] = Field(default_factory=dict)


def get_repository() -> WorkoutRepository:
    return SqlWorkoutRepository()


def get_coordinator(repository: WorkoutRepository = Depends(get_repository)) -> RescheduleCoordinator:
    return RescheduleCoordinator(repository)


def _grid_payload(grid: CalendarWeek | CalendarMonth) -> dict[str, Any]:
    """Serialize a grid and attach the display status of every day."""
    payload = grid.model_dump(mode="json")
    if isinstance(grid, CalendarWeek):
        pairs = [(grid, payload)]
    else:
        pairs = list(zip(grid.weeks, payload["weeks"], strict=True))
    for week, week_payload in pairs:
        for day, day_payload in zip(week.days, week_payload["days"], strict=True):
            day_payload["status"] = str(resolve_status(day))
    payload["day_names"] = day_names(short=True)
    return payload


@router.get("/week")
def get_week(
    date: str = Query(description="Any date inside the week (YYYY-MM-DD)"),
    user_id: str = Depends(get_current_user_id),
    repository: WorkoutRepository = Depends(get_repository),
) -> dict[str, Any]:
    anchor = parse_date(date)
    workouts = repository.fetch_workouts(user_id, week_start(anchor), week_end(anchor))
    week = build_week(anchor, workouts)
    payload = _grid_payload(week)
    payload["label"] = week_range_label(week.start_date)
    return payload


@router.get("/month")
def get_month(
    year: int = Query(ge=1, le=9999),
    month: int = Query(ge=0, le=11, description="0-based month (0 = January)"),
    user_id: str = Depends(get_current_user_id),
    repository: WorkoutRepository = Depends(get_repository),
) -> dict[str, Any]:
    first, last = month_bounds(year, month)
    workouts = repository.fetch_workouts(user_id, week_start(first), week_end(last))
    return _grid_payload(build_month(year, month, workouts))


@router.get("/stats", response_model=WorkoutStats)
def get_stats(
    start: str,
    end: str,
    user_id: str = Depends(get_current_user_id),
    repository: WorkoutRepository = Depends(get_repository),
) -> WorkoutStats:
    return repository.workout_stats(user_id, parse_date(start), parse_date(end))


@router.post("/workouts", status_code=status.HTTP_201_CREATED, response_model=CreateWorkoutResponse)
async def create_workout(
    request: CreateWorkoutRequest,
    user_id: str = Depends(get_current_user_id),
    coordinator: RescheduleCoordinator = Depends(get_coordinator),
) -> CreateWorkoutResponse:
    workout_id = await coordinator.create(
        user_id,
        parse_date(request.date),
        request.title,
        exercises=request.exercises,
    )
    return CreateWorkoutResponse(id=workout_id)


@router.get("/workouts/{workout_id}", response_model=WorkoutPreview)
def get_workout_preview(
    workout_id: int,
    user_id: str = Depends(get_current_user_id),
    repository: WorkoutRepository = Depends(get_repository),
) -> WorkoutPreview:
    return repository.get_workout_preview(user_id, workout_id)


@router.put(
    "/workouts/{workout_id}/exercises/{exercise_id}/sets/{set_index}",
    response_model=RecordSetResponse,
)
def record_set(
    workout_id: int,
    exercise_id: int,
    set_index: int,
    request: RecordSetRequest,
    user_id: str = Depends(get_current_user_id),
    repository: WorkoutRepository = Depends(get_repository),
) -> RecordSetResponse:
    set_id = repository.record_set(
        user_id,
        workout_id,
        exercise_id,
        set_index,
        weight=request.weight,
        reps=request.reps,
    )
    return RecordSetResponse(id=set_id)


@router.post("/workouts/{workout_id}/reschedule", status_code=status.HTTP_204_NO_CONTENT)
async def reschedule_workout(
    workout_id: int,
    request: RescheduleRequest,
    user_id: str = Depends(get_current_user_id),
    coordinator: RescheduleCoordinator = Depends(get_coordinator),
) -> Response:
    await coordinator.reschedule(
        user_id,
        workout_id,
        parse_date(request.from_date),
        parse_date(request.to_date),
        request.reason,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/workouts/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workout(
    workout_id: int,
    user_id: str = Depends(get_current_user_id),
    coordinator: RescheduleCoordinator = Depends(get_coordinator),
) -> Response:
    await coordinator.delete(user_id, workout_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/workouts/{workout_id}/complete", status_code=status.HTTP_204_NO_CONTENT)
async def complete_workout(
    workout_id: int,
    user_id: str = Depends(get_current_user_id),
    coordinator: RescheduleCoordinator = Depends(get_coordinator),
) -> Response:
    await coordinator.mark_completed(user_id, workout_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/plans", status_code=status.HTTP_201_CREATED)
async def create_plan(
    request: CreatePlanRequest,
    user_id: str = Depends(get_current_user_id),
    repository: WorkoutRepository = Depends(get_repository),
) -> dict[str, Any]:
    result = await persist_first_week(
        repository,
        user_id,
        request.name,
        request.frequency,
        request.slots,
        exercises_by_slot=request.exercises_by_slot,
    )
    return {
        "plan_id": result.plan_id,
        "created": result.created,
        "skipped": result.skipped,
        "workout_ids": result.workout_ids,
        "conflicts": [c.model_dump(mode="json") for c in result.conflicts],
    }


_STATUS_BY_ERROR: list[tuple[type[CalendarError], int]] = [
    (InvalidDateFormatError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (DateConflictError, status.HTTP_409_CONFLICT),
    (WorkoutNotFoundError, status.HTTP_404_NOT_FOUND),
    (ExerciseNotFoundError, status.HTTP_404_NOT_FOUND),
    (UpstreamFailureError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


async def _calendar_error_handler(_request: Request, exc: CalendarError) -> JSONResponse:
    status_code = next(
        (code for error_type, code in _STATUS_BY_ERROR if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= 500:
        logger.error(f"[CALENDAR] Request failed: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "error_code": exc.code})


async def _planner_error_handler(_request: Request, exc: PlannerError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "error_code": exc.code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map engine errors to JSON error responses."""
    app.add_exception_handler(CalendarError, _calendar_error_handler)
    app.add_exception_handler(PlannerError, _planner_error_handler)
