"""Calendar loading: range fetch followed by grid build.

The grid for a navigation state is built only after the fetch issued for
that state resolves, and only if the view is still on that state. A
response for a state the user already navigated away from is dropped
(last navigation wins), so a rendered grid never mixes two fetches.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import date

from loguru import logger

from app.calendar.errors import CalendarError, UpstreamFailureError
from app.calendar.grid import build_month, build_week
from app.calendar.models import CalendarMonth, CalendarWeek, ViewMode, WorkoutSummary
from app.calendar.navigation import FetchRequest, NavigationController, NavigationState, normalize
from app.calendar.repository import WorkoutRepository


def build_view(
    state: NavigationState,
    workouts: Mapping[date, WorkoutSummary],
    today: date | None = None,
) -> CalendarWeek | CalendarMonth:
    """Build the grid a navigation state shows."""
    state = normalize(state)
    if state.view_mode == ViewMode.WEEK:
        return build_week(state.reference_date, workouts, today=today)
    return build_month(state.reference_date.year, state.reference_date.month - 1, workouts, today=today)


class CalendarLoader:
    """Loads the grid for one display session."""

    def __init__(
        self,
        repository: WorkoutRepository,
        controller: NavigationController,
        user_id: str,
    ):
        self._repository = repository
        self._controller = controller
        self._user_id = user_id

    async def fetch(self, request: FetchRequest) -> dict[date, WorkoutSummary]:
        try:
            return await asyncio.to_thread(
                self._repository.fetch_workouts,
                self._user_id,
                request.start_date,
                request.end_date,
            )
        except CalendarError:
            raise
        except Exception as e:
            raise UpstreamFailureError("fetch_workouts", str(e)) from e

    async def load(self, today: date | None = None) -> CalendarWeek | CalendarMonth | None:
        """Fetch and build the grid for the current navigation state.

        Returns:
            The grid, or None if navigation changed while the fetch was in flight
        """
        request = self._controller.fetch_request()
        workouts = await self.fetch(request)

        if not self._controller.is_current(request):
            logger.debug(
                "[CALENDAR] Discarding stale range fetch",
                requested=request.tag.reference_date.isoformat(),
                current=self._controller.reference_date.isoformat(),
            )
            return None

        return build_view(request.tag, workouts, today=today)
