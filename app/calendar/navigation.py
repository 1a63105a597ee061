"""Calendar navigation state.

NavigationState is an immutable value. Transition functions take a state and
return a new, already-normalized state: in week view the reference date is
always that week's Monday, in month view it is always day 1 of the month.

NavigationController holds the state for one display session and applies
transitions one at a time. There is no module-level state, so any number of
independent calendar views can coexist. A transition that would leave the
supported date range raises DateOutOfRangeError and the state is kept.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

from loguru import logger

from app.calendar.date_math import (
    add_weeks,
    check_date,
    first_of_month,
    month_bounds,
    month_start,
    next_month,
    previous_month,
    today_local,
    week_end,
    week_start,
)
from app.calendar.models import ViewMode


@dataclass(frozen=True)
class NavigationState:
    """Current position of a calendar view.

    Attributes:
        reference_date: Monday of the visible week, or day 1 of the visible month
        view_mode: Week or month view
    """

    reference_date: date
    view_mode: ViewMode = ViewMode.WEEK

    @classmethod
    def create(cls, reference_date: date, view_mode: ViewMode = ViewMode.WEEK) -> NavigationState:
        return normalize(cls(reference_date=reference_date, view_mode=ViewMode(view_mode)))


@dataclass(frozen=True)
class FetchRequest:
    """Range fetch issued for a navigation state.

    The tag is the state that initiated the fetch. A response is only
    applicable while the view is still on that state.
    """

    tag: NavigationState
    start_date: date
    end_date: date


def normalize(state: NavigationState) -> NavigationState:
    """Snap reference_date to the start of the period for the state's view mode.

    Raises:
        DateOutOfRangeError: If reference_date is outside the supported date range
    """
    check_date(state.reference_date)
    if state.view_mode == ViewMode.WEEK:
        anchor = week_start(state.reference_date)
    else:
        anchor = first_of_month(state.reference_date)
    if anchor == state.reference_date:
        return state
    return replace(state, reference_date=anchor)


def go_today(state: NavigationState, today: date | None = None) -> NavigationState:
    return normalize(replace(state, reference_date=today or today_local()))


def go_previous(state: NavigationState) -> NavigationState:
    """Move back one period: 7 days in week view, to day 1 of the previous month in month view."""
    state = normalize(state)
    if state.view_mode == ViewMode.WEEK:
        return normalize(replace(state, reference_date=add_weeks(state.reference_date, -1)))
    year, month = previous_month(state.reference_date.year, state.reference_date.month - 1)
    return replace(state, reference_date=month_start(year, month))


def go_next(state: NavigationState) -> NavigationState:
    """Move forward one period: 7 days in week view, to day 1 of the next month in month view."""
    state = normalize(state)
    if state.view_mode == ViewMode.WEEK:
        return normalize(replace(state, reference_date=add_weeks(state.reference_date, 1)))
    year, month = next_month(state.reference_date.year, state.reference_date.month - 1)
    return replace(state, reference_date=month_start(year, month))


def go_to_date(state: NavigationState, target: date) -> NavigationState:
    return normalize(replace(state, reference_date=target))


def set_view_mode(state: NavigationState, mode: ViewMode) -> NavigationState:
    """Switch view mode and re-normalize the reference date under the new mode."""
    return normalize(replace(state, view_mode=ViewMode(mode)))


def visible_range(state: NavigationState) -> tuple[date, date]:
    """Inclusive date range whose workouts are needed to render the state.

    Month view covers the whole grid, including the leading and trailing
    days of adjacent months.
    """
    state = normalize(state)
    if state.view_mode == ViewMode.WEEK:
        return state.reference_date, week_end(state.reference_date)
    first, last = month_bounds(state.reference_date.year, state.reference_date.month - 1)
    return week_start(first), week_end(last)


class NavigationController:
    """Owns the navigation state of a single calendar view."""

    def __init__(
        self,
        initial_date: date | None = None,
        view_mode: ViewMode = ViewMode.WEEK,
    ):
        self._state = NavigationState.create(initial_date or today_local(), view_mode)

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def reference_date(self) -> date:
        return self._state.reference_date

    @property
    def view_mode(self) -> ViewMode:
        return self._state.view_mode

    def _apply(self, new_state: NavigationState) -> NavigationState:
        if new_state != self._state:
            logger.debug(
                "[CALENDAR] Navigation transition",
                from_date=self._state.reference_date.isoformat(),
                to_date=new_state.reference_date.isoformat(),
                view_mode=str(new_state.view_mode),
            )
        self._state = new_state
        return new_state

    def go_today(self, today: date | None = None) -> NavigationState:
        return self._apply(go_today(self._state, today))

    def go_to_previous(self) -> NavigationState:
        return self._apply(go_previous(self._state))

    def go_to_next(self) -> NavigationState:
        return self._apply(go_next(self._state))

    def go_to_date(self, target: date) -> NavigationState:
        return self._apply(go_to_date(self._state, target))

    def set_view_mode(self, mode: ViewMode) -> NavigationState:
        return self._apply(set_view_mode(self._state, mode))

    def visible_range(self) -> tuple[date, date]:
        return visible_range(self._state)

    def fetch_request(self) -> FetchRequest:
        """Build a range fetch for the current state, tagged with that state."""
        start, end = visible_range(self._state)
        return FetchRequest(tag=self._state, start_date=start, end_date=end)

    def is_current(self, request: FetchRequest) -> bool:
        """Whether a fetch response for request may still be applied (last navigation wins)."""
        return request.tag == self._state
