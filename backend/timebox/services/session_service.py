"""
Per-owner planner sessions holding the working day and weekly plans.

All mutations run on the event loop thread, so a session is never touched by
two actors at once. Slow collaborator calls (AI generation, saves) are
tracked per action with an in-progress flag and a request sequence number:
a response is only applied while its sequence is still the latest one for
that action.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from timebox.core.exceptions import ActionInProgressError
from timebox.core.logger import logger
from timebox.models.enums import PlannerAction
from timebox.models.plan import DayPlan, WeeklyPlan
from timebox.services.plan_service import (
    empty_day_plan,
    empty_weekly_plan,
    reset_all,
    reset_weekly,
)
from timebox.services.slot_grid import (
    format_us_date,
    parse_plan_date,
    week_start_for,
    weekday_index,
)


@dataclass
class ActionState:
    in_progress: bool = False
    sequence: int = 0


class PlannerSession:
    """Working memory of one owner."""

    def __init__(self, owner_id: str, today: Optional[date] = None):
        today = today or date.today()
        self.owner_id = owner_id
        self.day_plan: DayPlan = empty_day_plan(date=format_us_date(today))
        self.weekly_plan: WeeklyPlan = empty_weekly_plan(
            week_start=format_us_date(week_start_for(today))
        )
        self.selected_day_index: int = weekday_index(today)
        self._actions: dict[PlannerAction, ActionState] = {
            action: ActionState() for action in PlannerAction
        }

    # ---- action tracking -------------------------------------------------

    def is_in_progress(self, action: PlannerAction) -> bool:
        return self._actions[action].in_progress

    def begin(self, action: PlannerAction, exclusive: bool = True) -> int:
        """Start a request for ``action`` and return its sequence number."""
        state = self._actions[action]
        if exclusive and state.in_progress:
            raise ActionInProgressError(action.value)
        state.sequence += 1
        state.in_progress = True
        return state.sequence

    def finish(self, action: PlannerAction, sequence: int) -> bool:
        """
        Complete a request. Returns False when a newer request (or an
        invalidation) superseded it, in which case its result must be dropped.
        """
        state = self._actions[action]
        if sequence != state.sequence:
            logger.debug(
                f"Dropping stale {action.value} response #{sequence} for {self.owner_id}"
            )
            return False
        state.in_progress = False
        return True

    def invalidate(self, action: PlannerAction) -> None:
        """Drop any in-flight response for ``action``."""
        state = self._actions[action]
        state.sequence += 1
        state.in_progress = False

    # ---- working plan replacement ------------------------------------------

    def reset_day(self) -> DayPlan:
        self.invalidate(PlannerAction.GENERATE)
        self.day_plan = reset_all(self.day_plan)
        return self.day_plan

    def reset_week(self) -> WeeklyPlan:
        self.weekly_plan = reset_weekly(self.weekly_plan)
        return self.weekly_plan

    def load_day_plan(self, plan: DayPlan) -> DayPlan:
        """Replace the working day plan with a (migrated) historical snapshot."""
        self.invalidate(PlannerAction.GENERATE)
        self.day_plan = plan
        plan_date = parse_plan_date(plan.date)
        if plan_date is not None:
            self.selected_day_index = weekday_index(plan_date)
        return self.day_plan

    def load_weekly_plan(self, plan: WeeklyPlan) -> WeeklyPlan:
        self.weekly_plan = plan
        return self.weekly_plan


class SessionRegistry:
    """In-memory map of owner id to planner session."""

    def __init__(self):
        self._sessions: dict[str, PlannerSession] = {}

    def get(self, owner_id: str) -> PlannerSession:
        session = self._sessions.get(owner_id)
        if session is None:
            session = PlannerSession(owner_id)
            self._sessions[owner_id] = session
        return session

    def discard(self, owner_id: str) -> None:
        self._sessions.pop(owner_id, None)
