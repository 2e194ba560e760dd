"""
Weekly plan API endpoints.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Path, Query, status

from timebox.api.deps import CurrentUser, HistoryService, Rng, Sessions, http_error
from timebox.core.exceptions import TimeboxError
from timebox.models.enums import PlannerAction, Weekday
from timebox.models.plan import (
    WEEKLY_PRIORITY_COUNT,
    WEEKLY_TRACKER_ROWS,
    WEEKLY_TRACKER_WIDTH,
    PlanModel,
    TextUpdate,
    WeeklyPlan,
    WeeklyPlanView,
    WeekStartUpdate,
)
from timebox.services import plan_service
from timebox.services.session_service import PlannerSession
from timebox.services.slot_grid import (
    format_us_date,
    parse_plan_date,
    week_range_label,
    week_start_for,
)

router = APIRouter()


class WeekRange(PlanModel):
    week_start: str
    week_range: str


def _view(session: PlannerSession) -> WeeklyPlanView:
    anchor = parse_plan_date(session.weekly_plan.week_start) or date.today()
    return WeeklyPlanView(
        plan=session.weekly_plan,
        week_range=week_range_label(anchor),
        selected_day=session.selected_day_index,
    )


@router.get("", response_model=WeeklyPlanView)
async def get_weekly_plan(user: CurrentUser, sessions: Sessions):
    return _view(sessions.get(user.id))


@router.get("/week-range", response_model=WeekRange)
async def get_week_range(
    day: Optional[date] = Query(None, description="Any day of the week (defaults to today)"),
):
    """Monday start and "M/D/YYYY~M/D/YYYY" label of the week containing ``day``."""
    day = day or date.today()
    return WeekRange(
        week_start=format_us_date(week_start_for(day)),
        week_range=week_range_label(day),
    )


@router.put("/selected-day/{index}", response_model=WeeklyPlanView)
async def select_day(
    user: CurrentUser,
    sessions: Sessions,
    index: int = Path(..., ge=0, le=6),
):
    session = sessions.get(user.id)
    session.selected_day_index = index
    return _view(session)


# ===========================================
# Tracker
# ===========================================


@router.post("/tracker/{day}/{row}/{index}/toggle", response_model=WeeklyPlanView)
async def toggle_tracker_cell(
    day: Weekday,
    user: CurrentUser,
    sessions: Sessions,
    rng: Rng,
    row: int = Path(..., ge=0, lt=WEEKLY_TRACKER_ROWS),
    index: int = Path(..., ge=0, lt=WEEKLY_TRACKER_WIDTH),
):
    session = sessions.get(user.id)
    session.weekly_plan = plan_service.update_weekly_tracker_cell_color(
        session.weekly_plan, day, row, index, rng=rng
    )
    return _view(session)


@router.put("/tracker/{day}/{row}/{index}/text", response_model=WeeklyPlanView)
async def update_tracker_cell_text(
    day: Weekday,
    update: TextUpdate,
    user: CurrentUser,
    sessions: Sessions,
    row: int = Path(..., ge=0, lt=WEEKLY_TRACKER_ROWS),
    index: int = Path(..., ge=0, lt=WEEKLY_TRACKER_WIDTH),
):
    session = sessions.get(user.id)
    session.weekly_plan = plan_service.update_weekly_tracker_cell_text(
        session.weekly_plan, day, row, index, update.text
    )
    return _view(session)


# ===========================================
# Priorities, brain dump, week start
# ===========================================


@router.put("/priorities/{index}", response_model=WeeklyPlanView)
async def update_priority(
    update: TextUpdate,
    user: CurrentUser,
    sessions: Sessions,
    index: int = Path(..., ge=0, lt=WEEKLY_PRIORITY_COUNT),
):
    session = sessions.get(user.id)
    session.weekly_plan = plan_service.update_weekly_priority(
        session.weekly_plan, index, update.text
    )
    return _view(session)


@router.put("/brain-dump", response_model=WeeklyPlanView)
async def update_brain_dump(update: TextUpdate, user: CurrentUser, sessions: Sessions):
    session = sessions.get(user.id)
    session.weekly_plan = plan_service.update_weekly_brain_dump(session.weekly_plan, update.text)
    return _view(session)


@router.put("/week-start", response_model=WeeklyPlanView)
async def update_week_start(update: WeekStartUpdate, user: CurrentUser, sessions: Sessions):
    session = sessions.get(user.id)
    session.weekly_plan = plan_service.update_week_start(
        session.weekly_plan, update.week_start.strip()
    )
    return _view(session)


@router.post("/reset", response_model=WeeklyPlanView)
async def reset_weekly_plan(user: CurrentUser, sessions: Sessions):
    session = sessions.get(user.id)
    session.reset_week()
    return _view(session)


# ===========================================
# History
# ===========================================


@router.post("/save", response_model=WeeklyPlan, status_code=status.HTTP_201_CREATED)
async def save_weekly_plan(
    user: CurrentUser,
    sessions: Sessions,
    history: HistoryService,
):
    """Save a snapshot of the working weekly plan, replacing one with the same week start."""
    session = sessions.get(user.id)
    try:
        sequence = session.begin(PlannerAction.SAVE)
    except TimeboxError as e:
        raise http_error(e)
    try:
        return await history.save_weekly_plan(user.id, session.weekly_plan)
    except TimeboxError as e:
        raise http_error(e)
    finally:
        session.finish(PlannerAction.SAVE, sequence)


@router.get("/history", response_model=list[WeeklyPlan])
async def list_weekly_plans(user: CurrentUser, history: HistoryService):
    try:
        return await history.list_weekly_plans(user.id)
    except TimeboxError as e:
        raise http_error(e)


@router.post("/history/{plan_id}/load", response_model=WeeklyPlanView)
async def load_weekly_plan(
    plan_id: str,
    user: CurrentUser,
    sessions: Sessions,
    history: HistoryService,
):
    try:
        plan = await history.get_weekly_plan(user.id, plan_id)
    except TimeboxError as e:
        raise http_error(e)
    session = sessions.get(user.id)
    session.load_weekly_plan(plan)
    return _view(session)


@router.delete("/history/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_weekly_plan(plan_id: str, user: CurrentUser, history: HistoryService):
    try:
        await history.delete_weekly_plan(user.id, plan_id)
    except TimeboxError as e:
        raise http_error(e)
