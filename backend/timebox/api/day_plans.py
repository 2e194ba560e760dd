"""
Day plan API endpoints.

Endpoints for the working day plan of the current user: blocks, manual
notes, tracker cells, priorities, AI generation and saved history.
"""

from fastapi import APIRouter, HTTPException, Path, status

from timebox.api.deps import (
    CurrentUser,
    HistoryService,
    ProposalService,
    Rng,
    Sessions,
    Slots,
    http_error,
)
from timebox.core.exceptions import TimeboxError
from timebox.models.enums import PlannerAction
from timebox.models.plan import (
    DAILY_PRIORITY_COUNT,
    DAILY_TRACKER_WIDTH,
    BlockPlacement,
    DateUpdate,
    DayPlan,
    DayPlanView,
    ScheduledBlock,
    TextUpdate,
)
from timebox.models.suggestion import ProposalResult
from timebox.services import block_service, plan_service
from timebox.services.session_service import PlannerSession

router = APIRouter()


def _view(session: PlannerSession, slots: tuple[str, ...]) -> DayPlanView:
    return DayPlanView(
        plan=session.day_plan,
        slots=block_service.build_slot_views(session.day_plan, slots),
        generating=session.is_in_progress(PlannerAction.GENERATE),
    )


def _require_slot(slot: str, slots: tuple[str, ...]) -> None:
    if slot not in slots:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{slot} is not a slot of the grid",
        )


@router.get("", response_model=DayPlanView)
async def get_day_plan(user: CurrentUser, sessions: Sessions, slots: Slots):
    """Get the working day plan with its resolved slot grid."""
    return _view(sessions.get(user.id), slots)


# ===========================================
# Blocks
# ===========================================


@router.put("/blocks", response_model=DayPlanView)
async def place_block(
    placement: BlockPlacement,
    user: CurrentUser,
    sessions: Sessions,
    slots: Slots,
):
    """Create a block, or replace the one named by ``editingId``."""
    session = sessions.get(user.id)
    block = ScheduledBlock(
        id=placement.editing_id or block_service.new_block_id(),
        title=placement.title.strip(),
        start_time=placement.start_time,
        duration=placement.duration,
        color=placement.color,
        notes=placement.notes,
    )
    try:
        session.day_plan = block_service.place_block(
            session.day_plan, block, editing_id=placement.editing_id, slots=slots
        )
    except TimeboxError as e:
        raise http_error(e)
    return _view(session, slots)


@router.delete("/blocks/{block_id}", response_model=DayPlanView)
async def delete_block(
    block_id: str,
    user: CurrentUser,
    sessions: Sessions,
    slots: Slots,
):
    session = sessions.get(user.id)
    session.day_plan = block_service.remove_block(session.day_plan, block_id)
    return _view(session, slots)


# ===========================================
# Manual notes and tracker
# ===========================================


@router.put("/manual-plans/{slot}", response_model=DayPlanView)
async def update_manual_plan(
    slot: str,
    update: TextUpdate,
    user: CurrentUser,
    sessions: Sessions,
    slots: Slots,
):
    """Set the free-text note of a slot."""
    _require_slot(slot, slots)
    session = sessions.get(user.id)
    session.day_plan = plan_service.update_manual_plan(session.day_plan, slot, update.text)
    return _view(session, slots)


@router.post("/tracker/{slot}/{index}/toggle", response_model=DayPlanView)
async def toggle_tracker_cell(
    slot: str,
    user: CurrentUser,
    sessions: Sessions,
    slots: Slots,
    rng: Rng,
    index: int = Path(..., ge=0, lt=DAILY_TRACKER_WIDTH),
):
    """Clear a colored tracker cell, or paint an empty one a random pastel color."""
    _require_slot(slot, slots)
    session = sessions.get(user.id)
    session.day_plan = plan_service.update_tracker_cell_color(
        session.day_plan, slot, index, rng=rng
    )
    return _view(session, slots)


@router.put("/tracker/{slot}/{index}/text", response_model=DayPlanView)
async def update_tracker_cell_text(
    slot: str,
    update: TextUpdate,
    user: CurrentUser,
    sessions: Sessions,
    slots: Slots,
    index: int = Path(..., ge=0, lt=DAILY_TRACKER_WIDTH),
):
    _require_slot(slot, slots)
    session = sessions.get(user.id)
    session.day_plan = plan_service.update_tracker_cell_text(
        session.day_plan, slot, index, update.text
    )
    return _view(session, slots)


# ===========================================
# Priorities, brain dump, date
# ===========================================


@router.put("/priorities/{index}", response_model=DayPlanView)
async def update_priority(
    update: TextUpdate,
    user: CurrentUser,
    sessions: Sessions,
    slots: Slots,
    index: int = Path(..., ge=0, lt=DAILY_PRIORITY_COUNT),
):
    session = sessions.get(user.id)
    session.day_plan = plan_service.update_priority(session.day_plan, index, update.text)
    return _view(session, slots)


@router.put("/brain-dump", response_model=DayPlanView)
async def update_brain_dump(
    update: TextUpdate,
    user: CurrentUser,
    sessions: Sessions,
    slots: Slots,
):
    session = sessions.get(user.id)
    session.day_plan = plan_service.update_brain_dump(session.day_plan, update.text)
    return _view(session, slots)


@router.put("/date", response_model=DayPlanView)
async def update_date(
    update: DateUpdate,
    user: CurrentUser,
    sessions: Sessions,
    slots: Slots,
):
    session = sessions.get(user.id)
    session.day_plan = plan_service.update_date(session.day_plan, update.date.strip())
    return _view(session, slots)


@router.post("/reset", response_model=DayPlanView)
async def reset_day_plan(user: CurrentUser, sessions: Sessions, slots: Slots):
    """Clear schedule, priorities, brain dump, tracker and notes at once."""
    session = sessions.get(user.id)
    session.reset_day()
    return _view(session, slots)


# ===========================================
# AI generation
# ===========================================


@router.post("/generate", response_model=ProposalResult)
async def generate_schedule(
    user: CurrentUser,
    sessions: Sessions,
    proposals: ProposalService,
):
    """
    Ask the AI collaborator for priorities and a schedule.

    A failed or malformed response leaves the working plan unchanged and is
    reported with ``applied=false``. A second request while one is in flight
    is rejected with 409.
    """
    session = sessions.get(user.id)
    try:
        return await proposals.generate(session)
    except TimeboxError as e:
        raise http_error(e)


# ===========================================
# History
# ===========================================


@router.post("/save", response_model=DayPlan, status_code=status.HTTP_201_CREATED)
async def save_day_plan(
    user: CurrentUser,
    sessions: Sessions,
    history: HistoryService,
):
    """Save a snapshot of the working plan. A plan with the same date is replaced."""
    session = sessions.get(user.id)
    try:
        sequence = session.begin(PlannerAction.SAVE)
    except TimeboxError as e:
        raise http_error(e)
    try:
        return await history.save_day_plan(user.id, session.day_plan)
    except TimeboxError as e:
        raise http_error(e)
    finally:
        session.finish(PlannerAction.SAVE, sequence)


@router.get("/history", response_model=list[DayPlan])
async def list_day_plans(user: CurrentUser, history: HistoryService):
    """List saved day plans, newest first."""
    try:
        return await history.list_day_plans(user.id)
    except TimeboxError as e:
        raise http_error(e)


@router.post("/history/{plan_id}/load", response_model=DayPlanView)
async def load_day_plan(
    plan_id: str,
    user: CurrentUser,
    sessions: Sessions,
    slots: Slots,
    history: HistoryService,
):
    """Replace the working plan with a saved one."""
    try:
        plan = await history.get_day_plan(user.id, plan_id)
    except TimeboxError as e:
        raise http_error(e)
    session = sessions.get(user.id)
    session.load_day_plan(plan)
    return _view(session, slots)


@router.delete("/history/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_day_plan(plan_id: str, user: CurrentUser, history: HistoryService):
    try:
        await history.delete_day_plan(user.id, plan_id)
    except TimeboxError as e:
        raise http_error(e)
