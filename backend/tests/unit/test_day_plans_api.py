import random
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from timebox.api import day_plans
from timebox.core.exceptions import ActionInProgressError, InfrastructureError, NotFoundError
from timebox.models.enums import BlockCategory, PlannerAction, SlotState
from timebox.models.plan import BlockPlacement, DateUpdate, DayPlan, TextUpdate
from timebox.models.suggestion import ProposalResult
from timebox.services.session_service import SessionRegistry
from timebox.services.slot_grid import generate_slots

SLOTS = generate_slots()


def _user(user_id: str = "owner-user") -> SimpleNamespace:
    return SimpleNamespace(id=user_id)


def _slot(view, time: str):
    return next(slot for slot in view.slots if slot.time == time)


@pytest.mark.asyncio
async def test_place_and_edit_block() -> None:
    sessions = SessionRegistry()
    user = _user()

    view = await day_plans.place_block(
        BlockPlacement(title=" Deep work ", start_time="09:00", duration=90, color=BlockCategory.WORK),
        user=user,
        sessions=sessions,
        slots=SLOTS,
    )
    block = _slot(view, "09:00").block
    assert block.title == "Deep work"
    assert block.id.startswith("manual-")
    assert _slot(view, "09:30").state == SlotState.COVERED

    view = await day_plans.place_block(
        BlockPlacement(title="Gym", start_time="18:00", duration=60, color="health", editing_id=block.id),
        user=user,
        sessions=sessions,
        slots=SLOTS,
    )
    assert _slot(view, "09:00").state == SlotState.FREE
    assert _slot(view, "18:00").block.id == block.id
    assert len(view.plan.schedule) == 1

    view = await day_plans.delete_block(block.id, user=user, sessions=sessions, slots=SLOTS)
    assert view.plan.schedule == []


@pytest.mark.asyncio
async def test_place_block_outside_grid_is_rejected() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await day_plans.place_block(
            BlockPlacement(title="Early", start_time="05:00"),
            user=_user(),
            sessions=SessionRegistry(),
            slots=SLOTS,
        )

    assert exc_info.value.status_code == 422


@pytest.mark.asyncio
async def test_manual_plan_and_tracker_endpoints() -> None:
    sessions = SessionRegistry()
    user = _user()

    await day_plans.update_manual_plan("10:00", TextUpdate(text="emails"), user=user, sessions=sessions, slots=SLOTS)
    await day_plans.toggle_tracker_cell("10:00", user=user, sessions=sessions, slots=SLOTS, rng=random.Random(5), index=1)
    view = await day_plans.update_tracker_cell_text(
        "10:00", TextUpdate(text="ok"), user=user, sessions=sessions, slots=SLOTS, index=1
    )

    slot = _slot(view, "10:00")
    assert slot.manual_plan == "emails"
    assert slot.tracker[1].color.startswith("bg-")
    assert slot.tracker[1].text == "ok"

    with pytest.raises(HTTPException) as exc_info:
        await day_plans.update_manual_plan("10:15", TextUpdate(text="x"), user=user, sessions=sessions, slots=SLOTS)
    assert exc_info.value.status_code == 422


@pytest.mark.asyncio
async def test_text_fields_and_reset() -> None:
    sessions = SessionRegistry()
    user = _user()

    await day_plans.update_priority(TextUpdate(text="Ship"), user=user, sessions=sessions, slots=SLOTS, index=2)
    await day_plans.update_brain_dump(TextUpdate(text="dump"), user=user, sessions=sessions, slots=SLOTS)
    view = await day_plans.update_date(DateUpdate(date="1/31/2025"), user=user, sessions=sessions, slots=SLOTS)
    assert view.plan.priorities == ["", "", "Ship"]
    assert view.plan.brain_dump == "dump"

    view = await day_plans.reset_day_plan(user=user, sessions=sessions, slots=SLOTS)
    assert view.plan.priorities == ["", "", ""]
    assert view.plan.brain_dump == ""
    assert view.plan.date == "1/31/2025"


@pytest.mark.asyncio
async def test_generate_conflict_maps_to_409() -> None:
    sessions = SessionRegistry()
    user = _user()
    sessions.get(user.id).begin(PlannerAction.GENERATE)
    proposals = SimpleNamespace(generate=AsyncMock(side_effect=ActionInProgressError("generate")))

    with pytest.raises(HTTPException) as exc_info:
        await day_plans.generate_schedule(user=user, sessions=sessions, proposals=proposals)

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_generate_returns_proposal_result() -> None:
    sessions = SessionRegistry()
    user = _user()
    plan = sessions.get(user.id).day_plan
    proposals = SimpleNamespace(generate=AsyncMock(return_value=ProposalResult(plan=plan, applied=False, error="x")))

    result = await day_plans.generate_schedule(user=user, sessions=sessions, proposals=proposals)

    assert result.applied is False
    proposals.generate.assert_awaited_once_with(sessions.get(user.id))


@pytest.mark.asyncio
async def test_save_failure_keeps_working_plan_and_clears_flag() -> None:
    sessions = SessionRegistry()
    user = _user()
    history = AsyncMock()
    history.save_day_plan.side_effect = InfrastructureError("disk full")
    before = sessions.get(user.id).day_plan

    with pytest.raises(HTTPException) as exc_info:
        await day_plans.save_day_plan(user=user, sessions=sessions, history=history)

    assert exc_info.value.status_code == 503
    assert sessions.get(user.id).day_plan == before
    assert not sessions.get(user.id).is_in_progress(PlannerAction.SAVE)


@pytest.mark.asyncio
async def test_load_and_delete_history() -> None:
    sessions = SessionRegistry()
    user = _user()
    history = AsyncMock()
    history.get_day_plan.return_value = DayPlan(id="saved", date="2/1/2025", brain_dump="old")

    view = await day_plans.load_day_plan("saved", user=user, sessions=sessions, slots=SLOTS, history=history)

    assert view.plan.id == "saved"
    assert sessions.get(user.id).selected_day_index == 5

    history.delete_day_plan.side_effect = NotFoundError("Day plan missing not found")
    with pytest.raises(HTTPException) as exc_info:
        await day_plans.delete_day_plan("missing", user=user, history=history)
    assert exc_info.value.status_code == 404
