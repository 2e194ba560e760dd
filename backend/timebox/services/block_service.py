"""
Block placement and slot coverage resolution.

A block occupies [start, start + duration). Its own start slot renders the
block; slots strictly inside the interval are "covered"; the slot at exactly
start + duration is free again, so back-to-back blocks never collide.

Blocks that start at different slots are allowed to overlap. Only the start
slot is kept unique.
"""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from timebox.core.exceptions import ValidationError
from timebox.models.enums import SlotState
from timebox.models.plan import (
    DAILY_TRACKER_WIDTH,
    DayPlan,
    ScheduledBlock,
    SlotView,
)
from timebox.services.plan_service import get_tracker_cells
from timebox.services.slot_grid import block_end_time, time_to_minutes


def new_block_id(prefix: str = "manual") -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


def place_block(
    plan: DayPlan,
    block: ScheduledBlock,
    editing_id: Optional[str] = None,
    slots: Optional[tuple[str, ...]] = None,
) -> DayPlan:
    """
    Insert ``block`` and return the new plan revision.

    With ``editing_id`` the block carrying that id is replaced. Any block
    starting at the same slot is overwritten either way. The manual plan note
    at the start slot is cleared.
    """
    if slots is not None and block.start_time not in slots:
        raise ValidationError(f"{block.start_time} is not a slot of the grid")

    kept = [
        b
        for b in plan.schedule
        if b.start_time != block.start_time and not (editing_id and b.id == editing_id)
    ]

    manual_plans = {
        slot: text for slot, text in plan.manual_plans.items() if slot != block.start_time
    }
    return plan.model_copy(update={"schedule": [*kept, block], "manual_plans": manual_plans})


def remove_block(plan: DayPlan, block_id: str) -> DayPlan:
    """Delete a block by id. Unknown ids leave the plan unchanged."""
    if not any(b.id == block_id for b in plan.schedule):
        return plan
    return plan.model_copy(
        update={"schedule": [b for b in plan.schedule if b.id != block_id]}
    )


def _covers(block: ScheduledBlock, minute: int) -> bool:
    start = time_to_minutes(block.start_time)
    return start < minute < start + block.duration


def is_slot_covered(plan: DayPlan, slot: str) -> bool:
    """True when ``slot`` lies strictly inside some block's interval."""
    minute = time_to_minutes(slot)
    return any(_covers(block, minute) for block in plan.schedule)


def get_block_for_slot(plan: DayPlan, slot: str) -> Optional[ScheduledBlock]:
    """The block starting exactly at ``slot``. Covered slots return None."""
    return next((b for b in plan.schedule if b.start_time == slot), None)


def resolve_slot(plan: DayPlan, slot: str) -> SlotState:
    if get_block_for_slot(plan, slot) is not None:
        return SlotState.BLOCK
    if is_slot_covered(plan, slot):
        return SlotState.COVERED
    return SlotState.FREE


def build_slot_views(plan: DayPlan, slots: tuple[str, ...]) -> list[SlotView]:
    """Resolve every slot of the grid for rendering."""
    views: list[SlotView] = []
    for slot in slots:
        block = get_block_for_slot(plan, slot)
        state = resolve_slot(plan, slot)
        views.append(
            SlotView(
                time=slot,
                state=state,
                is_hour=slot.endswith(":00"),
                block=block,
                end_time=block_end_time(block.start_time, block.duration) if block else None,
                manual_plan=plan.manual_plans.get(slot, "") if state == SlotState.FREE else "",
                tracker=get_tracker_cells(plan, slot, DAILY_TRACKER_WIDTH),
            )
        )
    return views
