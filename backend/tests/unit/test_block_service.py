import pytest
from pydantic import ValidationError as PydanticValidationError

from timebox.core.exceptions import ValidationError
from timebox.models.enums import BlockCategory, SlotState
from timebox.models.plan import ScheduledBlock
from timebox.services.block_service import (
    build_slot_views,
    get_block_for_slot,
    is_slot_covered,
    new_block_id,
    place_block,
    remove_block,
    resolve_slot,
)
from timebox.services.plan_service import empty_day_plan, update_manual_plan
from timebox.services.slot_grid import generate_slots


def _block(start_time: str, duration: int = 60, title: str = "Focus", block_id: str | None = None):
    return ScheduledBlock(
        id=block_id or new_block_id(),
        title=title,
        start_time=start_time,
        duration=duration,
        color=BlockCategory.WORK,
    )


def test_place_then_get_returns_block() -> None:
    block = _block("09:00")

    plan = place_block(empty_day_plan(), block)

    assert get_block_for_slot(plan, "09:00") == block


def test_placing_twice_at_same_start_keeps_only_latest() -> None:
    first = _block("09:00", title="First")
    second = _block("09:00", title="Second")

    plan = place_block(place_block(empty_day_plan(), first), second)

    at_nine = [b for b in plan.schedule if b.start_time == "09:00"]
    assert at_nine == [second]


def test_place_block_does_not_mutate_input() -> None:
    original = empty_day_plan()

    place_block(original, _block("09:00"))

    assert original.schedule == []


def test_editing_replaces_block_by_id_and_can_move_it() -> None:
    block = _block("09:00", block_id="manual-1")
    plan = place_block(empty_day_plan(), block)

    moved = _block("11:00", duration=90, title="Moved", block_id="manual-1")
    plan = place_block(plan, moved, editing_id="manual-1")

    assert get_block_for_slot(plan, "09:00") is None
    assert get_block_for_slot(plan, "11:00") == moved
    assert len(plan.schedule) == 1


def test_editing_onto_occupied_start_leaves_one_block() -> None:
    plan = place_block(empty_day_plan(), _block("09:00", block_id="a"))
    plan = place_block(plan, _block("10:00", block_id="b"))

    plan = place_block(plan, _block("10:00", title="Edited", block_id="a"), editing_id="a")

    assert [b.id for b in plan.schedule] == ["a"]
    assert get_block_for_slot(plan, "10:00").title == "Edited"


def test_placing_block_clears_manual_note_at_start() -> None:
    plan = update_manual_plan(empty_day_plan(), "09:00", "call mom")
    plan = update_manual_plan(plan, "09:30", "stretch")

    plan = place_block(plan, _block("09:00"))

    assert "09:00" not in plan.manual_plans
    assert plan.manual_plans["09:30"] == "stretch"


def test_place_block_rejects_start_outside_grid() -> None:
    with pytest.raises(ValidationError):
        place_block(empty_day_plan(), _block("05:00"), slots=generate_slots())


def test_coverage_is_strictly_inside_the_interval() -> None:
    plan = place_block(empty_day_plan(), _block("09:00", duration=90))

    assert not is_slot_covered(plan, "09:00")
    assert is_slot_covered(plan, "09:30")
    assert is_slot_covered(plan, "10:00")
    assert not is_slot_covered(plan, "10:30")

    assert resolve_slot(plan, "09:00") == SlotState.BLOCK
    assert resolve_slot(plan, "10:00") == SlotState.COVERED
    assert resolve_slot(plan, "10:30") == SlotState.FREE


def test_back_to_back_blocks_do_not_collide() -> None:
    plan = place_block(empty_day_plan(), _block("09:00"))
    plan = place_block(plan, _block("10:00"))

    assert not is_slot_covered(plan, "10:00")
    assert resolve_slot(plan, "10:00") == SlotState.BLOCK


def test_overlap_from_different_starts_is_permitted() -> None:
    plan = place_block(empty_day_plan(), _block("09:00", duration=120))
    plan = place_block(plan, _block("10:00", duration=60))

    assert len(plan.schedule) == 2
    # The later start still renders its own block even though it sits inside the first.
    assert resolve_slot(plan, "10:00") == SlotState.BLOCK
    assert resolve_slot(plan, "10:30") == SlotState.COVERED


def test_remove_block_by_id() -> None:
    block = _block("09:00", block_id="manual-x")
    plan = place_block(empty_day_plan(), block)

    assert remove_block(plan, "manual-x").schedule == []
    assert remove_block(plan, "missing") is plan


def test_build_slot_views() -> None:
    plan = place_block(empty_day_plan(), _block("09:00", duration=60))
    plan = update_manual_plan(plan, "11:00", "lunch prep")
    plan = update_manual_plan(plan, "09:30", "hidden")

    views = {view.time: view for view in build_slot_views(plan, generate_slots())}

    assert views["09:00"].state == SlotState.BLOCK
    assert views["09:00"].end_time == "10:00"
    assert views["09:30"].state == SlotState.COVERED
    assert views["09:30"].manual_plan == ""
    assert views["11:00"].manual_plan == "lunch prep"
    assert views["11:00"].is_hour
    assert not views["11:30"].is_hour
    assert len(views["11:00"].tracker) == 4


def test_block_rejects_blank_title_and_odd_duration() -> None:
    with pytest.raises(PydanticValidationError):
        ScheduledBlock(id="x", title="", start_time="09:00", duration=60)
    with pytest.raises(PydanticValidationError):
        ScheduledBlock(id="x", title="Focus", start_time="09:00", duration=45)


def test_unknown_category_degrades_to_other() -> None:
    block = ScheduledBlock(id="x", title="Nap", start_time="13:00", duration=30, color="sleep")

    assert block.color == BlockCategory.OTHER
