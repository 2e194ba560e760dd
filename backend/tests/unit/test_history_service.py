"""
Unit tests for plan history: legacy tracker migration, snapshot loading and
the save/list/load/delete flow.
"""

from unittest.mock import AsyncMock

import pytest

from timebox.core.exceptions import NotFoundError
from timebox.models.enums import BlockCategory, Weekday
from timebox.models.plan import DayPlan, TrackerCell, WeeklyPlan
from timebox.services.history_service import (
    PlanHistoryService,
    dump_plan,
    load_day_plan,
    load_weekly_plan,
    migrate_tracker,
    migrate_tracker_row,
    migrate_weekly_tracker,
)


def test_legacy_color_row_becomes_cells() -> None:
    row = migrate_tracker_row(["bg-red-200", None, ""])

    assert row == [
        TrackerCell(color="bg-red-200", text=""),
        TrackerCell(color="", text=""),
        TrackerCell(color="", text=""),
    ]


def test_structured_row_passes_through() -> None:
    row = migrate_tracker_row([{"color": "bg-blue-200", "text": "x"}, {"color": "", "text": ""}])

    assert row == [TrackerCell(color="bg-blue-200", text="x"), TrackerCell()]


def test_migration_never_raises_on_garbage() -> None:
    assert migrate_tracker_row("bg-red-200") == []
    assert migrate_tracker_row([]) == []
    assert migrate_tracker_row([{"color": 3}, 42]) == [TrackerCell(), TrackerCell()]
    assert migrate_tracker(None) == {}
    assert migrate_tracker({"07:00": None}) == {"07:00": []}


def test_weekly_migration_drops_unknown_days() -> None:
    tracker = migrate_weekly_tracker(
        {"mon": {"row-0": ["bg-lime-200"]}, "funday": {"row-0": ["bg-red-200"]}}
    )

    assert list(tracker) == [Weekday.MON]
    assert tracker[Weekday.MON]["row-0"] == [TrackerCell(color="bg-lime-200")]


def test_load_day_plan_from_legacy_record() -> None:
    plan = load_day_plan(
        {
            "id": "1706659200000",
            "date": "1/31/2024",
            "priorities": ["Ship"],
            "brainDump": "stuff",
            "schedule": [
                {"id": "a", "title": "Run", "startTime": "7:00", "duration": 45, "color": "health"},
                {"id": "b", "title": "", "startTime": "09:00", "duration": 60, "color": "work"},
                {"id": "c", "title": "Read", "startTime": "later", "duration": 60},
                "garbage",
            ],
            "tracker": {"07:00": ["bg-red-200", None, "", None]},
        }
    )

    assert plan.id == "1706659200000"
    assert plan.priorities == ["Ship", "", ""]
    assert plan.manual_plans == {}
    assert [b.id for b in plan.schedule] == ["a"]
    assert plan.schedule[0].start_time == "07:00"
    assert plan.schedule[0].duration == 60
    assert plan.schedule[0].color == BlockCategory.HEALTH
    assert plan.tracker["07:00"][0].color == "bg-red-200"
    assert len(plan.tracker["07:00"]) == 4


def test_load_day_plan_skips_blocks_off_the_slot_grid() -> None:
    record = {
        "id": "p",
        "date": "1/31/2025",
        "schedule": [
            {"id": "early", "title": "Milk", "startTime": "04:00", "duration": 30},
            {"id": "quarter", "title": "Call", "startTime": "09:15", "duration": 30},
            {"id": "ok", "title": "Gym", "startTime": "9:30", "duration": 60},
        ],
    }

    assert [b.id for b in load_day_plan(record).schedule] == ["ok"]
    assert [b.id for b in load_day_plan(record, slots=("04:00", "04:30")).schedule] == ["early"]


def test_load_day_plan_accepts_snake_case_keys() -> None:
    plan = load_day_plan({"id": "p", "date": "d", "brain_dump": "bd", "manual_plans": {"10:00": "n"}})

    assert plan.brain_dump == "bd"
    assert plan.manual_plans == {"10:00": "n"}


def test_dump_plan_uses_camel_case_record_shape() -> None:
    record = dump_plan(DayPlan(id="p", date="1/31/2025"))

    assert set(record) == {"id", "date", "priorities", "brainDump", "schedule", "tracker", "manualPlans"}
    assert load_day_plan(record) == DayPlan(id="p", date="1/31/2025")


def test_load_weekly_plan() -> None:
    plan = load_weekly_plan(
        {"id": "w", "weekStart": "1/27/2025", "priorities": ["a"] * 7, "tracker": {"sun": {"row-9": []}}}
    )

    assert plan.week_start == "1/27/2025"
    assert plan.priorities == ["a"] * 5
    assert plan.tracker == {Weekday.SUN: {"row-9": []}}


# ===========================================
# PlanHistoryService
# ===========================================


def _service():
    day_repo = AsyncMock()
    weekly_repo = AsyncMock()
    day_repo.save.side_effect = lambda owner_id, plan: plan
    weekly_repo.save.side_effect = lambda owner_id, plan: plan
    return PlanHistoryService(day_repo=day_repo, weekly_repo=weekly_repo), day_repo, weekly_repo


@pytest.mark.asyncio
async def test_save_assigns_fresh_id() -> None:
    service, day_repo, _ = _service()
    plan = DayPlan(id="working", date="1/31/2025")

    saved = await service.save_day_plan("owner", plan)

    assert saved.id != "working"
    assert saved.date == "1/31/2025"
    day_repo.save.assert_awaited_once()
    assert day_repo.save.await_args.args[0] == "owner"


@pytest.mark.asyncio
async def test_get_day_plan_finds_by_id_or_raises() -> None:
    service, day_repo, _ = _service()
    day_repo.list_all.return_value = [DayPlan(id="a"), DayPlan(id="b")]

    assert (await service.get_day_plan("owner", "b")).id == "b"
    with pytest.raises(NotFoundError):
        await service.get_day_plan("owner", "zzz")


@pytest.mark.asyncio
async def test_delete_missing_plan_raises() -> None:
    service, day_repo, weekly_repo = _service()
    day_repo.delete.return_value = False
    weekly_repo.delete.return_value = True

    with pytest.raises(NotFoundError):
        await service.delete_day_plan("owner", "nope")
    await service.delete_weekly_plan("owner", "w")
    weekly_repo.delete.assert_awaited_once_with("owner", "w")


@pytest.mark.asyncio
async def test_save_weekly_plan() -> None:
    service, _, weekly_repo = _service()

    saved = await service.save_weekly_plan("owner", WeeklyPlan(id="w", week_start="1/27/2025"))

    assert saved.id != "w"
    assert saved.week_start == "1/27/2025"
    weekly_repo.save.assert_awaited_once()
