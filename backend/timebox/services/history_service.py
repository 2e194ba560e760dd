"""
Plan history: snapshot (de)serialization, legacy tracker migration and the
save/list/load/delete flow against the plan repositories.

Older snapshots stored each tracker slot as a plain list of color strings
(with empty or null entries). Loading converts those into {color, text}
cells. Migration never raises: anything malformed degrades to empty cells.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from timebox.core.config import get_settings
from timebox.core.exceptions import NotFoundError, ValidationError
from timebox.core.logger import logger
from timebox.interfaces.plan_repository import IDayPlanRepository, IWeeklyPlanRepository
from timebox.models.enums import Weekday
from timebox.models.plan import (
    EMPTY_CELL,
    MAX_BLOCK_MINUTES,
    MIN_BLOCK_MINUTES,
    DayPlan,
    ScheduledBlock,
    TrackerCell,
    WeeklyPlan,
    new_plan_id,
)
from timebox.services.slot_grid import generate_slots, normalize_time, snap_duration


# ===========================================
# Tracker migration
# ===========================================


def _is_legacy_row(value: list) -> bool:
    return len(value) == 0 or value[0] is None or isinstance(value[0], str)


def _legacy_cell(value: Any) -> TrackerCell:
    return TrackerCell(color=value if isinstance(value, str) else "", text="")


def _structured_cell(value: Any) -> TrackerCell:
    if isinstance(value, TrackerCell):
        return value
    if isinstance(value, Mapping):
        color = value.get("color")
        text = value.get("text")
        return TrackerCell(
            color=color if isinstance(color, str) else "",
            text=text if isinstance(text, str) else "",
        )
    if isinstance(value, str):
        return _legacy_cell(value)
    return EMPTY_CELL


def migrate_tracker_row(value: Any) -> list[TrackerCell]:
    """Normalize one stored tracker row to a list of cells."""
    if not isinstance(value, (list, tuple)):
        return []
    value = list(value)
    if _is_legacy_row(value):
        return [_legacy_cell(item) for item in value]
    return [_structured_cell(item) for item in value]


def migrate_tracker(raw: Any) -> dict[str, list[TrackerCell]]:
    """slot -> row map, converting legacy color-string rows."""
    if not isinstance(raw, Mapping):
        return {}
    return {str(slot): migrate_tracker_row(row) for slot, row in raw.items()}


def migrate_weekly_tracker(raw: Any) -> dict[Weekday, dict[str, list[TrackerCell]]]:
    """day -> row-key -> row map. Unknown day keys are dropped."""
    if not isinstance(raw, Mapping):
        return {}
    days = {day.value: day for day in Weekday}
    migrated: dict[Weekday, dict[str, list[TrackerCell]]] = {}
    for key, rows in raw.items():
        day = days.get(str(key))
        if day is None:
            continue
        migrated[day] = migrate_tracker(rows)
    return migrated


# ===========================================
# Snapshot parsing
# ===========================================


def _pick(raw: Mapping, camel: str, snake: str, default: Any = None) -> Any:
    if camel in raw:
        return raw[camel]
    return raw.get(snake, default)


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _load_block(raw: Any, slots: Sequence[str]) -> Optional[ScheduledBlock]:
    if not isinstance(raw, Mapping):
        return None
    try:
        duration = int(raw.get("duration", MIN_BLOCK_MINUTES))
        start_time = normalize_time(_as_text(_pick(raw, "startTime", "start_time")))
        if start_time not in slots:
            raise ValidationError(f"Start time {start_time} is outside the slot grid")
        return ScheduledBlock(
            id=str(raw.get("id") or new_plan_id()),
            title=_as_text(raw.get("title")),
            start_time=start_time,
            duration=snap_duration(duration, MIN_BLOCK_MINUTES, MAX_BLOCK_MINUTES),
            color=raw.get("color"),
            notes=raw.get("notes") if isinstance(raw.get("notes"), str) else None,
        )
    except (TypeError, ValueError, ValidationError, PydanticValidationError) as e:
        logger.warning(f"Skipping malformed stored block {raw!r}: {e}")
        return None


def _load_schedule(raw: Any, slots: Sequence[str]) -> list[ScheduledBlock]:
    if not isinstance(raw, list):
        return []
    blocks = [_load_block(item, slots) for item in raw]
    return [block for block in blocks if block is not None]


def _load_manual_plans(raw: Any) -> dict[str, str]:
    if not isinstance(raw, Mapping):
        return {}
    return {str(slot): text for slot, text in raw.items() if isinstance(text, str)}


def _load_priorities(raw: Any) -> list:
    return raw if isinstance(raw, list) else []


def load_day_plan(raw: Mapping, slots: Optional[Sequence[str]] = None) -> DayPlan:
    """
    Build a DayPlan from a persisted record, migrating its tracker first.

    Blocks starting off the configured slot grid are dropped.
    """
    if slots is None:
        settings = get_settings()
        slots = generate_slots(settings.DAY_START_HOUR, settings.DAY_END_HOUR)
    return DayPlan(
        id=str(raw.get("id") or new_plan_id()),
        date=_as_text(raw.get("date")),
        priorities=_load_priorities(raw.get("priorities")),
        brain_dump=_as_text(_pick(raw, "brainDump", "brain_dump", "")),
        schedule=_load_schedule(raw.get("schedule"), slots),
        tracker=migrate_tracker(raw.get("tracker")),
        manual_plans=_load_manual_plans(_pick(raw, "manualPlans", "manual_plans")),
    )


def load_weekly_plan(raw: Mapping) -> WeeklyPlan:
    return WeeklyPlan(
        id=str(raw.get("id") or new_plan_id()),
        week_start=_as_text(_pick(raw, "weekStart", "week_start", "")),
        priorities=_load_priorities(raw.get("priorities")),
        brain_dump=_as_text(_pick(raw, "brainDump", "brain_dump", "")),
        tracker=migrate_weekly_tracker(raw.get("tracker")),
    )


def dump_plan(plan: DayPlan | WeeklyPlan) -> dict:
    """Persisted record shape (camelCase keys)."""
    return plan.model_dump(mode="json", by_alias=True)


# ===========================================
# History service
# ===========================================


class PlanHistoryService:
    """Save, list, load and delete plan snapshots of an owner."""

    def __init__(
        self,
        day_repo: IDayPlanRepository,
        weekly_repo: IWeeklyPlanRepository,
    ):
        self._day_repo = day_repo
        self._weekly_repo = weekly_repo

    async def save_day_plan(self, owner_id: str, plan: DayPlan) -> DayPlan:
        """
        Persist a snapshot of the working plan under a fresh id.

        The repository replaces any stored plan with the same date.
        """
        snapshot = plan.model_copy(update={"id": new_plan_id()})
        saved = await self._day_repo.save(owner_id, snapshot)
        logger.info(f"Saved day plan {saved.id} ({saved.date}) for {owner_id}")
        return saved

    async def list_day_plans(self, owner_id: str) -> list[DayPlan]:
        return await self._day_repo.list_all(owner_id)

    async def get_day_plan(self, owner_id: str, plan_id: str) -> DayPlan:
        plans = await self._day_repo.list_all(owner_id)
        for plan in plans:
            if plan.id == plan_id:
                return plan
        raise NotFoundError(f"Day plan {plan_id} not found")

    async def delete_day_plan(self, owner_id: str, plan_id: str) -> None:
        if not await self._day_repo.delete(owner_id, plan_id):
            raise NotFoundError(f"Day plan {plan_id} not found")

    async def save_weekly_plan(self, owner_id: str, plan: WeeklyPlan) -> WeeklyPlan:
        snapshot = plan.model_copy(update={"id": new_plan_id()})
        saved = await self._weekly_repo.save(owner_id, snapshot)
        logger.info(f"Saved weekly plan {saved.id} ({saved.week_start}) for {owner_id}")
        return saved

    async def list_weekly_plans(self, owner_id: str) -> list[WeeklyPlan]:
        return await self._weekly_repo.list_all(owner_id)

    async def get_weekly_plan(self, owner_id: str, plan_id: str) -> WeeklyPlan:
        plans = await self._weekly_repo.list_all(owner_id)
        for plan in plans:
            if plan.id == plan_id:
                return plan
        raise NotFoundError(f"Weekly plan {plan_id} not found")

    async def delete_weekly_plan(self, owner_id: str, plan_id: str) -> None:
        if not await self._weekly_repo.delete(owner_id, plan_id):
            raise NotFoundError(f"Weekly plan {plan_id} not found")
