"""
Local JSON file implementation of the plan repositories.

Fallback store used when no database is configured. Each owner gets one
JSON file holding a list of plan records, newest first.
"""

from __future__ import annotations

import hashlib
import json
import os
import re
from pathlib import Path
from typing import Callable, Generic, Optional, TypeVar

from timebox.core.exceptions import InfrastructureError
from timebox.interfaces.plan_repository import IDayPlanRepository, IWeeklyPlanRepository
from timebox.models.plan import DayPlan, WeeklyPlan
from timebox.services.history_service import dump_plan, load_day_plan, load_weekly_plan

PlanT = TypeVar("PlanT", DayPlan, WeeklyPlan)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class _JsonPlanStore(Generic[PlanT]):
    """Owner-scoped list of plan records in a JSON file."""

    def __init__(
        self,
        base_path: str,
        prefix: str,
        key_field: str,
        loader: Callable[[dict], PlanT],
    ):
        self.base_path = Path(base_path)
        self._prefix = prefix
        self._key_field = key_field
        self._loader = loader

    def _file_for(self, owner_id: str) -> Path:
        safe = _UNSAFE_CHARS.sub("_", owner_id)[:64]
        digest = hashlib.sha256(owner_id.encode("utf-8")).hexdigest()[:12]
        return self.base_path / f"{self._prefix}_{safe}_{digest}.json"

    def _read(self, owner_id: str) -> list[dict]:
        path = self._file_for(owner_id)
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InfrastructureError(f"Failed to read plan store {path.name}: {e}")
        return [entry for entry in data if isinstance(entry, dict)] if isinstance(data, list) else []

    def _write(self, owner_id: str, records: list[dict]) -> None:
        path = self._file_for(owner_id)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            raise InfrastructureError(f"Failed to write plan store {path.name}: {e}")

    def save(self, owner_id: str, plan: PlanT) -> PlanT:
        record = dump_plan(plan)
        key = record[self._key_field]
        records = [
            entry
            for entry in self._read(owner_id)
            if entry.get(self._key_field) != key and entry.get("id") != record["id"]
        ]
        self._write(owner_id, [record, *records])
        return plan

    def list_all(self, owner_id: str) -> list[PlanT]:
        return [self._loader(entry) for entry in self._read(owner_id)]

    def delete(self, owner_id: str, plan_id: str) -> bool:
        records = self._read(owner_id)
        kept = [entry for entry in records if entry.get("id") != plan_id]
        if len(kept) == len(records):
            return False
        self._write(owner_id, kept)
        return True


class JsonFileDayPlanRepository(IDayPlanRepository):
    """Day plans stored in per-owner JSON files."""

    def __init__(self, base_path: Optional[str] = None):
        self._store = _JsonPlanStore(
            base_path or "./storage/plans", "timebox_history", "date", load_day_plan
        )

    async def save(self, owner_id: str, plan: DayPlan) -> DayPlan:
        return self._store.save(owner_id, plan)

    async def list_all(self, owner_id: str) -> list[DayPlan]:
        return self._store.list_all(owner_id)

    async def delete(self, owner_id: str, plan_id: str) -> bool:
        return self._store.delete(owner_id, plan_id)


class JsonFileWeeklyPlanRepository(IWeeklyPlanRepository):
    """Weekly plans stored in per-owner JSON files."""

    def __init__(self, base_path: Optional[str] = None):
        self._store = _JsonPlanStore(
            base_path or "./storage/plans", "timebox_weekly", "weekStart", load_weekly_plan
        )

    async def save(self, owner_id: str, plan: WeeklyPlan) -> WeeklyPlan:
        return self._store.save(owner_id, plan)

    async def list_all(self, owner_id: str) -> list[WeeklyPlan]:
        return self._store.list_all(owner_id)

    async def delete(self, owner_id: str, plan_id: str) -> bool:
        return self._store.delete(owner_id, plan_id)
