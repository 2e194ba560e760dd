"""
Plan repository interfaces.

Two variants implement these: a SQL database store and a local JSON file
store. The variant is chosen once at startup from configuration.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from timebox.models.plan import DayPlan, WeeklyPlan


class IDayPlanRepository(ABC):
    @abstractmethod
    async def save(self, owner_id: str, plan: DayPlan) -> DayPlan:
        """
        Store a plan snapshot.

        A stored plan with the same date (or the same id) is replaced, so each
        owner has at most one plan per date.
        """
        pass

    @abstractmethod
    async def list_all(self, owner_id: str) -> list[DayPlan]:
        """All stored plans of the owner, most recently created first."""
        pass

    @abstractmethod
    async def delete(self, owner_id: str, plan_id: str) -> bool:
        """Delete a stored plan. Returns False when nothing matched."""
        pass


class IWeeklyPlanRepository(ABC):
    @abstractmethod
    async def save(self, owner_id: str, plan: WeeklyPlan) -> WeeklyPlan:
        """Store a weekly plan; replaces any plan with the same week_start (or id)."""
        pass

    @abstractmethod
    async def list_all(self, owner_id: str) -> list[WeeklyPlan]:
        """All stored weekly plans of the owner, most recently created first."""
        pass

    @abstractmethod
    async def delete(self, owner_id: str, plan_id: str) -> bool:
        pass
