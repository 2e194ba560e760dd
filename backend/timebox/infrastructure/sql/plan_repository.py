"""
SQL implementation of the day and weekly plan repositories.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError

from timebox.core.exceptions import InfrastructureError
from timebox.infrastructure.sql.database import DayPlanORM, WeeklyPlanORM, get_session_factory
from timebox.interfaces.plan_repository import IDayPlanRepository, IWeeklyPlanRepository
from timebox.models.plan import DayPlan, WeeklyPlan
from timebox.services.history_service import dump_plan, load_day_plan, load_weekly_plan


class SqlDayPlanRepository(IDayPlanRepository):
    """SQLAlchemy implementation of the day plan repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: DayPlanORM) -> DayPlan:
        return load_day_plan(
            {
                "id": orm.id,
                "date": orm.date,
                "priorities": orm.priorities,
                "brainDump": orm.brain_dump,
                "schedule": orm.schedule,
                "tracker": orm.tracker,
                "manualPlans": orm.manual_plans,
            }
        )

    async def save(self, owner_id: str, plan: DayPlan) -> DayPlan:
        record = dump_plan(plan)
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(DayPlanORM).where(
                        DayPlanORM.user_id == owner_id,
                        or_(DayPlanORM.date == plan.date, DayPlanORM.id == plan.id),
                    )
                )
                session.add(
                    DayPlanORM(
                        id=plan.id,
                        user_id=owner_id,
                        date=plan.date,
                        priorities=record["priorities"],
                        brain_dump=record["brainDump"],
                        schedule=record["schedule"],
                        tracker=record["tracker"],
                        manual_plans=record["manualPlans"],
                        created_at=datetime.utcnow(),
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to save day plan: {e}") from e
        return plan

    async def list_all(self, owner_id: str) -> list[DayPlan]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(DayPlanORM)
                    .where(DayPlanORM.user_id == owner_id)
                    .order_by(DayPlanORM.created_at.desc())
                )
                orms = result.scalars().all()
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to load day plans: {e}") from e
        return [self._orm_to_model(orm) for orm in orms]

    async def delete(self, owner_id: str, plan_id: str) -> bool:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(DayPlanORM).where(
                        DayPlanORM.user_id == owner_id,
                        DayPlanORM.id == plan_id,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to delete day plan: {e}") from e
        return result.rowcount > 0


class SqlWeeklyPlanRepository(IWeeklyPlanRepository):
    """SQLAlchemy implementation of the weekly plan repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: WeeklyPlanORM) -> WeeklyPlan:
        return load_weekly_plan(
            {
                "id": orm.id,
                "weekStart": orm.week_start,
                "priorities": orm.priorities,
                "brainDump": orm.brain_dump,
                "tracker": orm.tracker,
            }
        )

    async def save(self, owner_id: str, plan: WeeklyPlan) -> WeeklyPlan:
        record = dump_plan(plan)
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(WeeklyPlanORM).where(
                        WeeklyPlanORM.user_id == owner_id,
                        or_(
                            WeeklyPlanORM.week_start == plan.week_start,
                            WeeklyPlanORM.id == plan.id,
                        ),
                    )
                )
                session.add(
                    WeeklyPlanORM(
                        id=plan.id,
                        user_id=owner_id,
                        week_start=plan.week_start,
                        priorities=record["priorities"],
                        brain_dump=record["brainDump"],
                        tracker=record["tracker"],
                        created_at=datetime.utcnow(),
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to save weekly plan: {e}") from e
        return plan

    async def list_all(self, owner_id: str) -> list[WeeklyPlan]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(WeeklyPlanORM)
                    .where(WeeklyPlanORM.user_id == owner_id)
                    .order_by(WeeklyPlanORM.created_at.desc())
                )
                orms = result.scalars().all()
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to load weekly plans: {e}") from e
        return [self._orm_to_model(orm) for orm in orms]

    async def delete(self, owner_id: str, plan_id: str) -> bool:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(WeeklyPlanORM).where(
                        WeeklyPlanORM.user_id == owner_id,
                        WeeklyPlanORM.id == plan_id,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to delete weekly plan: {e}") from e
        return result.rowcount > 0
