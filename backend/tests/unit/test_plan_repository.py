"""
Unit tests for the SQL and JSON file plan repositories.
"""

import json

import pytest

from timebox.core.exceptions import InfrastructureError
from timebox.infrastructure.local.json_plan_repository import (
    JsonFileDayPlanRepository,
    JsonFileWeeklyPlanRepository,
)
from timebox.infrastructure.sql.plan_repository import (
    SqlDayPlanRepository,
    SqlWeeklyPlanRepository,
)
from timebox.models.enums import Weekday
from timebox.models.plan import DayPlan, TrackerCell, WeeklyPlan


@pytest.fixture
async def session_factory():
    """Create in-memory database session factory."""
    from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
    from sqlalchemy.orm import sessionmaker

    from timebox.infrastructure.sql.database import Base

    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture(params=["sql", "json"])
async def day_repo(request, session_factory, tmp_path):
    if request.param == "sql":
        return SqlDayPlanRepository(session_factory)
    return JsonFileDayPlanRepository(str(tmp_path))


@pytest.fixture(params=["sql", "json"])
async def weekly_repo(request, session_factory, tmp_path):
    if request.param == "sql":
        return SqlWeeklyPlanRepository(session_factory)
    return JsonFileWeeklyPlanRepository(str(tmp_path))


@pytest.mark.asyncio
async def test_saving_same_date_twice_keeps_one_plan(day_repo):
    await day_repo.save("user", DayPlan(id="first", date="1/31/2025", brain_dump="old"))
    await day_repo.save("user", DayPlan(id="second", date="1/31/2025", brain_dump="new"))

    plans = await day_repo.list_all("user")

    assert len(plans) == 1
    assert plans[0].id == "second"
    assert plans[0].brain_dump == "new"


@pytest.mark.asyncio
async def test_list_is_newest_first_and_owner_scoped(day_repo):
    await day_repo.save("user", DayPlan(id="a", date="1/30/2025"))
    await day_repo.save("user", DayPlan(id="b", date="1/31/2025"))
    await day_repo.save("other", DayPlan(id="c", date="1/31/2025"))

    plans = await day_repo.list_all("user")

    assert [p.id for p in plans] == ["b", "a"]
    assert [p.id for p in await day_repo.list_all("other")] == ["c"]
    assert await day_repo.list_all("nobody") == []


@pytest.mark.asyncio
async def test_round_trip_keeps_tracker_and_notes(day_repo):
    plan = DayPlan(
        id="p",
        date="1/31/2025",
        priorities=["A", "B", "C"],
        tracker={"07:00": [TrackerCell(color="bg-red-200", text="x")]},
        manual_plans={"08:00": "note"},
    )

    await day_repo.save("user", plan)

    assert (await day_repo.list_all("user"))[0] == plan


@pytest.mark.asyncio
async def test_delete(day_repo):
    await day_repo.save("user", DayPlan(id="a", date="1/30/2025"))

    assert await day_repo.delete("user", "a") is True
    assert await day_repo.delete("user", "a") is False
    assert await day_repo.list_all("user") == []


@pytest.mark.asyncio
async def test_weekly_save_replaces_same_week(weekly_repo):
    tracker = {Weekday.FRI: {"row-3": [TrackerCell(color="bg-sky-200")]}}
    await weekly_repo.save("user", WeeklyPlan(id="w1", week_start="1/27/2025"))
    await weekly_repo.save("user", WeeklyPlan(id="w2", week_start="1/27/2025", tracker=tracker))

    plans = await weekly_repo.list_all("user")

    assert [p.id for p in plans] == ["w2"]
    assert plans[0].tracker == tracker
    assert await weekly_repo.delete("user", "w2") is True


@pytest.mark.asyncio
async def test_json_store_migrates_legacy_file(tmp_path):
    repo = JsonFileDayPlanRepository(str(tmp_path))
    await repo.save("user", DayPlan(id="seed", date="1/1/2024"))
    store_file = next(tmp_path.glob("timebox_history_user_*.json"))
    store_file.write_text(
        json.dumps([{"id": "legacy", "date": "1/2/2024", "tracker": {"07:00": ["bg-red-200", None]}}]),
        encoding="utf-8",
    )

    plans = await repo.list_all("user")

    assert plans[0].id == "legacy"
    assert plans[0].tracker["07:00"] == [TrackerCell(color="bg-red-200"), TrackerCell()]


@pytest.mark.asyncio
async def test_json_store_reports_corrupt_file(tmp_path):
    repo = JsonFileDayPlanRepository(str(tmp_path))
    await repo.save("user", DayPlan(id="seed", date="1/1/2024"))
    next(tmp_path.glob("timebox_history_user_*.json")).write_text("{broken", encoding="utf-8")

    with pytest.raises(InfrastructureError):
        await repo.list_all("user")
