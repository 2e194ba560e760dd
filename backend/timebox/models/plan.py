"""
Plan aggregate models: scheduled blocks, tracker cells, daily and weekly plans.

All models are frozen. Mutations live in the service layer and always return a
new model revision built with ``model_copy(update=...)``.
"""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from timebox.models.enums import BlockCategory, SlotState, Weekday

DAILY_PRIORITY_COUNT = 3
WEEKLY_PRIORITY_COUNT = 5
DAILY_TRACKER_WIDTH = 4
WEEKLY_TRACKER_WIDTH = 7
WEEKLY_TRACKER_ROWS = 10

MIN_BLOCK_MINUTES = 30
MAX_BLOCK_MINUTES = 240

# Pastel colors for the tracker double-click toggle
PASTEL_COLORS: tuple[str, ...] = (
    "bg-red-200", "bg-orange-200", "bg-amber-200",
    "bg-yellow-200", "bg-lime-200", "bg-green-200",
    "bg-emerald-200", "bg-teal-200", "bg-cyan-200",
    "bg-sky-200", "bg-blue-200", "bg-indigo-200",
    "bg-violet-200", "bg-purple-200", "bg-fuchsia-200",
    "bg-pink-200", "bg-rose-200",
)

TIME_LABEL_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def new_plan_id() -> str:
    return str(uuid4())


def fit_priorities(values: Optional[list], count: int) -> list[str]:
    """Right-pad with empty strings and truncate to exactly ``count`` entries."""
    cleaned = [str(value) if value is not None else "" for value in (values or [])]
    return (cleaned + [""] * count)[:count]


class PlanModel(BaseModel):
    """Base model: immutable, camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class TrackerCell(PlanModel):
    """A small colored + texted annotation unit."""

    color: str = ""
    text: str = ""


EMPTY_CELL = TrackerCell()


class ScheduledBlock(PlanModel):
    """An activity spanning one or more consecutive slots from a single start label."""

    id: str
    title: str = Field(..., min_length=1)
    start_time: str = Field(..., pattern=TIME_LABEL_PATTERN)
    duration: int = Field(
        ...,
        ge=MIN_BLOCK_MINUTES,
        le=MAX_BLOCK_MINUTES,
        multiple_of=30,
        description="Duration in minutes",
    )
    color: BlockCategory = BlockCategory.WORK
    notes: Optional[str] = None

    @field_validator("color", mode="before")
    @classmethod
    def _coerce_category(cls, value: object) -> object:
        if isinstance(value, BlockCategory):
            return value
        if isinstance(value, str) and value in {c.value for c in BlockCategory}:
            return value
        return BlockCategory.OTHER


class DayPlan(PlanModel):
    """The daily plan aggregate."""

    id: str = Field(default_factory=new_plan_id)
    date: str = ""
    priorities: list[str] = Field(default_factory=lambda: [""] * DAILY_PRIORITY_COUNT)
    brain_dump: str = ""
    schedule: list[ScheduledBlock] = Field(default_factory=list)
    tracker: dict[str, list[TrackerCell]] = Field(default_factory=dict)
    manual_plans: dict[str, str] = Field(default_factory=dict)

    @field_validator("priorities", mode="before")
    @classmethod
    def _fit_priorities(cls, value: object) -> list[str]:
        return fit_priorities(value if isinstance(value, list) else None, DAILY_PRIORITY_COUNT)


class WeeklyPlan(PlanModel):
    """The weekly plan aggregate, keyed by day instead of time of day."""

    id: str = Field(default_factory=new_plan_id)
    week_start: str = ""
    priorities: list[str] = Field(default_factory=lambda: [""] * WEEKLY_PRIORITY_COUNT)
    brain_dump: str = ""
    tracker: dict[Weekday, dict[str, list[TrackerCell]]] = Field(default_factory=dict)

    @field_validator("priorities", mode="before")
    @classmethod
    def _fit_priorities(cls, value: object) -> list[str]:
        return fit_priorities(value if isinstance(value, list) else None, WEEKLY_PRIORITY_COUNT)


# ===========================================
# Request / Response Models
# ===========================================


class BlockPlacement(PlanModel):
    """Request body for creating or editing a block."""

    title: str = Field(..., min_length=1)
    start_time: str = Field(..., pattern=TIME_LABEL_PATTERN)
    duration: int = Field(
        60, ge=MIN_BLOCK_MINUTES, le=MAX_BLOCK_MINUTES, multiple_of=30
    )
    color: BlockCategory = BlockCategory.WORK
    notes: Optional[str] = None
    editing_id: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value


class TextUpdate(PlanModel):
    text: str = ""


class DateUpdate(PlanModel):
    date: str = Field(..., min_length=1)


class WeekStartUpdate(PlanModel):
    week_start: str = Field(..., min_length=1)


class SlotView(PlanModel):
    """Resolved view of a single slot of the daily grid."""

    time: str
    state: SlotState
    is_hour: bool
    block: Optional[ScheduledBlock] = None
    end_time: Optional[str] = None
    manual_plan: str = ""
    tracker: list[TrackerCell] = Field(default_factory=list)


class DayPlanView(PlanModel):
    plan: DayPlan
    slots: list[SlotView]
    generating: bool = False


class WeeklyPlanView(PlanModel):
    plan: WeeklyPlan
    week_range: str
    selected_day: int = Field(0, ge=0, le=6)
    rows: int = WEEKLY_TRACKER_ROWS
