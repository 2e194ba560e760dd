"""Pydantic models (schemas) for the application."""

from timebox.models.enums import BlockCategory, PlannerAction, SlotState, Weekday
from timebox.models.plan import (
    BlockPlacement,
    DateUpdate,
    DayPlan,
    DayPlanView,
    ScheduledBlock,
    SlotView,
    TextUpdate,
    TrackerCell,
    WeeklyPlan,
    WeeklyPlanView,
    WeekStartUpdate,
)
from timebox.models.suggestion import ProposalResult, SuggestedBlock, SuggestionResponse

__all__ = [
    "BlockCategory",
    "BlockPlacement",
    "DateUpdate",
    "DayPlan",
    "DayPlanView",
    "PlannerAction",
    "ProposalResult",
    "ScheduledBlock",
    "SlotState",
    "SlotView",
    "SuggestedBlock",
    "SuggestionResponse",
    "TextUpdate",
    "TrackerCell",
    "Weekday",
    "WeeklyPlan",
    "WeeklyPlanView",
    "WeekStartUpdate",
]
