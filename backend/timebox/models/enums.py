"""
Enum definitions for the application.

These enums are used across models and provide type-safe category/state values.
"""

from enum import Enum


class BlockCategory(str, Enum):
    """Category of a scheduled block. Doubles as the block's color key."""

    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    LEARN = "learn"
    OTHER = "other"


class SlotState(str, Enum):
    """
    Rendering state of a single slot in the daily grid.

    BLOCK = a block starts at this slot
    COVERED = the slot falls strictly inside a block that started earlier
    FREE = no block; the slot shows an editable manual plan note
    """

    BLOCK = "block"
    COVERED = "covered"
    FREE = "free"


class Weekday(str, Enum):
    """Day keys of the weekly tracker, Monday first."""

    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"


class PlannerAction(str, Enum):
    """Actions guarded by an in-progress flag in a planner session."""

    GENERATE = "generate"
    SAVE = "save"
