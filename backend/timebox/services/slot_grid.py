"""
Slot grid: the fixed ordered sequence of half-hour time labels.

Both the daily schedule and the tracker are indexed against these labels.
Week helpers used by the weekly planner live here too.
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from functools import lru_cache

from timebox.core.exceptions import ValidationError

SLOT_MINUTES = 30

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


@lru_cache(maxsize=32)
def generate_slots(start_hour: int = 6, end_hour: int = 24) -> tuple[str, ...]:
    """
    Generate "HH:MM" labels every 30 minutes from start_hour:00.

    The grid holds exactly 2 * (end_hour - start_hour) labels, so the last
    label is (end_hour - 1):30.
    """
    if not (0 <= start_hour < end_hour <= 24):
        raise ValidationError(
            f"Invalid slot window: start_hour={start_hour}, end_hour={end_hour}"
        )
    return tuple(
        minutes_to_time(minute)
        for minute in range(start_hour * 60, end_hour * 60, SLOT_MINUTES)
    )


def time_to_minutes(label: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    match = _TIME_RE.match(label or "")
    if not match:
        raise ValidationError(f"Invalid time label: {label!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValidationError(f"Invalid time label: {label!r}")
    return hours * 60 + minutes


def minutes_to_time(total_minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM". Hours are not wrapped at 24."""
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"


def normalize_time(label: str) -> str:
    """Normalize loose labels such as "9:00" to "09:00"."""
    return minutes_to_time(time_to_minutes(label))


def is_slot_label(label: str, slots: tuple[str, ...]) -> bool:
    return label in slots


def snap_duration(minutes: int, minimum: int = 30, maximum: int = 240) -> int:
    """Round up to the next slot multiple and clamp into [minimum, maximum]."""
    slots = -(-int(minutes) // SLOT_MINUTES)
    return max(minimum, min(maximum, slots * SLOT_MINUTES))


def block_end_time(start_time: str, duration: int) -> str:
    """End label of a block, e.g. ("23:00", 90) -> "24:30"."""
    return minutes_to_time(time_to_minutes(start_time) + duration)


# ===========================================
# Week helpers
# ===========================================


def week_start_for(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def weekday_index(day: date) -> int:
    """Monday = 0 ... Sunday = 6."""
    return day.weekday()


def format_us_date(day: date) -> str:
    return f"{day.month}/{day.day}/{day.year}"


def parse_plan_date(value: str) -> date | None:
    """Parse ISO ("2025-01-31") or US ("1/31/2025") plan dates. Returns None if unparsable."""
    value = (value or "").strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    parts = value.split("/")
    if len(parts) != 3:
        return None
    try:
        month, day, year = (int(part) for part in parts)
        return date(year, month, day)
    except ValueError:
        return None


def week_range_label(day: date) -> str:
    """Label like "1/27/2025~2/2/2025" for the Monday..Sunday week of ``day``."""
    monday = week_start_for(day)
    sunday = monday + timedelta(days=6)
    return f"{format_us_date(monday)}~{format_us_date(sunday)}"
