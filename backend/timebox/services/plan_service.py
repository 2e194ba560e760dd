"""
Plan aggregate mutations: manual notes, tracker cells, priorities and reset.

Every function returns a new plan revision and never edits its input.
Tracker rows are materialized lazily: reading a slot without an entry yields
a row of empty cells.
"""

from __future__ import annotations

import random
from typing import Optional

from timebox.core.exceptions import ValidationError
from timebox.models.enums import Weekday
from timebox.models.plan import (
    DAILY_PRIORITY_COUNT,
    DAILY_TRACKER_WIDTH,
    EMPTY_CELL,
    PASTEL_COLORS,
    WEEKLY_PRIORITY_COUNT,
    WEEKLY_TRACKER_ROWS,
    WEEKLY_TRACKER_WIDTH,
    DayPlan,
    TrackerCell,
    WeeklyPlan,
)

_default_rng = random.Random()


def _check_index(index: int, size: int, what: str) -> None:
    if not 0 <= index < size:
        raise IndexError(f"{what} index {index} out of range 0..{size - 1}")


def _fill_row(cells: Optional[list[TrackerCell]], width: int) -> list[TrackerCell]:
    row = list(cells or [])
    if len(row) < width:
        row.extend([EMPTY_CELL] * (width - len(row)))
    return row


def _toggle_color(cell: TrackerCell, rng: random.Random) -> TrackerCell:
    if cell.color:
        return cell.model_copy(update={"color": ""})
    return cell.model_copy(update={"color": rng.choice(PASTEL_COLORS)})


def _replace_cell(
    row: list[TrackerCell], index: int, cell: TrackerCell
) -> list[TrackerCell]:
    return [cell if i == index else existing for i, existing in enumerate(row)]


# ===========================================
# Daily plan
# ===========================================


def empty_day_plan(date: str = "") -> DayPlan:
    return DayPlan(date=date)


def reset_all(plan: DayPlan) -> DayPlan:
    """Blank every part of the working plan at once. The date is kept."""
    return empty_day_plan(date=plan.date)


def get_manual_plan(plan: DayPlan, slot: str) -> str:
    return plan.manual_plans.get(slot, "")


def update_manual_plan(plan: DayPlan, slot: str, text: str) -> DayPlan:
    return plan.model_copy(update={"manual_plans": {**plan.manual_plans, slot: text}})


def get_tracker_cells(
    plan: DayPlan, slot: str, width: int = DAILY_TRACKER_WIDTH
) -> list[TrackerCell]:
    return _fill_row(plan.tracker.get(slot), width)


def update_tracker_cell_color(
    plan: DayPlan,
    slot: str,
    index: int,
    rng: Optional[random.Random] = None,
) -> DayPlan:
    """Toggle a cell: a colored cell is cleared, an empty one gets a random pastel color."""
    _check_index(index, DAILY_TRACKER_WIDTH, "tracker cell")
    row = get_tracker_cells(plan, slot)
    cell = _toggle_color(row[index], rng or _default_rng)
    return plan.model_copy(
        update={"tracker": {**plan.tracker, slot: _replace_cell(row, index, cell)}}
    )


def update_tracker_cell_text(plan: DayPlan, slot: str, index: int, text: str) -> DayPlan:
    _check_index(index, DAILY_TRACKER_WIDTH, "tracker cell")
    row = get_tracker_cells(plan, slot)
    cell = row[index].model_copy(update={"text": text})
    return plan.model_copy(
        update={"tracker": {**plan.tracker, slot: _replace_cell(row, index, cell)}}
    )


def update_priority(plan: DayPlan, index: int, value: str) -> DayPlan:
    _check_index(index, DAILY_PRIORITY_COUNT, "priority")
    priorities = [value if i == index else p for i, p in enumerate(plan.priorities)]
    return plan.model_copy(update={"priorities": priorities})


def update_brain_dump(plan: DayPlan, text: str) -> DayPlan:
    return plan.model_copy(update={"brain_dump": text})


def update_date(plan: DayPlan, date: str) -> DayPlan:
    return plan.model_copy(update={"date": date})


# ===========================================
# Weekly plan
# ===========================================


def row_key(row: int) -> str:
    return f"row-{row}"


def parse_weekday(day: str | Weekday) -> Weekday:
    try:
        return Weekday(day)
    except ValueError as exc:
        raise ValidationError(f"Unknown weekday: {day!r}") from exc


def empty_weekly_plan(week_start: str = "") -> WeeklyPlan:
    return WeeklyPlan(week_start=week_start)


def reset_weekly(plan: WeeklyPlan) -> WeeklyPlan:
    return empty_weekly_plan(week_start=plan.week_start)


def get_weekly_tracker_cells(
    plan: WeeklyPlan, day: str | Weekday, row: int
) -> list[TrackerCell]:
    _check_index(row, WEEKLY_TRACKER_ROWS, "tracker row")
    day_rows = plan.tracker.get(parse_weekday(day), {})
    return _fill_row(day_rows.get(row_key(row)), WEEKLY_TRACKER_WIDTH)


def _with_weekly_row(
    plan: WeeklyPlan, day: Weekday, row: int, cells: list[TrackerCell]
) -> WeeklyPlan:
    day_rows = {**plan.tracker.get(day, {}), row_key(row): cells}
    return plan.model_copy(update={"tracker": {**plan.tracker, day: day_rows}})


def update_weekly_tracker_cell_color(
    plan: WeeklyPlan,
    day: str | Weekday,
    row: int,
    index: int,
    rng: Optional[random.Random] = None,
) -> WeeklyPlan:
    _check_index(index, WEEKLY_TRACKER_WIDTH, "tracker cell")
    weekday = parse_weekday(day)
    cells = get_weekly_tracker_cells(plan, weekday, row)
    cell = _toggle_color(cells[index], rng or _default_rng)
    return _with_weekly_row(plan, weekday, row, _replace_cell(cells, index, cell))


def update_weekly_tracker_cell_text(
    plan: WeeklyPlan, day: str | Weekday, row: int, index: int, text: str
) -> WeeklyPlan:
    _check_index(index, WEEKLY_TRACKER_WIDTH, "tracker cell")
    weekday = parse_weekday(day)
    cells = get_weekly_tracker_cells(plan, weekday, row)
    cell = cells[index].model_copy(update={"text": text})
    return _with_weekly_row(plan, weekday, row, _replace_cell(cells, index, cell))


def update_weekly_priority(plan: WeeklyPlan, index: int, value: str) -> WeeklyPlan:
    _check_index(index, WEEKLY_PRIORITY_COUNT, "priority")
    priorities = [value if i == index else p for i, p in enumerate(plan.priorities)]
    return plan.model_copy(update={"priorities": priorities})


def update_weekly_brain_dump(plan: WeeklyPlan, text: str) -> WeeklyPlan:
    return plan.model_copy(update={"brain_dump": text})


def update_week_start(plan: WeeklyPlan, week_start: str) -> WeeklyPlan:
    return plan.model_copy(update={"week_start": week_start})
