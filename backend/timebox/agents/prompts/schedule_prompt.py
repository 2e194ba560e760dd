"""
Prompt for turning a free-text brain dump into a time-boxed day.
"""

from __future__ import annotations

from timebox.models.plan import ScheduledBlock

SCHEDULE_SYSTEM_INSTRUCTION = (
    "You are a strict but encouraging coach who plans a person's day in "
    "time boxes. Answer with JSON only."
)


def _format_existing(schedule: list[ScheduledBlock]) -> str:
    if not schedule:
        return "(empty)"
    lines = [
        f"- {block.start_time} {block.title} ({block.duration} min, {block.color.value})"
        for block in sorted(schedule, key=lambda b: b.start_time)
    ]
    return "\n".join(lines)


def build_schedule_prompt(
    brain_dump: str,
    current_schedule: list[ScheduledBlock],
    start_time: str,
    end_time: str,
) -> str:
    return f"""
Here is my brain dump of things on my mind today:
\"\"\"
{brain_dump}
\"\"\"

My current schedule (context only, you may replace it entirely):
{_format_existing(current_schedule)}

Organize my day:
1. Extract the top 3 priorities.
2. Create a time-boxed schedule.

Constraints:
- Start time: {start_time}
- End time: {end_time}
- Use 24h "HH:MM" start times on the hour or half hour.
- Duration in minutes, a multiple of 30 between 30 and 240.
- Categorize each block as one of: work, personal, health, learn, other.
- Be efficient. No wasted slots.
""".strip()
