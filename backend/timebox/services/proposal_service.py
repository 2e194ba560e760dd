"""
AI schedule proposals.

The generated schedule replaces the working schedule wholesale and non-empty
generated priorities replace the current ones. The merge is all-or-nothing:
a failed call or a malformed response leaves the working plan untouched.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from timebox.agents.prompts.schedule_prompt import (
    SCHEDULE_SYSTEM_INSTRUCTION,
    build_schedule_prompt,
)
from timebox.core.exceptions import LLMValidationError, ValidationError
from timebox.core.logger import logger
from timebox.interfaces.llm_provider import ILLMProvider
from timebox.models.enums import PlannerAction
from timebox.models.plan import (
    DAILY_PRIORITY_COUNT,
    DayPlan,
    ScheduledBlock,
    fit_priorities,
)
from timebox.models.suggestion import (
    SUGGESTION_RESPONSE_SCHEMA,
    ProposalResult,
    SuggestedBlock,
    SuggestionResponse,
)
from timebox.services.block_service import new_block_id
from timebox.services.llm_utils import generate_text_with_status, strip_code_fence
from timebox.services.plan_service import update_brain_dump
from timebox.services.session_service import PlannerSession
from timebox.services.slot_grid import generate_slots, normalize_time, snap_duration

SAMPLE_BRAIN_DUMP = """07:00 Morning Jog & Stretch
09:00 Deep Work: Project Architecture
12:00 Healthy Lunch
14:00 Team Sync Meeting
16:00 Code Review & Emails
18:30 Boxing Training
21:00 Read Book & Relax"""


def parse_suggestion(text: Optional[str]) -> Optional[SuggestionResponse]:
    """Parse the raw LLM answer. Returns None when nothing usable came back."""
    if not text:
        return None
    try:
        data = json.loads(strip_code_fence(text))
        return SuggestionResponse.model_validate(data)
    except (json.JSONDecodeError, PydanticValidationError) as e:
        logger.warning(f"Failed to parse AI response: {e}")
        return None


def _to_block(index: int, item: SuggestedBlock, slots: Sequence[str]) -> ScheduledBlock:
    try:
        start_time = normalize_time(item.start_time)
        if start_time not in slots:
            raise ValidationError(f"Start time {start_time} is outside the slot grid")
        return ScheduledBlock(
            id=new_block_id(f"ai-{index}"),
            title=item.title,
            start_time=start_time,
            duration=snap_duration(item.duration),
            color=item.category,
        )
    except (ValidationError, PydanticValidationError) as e:
        raise LLMValidationError(
            f"Malformed suggested block #{index}: {e}",
            raw_output=item.model_dump_json(by_alias=True),
        ) from e


def merge_suggestion(
    plan: DayPlan,
    suggestion: SuggestionResponse,
    slots: Optional[Sequence[str]] = None,
) -> DayPlan:
    """
    Apply a suggestion to ``plan`` and return the new revision.

    Raises LLMValidationError if any suggested block is unusable or starts
    off the slot grid; nothing is applied in that case. Manual notes are
    kept as they are.
    """
    slots = generate_slots() if slots is None else slots
    update: dict = {}
    if suggestion.priorities:
        update["priorities"] = fit_priorities(suggestion.priorities, DAILY_PRIORITY_COUNT)

    if suggestion.schedule is not None:
        by_start: dict[str, ScheduledBlock] = {}
        for index, item in enumerate(suggestion.schedule):
            block = _to_block(index, item, slots)
            # Later suggestions win a shared start slot.
            by_start.pop(block.start_time, None)
            by_start[block.start_time] = block
        update["schedule"] = list(by_start.values())

    return plan.model_copy(update=update) if update else plan


class ScheduleProposalService:
    """Asks the LLM collaborator for a schedule proposal."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        slots: Optional[Sequence[str]] = None,
    ):
        self._llm_provider = llm_provider
        self._slots = tuple(slots) if slots else generate_slots()
        self._start_time = self._slots[0]
        self._end_time = self._slots[-1]

    async def propose(
        self,
        brain_dump: str,
        current_schedule: list[ScheduledBlock],
    ) -> tuple[Optional[SuggestionResponse], Optional[str]]:
        """Returns (suggestion, error_code)."""
        prompt = build_schedule_prompt(
            brain_dump=brain_dump,
            current_schedule=current_schedule,
            start_time=self._start_time,
            end_time=self._end_time,
        )
        text, error_code, error_detail = await asyncio.to_thread(
            generate_text_with_status,
            self._llm_provider,
            prompt,
            temperature=0.4,
            max_output_tokens=2048,
            response_schema=SUGGESTION_RESPONSE_SCHEMA,
            response_mime_type="application/json",
            system_instruction=SCHEDULE_SYSTEM_INSTRUCTION,
        )
        if not text:
            logger.warning(
                f"Schedule generation failed via {self._llm_provider.get_model_name()}: "
                f"{error_code} {error_detail or ''}".rstrip()
            )
            return None, error_code or "empty_response"

        suggestion = parse_suggestion(text)
        if suggestion is None:
            return None, "unparsable_response"
        return suggestion, None

    async def generate(self, session: PlannerSession) -> ProposalResult:
        """
        Generate a schedule for the session's working day plan.

        An empty brain dump is replaced by the sample text, which is also
        written back into the working plan.
        """
        sequence = session.begin(PlannerAction.GENERATE)

        brain_dump = session.day_plan.brain_dump
        if not brain_dump.strip():
            brain_dump = SAMPLE_BRAIN_DUMP
            session.day_plan = update_brain_dump(session.day_plan, brain_dump)

        try:
            suggestion, error_code = await self.propose(
                brain_dump, list(session.day_plan.schedule)
            )
        finally:
            is_current = session.finish(PlannerAction.GENERATE, sequence)

        if not is_current:
            return ProposalResult(
                plan=session.day_plan, applied=False, error="stale_response", stale=True
            )
        if suggestion is None:
            return ProposalResult(plan=session.day_plan, applied=False, error=error_code)

        try:
            merged = merge_suggestion(session.day_plan, suggestion, self._slots)
        except LLMValidationError as e:
            logger.warning(str(e))
            return ProposalResult(
                plan=session.day_plan, applied=False, error="malformed_response"
            )

        session.day_plan = merged
        logger.info(
            f"Applied AI schedule for {session.owner_id}: {len(merged.schedule)} blocks"
        )
        return ProposalResult(plan=merged, applied=True)
