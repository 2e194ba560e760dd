"""
Models for AI schedule suggestions.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from timebox.models.plan import DayPlan


class SuggestedBlock(BaseModel):
    """A single block proposed by the AI collaborator."""

    start_time: str = Field(..., alias="startTime", description="HH:MM format (24h)")
    title: str = Field(..., min_length=1)
    duration: int = Field(..., gt=0, description="Duration in minutes")
    category: str = "other"
    reasoning: Optional[str] = None

    model_config = {"populate_by_name": True}


class SuggestionResponse(BaseModel):
    """Parsed AI response: top priorities plus a proposed schedule."""

    priorities: list[str] = Field(default_factory=list)
    schedule: Optional[list[SuggestedBlock]] = None


class ProposalResult(BaseModel):
    """Outcome of a generate request."""

    plan: DayPlan
    applied: bool
    error: Optional[str] = None
    stale: bool = False


# JSON schema handed to the LLM (Gemini response_schema format)
SUGGESTION_RESPONSE_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "priorities": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Top 3 Main Events (Priorities)",
        },
        "schedule": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "startTime": {"type": "STRING", "description": "HH:MM format (24h)"},
                    "title": {"type": "STRING"},
                    "duration": {"type": "INTEGER", "description": "Duration in minutes"},
                    "category": {
                        "type": "STRING",
                        "enum": ["work", "personal", "health", "learn", "other"],
                    },
                    "reasoning": {"type": "STRING", "description": "Short reason for this round"},
                },
                "required": ["startTime", "title", "duration", "category"],
            },
        },
    },
}
