from types import SimpleNamespace
from unittest.mock import MagicMock

import litellm

from timebox.agents.prompts.schedule_prompt import build_schedule_prompt
from timebox.infrastructure.local.litellm_provider import LiteLLMProvider
from timebox.models.plan import ScheduledBlock
from timebox.services.llm_utils import generate_text_with_status, strip_code_fence


def _completion(content: str):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def test_litellm_branch_returns_text(monkeypatch) -> None:
    completion = MagicMock(return_value=_completion('  {"priorities": []}  '))
    monkeypatch.setattr(litellm, "completion", completion)
    provider = LiteLLMProvider("openai/gpt-4o-mini", api_base="http://proxy:4000", api_key="sk-test")

    text, error_code, _ = generate_text_with_status(
        provider,
        "plan my day",
        response_schema={"type": "OBJECT"},
        system_instruction="be brief",
    )

    assert text == '{"priorities": []}'
    assert error_code is None
    kwargs = completion.call_args.kwargs
    assert kwargs["model"] == "openai/gpt-4o-mini"
    assert kwargs["api_base"] == "http://proxy:4000"
    assert kwargs["messages"][0] == {"role": "system", "content": "be brief"}
    assert "Schema:" in kwargs["messages"][1]["content"]


def test_litellm_failures_are_reported_not_raised(monkeypatch) -> None:
    provider = LiteLLMProvider("openai/gpt-4o-mini")

    monkeypatch.setattr(litellm, "completion", MagicMock(return_value=_completion("")))
    assert generate_text_with_status(provider, "x")[1] == "litellm_empty_response"

    monkeypatch.setattr(litellm, "completion", MagicMock(side_effect=RuntimeError("timeout")))
    assert generate_text_with_status(provider, "x")[1] == "litellm_request_failed"

    assert generate_text_with_status(provider, "")[1] == "empty_prompt"


def test_strip_code_fence() -> None:
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('```\n[]\n```') == "[]"
    assert strip_code_fence(' {"a": 1} ') == '{"a": 1}'


def test_schedule_prompt_includes_window_and_current_blocks() -> None:
    prompt = build_schedule_prompt(
        brain_dump="write report",
        current_schedule=[
            ScheduledBlock(id="b", title="Standup", start_time="10:00", duration=30, color="work"),
        ],
        start_time="06:00",
        end_time="23:30",
    )

    assert "write report" in prompt
    assert "- 10:00 Standup (30 min, work)" in prompt
    assert "Start time: 06:00" in prompt
    assert "End time: 23:30" in prompt
