"""
Shared LLM invocation utilities for text generation.
"""

from __future__ import annotations

import json
from typing import Optional

from timebox.core.config import get_settings
from timebox.core.logger import logger
from timebox.interfaces.llm_provider import ILLMProvider


def _is_litellm_provider(llm_provider: ILLMProvider) -> bool:
    from timebox.infrastructure.local.litellm_provider import LiteLLMProvider

    return isinstance(llm_provider, LiteLLMProvider)


def generate_text_with_status(
    llm_provider: ILLMProvider,
    prompt: str,
    temperature: float = 0.2,
    max_output_tokens: int = 600,
    response_schema: Optional[dict] = None,
    response_mime_type: Optional[str] = None,
    system_instruction: Optional[str] = None,
) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """
    Generate text with error status.

    Blocking call; run it in a worker thread from async code.

    Returns (text, error_code, error_detail).
    """
    if not prompt:
        return None, "empty_prompt", None

    if _is_litellm_provider(llm_provider):
        return _generate_text_litellm_with_status(
            llm_provider=llm_provider,
            prompt=prompt,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_schema=response_schema,
            system_instruction=system_instruction,
        )

    api_key = getattr(llm_provider, "get_api_key", lambda: None)()
    if not api_key:
        return None, "missing_google_api_key", None

    try:
        from google import genai
        from google.genai.types import Content, GenerateContentConfig, Part
    except ImportError as exc:
        logger.warning(f"GenAI import failed: {exc}")
        return None, "genai_import_failed", _maybe_detail(exc)

    config_kwargs: dict = {
        "temperature": temperature,
        "max_output_tokens": max_output_tokens,
    }
    if response_schema and llm_provider.supports_structured_output():
        config_kwargs["response_schema"] = response_schema
    if response_mime_type:
        config_kwargs["response_mime_type"] = response_mime_type
    if system_instruction:
        config_kwargs["system_instruction"] = system_instruction

    try:
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=llm_provider.get_model(),
            contents=[Content(role="user", parts=[Part(text=prompt)])],
            config=GenerateContentConfig(**config_kwargs),
        )
        text = (response.text or "").strip()
        if not text:
            return None, "genai_empty_response", None
        return text, None, None
    except Exception as exc:
        logger.warning(f"GenAI request failed: {exc}")
        return None, "genai_request_failed", _maybe_detail(exc)


def _generate_text_litellm_with_status(
    llm_provider: ILLMProvider,
    prompt: str,
    temperature: float,
    max_output_tokens: int,
    response_schema: Optional[dict],
    system_instruction: Optional[str],
) -> tuple[Optional[str], Optional[str], Optional[str]]:
    try:
        import litellm
    except ImportError as exc:
        logger.warning(f"LiteLLM import failed: {exc}")
        return None, "litellm_import_failed", _maybe_detail(exc)

    messages = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})

    user_prompt = prompt
    if response_schema:
        schema_text = json.dumps(response_schema, ensure_ascii=False)
        user_prompt = f"{prompt}\n\nReturn JSON only. Schema:\n{schema_text}"
    messages.append({"role": "user", "content": user_prompt})

    kwargs: dict = {
        "model": llm_provider.get_model(),
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_output_tokens,
    }
    if llm_provider.get_api_base():
        kwargs["api_base"] = llm_provider.get_api_base()
    if llm_provider.get_api_key():
        kwargs["api_key"] = llm_provider.get_api_key()

    try:
        response = litellm.completion(**kwargs)
        content = response.choices[0].message.content if response.choices else ""
        text = (content or "").strip()
        if not text:
            return None, "litellm_empty_response", None
        return text, None, None
    except Exception as exc:
        logger.warning(f"LiteLLM request failed: {exc}")
        return None, "litellm_request_failed", _maybe_detail(exc)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence if the model added one."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def _maybe_detail(exc: Exception) -> Optional[str]:
    settings = get_settings()
    if not settings.DEBUG:
        return None
    return f"{type(exc).__name__}: {exc}"
