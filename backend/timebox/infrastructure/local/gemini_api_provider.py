"""
Gemini API provider.

Uses the Gemini API with an API Key (no GCP project required).
"""

from timebox.core.config import get_settings
from timebox.interfaces.llm_provider import ILLMProvider


class GeminiAPIProvider(ILLMProvider):
    """Gemini API provider using API Key."""

    def __init__(self, model_name: str):
        """
        Initialize Gemini API provider.

        Args:
            model_name: Gemini model name (e.g., "gemini-2.0-flash")
        """
        self._model_name = model_name
        self._settings = get_settings()

        if not self._settings.GOOGLE_API_KEY:
            raise ValueError(
                "GOOGLE_API_KEY is required for Gemini API provider. "
                "Get your API key from https://aistudio.google.com/apikey"
            )

    def get_model(self) -> str:
        return self._model_name

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        return f"Gemini API ({self._model_name})"

    def get_api_key(self) -> str:
        return self._settings.GOOGLE_API_KEY

    def supports_structured_output(self) -> bool:
        """Gemini accepts response_schema directly."""
        return True
