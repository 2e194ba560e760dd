"""
Application configuration using Pydantic Settings.

Persistence backend selection is controlled by DATABASE_URL: when it is set,
plans are stored through SQLAlchemy; when it is empty, plans fall back to
per-owner JSON files under LOCAL_STORE_PATH.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "production"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Persistence
    # ===========================================
    # Empty string selects the local JSON file store.
    DATABASE_URL: str = "sqlite+aiosqlite:///./timebox.db"
    LOCAL_STORE_PATH: str = "./storage/plans"

    # ===========================================
    # LLM Configuration
    # ===========================================
    # LLM Provider: "gemini-api" | "litellm"
    # - gemini-api: Gemini API (API Key)
    # - litellm: LiteLLM (Bedrock, OpenAI, etc. with optional custom endpoint)
    LLM_PROVIDER: Literal["gemini-api", "litellm"] = "gemini-api"

    # Gemini model name (for gemini-api)
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # LiteLLM model identifier (for litellm provider)
    LITELLM_MODEL: str = "bedrock/anthropic.claude-3-5-sonnet-20241022-v2:0"

    # LiteLLM custom endpoint (optional, for proxy servers)
    LITELLM_API_BASE: str = ""

    # LiteLLM custom API key (optional, for custom endpoints)
    LITELLM_API_KEY: str = ""

    # Google API Key (for gemini-api provider)
    GOOGLE_API_KEY: str = ""

    # ===========================================
    # Auth
    # ===========================================
    AUTH_PROVIDER: Literal["mock"] = "mock"
    AUTH_REQUIRED: bool = True

    # ===========================================
    # Planner grid
    # ===========================================
    # Waking window for the daily slot grid: DAY_START_HOUR:00 .. (DAY_END_HOUR-1):30
    DAY_START_HOUR: int = Field(default=6, ge=0, le=23)
    DAY_END_HOUR: int = Field(default=24, ge=1, le=24)

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @property
    def has_database(self) -> bool:
        """Check whether a SQL database is configured."""
        return bool(self.DATABASE_URL.strip())


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
