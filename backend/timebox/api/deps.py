"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

import random
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from timebox.core.config import get_settings
from timebox.core.exceptions import (
    ActionInProgressError,
    AuthenticationError,
    InfrastructureError,
    LLMError,
    NotFoundError,
    TimeboxError,
    ValidationError,
)
from timebox.interfaces.auth_provider import IAuthProvider, User
from timebox.interfaces.llm_provider import ILLMProvider
from timebox.interfaces.plan_repository import IDayPlanRepository, IWeeklyPlanRepository
from timebox.services.history_service import PlanHistoryService
from timebox.services.proposal_service import ScheduleProposalService
from timebox.services.session_service import SessionRegistry
from timebox.services.slot_grid import generate_slots


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_day_plan_repository() -> IDayPlanRepository:
    """Get day plan repository instance (SQL when a database is configured)."""
    settings = get_settings()
    if settings.has_database:
        from timebox.infrastructure.sql.plan_repository import SqlDayPlanRepository
        return SqlDayPlanRepository()
    else:
        from timebox.infrastructure.local.json_plan_repository import JsonFileDayPlanRepository
        return JsonFileDayPlanRepository(settings.LOCAL_STORE_PATH)


@lru_cache()
def get_weekly_plan_repository() -> IWeeklyPlanRepository:
    """Get weekly plan repository instance (SQL when a database is configured)."""
    settings = get_settings()
    if settings.has_database:
        from timebox.infrastructure.sql.plan_repository import SqlWeeklyPlanRepository
        return SqlWeeklyPlanRepository()
    else:
        from timebox.infrastructure.local.json_plan_repository import JsonFileWeeklyPlanRepository
        return JsonFileWeeklyPlanRepository(settings.LOCAL_STORE_PATH)


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_llm_provider() -> ILLMProvider:
    """
    Get LLM provider instance based on LLM_PROVIDER setting.

    Supports:
    - gemini-api: Gemini API (API Key)
    - litellm: LiteLLM (Bedrock, OpenAI, etc. with optional custom endpoint)
    """
    settings = get_settings()

    if settings.LLM_PROVIDER == "gemini-api":
        from timebox.infrastructure.local.gemini_api_provider import GeminiAPIProvider
        return GeminiAPIProvider(settings.GEMINI_MODEL)

    elif settings.LLM_PROVIDER == "litellm":
        from timebox.infrastructure.local.litellm_provider import LiteLLMProvider
        return LiteLLMProvider(settings.LITELLM_MODEL)

    else:
        raise ValueError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()

    if settings.AUTH_PROVIDER == "mock":
        from timebox.infrastructure.local.mock_auth import MockAuthProvider
        return MockAuthProvider(enabled=settings.AUTH_REQUIRED)

    else:
        raise ValueError(f"Unknown AUTH_PROVIDER: {settings.AUTH_PROVIDER}")


# ===========================================
# Session / Service Dependencies
# ===========================================


@lru_cache()
def get_session_registry() -> SessionRegistry:
    """Process-wide registry of working plans."""
    return SessionRegistry()


def get_slots() -> tuple[str, ...]:
    settings = get_settings()
    return generate_slots(settings.DAY_START_HOUR, settings.DAY_END_HOUR)


def get_rng() -> random.Random:
    """Random source for tracker colors (overridable in tests)."""
    return random.Random()


def get_plan_history_service(
    day_repo: IDayPlanRepository = Depends(get_day_plan_repository),
    weekly_repo: IWeeklyPlanRepository = Depends(get_weekly_plan_repository),
) -> PlanHistoryService:
    return PlanHistoryService(day_repo=day_repo, weekly_repo=weekly_repo)


def get_proposal_service(
    slots: tuple[str, ...] = Depends(get_slots),
) -> ScheduleProposalService:
    try:
        llm_provider = get_llm_provider()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e
    return ScheduleProposalService(llm_provider=llm_provider, slots=slots)


# ===========================================
# User Authentication
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Get current authenticated user.

    With authentication disabled, returns the development user.
    """
    if not auth_provider.is_enabled():
        return auth_provider.default_user()

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return await auth_provider.verify_token(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

CurrentUser = Annotated[User, Depends(get_current_user)]
Sessions = Annotated[SessionRegistry, Depends(get_session_registry)]
Slots = Annotated[tuple[str, ...], Depends(get_slots)]
Rng = Annotated[random.Random, Depends(get_rng)]
HistoryService = Annotated[PlanHistoryService, Depends(get_plan_history_service)]
ProposalService = Annotated[ScheduleProposalService, Depends(get_proposal_service)]


# ===========================================
# Error Translation
# ===========================================

_STATUS_BY_ERROR: tuple[tuple[type[TimeboxError], int], ...] = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ActionInProgressError, status.HTTP_409_CONFLICT),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (InfrastructureError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (LLMError, status.HTTP_502_BAD_GATEWAY),
)


def http_error(error: TimeboxError) -> HTTPException:
    """Map a domain error to the HTTPException the routers raise."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error.message,
    )
