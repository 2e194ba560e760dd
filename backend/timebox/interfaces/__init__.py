"""Abstract interfaces for infrastructure abstraction."""

from timebox.interfaces.auth_provider import IAuthProvider, User
from timebox.interfaces.llm_provider import ILLMProvider
from timebox.interfaces.plan_repository import IDayPlanRepository, IWeeklyPlanRepository

__all__ = [
    "IAuthProvider",
    "IDayPlanRepository",
    "ILLMProvider",
    "IWeeklyPlanRepository",
    "User",
]
