"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class TimeboxError(Exception):
    """Base exception for the timebox planner."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(TimeboxError):
    """Resource not found."""

    pass


class ValidationError(TimeboxError):
    """Validation error."""

    pass


class LLMError(TimeboxError):
    """LLM-related error."""

    pass


class LLMValidationError(LLMError):
    """LLM output validation failed."""

    def __init__(self, message: str, raw_output: str):
        super().__init__(message, details={"raw_output": raw_output})
        self.raw_output = raw_output


class AuthenticationError(TimeboxError):
    """Authentication failed."""

    pass


class InfrastructureError(TimeboxError):
    """Infrastructure-related error (DB, file store, external services)."""

    pass


class ActionInProgressError(TimeboxError):
    """An action was re-triggered while a previous request is still in flight."""

    def __init__(self, action: str):
        super().__init__(f"{action} is already in progress", details={"action": action})
        self.action = action
