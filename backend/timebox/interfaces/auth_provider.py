"""
Authentication provider interface.

The planner only needs an opaque owner id to namespace persisted plans.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Authenticated user. ``id`` is used as the owner id of plans."""

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class IAuthProvider(ABC):
    """Abstract interface for authentication providers."""

    @abstractmethod
    async def verify_token(self, token: str) -> User:
        """
        Verify a bearer token and return the user.

        Raises:
            AuthenticationError: If the token is invalid
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Check if authentication is required."""
        pass

    @abstractmethod
    def default_user(self) -> User:
        """User assumed when authentication is disabled."""
        pass
