"""
Mock authentication provider for local development.
"""

from timebox.core.exceptions import AuthenticationError
from timebox.interfaces.auth_provider import IAuthProvider, User

DEFAULT_USER_ID = "dev_user"


class MockAuthProvider(IAuthProvider):
    """Mock auth provider: the bearer token is treated as the user id."""

    def __init__(self, enabled: bool = False):
        """
        Initialize mock auth provider.

        Args:
            enabled: Whether authentication is required
        """
        self._enabled = enabled

    async def verify_token(self, token: str) -> User:
        """
        Verify token - in mock mode, token is treated as user_id.

        Args:
            token: User ID (in mock mode)

        Returns:
            Mock user
        """
        token = token.strip()
        if not token:
            raise AuthenticationError("Empty token")
        if "@" in token:
            return User(id=token, email=token, display_name=token)
        return User(id=token, email=f"{token}@example.com", display_name=token)

    def default_user(self) -> User:
        return User(id=DEFAULT_USER_ID, email="dev@example.com", display_name="Developer")

    def is_enabled(self) -> bool:
        """Check if authentication is enabled."""
        return self._enabled
