"""
Abstract authentication provider interface.

Defines the contract that auth providers must implement, so the
application only depends on "hash/verify a password" and "issue/verify a
token", never on a particular token format.

Example:
    from common.auth import AuthProvider, JWTAuth

    def get_auth_provider(settings) -> AuthProvider:
        return JWTAuth(secret=settings.JWT_SECRET)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class AuthProvider(ABC):
    """
    Abstract authentication provider.

    Token methods are async to support providers that call out to a
    remote service; password hashing is CPU-bound and stays sync.
    """

    @abstractmethod
    def hash_password(self, password: str) -> str:
        """
        Hash a plaintext password for storage.

        Args:
            password: User's password

        Returns:
            Hash string safe to persist
        """
        pass

    @abstractmethod
    def verify_password(self, password: str, hashed: str) -> bool:
        """
        Check a plaintext password against a stored hash.

        Args:
            password: Candidate password
            hashed: Stored hash

        Returns:
            True when the password matches
        """
        pass

    @abstractmethod
    async def create_token(
        self,
        user_id: str,
        **claims: Any,
    ) -> str:
        """
        Create an authentication token for a user.

        Args:
            user_id: The user's ID
            **claims: Additional claims to include in the token

        Returns:
            The authentication token string
        """
        pass

    @abstractmethod
    async def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify an authentication token.

        Args:
            token: The token to verify

        Returns:
            Dictionary containing decoded token claims (at minimum: sub)

        Raises:
            ValueError: If token is invalid, expired, or revoked
        """
        pass

    @abstractmethod
    async def revoke_token(self, token: str) -> None:
        """
        Revoke/invalidate a token.

        Args:
            token: The token to revoke
        """
        pass
