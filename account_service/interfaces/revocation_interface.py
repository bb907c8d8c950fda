"""
Revocation store interface for dependency abstraction.
Defines the contract of the shared key/TTL map that keeps issued tokens alive.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IRevocationStore(Protocol):
    """Protocol for token revocation store operations."""

    async def add(self, token_id: str, ttl_seconds: int) -> None:
        """
        Record a token id as present.

        Args:
            token_id: Unique token identifier (``jti``)
            ttl_seconds: Time to live in seconds

        Raises:
            RepositoryError: If the store cannot be reached
        """
        ...

    async def contains(self, token_id: str) -> bool:
        """
        Check whether a token id is still present.

        Args:
            token_id: Unique token identifier

        Returns:
            True if present, False if revoked or expired

        Raises:
            RepositoryError: If the store cannot be reached
        """
        ...

    async def remove(self, token_id: str) -> bool:
        """
        Delete a token id.

        Args:
            token_id: Unique token identifier

        Returns:
            True if an entry was deleted, False if it was already absent

        Raises:
            RepositoryError: If the store cannot be reached
        """
        ...

    async def ping(self) -> bool:
        """Report whether the store is reachable."""
        ...
