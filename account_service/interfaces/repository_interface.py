"""
Repository interfaces for dependency abstraction.
Defines the contract every user storage backend must honor so that the
account service can run unchanged against memory or a database.
"""

from typing import List, Protocol, Tuple, runtime_checkable
import uuid

from ..models.user import ListOptions, User, UserStats


@runtime_checkable
class IUserRepository(Protocol):
    """Protocol for user repository operations."""

    async def create(self, user: User) -> User:
        """
        Persist a new user.

        Args:
            user: Fully built user; ``id`` and ``created_at`` are assigned by the caller

        Returns:
            Stored user

        Raises:
            ConflictError: If the email collides case-insensitively with an existing user
            RepositoryError: If the backend fails
        """
        ...

    async def find_by_id(self, user_id: uuid.UUID) -> User:
        """
        Get user by ID.

        Raises:
            NotFoundError: If no such user exists
        """
        ...

    async def find_by_email(self, email: str) -> User:
        """
        Get user by email, compared case-insensitively.

        Raises:
            NotFoundError: If no such user exists
        """
        ...

    async def list(self, options: ListOptions) -> Tuple[List[User], int]:
        """
        Page through users ordered by creation time.

        Args:
            options: Already clamped pagination window

        Returns:
            Tuple of (users on the page, total user count); pages past the
            end are empty rather than an error
        """
        ...

    async def update(self, user: User) -> User:
        """
        Replace a stored user with ``user`` (no partial merge).

        Raises:
            NotFoundError: If ``user.id`` does not exist
            ConflictError: If the new email belongs to another user
        """
        ...

    async def delete(self, user_id: uuid.UUID) -> None:
        """
        Delete a user.

        Raises:
            NotFoundError: If no such user exists
        """
        ...

    async def stats(self) -> UserStats:
        """
        Count users by status variant at a point in time.

        Returns:
            Totals for all, active, suspended and pending users
        """
        ...
