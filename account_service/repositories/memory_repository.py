"""
In-process user repository.
Keeps users in a dict keyed by id behind a reader/writer lock; used for
development and whenever no database is configured.
"""

from typing import Dict, List, Optional, Tuple
import uuid
import structlog

from ..core.exceptions import ConflictError, NotFoundError
from ..core.locks import ReadWriteLock
from ..models.user import (
    Active,
    ListOptions,
    PendingVerification,
    Suspended,
    User,
    UserStats,
)

logger = structlog.get_logger()


class InMemoryUserRepository:
    """Repository for user data kept in process memory."""

    def __init__(self) -> None:
        self._users: Dict[uuid.UUID, User] = {}
        self._lock = ReadWriteLock()

    def _email_taken(self, email: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        normalized = email.lower()
        return any(
            user.email.lower() == normalized and user.id != exclude_id
            for user in self._users.values()
        )

    async def create(self, user: User) -> User:
        async with self._lock.write():
            if self._email_taken(user.email):
                raise ConflictError("email already exists")
            if user.id in self._users:
                raise ConflictError("user id already exists")
            self._users[user.id] = user

        logger.debug("User stored in memory", user_id=str(user.id))
        return user

    async def find_by_id(self, user_id: uuid.UUID) -> User:
        async with self._lock.read():
            user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("user not found")
        return user

    async def find_by_email(self, email: str) -> User:
        normalized = email.lower()
        async with self._lock.read():
            for user in self._users.values():
                if user.email.lower() == normalized:
                    return user
        raise NotFoundError("user not found")

    async def list(self, options: ListOptions) -> Tuple[List[User], int]:
        async with self._lock.read():
            users = sorted(
                self._users.values(),
                key=lambda u: (u.created_at, str(u.id))
            )
        total = len(users)
        start = min(options.offset, total)
        end = min(start + options.per_page, total)
        return users[start:end], total

    async def update(self, user: User) -> User:
        async with self._lock.write():
            if user.id not in self._users:
                raise NotFoundError("user not found")
            if self._email_taken(user.email, exclude_id=user.id):
                raise ConflictError("email already exists")
            self._users[user.id] = user
        return user

    async def delete(self, user_id: uuid.UUID) -> None:
        async with self._lock.write():
            if self._users.pop(user_id, None) is None:
                raise NotFoundError("user not found")

    async def stats(self) -> UserStats:
        active = suspended = pending = 0
        async with self._lock.read():
            for user in self._users.values():
                status = user.status
                if isinstance(status, Active):
                    active += 1
                elif isinstance(status, Suspended):
                    suspended += 1
                elif isinstance(status, PendingVerification):
                    pending += 1
                else:
                    raise TypeError(f"Unknown user status: {status!r}")
        return UserStats(
            total=active + suspended + pending,
            active=active,
            suspended=suspended,
            pending=pending,
        )
