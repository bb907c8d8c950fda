"""
User repository implementation following the Repository pattern.
Persists users through async SQLAlchemy and translates driver errors into
the service's error taxonomy.
"""

from typing import List, Tuple
import uuid
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import structlog

from ..core.exceptions import ConflictError, NotFoundError, RepositoryError
from ..models.user import (
    STATUS_ACTIVE,
    STATUS_PENDING,
    STATUS_SUSPENDED,
    ListOptions,
    User,
    UserStats,
)
from ..models.user_record import UserRecord

logger = structlog.get_logger()

_UNIQUE_VIOLATION_SQLSTATE = "23505"


def _is_unique_violation(error: IntegrityError) -> bool:
    orig = error.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    return "unique" in str(orig).lower()


class SQLUserRepository:
    """Repository for user data access operations on a relational database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create(self, user: User) -> User:
        """
        Insert a new user row.

        Args:
            user: User to persist

        Returns:
            The stored user, read back from the row
        """
        try:
            async with self.session_factory() as db:
                record = UserRecord.from_domain(user)
                db.add(record)
                await db.commit()
                stored = record.to_domain()
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise ConflictError("email already exists") from e
            logger.error("User creation failed", user_id=str(user.id), error=str(e))
            raise RepositoryError("failed to create user") from e
        except SQLAlchemyError as e:
            logger.error("User creation failed", user_id=str(user.id), error=str(e))
            raise RepositoryError("failed to create user") from e

        logger.info("User created successfully", user_id=str(stored.id), email="***MASKED***")
        return stored

    async def find_by_id(self, user_id: uuid.UUID) -> User:
        try:
            async with self.session_factory() as db:
                record = await db.get(UserRecord, str(user_id))
                user = record.to_domain() if record else None
        except SQLAlchemyError as e:
            logger.error("Failed to get user by ID", user_id=str(user_id), error=str(e))
            raise RepositoryError("failed to load user") from e

        if user is None:
            raise NotFoundError("user not found")
        return user

    async def find_by_email(self, email: str) -> User:
        query = select(UserRecord).where(func.lower(UserRecord.email) == email.lower())
        try:
            async with self.session_factory() as db:
                result = await db.execute(query)
                record = result.scalar_one_or_none()
                user = record.to_domain() if record else None
        except SQLAlchemyError as e:
            logger.error("Failed to get user by email", error=str(e))
            raise RepositoryError("failed to load user") from e

        if user is None:
            raise NotFoundError("user not found")
        return user

    async def list(self, options: ListOptions) -> Tuple[List[User], int]:
        """
        Get one page of users ordered by creation time.

        Args:
            options: Clamped pagination window

        Returns:
            Tuple of (users, total count)
        """
        query = (
            select(UserRecord)
            .order_by(UserRecord.created_at.asc(), UserRecord.id.asc())
            .limit(options.per_page)
            .offset(options.offset)
        )
        try:
            async with self.session_factory() as db:
                total = await db.scalar(select(func.count()).select_from(UserRecord))
                result = await db.execute(query)
                users = [record.to_domain() for record in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Failed to list users", error=str(e))
            raise RepositoryError("failed to list users") from e

        return users, int(total or 0)

    async def update(self, user: User) -> User:
        try:
            async with self.session_factory() as db:
                record = await db.get(UserRecord, str(user.id))
                if record is None:
                    raise NotFoundError("user not found")
                record.apply(user)
                await db.commit()
                stored = record.to_domain()
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise ConflictError("email already exists") from e
            logger.error("User update failed", user_id=str(user.id), error=str(e))
            raise RepositoryError("failed to update user") from e
        except SQLAlchemyError as e:
            logger.error("User update failed", user_id=str(user.id), error=str(e))
            raise RepositoryError("failed to update user") from e

        logger.info("User updated successfully", user_id=str(stored.id))
        return stored

    async def delete(self, user_id: uuid.UUID) -> None:
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    delete(UserRecord).where(UserRecord.id == str(user_id))
                )
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("User deletion failed", user_id=str(user_id), error=str(e))
            raise RepositoryError("failed to delete user") from e

        if result.rowcount == 0:
            raise NotFoundError("user not found")
        logger.info("User deleted successfully", user_id=str(user_id))

    async def stats(self) -> UserStats:
        query = select(UserRecord.status, func.count()).group_by(UserRecord.status)
        try:
            async with self.session_factory() as db:
                result = await db.execute(query)
                counts = {status: int(count) for status, count in result.all()}
        except SQLAlchemyError as e:
            logger.error("Failed to compute user stats", error=str(e))
            raise RepositoryError("failed to compute user stats") from e

        active = counts.get(STATUS_ACTIVE, 0)
        suspended = counts.get(STATUS_SUSPENDED, 0)
        pending = counts.get(STATUS_PENDING, 0)
        return UserStats(
            total=active + suspended + pending,
            active=active,
            suspended=suspended,
            pending=pending,
        )
