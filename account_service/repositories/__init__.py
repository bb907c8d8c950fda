"""
User storage backends and the factory that selects one at construction time.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..interfaces.repository_interface import IUserRepository
from .memory_repository import InMemoryUserRepository
from .user_repository import SQLUserRepository


class RepositoryFactory:
    """Builds user repositories for the composition root."""

    @staticmethod
    def in_memory() -> IUserRepository:
        return InMemoryUserRepository()

    @staticmethod
    def sql(session_factory: async_sessionmaker[AsyncSession]) -> IUserRepository:
        return SQLUserRepository(session_factory)


__all__ = ["InMemoryUserRepository", "SQLUserRepository", "RepositoryFactory"]
