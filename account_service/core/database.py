"""
Database connection management for the durable user store.
Wraps an async SQLAlchemy engine and session factory built from a URL.
"""
import asyncio
from typing import Any, Dict, Optional
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
import structlog

from ..models.base import Base
from .exceptions import RepositoryError

logger = structlog.get_logger()


class DatabaseManager:
    """Owns the engine and session factory for one database URL."""

    def __init__(
        self,
        url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        echo: bool = False
    ):
        self._url = url
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    def _engine_options(self) -> Dict[str, Any]:
        if self._url.startswith("sqlite"):
            # A single shared connection keeps in-memory databases alive
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        return {
            "pool_size": self._pool_size,
            "max_overflow": self._max_overflow,
            "pool_pre_ping": True,
        }

    async def initialize(self) -> None:
        """Create the engine, verify connectivity and bootstrap tables."""
        try:
            self._engine = create_async_engine(self._url, echo=self._echo, **self._engine_options())
            self._session_factory = async_sessionmaker(
                self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False
            )
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError, ValueError, asyncio.TimeoutError) as e:
            logger.error("Database initialization failed", error=str(e))
            await self.close()
            raise RepositoryError("user store unavailable", details={"error": str(e)}) from e
        logger.info("Database connection initialized")

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("Database not initialized")
        return self._session_factory

    async def health_check(self) -> bool:
        """Check if database connection is healthy."""
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                return result.scalar() == 1
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database health check failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close all database connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connections closed")
