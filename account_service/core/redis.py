"""
Redis connection management and the token revocation store.
The revocation store is the shared key/TTL map that makes logout
authoritative across service instances.
"""
import asyncio
from typing import Optional
import redis.asyncio as redis
from redis.asyncio import ConnectionPool
from redis.exceptions import RedisError
import structlog

from .exceptions import RepositoryError

logger = structlog.get_logger()


class RedisManager:
    """Redis connection manager with connection pooling."""

    def __init__(self, url: str, pool_size: int = 20, connect_timeout: float = 5.0):
        self._url = url
        self._pool_size = pool_size
        self._connect_timeout = connect_timeout
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None

    async def initialize(self):
        """Initialize Redis connection pool and verify it answers PING."""
        try:
            self._pool = ConnectionPool.from_url(
                self._url,
                max_connections=self._pool_size,
                socket_keepalive=True,
                health_check_interval=0,
                decode_responses=True,
            )
            self._client = redis.Redis(connection_pool=self._pool)

            try:
                await asyncio.wait_for(self._client.ping(), timeout=self._connect_timeout)
                logger.info("Redis connection initialized and tested successfully")
            except asyncio.TimeoutError:
                logger.error("Redis connection test timed out")
                raise ConnectionError("Redis connection test timed out")

        except (RedisError, OSError, ValueError) as e:
            logger.error("Failed to initialize Redis connection", error=str(e))
            await self.close()
            raise RepositoryError("revocation store unavailable", details={"error": str(e)}) from e

    async def close(self):
        """Close Redis connections."""
        if self._client:
            await self._client.aclose()
            self._client = None
        if self._pool:
            await self._pool.disconnect()
            self._pool = None
        logger.info("Redis connections closed")

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance."""
        if not self._client:
            raise RuntimeError("Redis client not initialized")
        return self._client


class RedisRevocationStore:
    """
    Revocation store backed by Redis keys with a TTL.

    A key ``{prefix}{jti}`` exists exactly as long as the token it names is
    still allowed to be used. Unlike a best-effort cache, every failure
    to reach Redis is raised: an unreachable store must never be read as
    "not revoked".
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = "jwt:"):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, token_id: str) -> str:
        return f"{self.key_prefix}{token_id}"

    async def add(self, token_id: str, ttl_seconds: int) -> None:
        """Record a token id as present for ``ttl_seconds``."""
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        try:
            await self.redis.set(self._make_key(token_id), "1", ex=ttl_seconds)
        except (RedisError, OSError) as e:
            logger.error("Revocation entry write failed", token_id=token_id, error=str(e))
            raise RepositoryError("revocation store unavailable", details={"error": str(e)}) from e

    async def contains(self, token_id: str) -> bool:
        try:
            return await self.redis.exists(self._make_key(token_id)) > 0
        except (RedisError, OSError) as e:
            logger.error("Revocation entry lookup failed", token_id=token_id, error=str(e))
            raise RepositoryError("revocation store unavailable", details={"error": str(e)}) from e

    async def remove(self, token_id: str) -> bool:
        """Delete a token id; returns False when it was already absent."""
        try:
            return await self.redis.delete(self._make_key(token_id)) > 0
        except (RedisError, OSError) as e:
            logger.error("Revocation entry delete failed", token_id=token_id, error=str(e))
            raise RepositoryError("revocation store unavailable", details={"error": str(e)}) from e

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except (RedisError, OSError) as e:
            logger.warning("Revocation store ping failed", error=str(e))
            return False
