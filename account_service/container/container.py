"""
Composition root for the account core.
Builds every service once from Settings and shares the storage handles by
reference; nothing here is a module-level singleton.
"""

from datetime import timedelta
from typing import Any, Dict, Optional
import structlog

from ..core.config import Settings
from ..core.database import DatabaseManager
from ..core.exceptions import RepositoryError
from ..core.redis import RedisManager, RedisRevocationStore
from ..interfaces.repository_interface import IUserRepository
from ..interfaces.revocation_interface import IRevocationStore
from ..repositories import RepositoryFactory
from ..services.account_service import AccountService
from ..services.auth.password_service import CredentialHasher
from ..services.auth.token_service import TokenService
from ..services.batch_service import BatchRegistrar

logger = structlog.get_logger()


class ServiceContainer:
    """Owns the backends and the services wired on top of them."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.database: Optional[DatabaseManager] = None
        self.redis: Optional[RedisManager] = None
        self._revocation_store: Optional[IRevocationStore] = None
        self._hasher: Optional[CredentialHasher] = None
        self._token_service: Optional[TokenService] = None
        self._account_service: Optional[AccountService] = None
        self._batch_registrar: Optional[BatchRegistrar] = None
        self._initialized = False

    async def initialize(self) -> None:
        """
        Connect backends and build services.

        An unreachable database falls back to the in-memory repository and an
        unreachable Redis falls back to stateless tokens; both are logged.
        """
        if self._initialized:
            return

        settings = self.settings
        self._hasher = CredentialHasher(
            rounds=settings.BCRYPT_ROUNDS,
            max_workers=settings.HASH_WORKERS
        )

        user_repository = await self._build_user_repository()
        revocation_store = await self._build_revocation_store()
        self._revocation_store = revocation_store

        self._token_service = TokenService(
            secret_key=settings.SECRET_KEY,
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            revocation_store=revocation_store,
            algorithm=settings.ALGORITHM
        )
        self._account_service = AccountService(
            user_repository=user_repository,
            token_service=self._token_service,
            hasher=self._hasher,
            max_page_size=settings.MAX_PAGE_SIZE,
            default_page_size=settings.DEFAULT_PAGE_SIZE
        )
        self._batch_registrar = BatchRegistrar(
            self._account_service,
            batch_limit=settings.BATCH_LIMIT
        )

        self._initialized = True
        logger.info(
            "Service container initialized",
            durable_store=self.database is not None,
            revocation_store=revocation_store is not None
        )

    async def _build_user_repository(self) -> IUserRepository:
        settings = self.settings
        if not settings.DATABASE_URL:
            logger.info("DATABASE_URL not set, using in-memory user store")
            return RepositoryFactory.in_memory()

        database = DatabaseManager(
            settings.DATABASE_URL,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            echo=settings.DEBUG
        )
        try:
            await database.initialize()
        except RepositoryError as e:
            logger.warning("Database unreachable, falling back to in-memory user store", error=e.message)
            return RepositoryFactory.in_memory()

        self.database = database
        return RepositoryFactory.sql(database.session_factory)

    async def _build_revocation_store(self) -> Optional[IRevocationStore]:
        settings = self.settings
        if not settings.REDIS_URL:
            logger.warning("REDIS_URL not set, tokens are stateless and logout cannot revoke them")
            return None

        manager = RedisManager(settings.REDIS_URL, pool_size=settings.REDIS_POOL_SIZE)
        try:
            await manager.initialize()
        except RepositoryError as e:
            logger.warning(
                "Redis unreachable, falling back to stateless tokens (development only)",
                error=e.message
            )
            return None

        self.redis = manager
        return RedisRevocationStore(manager.client, key_prefix=settings.REVOCATION_KEY_PREFIX)

    def _require(self, service: Optional[Any], name: str) -> Any:
        if not self._initialized or service is None:
            raise RuntimeError(f"Service container not initialized: {name}")
        return service

    @property
    def hasher(self) -> CredentialHasher:
        return self._require(self._hasher, "hasher")

    @property
    def token_service(self) -> TokenService:
        return self._require(self._token_service, "token_service")

    @property
    def account_service(self) -> AccountService:
        return self._require(self._account_service, "account_service")

    @property
    def batch_registrar(self) -> BatchRegistrar:
        return self._require(self._batch_registrar, "batch_registrar")

    async def health_check(self) -> Dict[str, str]:
        """Report backend health as ``{status, database, redis}``."""
        if self.database is None:
            database = "in_memory"
        else:
            database = "healthy" if await self.database.health_check() else "unhealthy"

        if self._revocation_store is None:
            redis_status = "disabled"
        else:
            redis_status = "healthy" if await self._revocation_store.ping() else "unhealthy"

        status = "unhealthy" if "unhealthy" in (database, redis_status) else "healthy"
        return {"status": status, "database": database, "redis": redis_status}

    async def close(self) -> None:
        """Dispose connections and worker threads."""
        if self.redis is not None:
            await self.redis.close()
            self.redis = None
        if self.database is not None:
            await self.database.close()
            self.database = None
        if self._hasher is not None:
            self._hasher.shutdown()
            self._hasher = None

        self._revocation_store = None
        self._token_service = None
        self._account_service = None
        self._batch_registrar = None
        self._initialized = False
        logger.info("Service container closed")

    async def __aenter__(self) -> "ServiceContainer":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
