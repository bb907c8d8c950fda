"""
Pytest configuration and fixtures for account service testing.
Provides hasher, revocation store, repository and service fixtures with
proper cleanup. Every repository-backed fixture runs against both backends.
"""
from datetime import timedelta
from typing import AsyncGenerator
import pytest
import pytest_asyncio
import fakeredis.aioredis

from account_service.core.config import Settings
from account_service.core.database import DatabaseManager
from account_service.core.redis import RedisRevocationStore
from account_service.repositories import RepositoryFactory
from account_service.services.account_service import AccountService
from account_service.services.auth.password_service import CredentialHasher
from account_service.services.auth.token_service import TokenService

TEST_SECRET_KEY = "test-signing-key-0123456789abcdef-0123456789"
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Minimum bcrypt cost keeps the suite fast
TEST_BCRYPT_ROUNDS = 4


class FakeClock:
    """Settable clock for token expiry tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings() -> Settings:
    """Create settings for the test environment without reading .env."""
    return Settings(
        _env_file=None,
        SECRET_KEY=TEST_SECRET_KEY,
        ENVIRONMENT="test",
        BCRYPT_ROUNDS=TEST_BCRYPT_ROUNDS,
        HASH_WORKERS=2,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def hasher():
    """Create a fast credential hasher and shut its pool down afterwards."""
    credential_hasher = CredentialHasher(rounds=TEST_BCRYPT_ROUNDS, max_workers=4)
    yield credential_hasher
    credential_hasher.shutdown()


@pytest_asyncio.fixture
async def fake_redis() -> AsyncGenerator[fakeredis.aioredis.FakeRedis, None]:
    """Create a fake Redis instance for testing."""
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    await client.flushall()
    yield client
    await client.aclose()


@pytest.fixture
def revocation_store(fake_redis) -> RedisRevocationStore:
    return RedisRevocationStore(fake_redis, key_prefix="jwt:")


@pytest.fixture
def token_service(revocation_store, clock) -> TokenService:
    """Token service with a revocation store."""
    return TokenService(
        secret_key=TEST_SECRET_KEY,
        expires_delta=timedelta(hours=24),
        revocation_store=revocation_store,
        clock=clock,
    )


@pytest.fixture
def stateless_token_service(clock) -> TokenService:
    """Token service without a revocation store."""
    return TokenService(
        secret_key=TEST_SECRET_KEY,
        expires_delta=timedelta(hours=24),
        clock=clock,
    )


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[DatabaseManager, None]:
    """Create a fresh in-memory SQLite database per test."""
    manager = DatabaseManager(TEST_DATABASE_URL)
    await manager.initialize()
    yield manager
    await manager.close()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def user_repository(request):
    """Yield each repository backend in turn."""
    if request.param == "memory":
        yield RepositoryFactory.in_memory()
        return

    manager = DatabaseManager(TEST_DATABASE_URL)
    await manager.initialize()
    yield RepositoryFactory.sql(manager.session_factory)
    await manager.close()


@pytest.fixture
def account_service(user_repository, token_service, hasher) -> AccountService:
    return AccountService(
        user_repository=user_repository,
        token_service=token_service,
        hasher=hasher,
        max_page_size=100,
        default_page_size=20,
    )


@pytest.fixture
def stateless_account_service(user_repository, stateless_token_service, hasher) -> AccountService:
    return AccountService(
        user_repository=user_repository,
        token_service=stateless_token_service,
        hasher=hasher,
    )
