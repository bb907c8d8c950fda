"""
Integration tests for the service container wiring and backend fallbacks.
"""
import asyncio
from unittest.mock import AsyncMock, patch
import pytest

from account_service.container.container import ServiceContainer
from account_service.core.exceptions import RepositoryError, UnauthorizedError
from account_service.core.redis import RedisRevocationStore
from account_service.repositories import InMemoryUserRepository, SQLUserRepository
from account_service.schemas.user_schemas import RegisterRequest


class TestServiceContainer:

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_defaults_to_in_memory_and_stateless(self, settings):
        async with ServiceContainer(settings) as container:
            assert isinstance(container.account_service.user_repository, InMemoryUserRepository)
            assert container.token_service.stateless is True
            assert container.batch_registrar.batch_limit == settings.BATCH_LIMIT

            health = await container.health_check()

        assert health == {"status": "healthy", "database": "in_memory", "redis": "disabled"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_sql_backend_when_database_configured(self, settings):
        settings.DATABASE_URL = "sqlite+aiosqlite:///:memory:"

        async with ServiceContainer(settings) as container:
            service = container.account_service
            assert isinstance(service.user_repository, SQLUserRepository)

            user = await service.register("a@b.com", "Password1")
            token = await service.login("a@b.com", "Password1")
            me = await service.me(f"Bearer {token}")

            assert me.id == user.id
            assert (await container.health_check())["database"] == "healthy"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unreachable_database_falls_back_to_memory(self, settings):
        settings.DATABASE_URL = "sqlite+aiosqlite:///:memory:"

        with patch(
            "account_service.container.container.DatabaseManager.initialize",
            AsyncMock(side_effect=RepositoryError("user store unavailable")),
        ):
            async with ServiceContainer(settings) as container:
                assert isinstance(container.account_service.user_repository, InMemoryUserRepository)
                assert container.database is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unreachable_redis_falls_back_to_stateless(self, settings):
        settings.REDIS_URL = "redis://127.0.0.1:1/0"

        async with ServiceContainer(settings) as container:
            assert container.token_service.stateless is True
            assert container.redis is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_malformed_urls_fall_back(self, settings):
        settings.DATABASE_URL = "not a database url"
        settings.REDIS_URL = "not-a-redis-url"

        async with ServiceContainer(settings) as container:
            assert isinstance(container.account_service.user_repository, InMemoryUserRepository)
            assert container.token_service.stateless is True
            assert container.database is None
            assert container.redis is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_database_timeout_falls_back_to_memory(self, settings):
        settings.DATABASE_URL = "sqlite+aiosqlite:///:memory:"

        with patch(
            "account_service.core.database.Base.metadata.create_all",
            side_effect=asyncio.TimeoutError(),
        ):
            async with ServiceContainer(settings) as container:
                assert isinstance(container.account_service.user_repository, InMemoryUserRepository)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_health_reports_unreachable_revocation_store(self, settings, fake_redis):
        settings.REDIS_URL = "redis://localhost:6379/0"

        with patch("account_service.container.container.RedisManager") as manager_cls:
            manager = manager_cls.return_value
            manager.initialize = AsyncMock()
            manager.close = AsyncMock()
            manager.client = fake_redis

            async with ServiceContainer(settings) as container:
                with patch.object(fake_redis, "ping", AsyncMock(side_effect=OSError("down"))):
                    health = await container.health_check()

        assert health["redis"] == "unhealthy"
        assert health["status"] == "unhealthy"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_redis_backed_revocation(self, settings, fake_redis):
        settings.REDIS_URL = "redis://localhost:6379/0"

        with patch("account_service.container.container.RedisManager") as manager_cls:
            manager = manager_cls.return_value
            manager.initialize = AsyncMock()
            manager.close = AsyncMock()
            manager.client = fake_redis

            async with ServiceContainer(settings) as container:
                assert isinstance(container.token_service.revocation_store, RedisRevocationStore)
                service = container.account_service
                await service.register("a@b.com", "Password1")
                token = await service.login("a@b.com", "Password1")

                await service.logout(f"Bearer {token}")

                with pytest.raises(UnauthorizedError):
                    await service.me(f"Bearer {token}")
                assert (await container.health_check())["redis"] == "healthy"

        manager.close.assert_awaited_once()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_batch_registration_through_container(self, settings):
        settings.BATCH_LIMIT = 2

        async with ServiceContainer(settings) as container:
            outcomes = await container.batch_registrar.register_many(
                [
                    RegisterRequest(email="one@example.com", password="Password1"),
                    RegisterRequest(email="two@example.com", password="bad"),
                    RegisterRequest(email="three@example.com", password="Password3"),
                ]
            )
            stats = await container.account_service.stats()

        assert [o.ok for o in outcomes] == [True, False, True]
        assert stats.pending == 2

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_services_unavailable_after_close(self, settings):
        container = ServiceContainer(settings)
        await container.initialize()
        await container.close()

        with pytest.raises(RuntimeError):
            _ = container.account_service
