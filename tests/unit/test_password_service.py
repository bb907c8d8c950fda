"""
Unit tests for CredentialHasher.
"""
import asyncio
import threading
import pytest

from account_service.core.exceptions import CredentialError
from account_service.services.auth.password_service import CredentialHasher


class TestCredentialHasher:
    """Test suite for bcrypt hashing on the worker pool."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_hash_and_verify(self, hasher):
        hash_value = await hasher.hash("Password1")

        assert hash_value != "Password1"
        assert hash_value.startswith("$2")
        assert await hasher.verify("Password1", hash_value) is True
        assert await hasher.verify("Password2", hash_value) is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_hash_is_salted(self, hasher):
        first = await hasher.hash("Password1")
        second = await hasher.hash("Password1")

        assert first != second

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_work_factor_is_fixed(self, hasher):
        hash_value = await hasher.hash("Password1")

        assert hash_value.split("$")[2] == "04"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_hash_is_non_match(self, hasher):
        assert await hasher.verify("Password1", "not-a-bcrypt-hash") is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_string_secret_fails_hashing(self, hasher):
        with pytest.raises(CredentialError):
            await hasher.hash(None)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_hashing_runs_off_the_event_loop_thread(self, hasher, monkeypatch):
        seen_threads = []
        original_hash = hasher._context.hash

        def recording_hash(secret):
            seen_threads.append(threading.current_thread().name)
            return original_hash(secret)

        monkeypatch.setattr(hasher._context, "hash", recording_hash)

        await hasher.hash("Password1")

        assert seen_threads
        assert seen_threads[0].startswith("credential-hasher")
        assert seen_threads[0] != threading.current_thread().name

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_event_loop_stays_responsive_while_hashing(self):
        hasher = CredentialHasher(rounds=10, max_workers=2)
        ticks = 0

        async def ticker():
            nonlocal ticks
            while True:
                ticks += 1
                await asyncio.sleep(0.001)

        ticker_task = asyncio.create_task(ticker())
        try:
            await hasher.hash("Password1")
        finally:
            ticker_task.cancel()
            hasher.shutdown()

        assert ticks > 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_shutdown_rejects_further_work(self):
        hasher = CredentialHasher(rounds=4, max_workers=1)
        hasher.shutdown()

        with pytest.raises(RuntimeError):
            await hasher.hash("Password1")
