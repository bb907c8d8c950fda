"""
Password service focused solely on credential hashing.
Bcrypt work runs on a dedicated thread pool so that bursts of hashing never
stall the event loop that serves I/O-bound requests.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Optional
from passlib.context import CryptContext
import structlog

from ...core.exceptions import CredentialError

logger = structlog.get_logger()


class CredentialHasher:
    """Salted bcrypt hashing with a fixed work factor."""

    def __init__(self, rounds: int = 12, max_workers: int = 4):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds
        )
        self._executor: Optional[ThreadPoolExecutor] = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="credential-hasher"
        )
        self.rounds = rounds

    def _run(self, func, *args):
        if self._executor is None:
            raise RuntimeError("CredentialHasher has been shut down")
        loop = asyncio.get_running_loop()
        return loop.run_in_executor(self._executor, func, *args)

    async def hash(self, secret: str) -> str:
        """
        Hash a secret.

        Args:
            secret: Plain text secret

        Returns:
            Encoded bcrypt hash

        Raises:
            CredentialError: If the secret cannot be hashed
        """
        if not isinstance(secret, str):
            raise CredentialError("secret must be a string")
        try:
            return await self._run(self._context.hash, secret)
        except (ValueError, TypeError) as e:
            logger.error("Credential hashing failed", error=str(e))
            raise CredentialError("failed to hash secret") from e

    async def verify(self, secret: str, hash_value: str) -> bool:
        """
        Verify a secret against its hash.

        A structurally invalid hash is logged and reported as a non-match.
        """
        if not isinstance(secret, str) or not isinstance(hash_value, str):
            return False
        try:
            return await self._run(self._context.verify, secret, hash_value)
        except (ValueError, TypeError) as e:
            logger.warning("Malformed credential hash", error=str(e))
            return False

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
