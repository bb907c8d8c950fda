"""
Bulk registration with bounded concurrency.
Each item goes through the account service's single registration path; a
semaphore admits at most ``batch_limit`` items at a time.
"""

import asyncio
from typing import List, Sequence
import structlog

from ..core.exceptions import AccountServiceError, ValidationError
from ..schemas.user_schemas import BatchOutcome, BatchSummary, RegisterRequest
from .account_service import AccountService

logger = structlog.get_logger()


class BatchRegistrar:
    """Best-effort fan-out of registrations."""

    def __init__(self, account_service: AccountService, batch_limit: int = 8):
        if batch_limit < 1:
            raise ValidationError("batch limit must be at least 1")
        self.account_service = account_service
        self.batch_limit = batch_limit

    async def register_many(self, requests: Sequence[RegisterRequest]) -> List[BatchOutcome]:
        """
        Register every request, collecting per-item outcomes.

        Args:
            requests: Ordered registration requests

        Returns:
            One outcome per request, in input order. A failed item carries
            its error message and never affects the others.
        """
        if not requests:
            return []

        gate = asyncio.Semaphore(self.batch_limit)

        async def register_one(index: int, request: RegisterRequest) -> BatchOutcome:
            async with gate:
                try:
                    user = await self.account_service.register(request.email, request.password)
                except AccountServiceError as e:
                    return BatchOutcome(index=index, email=request.email, error=str(e))
                except Exception as e:
                    logger.exception("Unexpected batch item failure", index=index)
                    return BatchOutcome(index=index, email=request.email, error=f"unknown error: {e}")
                return BatchOutcome(index=index, email=request.email, user=user)

        outcomes = await asyncio.gather(
            *(register_one(index, request) for index, request in enumerate(requests))
        )

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info(
            "Batch registration completed",
            total=len(outcomes),
            created=len(outcomes) - failed,
            failed=failed,
            batch_limit=self.batch_limit
        )
        return list(outcomes)


def summarize(outcomes: Sequence[BatchOutcome]) -> BatchSummary:
    """Collapse outcomes into the created users and error messages."""
    return BatchSummary.from_outcomes(list(outcomes))
