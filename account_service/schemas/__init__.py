"""
Pydantic views exchanged with the transport layer.
"""

from .user_schemas import (
    BatchOutcome,
    BatchSummary,
    PaginatedUsers,
    RegisterRequest,
    UserResponse,
    UserStatsResponse,
)

__all__ = [
    "BatchOutcome",
    "BatchSummary",
    "PaginatedUsers",
    "RegisterRequest",
    "UserResponse",
    "UserStatsResponse",
]
