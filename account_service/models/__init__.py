"""
Domain models and persisted tables.
"""

from .base import Base
from .user import (
    Active,
    ListOptions,
    PendingVerification,
    Suspended,
    User,
    UserStats,
    UserStatus,
    status_kind,
)
from .user_record import UserRecord

__all__ = [
    "Base",
    "Active",
    "ListOptions",
    "PendingVerification",
    "Suspended",
    "User",
    "UserStats",
    "UserStatus",
    "status_kind",
    "UserRecord",
]
