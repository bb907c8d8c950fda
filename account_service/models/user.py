"""
User domain model and its account status variants.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Union
import secrets
import uuid


@dataclass(frozen=True)
class Active:
    """Fully active account."""


@dataclass(frozen=True)
class Suspended:
    """Temporarily suspended; ``until=None`` means until an admin lifts it."""

    reason: str
    until: Optional[datetime] = None


@dataclass(frozen=True)
class PendingVerification:
    """Waiting for the owner to confirm the address with ``code``."""

    code: str


UserStatus = Union[Active, Suspended, PendingVerification]

STATUS_ACTIVE = "active"
STATUS_SUSPENDED = "suspended"
STATUS_PENDING = "pending"


def status_kind(status: UserStatus) -> str:
    """Storage tag of a status variant."""
    if isinstance(status, Active):
        return STATUS_ACTIVE
    if isinstance(status, Suspended):
        return STATUS_SUSPENDED
    if isinstance(status, PendingVerification):
        return STATUS_PENDING
    raise TypeError(f"Unknown user status: {status!r}")


@dataclass(frozen=True)
class User:
    """Identity record as persisted by a user repository."""

    id: uuid.UUID
    email: str
    credential_hash: str
    created_at: datetime
    status: UserStatus

    @classmethod
    def new(cls, email: str, credential_hash: str, status: UserStatus) -> "User":
        """Build a record with a fresh id and creation time."""
        return cls(
            id=uuid.uuid4(),
            email=email,
            credential_hash=credential_hash,
            created_at=utcnow(),
            status=status,
        )

    def with_status(self, status: UserStatus) -> "User":
        return replace(self, status=status)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, status={status_kind(self.status)})>"


@dataclass(frozen=True)
class UserStats:
    total: int = 0
    active: int = 0
    suspended: int = 0
    pending: int = 0


@dataclass(frozen=True)
class ListOptions:
    """1-based pagination window."""

    page: int = 1
    per_page: int = 20

    def clamp(self, max_per_page: int) -> "ListOptions":
        per_page = max(1, min(self.per_page, max_per_page))
        return ListOptions(page=max(1, self.page), per_page=per_page)

    @property
    def offset(self) -> int:
        return (max(1, self.page) - 1) * self.per_page


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_verification_code() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"
