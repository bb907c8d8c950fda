"""
User-related Pydantic schemas for request/response shaping.
Responses never carry the credential hash or the verification code.
"""
from typing import Optional, List, Literal, Union
from datetime import datetime
import uuid
from pydantic import BaseModel, ConfigDict, Field

from ..models.user import Active, PendingVerification, Suspended, User, UserStats


class RegisterRequest(BaseModel):
    """Registration request schema. Policy checks run in the account service."""

    email: str = Field(..., description="User's email address")
    password: str = Field(..., description="User's password", repr=False)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "newuser@example.com",
                "password": "Password1"
            }
        }
    )


class ActiveStatus(BaseModel):
    status: Literal["active"] = "active"


class SuspendedStatus(BaseModel):
    status: Literal["suspended"] = "suspended"
    reason: str
    until: Optional[datetime] = None


class PendingStatus(BaseModel):
    status: Literal["pending"] = "pending"


StatusView = Union[ActiveStatus, SuspendedStatus, PendingStatus]


def status_view(user: User) -> StatusView:
    status = user.status
    if isinstance(status, Active):
        return ActiveStatus()
    if isinstance(status, Suspended):
        return SuspendedStatus(reason=status.reason, until=status.until)
    if isinstance(status, PendingVerification):
        return PendingStatus()
    raise TypeError(f"Unknown user status: {status!r}")


class UserResponse(BaseModel):
    """Sanitized user view."""

    id: uuid.UUID
    email: str
    created_at: datetime
    status: StatusView = Field(..., discriminator="status")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            created_at=user.created_at,
            status=status_view(user),
        )

    @property
    def status_kind(self) -> str:
        return self.status.status


class PaginatedUsers(BaseModel):
    """Paginated user list response schema."""

    items: List[UserResponse]
    page: int
    per_page: int
    total: int


class UserStatsResponse(BaseModel):
    total: int
    active: int
    suspended: int
    pending: int

    @classmethod
    def from_domain(cls, stats: UserStats) -> "UserStatsResponse":
        return cls(
            total=stats.total,
            active=stats.active,
            suspended=stats.suspended,
            pending=stats.pending,
        )


class BatchOutcome(BaseModel):
    """Result of one item of a bulk registration, aligned with its input position."""

    index: int
    email: str
    user: Optional[UserResponse] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.user is not None


class BatchSummary(BaseModel):
    created: List[UserResponse]
    errors: List[str]

    @classmethod
    def from_outcomes(cls, outcomes: List[BatchOutcome]) -> "BatchSummary":
        return cls(
            created=[outcome.user for outcome in outcomes if outcome.user is not None],
            errors=[outcome.error for outcome in outcomes if outcome.error is not None],
        )


__all__ = [
    "RegisterRequest",
    "UserResponse",
    "PaginatedUsers",
    "UserStatsResponse",
    "BatchOutcome",
    "BatchSummary",
]
