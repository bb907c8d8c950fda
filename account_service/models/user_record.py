"""
SQLAlchemy mapping of the ``users`` table and conversion to/from the domain model.
"""
from datetime import datetime, timezone
from typing import Optional
import uuid
from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from .user import (
    STATUS_ACTIVE,
    STATUS_PENDING,
    STATUS_SUSPENDED,
    Active,
    PendingVerification,
    Suspended,
    User,
    status_kind,
)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class UserRecord(Base):
    """Row representation of a user."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    credential_hash: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    status_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    verification_code: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    @classmethod
    def from_domain(cls, user: User) -> "UserRecord":
        record = cls(id=str(user.id), created_at=user.created_at)
        record.apply(user)
        return record

    def apply(self, user: User) -> None:
        """Copy every mutable field of ``user`` onto this row (full replace)."""
        status = user.status
        self.email = user.email
        self.credential_hash = user.credential_hash
        self.status = status_kind(status)
        self.status_reason = status.reason if isinstance(status, Suspended) else None
        self.status_until = status.until if isinstance(status, Suspended) else None
        self.verification_code = status.code if isinstance(status, PendingVerification) else None

    def to_domain(self) -> User:
        if self.status == STATUS_ACTIVE:
            status = Active()
        elif self.status == STATUS_SUSPENDED:
            status = Suspended(reason=self.status_reason or "", until=_as_utc(self.status_until))
        elif self.status == STATUS_PENDING:
            status = PendingVerification(code=self.verification_code or "")
        else:
            raise ValueError(f"Unknown stored status: {self.status!r}")

        return User(
            id=uuid.UUID(self.id),
            email=self.email,
            credential_hash=self.credential_hash,
            created_at=_as_utc(self.created_at),
            status=status,
        )

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id}, status={self.status})>"


# Emails are unique regardless of case
Index("uq_users_email_lower", func.lower(UserRecord.__table__.c.email), unique=True)
