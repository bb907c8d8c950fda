"""
Error taxonomy shared by every component of the account core.

Each exception carries an :class:`ErrorKind` so that callers (the HTTP layer,
the batch registrar) can react to the category of failure without inspecting
driver-specific exception types.
"""
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    REPO = "repo"
    UNKNOWN = "unknown"


class AccountServiceError(Exception):
    """
    Base exception class for the account service.
    All custom exceptions should inherit from this class.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str = "Unexpected error",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.kind.value.upper()
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.kind.value.replace('_', ' ')} error: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error": {
                "code": self.error_code,
                "kind": self.kind.value,
                "message": self.message,
                "details": self.details,
                "status_code": int(self.status_code)
            }
        }


class ValidationError(AccountServiceError):
    """Malformed input; the caller's fault, never worth retrying."""

    kind = ErrorKind.VALIDATION
    status_code = HTTPStatus.BAD_REQUEST


class ConflictError(AccountServiceError):
    """Uniqueness violation, e.g. an email that is already registered."""

    kind = ErrorKind.CONFLICT
    status_code = HTTPStatus.CONFLICT


class NotFoundError(AccountServiceError):
    kind = ErrorKind.NOT_FOUND
    status_code = HTTPStatus.NOT_FOUND


class UnauthorizedError(AccountServiceError):
    """
    Bad credentials or a bad, expired or revoked token.

    These causes are merged on purpose so that responses never reveal which
    check failed.
    """

    kind = ErrorKind.UNAUTHORIZED
    status_code = HTTPStatus.UNAUTHORIZED


class ForbiddenError(AccountServiceError):
    kind = ErrorKind.FORBIDDEN
    status_code = HTTPStatus.FORBIDDEN


class RepositoryError(AccountServiceError):
    """A storage backend is unavailable or malfunctioning."""

    kind = ErrorKind.REPO
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class CredentialError(AccountServiceError):
    """Hashing a secret failed (bad input type, backend failure)."""

    kind = ErrorKind.UNKNOWN
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class ConfigurationError(AccountServiceError):
    kind = ErrorKind.VALIDATION
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
