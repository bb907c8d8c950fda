from typing import Optional, Dict, Any
import re
from jose import JWTError, jwt
import structlog

from .exceptions import UnauthorizedError, ValidationError

logger = structlog.get_logger()

EMAIL_MIN_LENGTH = 3
EMAIL_MAX_LENGTH = 254
PASSWORD_MIN_LENGTH = 8

_BEARER_RE = re.compile(r"^\s*bearer\s+(?P<token>\S+)\s*$", re.IGNORECASE)


class SecurityService:
    """Handles input policy checks and token signing primitives"""

    @staticmethod
    def validate_email(email: str) -> tuple[bool, list[str]]:
        """Validate email shape: contains '@' and '.', 3 to 254 characters"""
        errors = []

        if not isinstance(email, str) or not email.strip():
            return False, ["Email must not be empty"]

        if "@" not in email or "." not in email:
            errors.append("Email must contain '@' and '.'")

        if not EMAIL_MIN_LENGTH <= len(email) <= EMAIL_MAX_LENGTH:
            errors.append(
                f"Email must be between {EMAIL_MIN_LENGTH} and {EMAIL_MAX_LENGTH} characters"
            )

        return len(errors) == 0, errors

    @staticmethod
    def validate_password_strength(password: str) -> tuple[bool, list[str]]:
        """Validate password meets policy: 8+ characters, a letter and a digit"""
        errors = []

        if not isinstance(password, str):
            return False, ["Password must be a string"]

        if len(password) < PASSWORD_MIN_LENGTH:
            errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

        if not re.search(r"[A-Za-z]", password):
            errors.append("Password must contain at least one letter")

        if not re.search(r"\d", password):
            errors.append("Password must contain at least one number")

        return len(errors) == 0, errors

    @classmethod
    def ensure_valid_registration(cls, email: str, password: str) -> None:
        """Raise ValidationError unless both email and password pass policy"""
        is_valid, errors = cls.validate_email(email)
        if not is_valid:
            raise ValidationError("invalid email format", details={"errors": errors})

        is_valid, errors = cls.validate_password_strength(password)
        if not is_valid:
            raise ValidationError(
                "password does not meet policy", details={"errors": errors}
            )

    @staticmethod
    def encode_token(claims: Dict[str, Any], secret_key: str, algorithm: str) -> str:
        """Sign a claim set"""
        return jwt.encode(claims, secret_key, algorithm=algorithm)

    @staticmethod
    def decode_token(token: str, secret_key: str, algorithm: str) -> Dict[str, Any]:
        """
        Verify the signature and structure of a token.

        Expiry is not checked here; the token service compares ``exp``
        against its own clock.
        """
        try:
            return jwt.decode(
                token,
                secret_key,
                algorithms=[algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTError as e:
            logger.debug("Token decoding failed", error=str(e))
            raise UnauthorizedError("could not validate credentials") from e


def bearer_from_header(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    match = _BEARER_RE.match(authorization)
    if match is None:
        return None
    return match.group("token")
