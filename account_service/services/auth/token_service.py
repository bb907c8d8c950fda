"""
Token service focused solely on session token operations.
Issues, validates and revokes signed tokens; when a revocation store is
configured a token is only valid while its ``jti`` entry is present there.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, Optional
import time
import uuid
import structlog

from ...core.exceptions import ConfigurationError, UnauthorizedError
from ...core.security import SecurityService
from ...interfaces.revocation_interface import IRevocationStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class TokenClaims:
    """Decoded claim set of a session token."""

    sub: str
    iat: int
    exp: int
    jti: str

    @property
    def expires_in(self) -> int:
        return self.exp - self.iat

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TokenClaims":
        try:
            sub, iat, exp, jti = (
                payload["sub"], payload["iat"], payload["exp"], payload["jti"]
            )
        except KeyError as e:
            raise UnauthorizedError("could not validate credentials") from e

        if not isinstance(sub, str) or not isinstance(jti, str):
            raise UnauthorizedError("could not validate credentials")
        if isinstance(iat, bool) or isinstance(exp, bool):
            raise UnauthorizedError("could not validate credentials")
        if not isinstance(iat, int) or not isinstance(exp, int) or exp <= iat:
            raise UnauthorizedError("could not validate credentials")
        return cls(sub=sub, iat=iat, exp=exp, jti=jti)


class TokenService:
    """Service responsible for session token operations."""

    def __init__(
        self,
        secret_key: str,
        expires_delta: timedelta,
        revocation_store: Optional[IRevocationStore] = None,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time
    ):
        lifetime = int(expires_delta.total_seconds())
        if lifetime <= 0:
            raise ConfigurationError("token lifetime must be at least one second")

        self.secret_key = secret_key
        self.algorithm = algorithm
        self.lifetime = lifetime
        self.revocation_store = revocation_store
        self._clock = clock

    @property
    def stateless(self) -> bool:
        """True when signature and expiry are the sole authority."""
        return self.revocation_store is None

    def _now(self) -> int:
        return int(self._clock())

    async def issue(self, user_id: uuid.UUID) -> str:
        """
        Create a signed token for a user.

        Args:
            user_id: Subject of the token

        Returns:
            Encoded token

        Raises:
            RepositoryError: If the revocation entry cannot be recorded; no
                token is returned in that case
        """
        iat = self._now()
        claims = TokenClaims(
            sub=str(user_id),
            iat=iat,
            exp=iat + self.lifetime,
            jti=uuid.uuid4().hex,
        )
        token = SecurityService.encode_token(
            {"sub": claims.sub, "iat": claims.iat, "exp": claims.exp, "jti": claims.jti},
            self.secret_key,
            self.algorithm,
        )

        if self.revocation_store is not None:
            await self.revocation_store.add(claims.jti, claims.expires_in)

        logger.debug("Access token issued", user_id=claims.sub, jti=claims.jti)
        return token

    async def validate(self, token: str) -> TokenClaims:
        """
        Validate a token and return its claims.

        Raises:
            UnauthorizedError: Bad signature, expired, or revoked token
            RepositoryError: If the revocation store cannot be reached
        """
        claims = TokenClaims.from_payload(
            SecurityService.decode_token(token, self.secret_key, self.algorithm)
        )

        if self._now() >= claims.exp:
            logger.debug("Token expired", jti=claims.jti)
            raise UnauthorizedError("token has expired")

        if self.revocation_store is not None:
            if not await self.revocation_store.contains(claims.jti):
                logger.debug("Token not present in revocation store", jti=claims.jti)
                raise UnauthorizedError("token has been revoked")

        return claims

    async def revoke(self, token: str) -> None:
        """
        Revoke a token by deleting its revocation entry.

        Expiry is ignored and an already missing entry is not an error, so
        revoking twice succeeds.
        """
        claims = TokenClaims.from_payload(
            SecurityService.decode_token(token, self.secret_key, self.algorithm)
        )

        if self.revocation_store is None:
            logger.warning(
                "Logout in stateless token mode does not invalidate the token",
                jti=claims.jti
            )
            return

        removed = await self.revocation_store.remove(claims.jti)
        logger.info("Token revoked", user_id=claims.sub, jti=claims.jti, was_present=removed)

    async def subject_of(self, token: str) -> uuid.UUID:
        claims = await self.validate(token)
        try:
            return uuid.UUID(claims.sub)
        except ValueError as e:
            raise UnauthorizedError("could not validate credentials") from e
