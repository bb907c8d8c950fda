"""
Account service implementing the register, login, session lookup and logout
use cases on top of a user repository and the token service.
It is the only component that sees both storage and tokens.
"""
from typing import Optional
from datetime import datetime
import secrets
import uuid
import structlog

from ..core.exceptions import (
    AccountServiceError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from ..core.security import SecurityService, bearer_from_header
from ..interfaces.hasher_interface import ICredentialHasher
from ..interfaces.repository_interface import IUserRepository
from ..models.user import (
    Active,
    ListOptions,
    PendingVerification,
    Suspended,
    User,
    generate_verification_code,
)
from ..schemas.user_schemas import PaginatedUsers, UserResponse, UserStatsResponse
from .auth.token_service import TokenService

logger = structlog.get_logger()


class AccountService:
    """Account use cases."""

    def __init__(
        self,
        user_repository: IUserRepository,
        token_service: TokenService,
        hasher: ICredentialHasher,
        max_page_size: int = 100,
        default_page_size: int = 20
    ):
        self.user_repository = user_repository
        self.token_service = token_service
        self.hasher = hasher
        self.max_page_size = max_page_size
        self.default_page_size = min(default_page_size, max_page_size)
        self._decoy_hash: Optional[str] = None

    async def register(self, email: str, secret: str) -> UserResponse:
        """
        Register a new account awaiting email verification.

        Args:
            email: User email address
            secret: Plain text password

        Returns:
            Sanitized view of the created user

        Raises:
            ValidationError: If the email or password fails policy
            ConflictError: If the email is already registered
        """
        if isinstance(email, str):
            email = email.strip()
        SecurityService.ensure_valid_registration(email, secret)

        credential_hash = await self.hasher.hash(secret)
        user = User.new(
            email=email.lower(),
            credential_hash=credential_hash,
            status=PendingVerification(code=generate_verification_code()),
        )
        stored = await self.user_repository.create(user)

        logger.info("User registered", user_id=str(stored.id), email="***MASKED***")
        return UserResponse.from_domain(stored)

    async def login(self, email: str, secret: str) -> str:
        """
        Authenticate with email and password.

        Unknown emails and wrong passwords fail identically.

        Returns:
            Bearer token
        """
        try:
            user = await self.user_repository.find_by_email(email.strip().lower())
        except NotFoundError:
            logger.info("Login failed", reason="unknown_email", email="***MASKED***")
            await self._verify_decoy(secret)
            raise UnauthorizedError("invalid credentials") from None

        if not await self.hasher.verify(secret, user.credential_hash):
            logger.info("Login failed", reason="invalid_password", user_id=str(user.id))
            raise UnauthorizedError("invalid credentials")

        token = await self.token_service.issue(user.id)
        logger.info("User logged in", user_id=str(user.id))
        return token

    async def _verify_decoy(self, secret: str) -> None:
        # Unknown emails pay the same hashing cost as wrong passwords
        if self._decoy_hash is None:
            self._decoy_hash = await self.hasher.hash(secrets.token_urlsafe(16))
        await self.hasher.verify(secret, self._decoy_hash)

    async def me(self, authorization: Optional[str]) -> UserResponse:
        """Resolve the user behind an ``Authorization`` header value."""
        try:
            token = bearer_from_header(authorization)
            if token is None:
                raise UnauthorizedError("missing bearer token")
            user_id = await self.token_service.subject_of(token)
            user = await self.user_repository.find_by_id(user_id)
        except UnauthorizedError:
            raise
        except AccountServiceError as e:
            logger.info("Session lookup failed", kind=e.kind.value)
            raise UnauthorizedError("could not validate credentials") from e

        return UserResponse.from_domain(user)

    async def logout(self, authorization: Optional[str]) -> None:
        """
        Revoke the presented token.

        Raises:
            UnauthorizedError: If the header is missing or the token is malformed
            RepositoryError: If the revocation store cannot be reached
        """
        token = bearer_from_header(authorization)
        if token is None:
            raise UnauthorizedError("missing bearer token")
        await self.token_service.revoke(token)

    async def list_users(
        self,
        page: Optional[int] = None,
        per_page: Optional[int] = None
    ) -> PaginatedUsers:
        """Get one page of users; out-of-range values are clamped."""
        options = ListOptions(
            page=page if page is not None else 1,
            per_page=per_page if per_page is not None else self.default_page_size,
        ).clamp(self.max_page_size)

        users, total = await self.user_repository.list(options)
        return PaginatedUsers(
            items=[UserResponse.from_domain(user) for user in users],
            page=options.page,
            per_page=options.per_page,
            total=total,
        )

    async def stats(self) -> UserStatsResponse:
        return UserStatsResponse.from_domain(await self.user_repository.stats())

    async def verify_email(self, user_id: uuid.UUID, code: str) -> UserResponse:
        """
        Confirm a pending account with its verification code.

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If the account is not pending or the code is wrong
        """
        user = await self.user_repository.find_by_id(user_id)
        status = user.status
        if not isinstance(status, PendingVerification):
            raise ValidationError("account is not pending verification")
        if not isinstance(code, str) or not secrets.compare_digest(
            code.encode("utf-8"), status.code.encode("utf-8")
        ):
            logger.info("Email verification failed", user_id=str(user_id))
            raise ValidationError("invalid verification code")

        stored = await self.user_repository.update(user.with_status(Active()))
        logger.info("Email verified", user_id=str(user_id))
        return UserResponse.from_domain(stored)

    async def suspend(
        self,
        user_id: uuid.UUID,
        reason: str,
        until: Optional[datetime] = None
    ) -> UserResponse:
        if not reason or not reason.strip():
            raise ValidationError("suspension reason must not be empty")
        if until is not None and until.tzinfo is None:
            raise ValidationError("suspension end must be timezone-aware")

        user = await self.user_repository.find_by_id(user_id)
        stored = await self.user_repository.update(
            user.with_status(Suspended(reason=reason.strip(), until=until))
        )
        logger.info("User suspended", user_id=str(user_id), until=until.isoformat() if until else None)
        return UserResponse.from_domain(stored)

    async def reactivate(self, user_id: uuid.UUID) -> UserResponse:
        user = await self.user_repository.find_by_id(user_id)
        if not isinstance(user.status, Suspended):
            raise ValidationError("only suspended accounts can be reactivated")

        stored = await self.user_repository.update(user.with_status(Active()))
        logger.info("User reactivated", user_id=str(user_id))
        return UserResponse.from_domain(stored)

    async def delete_user(self, user_id: uuid.UUID) -> None:
        await self.user_repository.delete(user_id)
        logger.info("User deleted", user_id=str(user_id))
