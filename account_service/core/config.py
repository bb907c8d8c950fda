from typing import Optional
from functools import lru_cache
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

from .exceptions import ConfigurationError

logger = structlog.get_logger()


class Settings(BaseSettings):
    """
    Account Service Configuration

    The token signing secret MUST be provided via environment variables.
    Storage backends are optional: without DATABASE_URL users are kept in
    process memory, without REDIS_URL tokens are validated statelessly.
    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra="ignore",
        validate_assignment=True,
    )

    # Application settings
    APP_NAME: str = "Account Service"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # Token settings - SECRET_KEY is REQUIRED, NO DEFAULT
    SECRET_KEY: str = Field(..., min_length=32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=24 * 60, ge=1, le=30 * 24 * 60)

    # Credential hashing
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)
    HASH_WORKERS: int = Field(default=4, ge=1, le=64)

    # Durable user store (optional)
    DATABASE_URL: Optional[str] = None
    DATABASE_POOL_SIZE: int = Field(default=20, ge=1, le=200)
    DATABASE_MAX_OVERFLOW: int = Field(default=10, ge=0, le=200)

    # Revocation store (optional)
    REDIS_URL: Optional[str] = None
    REDIS_POOL_SIZE: int = Field(default=20, ge=1, le=100)
    REVOCATION_KEY_PREFIX: str = "jwt:"

    # Listing and bulk registration
    DEFAULT_PAGE_SIZE: int = Field(default=20, ge=1)
    MAX_PAGE_SIZE: int = Field(default=100, ge=1)
    BATCH_LIMIT: int = Field(default=8, ge=1, le=256)

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Reject obvious placeholder secrets."""
        bad_values = ["your-secret-key", "change-me", "changeme", "secret-key"]
        if any(bad in v.lower() for bad in bad_values):
            raise ValueError("SECRET_KEY contains weak or default values")
        return v

    @field_validator("ALGORITHM")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        if v != "HS256":
            raise ValueError("Only HS256 token signing is supported")
        return v

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        valid_envs = ["development", "staging", "production", "test"]
        if v not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of: {valid_envs}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level


def validate_required_settings(settings: Settings) -> None:
    """
    Cross-field checks that a single field validator cannot express.
    Fail fast if the combination is unusable.
    """
    errors = []

    if settings.DEFAULT_PAGE_SIZE > settings.MAX_PAGE_SIZE:
        errors.append("DEFAULT_PAGE_SIZE cannot exceed MAX_PAGE_SIZE")

    if settings.ENVIRONMENT == "production":
        if settings.DEBUG:
            errors.append("DEBUG must be False in production")
        if not settings.REDIS_URL:
            errors.append("REDIS_URL is required in production; stateless tokens cannot be revoked")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        logger.error(error_msg)
        raise ConfigurationError(error_msg, details={"errors": errors})

    logger.info(
        "Configuration validated successfully",
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
        durable_store=bool(settings.DATABASE_URL),
        revocation_store=bool(settings.REDIS_URL),
        batch_limit=settings.BATCH_LIMIT,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Fails fast if required environment variables are missing.
    """
    try:
        settings = Settings()
    except ValidationError as e:
        logger.error("Failed to load settings", errors=e.errors())
        fields = [str(error.get("loc", ["unknown"])[0]) for error in e.errors()]
        raise ConfigurationError(
            "Required environment variables are missing or invalid",
            details={"fields": fields},
        ) from e
    validate_required_settings(settings)
    return settings
