"""
Application configuration settings.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Self

from app.core.auth.magic_link import parse_ttl

# Signing secret used when none is configured. Acceptable for local
# development and tests only; rejected when ENV=production.
DEV_FALLBACK_JWT_SECRET = "fallback-secret-for-dev"

# Minimum length for an HS256 signing secret in production
_MIN_PRODUCTION_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Quick Quality Assessment API"
    APP_VERSION: str = "0.1.0"
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API
    API_V1_PREFIX: str = "/v1"

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
    ]

    # Public site URL used to build magic links
    APP_URL: str = "http://localhost:3000"

    # Database (read by app.models.base)
    DATABASE_URL: str = ""

    # Magic-link signing
    JWT_SECRET_KEY: str = Field(
        default=DEV_FALLBACK_JWT_SECRET,
        repr=False,
        description="Magic-link signing secret (must be set explicitly in production)",
    )
    JWT_ALGORITHM: str = "HS256"
    MAGIC_LINK_EXPIRES_IN: str = Field(
        default="7d",
        description="Magic-link lifetime as a duration string (e.g. '7d', '12h', '30m')",
    )

    # Survey
    CURRENT_SURVEY_VERSION: str = "1.0"

    # Privacy & population statistics
    MIN_RESPONSES_FOR_STATS: int = Field(
        default=10,
        ge=1,
        description="Minimum responses before population comparisons are shown",
    )
    STATS_STALE_HOURS: int = Field(
        default=1,
        ge=1,
        description="Refresh interval of the aggregate materialized views",
    )

    # Email/SMTP Settings (results links)
    SMTP_HOST: str = Field(
        default="",
        description="SMTP server hostname (leave empty to log links instead of sending)",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port (587 for TLS, 465 for SSL)",
    )
    SMTP_USERNAME: str = Field(
        default="",
        description="SMTP authentication username",
    )
    SMTP_PASSWORD: str = Field(
        default="",
        repr=False,
        description="SMTP authentication password",
    )
    SMTP_FROM_EMAIL: str = Field(
        default="noreply@upskillaba.com",
        description="Email address to send from",
    )
    SMTP_FROM_NAME: str = Field(
        default="UpskillABA",
        description="Display name for sent emails",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env not defined in Settings
    )

    @model_validator(mode="after")
    def validate_signing_secret(self) -> Self:
        """Require an explicit, strong signing secret in production."""
        if self.ENV != "production":
            return self
        if self.JWT_SECRET_KEY == DEV_FALLBACK_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be set explicitly when ENV=production")
        if len(self.JWT_SECRET_KEY) < _MIN_PRODUCTION_SECRET_LENGTH:
            raise ValueError(
                f"JWT_SECRET_KEY must be at least {_MIN_PRODUCTION_SECRET_LENGTH} "
                "characters when ENV=production"
            )
        return self

    @model_validator(mode="after")
    def validate_magic_link_lifetime(self) -> Self:
        """Fail at startup rather than on the first magic-link request."""
        try:
            parse_ttl(self.MAGIC_LINK_EXPIRES_IN)
        except ValueError as e:
            raise ValueError(f"Invalid MAGIC_LINK_EXPIRES_IN: {e}") from e
        return self


# mypy doesn't understand that pydantic_settings loads fields from env vars
settings = Settings()  # type: ignore[call-arg]
