"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables (and an optional .env file)
- Centralizes Gist store and Resend mail credentials
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Missing store/mail credentials are tolerated outside production so the
    health endpoint can report them.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # GitHub Gist document store
    GIST_ID: Optional[str] = Field(
        default=None,
        description="Identifier of the gist holding the application document"
    )
    GITHUB_TOKEN: Optional[str] = Field(
        default=None,
        description="GitHub token with gist scope"
    )
    GIST_FILE: str = Field(
        default="proplugin_data.json",
        description="Name of the JSON file inside the gist"
    )
    GITHUB_API_URL: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )
    USE_IN_MEMORY_STORE: bool = Field(
        default=False,
        description="Serve the document from process memory (development only)"
    )

    # Resend email delivery
    RESEND_API_KEY: Optional[str] = Field(
        default=None,
        description="Resend API key used to deliver OTP emails"
    )
    RESEND_API_URL: str = Field(
        default="https://api.resend.com",
        description="Resend API base URL"
    )
    MAIL_FROM: str = Field(
        default="ProPricing <noreply@proplugin.com>",
        description="Sender address for outgoing mail"
    )

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=15.0,
        description="Timeout for calls to GitHub and Resend"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api",
        description="API route prefix"
    )
    CORS_ORIGINS: List[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def store_configured(self) -> bool:
        """Both gist id and token are present."""
        return bool(self.GIST_ID and self.GITHUB_TOKEN)

    @property
    def mail_configured(self) -> bool:
        return bool(self.RESEND_API_KEY)


# Global settings instance
settings = Settings()


def validate_settings() -> List[str]:
    """
    Validates critical settings on application startup.

    Returns the list of problems found. In production any problem is fatal
    and raises ValueError; elsewhere the caller logs them and requests fail
    individually.
    """
    errors = []

    if not settings.USE_IN_MEMORY_STORE:
        if not settings.GIST_ID:
            errors.append("GIST_ID is not set")
        if not settings.GITHUB_TOKEN:
            errors.append("GITHUB_TOKEN is not set")
    if not settings.GIST_FILE:
        errors.append("GIST_FILE must not be empty")
    if not settings.RESEND_API_KEY:
        errors.append("RESEND_API_KEY is not set")

    # Production-specific validations
    if settings.is_production:
        if settings.USE_IN_MEMORY_STORE:
            errors.append("USE_IN_MEMORY_STORE cannot be enabled in production")
        if errors:
            raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return errors
