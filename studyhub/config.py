"""
Centralized Configuration for StudyHub.

All environment variables are managed here using Pydantic Settings.

Usage:
    from studyhub.config import settings

    upload_dir = settings.upload_dir
"""

import os
from typing import Optional, Literal
from pydantic import Field, field_validator, ConfigDict
from pydantic_settings import BaseSettings

from .constants import DEFAULT_TOKEN_EXPIRE_MINUTES, MAX_UPLOAD_SIZE_BYTES


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables are prefixed with STUDYHUB_ where applicable.
    """

    # =============================================================================
    # Application Environment
    # =============================================================================

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
        validation_alias="STUDYHUB_ENVIRONMENT"
    )

    testing: bool = Field(
        default=False,
        description="Enable testing mode (disables rate limiting)",
        validation_alias="TESTING"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validation_alias="STUDYHUB_LOG_LEVEL"
    )

    allowed_origins: str = Field(
        default="*",
        description="CORS allowed origins (comma-separated or '*')",
        validation_alias="STUDYHUB_ALLOWED_ORIGINS"
    )

    # =============================================================================
    # Authentication
    # =============================================================================

    secret_key: str = Field(
        ...,
        description="Secret key for JWT verification (generate with: openssl rand -hex 32)",
        validation_alias="STUDYHUB_SECRET_KEY"
    )

    token_expire_minutes: int = Field(
        default=DEFAULT_TOKEN_EXPIRE_MINUTES,
        description="JWT token expiration time in minutes",
        validation_alias="STUDYHUB_TOKEN_EXPIRE_MINUTES"
    )

    # =============================================================================
    # Uploads
    # =============================================================================

    upload_dir: str = Field(
        default="uploads",
        description="Directory where uploaded files are persisted",
        validation_alias="STUDYHUB_UPLOAD_DIR"
    )

    max_upload_bytes: int = Field(
        default=MAX_UPLOAD_SIZE_BYTES,
        gt=0,
        description="Maximum accepted upload size in bytes",
        validation_alias="STUDYHUB_MAX_UPLOAD_BYTES"
    )

    # =============================================================================
    # Content Generation
    # =============================================================================

    generator: Literal["placeholder", "openai"] = Field(
        default="placeholder",
        description="Content generation backend",
        validation_alias="STUDYHUB_GENERATOR"
    )

    generation_delay_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Simulated processing delay of the placeholder generator",
        validation_alias="STUDYHUB_GENERATION_DELAY_SECONDS"
    )

    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key",
        validation_alias="OPENAI_API_KEY"
    )

    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model for summaries, quizzes and flashcards",
        validation_alias="OPENAI_MODEL"
    )

    # =============================================================================
    # Computed Properties
    # =============================================================================

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def cors_origins(self) -> list:
        if self.allowed_origins == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =============================================================================
    # Field Validators
    # =============================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is uppercase and valid."""
        v = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is lowercase."""
        return v.lower() if isinstance(v, str) else v


# =============================================================================
# Global Settings Instance
# =============================================================================

try:
    settings = Settings()
except Exception as e:
    if os.getenv("TESTING") == "true":
        os.environ.setdefault("STUDYHUB_SECRET_KEY", "test-secret-key-for-testing-only")
        settings = Settings()
    else:
        raise RuntimeError(
            f"Failed to load application settings: {e}\n\n"
            "Required environment variables:\n"
            "- STUDYHUB_SECRET_KEY (generate with: openssl rand -hex 32)\n"
        ) from e


__all__ = ["settings", "Settings"]
