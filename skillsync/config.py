"""
Centralized Configuration for the SkillSync backend.

All environment variables are managed here using Pydantic Settings.

Usage:
    from skillsync.config import settings

    db_url = settings.database_url
    api_key = settings.openai_api_key
"""

import os
from typing import Optional, Literal
from pydantic import Field, field_validator, ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables are prefixed with SKILLSYNC_ where applicable.
    """

    # =============================================================================
    # Application Environment
    # =============================================================================

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
        validation_alias="SKILLSYNC_ENVIRONMENT"
    )

    testing: bool = Field(
        default=False,
        description="Enable testing mode",
        validation_alias="TESTING"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validation_alias="SKILLSYNC_LOG_LEVEL"
    )

    allowed_origins: str = Field(
        default="*",
        description="CORS allowed origins (comma-separated or '*')",
        validation_alias="SKILLSYNC_ALLOWED_ORIGINS"
    )

    # =============================================================================
    # Database
    # =============================================================================

    database_url: str = Field(
        default="sqlite:///./skillsync.db",
        description="Database connection URL (PostgreSQL or SQLite)",
        validation_alias="DATABASE_URL"
    )

    # =============================================================================
    # Authentication & Security
    # =============================================================================

    secret_key: str = Field(
        ...,  # Required field
        description="Secret key for JWT token signing (generate with: openssl rand -hex 32)",
        validation_alias="SKILLSYNC_SECRET_KEY"
    )

    token_expire_minutes: int = Field(
        default=1440,  # 24 hours
        description="JWT token expiration time in minutes",
        validation_alias="SKILLSYNC_TOKEN_EXPIRE_MINUTES"
    )

    # =============================================================================
    # LLM Providers
    # =============================================================================

    llm_provider: Literal["openai", "ollama", "mock"] = Field(
        default="openai",
        description="LLM provider to use",
        validation_alias="LLM_PROVIDER"
    )

    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key",
        validation_alias="OPENAI_API_KEY"
    )

    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model for text generation",
        validation_alias="OPENAI_MODEL"
    )

    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama API base URL",
        validation_alias="OLLAMA_BASE_URL"
    )

    ollama_model: str = Field(
        default="llama3",
        description="Ollama model for text generation",
        validation_alias="OLLAMA_MODEL"
    )

    llm_max_tokens: int = Field(
        default=1200,
        description="Maximum completion tokens per LLM call",
        validation_alias="LLM_MAX_TOKENS"
    )

    login_activity_review: bool = Field(
        default=False,
        description="Ask the LLM to review successful logins (log only)",
        validation_alias="LOGIN_ACTIVITY_REVIEW"
    )

    ai_access_review: bool = Field(
        default=True,
        description="Let the LLM veto access validation requests",
        validation_alias="AI_ACCESS_REVIEW"
    )

    # =============================================================================
    # External Systems
    # =============================================================================

    hr_system_api_url: Optional[str] = Field(
        default=None,
        description="HR system employee export endpoint",
        validation_alias="HR_SYSTEM_API_URL"
    )

    hr_system_api_key: Optional[str] = Field(
        default=None,
        description="Bearer key for the HR system API",
        validation_alias="HR_SYSTEM_API_KEY"
    )

    mail_api_endpoint: Optional[str] = Field(
        default=None,
        description="Mail sending API endpoint",
        validation_alias="MAIL_API_ENDPOINT"
    )

    external_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout for HR and mail API calls",
        validation_alias="EXTERNAL_TIMEOUT_SECONDS"
    )

    # =============================================================================
    # Computed Properties
    # =============================================================================

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    # =============================================================================
    # Pydantic Model Configuration
    # =============================================================================

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =============================================================================
    # Field Validators
    # =============================================================================

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Convert postgres:// to postgresql:// for SQLAlchemy compatibility."""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

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
        os.environ.setdefault("SKILLSYNC_SECRET_KEY", "test-secret-key-for-testing-only")
        settings = Settings()
    else:
        raise RuntimeError(
            f"Failed to load application settings: {e}\n\n"
            "Required environment variables:\n"
            "- SKILLSYNC_SECRET_KEY (generate with: openssl rand -hex 32)\n"
        ) from e


def get_settings() -> Settings:
    """Get settings instance (for dependency injection)."""
    return settings


__all__ = ["settings", "get_settings", "Settings"]
