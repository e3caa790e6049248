"""
Application settings module.

This module provides configuration settings for the assessment engine,
including the relational store connection, the realtime change channel and
logging levels.
"""

# Standard Library Imports
import logging
from functools import lru_cache
from typing import Self

# Third-Party Imports
from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings using Pydantic for validation and environment variable loading."""

    # API Information
    PROJECT_NAME: str = "Practiceboard"
    PROJECT_DESCRIPTION: str = "Assessment assignment, scoring and synchronization API"
    API_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # Environment
    TESTING: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production, test

    # Database Settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./practiceboard.db"
    ASYNC_DATABASE_URL: str | None = None  # Will be set based on DATABASE_URL if None
    DB_ECHO_LOG: bool = False

    # Logging Settings
    LOG_LEVEL: str = "INFO"

    # Realtime change channel
    REDIS_URL: str = "redis://localhost:6379/0"
    REALTIME_BACKEND: str = "redis"  # redis, memory

    # Backend messages that identify row-level policy recursion
    RECURSION_ERROR_MARKERS: list[str] = Field(
        default_factory=lambda: ["infinite recursion"]
    )

    # None leaves timeouts to the transport
    STORE_TIMEOUT_SECONDS: float | None = None

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is one of the valid levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("REALTIME_BACKEND")
    def validate_realtime_backend(cls, v: str) -> str:
        if v.lower() not in ("redis", "memory"):
            raise ValueError("REALTIME_BACKEND must be 'redis' or 'memory'")
        return v.lower()

    @model_validator(mode="after")
    def ensure_async_database_url(self) -> Self:
        """Ensure ASYNC_DATABASE_URL is set properly from DATABASE_URL."""
        if not self.ASYNC_DATABASE_URL and self.DATABASE_URL:
            db_url = self.DATABASE_URL
            # If it's a SQLite URL without async driver, convert it
            if db_url.startswith("sqlite:///") and "aiosqlite" not in db_url:
                self.ASYNC_DATABASE_URL = db_url.replace("sqlite:///", "sqlite+aiosqlite:///")
            elif db_url.startswith("postgresql://"):
                self.ASYNC_DATABASE_URL = db_url.replace("postgresql://", "postgresql+asyncpg://")
            else:
                self.ASYNC_DATABASE_URL = db_url
            logger.info(f"Set ASYNC_DATABASE_URL based on DATABASE_URL ({self.ENVIRONMENT})")

        if self.ENVIRONMENT == "test":
            self.TESTING = True

        return self


@lru_cache
def get_settings() -> Settings:
    """
    Factory function to get the application settings.

    This function enables dependency injection of settings in FastAPI and can
    be overridden in tests through ``app.dependency_overrides``.

    Returns:
        The application settings instance
    """
    return Settings()
