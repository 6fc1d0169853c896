# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SERVICE_NAME)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

import os
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Prefix for per-app key variables, e.g. APP_KEY_DASHBOARD=s3cret
APP_KEY_PREFIX = "APP_KEY_"


class Settings(BaseSettings):
    """
    Service settings loaded from environment variables.

    Nothing is required: a bare environment gives a development service
    that rejects every authenticated route until app keys are configured.
    """

    # -------------------------------------------------------------------------
    # Service Identity
    # -------------------------------------------------------------------------
    # Reported by GET /version and used in log lines

    SERVICE_NAME: str = Field(
        default="widget",
        min_length=1,
        description="Service name reported by /version"
    )

    SERVICE_VERSION: str = Field(
        default="0.1.0",
        description="Service version reported by /version"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level (DEBUG forces verbose output)"
    )

    SLOW_REQUEST_MS: int = Field(
        default=800,
        ge=0,
        description="Requests slower than this are logged as warnings"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    # Comma-separated "name:key" pairs. APP_KEY_<NAME> variables are merged in.
    APP_KEYS: str = Field(
        default="",
        description="Client app keys accepted as Bearer tokens (name:key,...)"
    )

    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Slack Messaging
    # -------------------------------------------------------------------------
    # Without a hook, POST /message succeeds but nothing is sent

    SLACK_HOOK: str | None = Field(
        default=None,
        description="Slack incoming webhook URL"
    )

    SLACK_CHANNEL: str | None = Field(
        default=None,
        description="Channel override for Slack messages"
    )

    SLACK_USERNAME: str | None = Field(
        default=None,
        description="Username for Slack messages (defaults to SERVICE_NAME)"
    )

    SLACK_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for Slack webhook calls"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def app_keys(self) -> dict[str, str]:
        """
        Map of accepted key -> app name.

        Built from APP_KEYS ("dashboard:abc, cli:def") and from every
        APP_KEY_<NAME> environment variable, whose lower-cased suffix
        becomes the app name.
        """
        keys: dict[str, str] = {}

        for pair in self.APP_KEYS.split(","):
            name, sep, key = pair.strip().partition(":")
            if sep and name.strip() and key.strip():
                keys[key.strip()] = name.strip()

        for var, value in os.environ.items():
            if var.startswith(APP_KEY_PREFIX) and value:
                keys[value] = var[len(APP_KEY_PREFIX):].lower()

        return keys

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
