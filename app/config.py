"""Configuration management for the question paper generator.

This module uses Pydantic Settings to load configuration from environment
variables. All settings are validated at startup to catch configuration
errors early.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every field has a working default, so the service starts without a
    .env file.
    """

    # Upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum accepted spreadsheet size in megabytes"
    )

    # Image proxy
    image_fetch_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for fetching a remote image through the proxy"
    )
    image_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Largest image body the proxy will encode"
    )

    # Selection
    selection_seed: Optional[int] = Field(
        default=None,
        description="Seed for question selection. Leave unset for a fresh shuffle on every request"
    )

    # HTTP
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )
    trusted_proxies: str = Field(
        default="",
        description="Comma-separated proxy IPs whose X-Forwarded-For header is trusted"
    )

    log_level: str = Field(
        default="INFO",
        description="Root logging level"
    )

    # Model configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that LOG_LEVEL names a standard logging level."""
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(
                f"LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL (got: {v})"
            )
        return level

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: str) -> str:
        """Validate that at least one CORS origin is configured."""
        if not v or not v.strip():
            raise ValueError("CORS_ORIGINS must not be empty (use * to allow all)")
        return v.strip()

    @property
    def cors_origin_list(self) -> List[str]:
        """CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached Settings instance.

    This function uses lru_cache to ensure settings are loaded only once
    and reused across the application lifetime.

    Returns:
        Settings: Validated application settings

    Raises:
        ValueError: If environment variables are invalid
    """
    return Settings()
