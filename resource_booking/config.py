"""Application configuration using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration, read from ``BOOKING_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_title: str = Field(default="Resource Booking Service", description="OpenAPI title")
    api_prefix: str = Field(default="/api", description="Path prefix for every route")
    log_level: str = Field(default="INFO", description="Root log level for the service")
    seed_sample_data: bool = Field(
        default=False,
        description="Load a few sample resources and bookings on startup.",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"], description="Allowed CORS origins"
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""
    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""
    get_settings.cache_clear()
