# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for PedagogyGuard.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.calendar.timezone)
    'America/Sao_Paulo'
"""

from functools import lru_cache
from typing import Literal, Self
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Record store database configuration.

    The engine only reads from this database. Writes that follow a
    successful decision are performed by the calling application.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        url_override: Full SQLAlchemy URL, used instead of the components
            when set (e.g. sqlite for local runs).
    """

    model_config = SettingsConfigDict(
        env_prefix="GUARD_DB_",
        extra="ignore",
    )

    user: str = "pedagogy"
    password: SecretStr = SecretStr("pedagogy_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "pedagogy"
    pool_size: int = 10
    max_overflow: int = 20
    url_override: str | None = None

    @property
    def url(self) -> str:
        """Build the sync database URL (psycopg2 driver)."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+psycopg2://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class CalendarSettings(BaseSettings):
    """Institutional calendar configuration.

    All "same day" comparisons are made in this fixed civil timezone,
    regardless of the timezone the instants were stored in.

    Attributes:
        timezone: IANA timezone name of the institution.
        date_format: strftime format used in user-facing messages.
    """

    model_config = SettingsConfigDict(
        env_prefix="CALENDAR_",
        extra="ignore",
    )

    timezone: str = "America/Sao_Paulo"
    date_format: str = "%d/%m/%Y"

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject names missing from the timezone database."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def zone(self) -> ZoneInfo:
        """Return the configured timezone as a ZoneInfo."""
        return ZoneInfo(self.timezone)


class AccessSettings(BaseSettings):
    """Access resolution configuration.

    Attributes:
        regional_scope_fallback: When a regional staff grant has no unit
            scopes, grant every unit of the tenant instead of none.
    """

    model_config = SettingsConfigDict(
        env_prefix="ACCESS_",
        extra="ignore",
    )

    regional_scope_fallback: bool = True


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Record store database settings.
        calendar: Institutional calendar settings.
        access: Access resolution settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    access: AccessSettings = Field(default_factory=AccessSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with debug enabled.
        """
        if self.environment == "production" and self.debug:
            raise ValueError(
                "Debug mode must be disabled in production. "
                "Set DEBUG=false environment variable."
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
