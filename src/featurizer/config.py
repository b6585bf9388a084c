# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Application configuration using Pydantic Settings.

All settings can be overridden via environment variables prefixed with
``FEATURIZER_`` (e.g. ``FEATURIZER_STORE_BACKEND=memory``).
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FEATURIZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "featurizer"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_masking_enabled: bool = True
    log_masking_patterns: str = "password,secret,token,authorization"

    # Persistence
    store_backend: Literal["memory", "database"] = "database"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "featurizer"
    db_user: str = "featurizer"
    db_password: str = "featurizer-dev-secret"
    db_url: str = ""  # Full URL, takes precedence over the db_* parts
    db_pool_size: int = 5
    db_echo: bool = False
    db_auto_create: bool = False  # Create tables on startup (development only)

    # Bootstrap: YAML manifest of features registered at startup
    catalog_manifest: str = ""

    # Environment-wide kill switch for flag checks
    kill_switch: bool = False
    kill_switch_vendors: str = ""

    # Rate limiting (mutating HTTP routes)
    rate_limit_enabled: bool = True
    rate_limit_mutations: str = "60/minute"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @property
    def database_url(self) -> str:
        """Construct async database URL."""
        if self.db_url:
            return self.db_url
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def kill_switch_vendors_list(self) -> list[str]:
        """Return kill-switched vendors as a list."""
        return [v.strip() for v in self.kill_switch_vendors.split(",") if v.strip()]

    @property
    def log_masking_patterns_list(self) -> list[str]:
        """Return masking patterns as a list."""
        return [p.strip() for p in self.log_masking_patterns.split(",") if p.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
