# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

Settings are loaded from environment variables with sensible defaults.
The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from emogeo.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.engine.ruleset_version
    'v2'
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_DIR = Path(__file__).parents[3] / "config" / "engine"


class EngineSettings(BaseSettings):
    """Tunables for the analysis pipeline.

    Attributes:
        ruleset_version: Classification rule set used by the classifier.
        history_capacity: Maximum number of sessions kept in the history.
        trend_window: Number of most recent sessions used for trends.
        personal_info_window: Number of most recent messages scanned for
            personal details.
        trauma_message_window: Number of most recent messages scanned for
            trauma keywords.
        crisis_hysteresis: Keep crisis mode until the crisis level clears
            completely when the caller resupplies the previous mode.
        config_dir: Directory holding the rule set YAML files.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENGINE_",
        extra="ignore",
    )

    ruleset_version: str = "v2"
    history_capacity: int = Field(default=10, ge=1)
    trend_window: int = Field(default=5, ge=2)
    personal_info_window: int = Field(default=5, ge=1)
    trauma_message_window: int = Field(default=3, ge=1)
    crisis_hysteresis: bool = False
    config_dir: Path = DEFAULT_CONFIG_DIR

    @field_validator("ruleset_version")
    @classmethod
    def normalize_version(cls, value: str) -> str:
        """Rule set versions are matched case-insensitively."""
        return value.strip().lower()


class APISettings(BaseSettings):
    """HTTP server configuration.

    Attributes:
        host: Interface the server binds to.
        port: Port the server listens on.
        title: OpenAPI title.
        version: Service version reported by the health endpoint.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    title: str = "Emotional Geometry Engine"
    version: str = "0.1.0"


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        engine: Analysis pipeline settings.
        api: HTTP server settings.
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

    engine: EngineSettings = Field(default_factory=EngineSettings)
    api: APISettings = Field(default_factory=APISettings)

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
