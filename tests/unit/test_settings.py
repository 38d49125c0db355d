# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for application settings."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from emogeo.core.config.settings import (
    DEFAULT_CONFIG_DIR,
    APISettings,
    EngineSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        settings = EngineSettings()

        assert settings.ruleset_version == "v2"
        assert settings.history_capacity == 10
        assert settings.trend_window == 5
        assert settings.personal_info_window == 5
        assert settings.trauma_message_window == 3
        assert settings.crisis_hysteresis is False
        assert settings.config_dir == DEFAULT_CONFIG_DIR

    def test_default_config_dir_holds_rulesets(self) -> None:
        """Test the default config directory ships the rule set file."""
        assert (DEFAULT_CONFIG_DIR / "rulesets.yaml").is_file()

    def test_loads_from_environment(self) -> None:
        """Test that settings load from environment variables."""
        env = {
            "ENGINE_RULESET_VERSION": " V1 ",
            "ENGINE_HISTORY_CAPACITY": "20",
            "ENGINE_CRISIS_HYSTERESIS": "true",
        }

        with patch.dict(os.environ, env, clear=False):
            settings = EngineSettings()

        assert settings.ruleset_version == "v1"
        assert settings.history_capacity == 20
        assert settings.crisis_hysteresis is True

    def test_capacity_must_be_positive(self) -> None:
        """Test a zero history capacity is rejected."""
        with patch.dict(os.environ, {"ENGINE_HISTORY_CAPACITY": "0"}, clear=False):
            with pytest.raises(ValidationError):
                EngineSettings()

    def test_trend_window_needs_two_sessions(self) -> None:
        """Test a trend window below two is rejected."""
        with pytest.raises(ValidationError):
            EngineSettings(trend_window=1)


class TestAPISettings:
    """Tests for APISettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        settings = APISettings()

        assert settings.host == "0.0.0.0"
        assert settings.port == 8000
        assert settings.title == "Emotional Geometry Engine"

    def test_loads_from_environment(self) -> None:
        """Test that settings load from environment variables."""
        with patch.dict(os.environ, {"API_PORT": "9000"}, clear=False):
            settings = APISettings()

        assert settings.port == 9000


class TestSettings:
    """Tests for main Settings class."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        settings = Settings()

        assert settings.environment == "development"
        assert settings.debug is True
        assert settings.log_level == "DEBUG"

    def test_subsettings_loaded(self) -> None:
        """Test that all subsettings are loaded."""
        settings = Settings()

        assert isinstance(settings.engine, EngineSettings)
        assert isinstance(settings.api, APISettings)

    def test_invalid_environment(self) -> None:
        """Test an unknown environment name is rejected."""
        with pytest.raises(ValidationError):
            Settings(environment="qa")  # type: ignore[arg-type]

    def test_is_development_property(self) -> None:
        """Test is_development property."""
        dev_settings = Settings(environment="development")
        prod_settings = Settings(environment="production")

        assert dev_settings.is_development is True
        assert prod_settings.is_development is False

    def test_is_production_property(self) -> None:
        """Test is_production property."""
        dev_settings = Settings(environment="development")
        prod_settings = Settings(environment="production")

        assert dev_settings.is_production is False
        assert prod_settings.is_production is True


class TestGetSettings:
    """Tests for get_settings function."""

    def test_returns_settings_instance(self) -> None:
        """Test that get_settings returns a Settings instance."""
        settings = get_settings()

        assert isinstance(settings, Settings)

    def test_returns_cached_instance(self) -> None:
        """Test that get_settings returns cached instance."""
        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_clear_cache_allows_reload(self) -> None:
        """Test that clearing cache picks up environment changes."""
        settings1 = get_settings()

        with patch.dict(os.environ, {"ENGINE_RULESET_VERSION": "v1"}, clear=False):
            clear_settings_cache()
            settings2 = get_settings()

        assert settings1 is not settings2
        assert settings2.engine.ruleset_version == "v1"
