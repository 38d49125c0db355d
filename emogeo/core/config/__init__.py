# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for the emotional geometry engine.

This package provides centralized configuration management:
- Settings: Pydantic-based settings loaded from environment variables
- YAML loader: Utilities for loading YAML rule set files

Example:
    >>> from emogeo.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from emogeo.core.config.settings import (
    DEFAULT_CONFIG_DIR,
    APISettings,
    EngineSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from emogeo.core.config.yaml_loader import (
    YAMLLoadError,
    deep_merge,
    load_yaml,
    load_yaml_section,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "DEFAULT_CONFIG_DIR",
    # Subsettings
    "EngineSettings",
    "APISettings",
    # YAML utilities
    "load_yaml",
    "load_yaml_section",
    "deep_merge",
    "YAMLLoadError",
]
