# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from collections.abc import Generator
from typing import Any

import pytest

from emogeo.api.dependencies import clear_engine_cache
from emogeo.core.config import clear_settings_cache
from emogeo.core.emotional.context import EmotionVector
from emogeo.core.emotional.rulesets import reload_rulesets


# =============================================================================
# Cache Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_caches() -> Generator[None, None, None]:
    """Reset cached settings, rule sets and the shared engine around each test."""
    clear_settings_cache()
    reload_rulesets()
    clear_engine_cache()
    yield
    clear_settings_cache()
    reload_rulesets()
    clear_engine_cache()


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_environment() -> dict[str, str]:
    """Provide test environment variables.

    Returns:
        Dictionary of environment variables for testing.
    """
    return {
        "ENVIRONMENT": "development",
        "DEBUG": "true",
        "LOG_LEVEL": "DEBUG",
        "ENGINE_RULESET_VERSION": "v2",
        "ENGINE_HISTORY_CAPACITY": "10",
        "ENGINE_TREND_WINDOW": "5",
    }


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (exercises the HTTP API)"
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def crisis_emotions() -> EmotionVector:
    """High sadness with moderate fear: critical and Volatile."""
    return EmotionVector(joy=0, sadness=9, anger=2, fear=6, surprise=0, disgust=3)


@pytest.fixture
def calm_emotions() -> EmotionVector:
    """Mostly positive, low-curvature state."""
    return EmotionVector(joy=6, surprise=5, sadness=2)


@pytest.fixture
def sample_messages() -> list[dict[str, Any]]:
    """Provide a short conversation for text signal tests."""
    return [
        {"role": "assistant", "content": "Hi, how are you feeling today?"},
        {"role": "user", "content": "My name is Alex and I work as a teacher"},
        {"role": "assistant", "content": "Nice to meet you, Alex."},
        {"role": "user", "content": "My husband and kids keep me busy. I love painting."},
    ]


def make_history_entry(
    sadness: float = 0.0,
    stability_index: float = 0.5,
    dominant_emotion: str | None = None,
    **emotions: float,
) -> dict[str, Any]:
    """Build a raw history entry the way a client would send it."""
    return {
        "timestamp": "2025-01-01T12:00:00Z",
        "emotions": {"sadness": sadness, **emotions},
        "dominantEmotion": dominant_emotion,
        "stabilityIndex": stability_index,
    }


@pytest.fixture
def history_factory():
    """Provide the raw history entry builder."""
    return make_history_entry
