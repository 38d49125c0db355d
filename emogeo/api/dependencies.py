# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

Example:
    @router.post("/analysis")
    def analyze(engine: EmotionalGeometryEngine = Depends(get_engine)):
        ...
"""

from functools import lru_cache

from emogeo.core.config import get_settings
from emogeo.core.emotional.service import EmotionalGeometryEngine


# =========================================================================
# Service Dependencies
# =========================================================================


@lru_cache(maxsize=1)
def get_engine() -> EmotionalGeometryEngine:
    """Get the shared engine instance.

    The engine is stateless between requests, so one instance built from
    the application settings serves every request.

    Returns:
        EmotionalGeometryEngine.
    """
    return EmotionalGeometryEngine(get_settings().engine)


def clear_engine_cache() -> None:
    """Drop the shared engine so the next request rebuilds it from settings."""
    get_engine.cache_clear()
