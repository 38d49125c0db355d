# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    analysis: Emotional geometry analysis endpoints.
"""

from fastapi import APIRouter

from emogeo.api.v1 import analysis

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(analysis.router, prefix="/analysis", tags=["Analysis"])

__all__ = ["router"]
