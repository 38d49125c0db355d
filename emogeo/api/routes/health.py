# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides the health endpoint for the API.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from emogeo.api.dependencies import get_engine
from emogeo.core.config import get_settings
from emogeo.core.emotional.service import EmotionalGeometryEngine

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(description="Current server timestamp")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    ruleset_version: str = Field(description="Active classification rule set")


@router.get("/health", response_model=HealthResponse)
def health_check(
    engine: EmotionalGeometryEngine = Depends(get_engine),
) -> HealthResponse:
    """Report service status and the active rule set."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.api.version,
        environment=settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
        ruleset_version=engine.ruleset.version,
    )
