# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analysis API endpoints.

This module exposes the emotional geometry pipeline:
- POST /analysis - Analyze one session

The service is stateless. Callers resupply their history, personal context
and previous crisis mode on every request and store the updated versions
returned in the response.

Example:
    POST /api/v1/analysis
    {
        "emotions": {"joy": 0, "sadness": 9, "anger": 2, "fear": 6},
        "biometrics": {"heartRate": 96},
        "messages": [{"role": "user", "content": "ok"}]
    }
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from emogeo.api.dependencies import get_engine
from emogeo.core.emotional.constants import CrisisMode
from emogeo.core.emotional.context import clamp_intensity
from emogeo.core.emotional.service import AnalysisRequest, EmotionalGeometryEngine
from emogeo.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class _CamelModel(BaseModel):
    """Accepts both snake_case and camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ============================================================================
# Request Models
# ============================================================================


class EmotionsInput(_CamelModel):
    """Self-reported intensities; values are clamped to [0, 10]."""

    joy: float = Field(default=0.0, description="Joy intensity")
    sadness: float = Field(default=0.0, description="Sadness intensity")
    anger: float = Field(default=0.0, description="Anger intensity")
    fear: float = Field(default=0.0, description="Fear intensity")
    surprise: float = Field(default=0.0, description="Surprise intensity")
    disgust: float = Field(default=0.0, description="Disgust intensity")

    @field_validator("*", mode="before")
    @classmethod
    def clamp(cls, value: Any) -> float:
        """Clamp instead of rejecting out-of-range or unusable values."""
        return clamp_intensity(value)


class ChatMessageInput(_CamelModel):
    """A chat message; content that is not text is read as an empty string."""

    role: str = Field(default="user", description="Message author: user or assistant")
    content: str = Field(default="", description="Message text")

    @field_validator("content", mode="before")
    @classmethod
    def text_or_empty(cls, value: Any) -> str:
        """Malformed content becomes an empty string."""
        return value if isinstance(value, str) else ""


class HistoryEntryInput(_CamelModel):
    """One past session, as returned by a previous analysis."""

    timestamp: datetime | float | None = Field(
        default=None,
        description="ISO timestamp or epoch milliseconds",
    )
    emotions: EmotionsInput = Field(default_factory=EmotionsInput)
    dominant_emotion: str | None = None
    stability_index: float = 0.0


class PersonalContextInput(_CamelModel):
    """Personal details remembered by the caller."""

    name: str | None = None
    job: str | None = None
    relationships: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    previous_topics: list[str] = Field(default_factory=list)
    challenges: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)


class AnalysisRequestBody(_CamelModel):
    """Request to analyze one session."""

    emotions: EmotionsInput = Field(default_factory=EmotionsInput)
    biometrics: dict[str, Any] | None = Field(
        default=None,
        description="Physiological readings, camelCase or snake_case keys",
        examples=[{"heartRate": 96, "stressLevel": 8}],
    )
    history: list[HistoryEntryInput] = Field(
        default_factory=list,
        description="Past sessions, oldest first",
    )
    personal_context: PersonalContextInput | None = None
    messages: list[ChatMessageInput] = Field(default_factory=list)
    previous_crisis_mode: CrisisMode | None = Field(
        default=None,
        description="Crisis mode returned by the previous analysis",
    )


# ============================================================================
# Response Models
# ============================================================================


class AnalysisResponse(BaseModel):
    """Result of one analysis."""

    geometry: dict[str, Any]
    classification: dict[str, Any]
    trends: dict[str, Any]
    personal_context: dict[str, Any]
    response_signal: dict[str, Any]
    trauma_indicators: dict[str, Any]
    directive: dict[str, Any]
    history: list[dict[str, Any]]


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "",
    response_model=AnalysisResponse,
    summary="Analyze one session",
)
def analyze(
    body: AnalysisRequestBody,
    engine: EmotionalGeometryEngine = Depends(get_engine),
) -> AnalysisResponse:
    """Run the geometry, classification, trend, text and protocol steps.

    Args:
        body: The session to analyze.
        engine: Shared analysis engine.

    Returns:
        AnalysisResponse with the updated history and personal context.
    """
    request = AnalysisRequest.from_dict(body.model_dump())
    result = engine.analyze(request)

    logger.debug(
        "analysis_request_served",
        messages=len(body.messages),
        history=len(body.history),
    )
    return AnalysisResponse(**result.to_dict())
