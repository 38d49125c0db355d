# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Emotional Geometry Engine - single entry point of the analysis pipeline.

One call to EmotionalGeometryEngine.analyze() runs:
1. Geometry transform of the reported intensities
2. State classification with the configured rule set
3. Trend analysis over the caller's history
4. Text signal extraction from the chat messages
5. Protocol selection for the downstream companion prompt

The engine holds no per-user state. History and personal context persist
only because the caller resupplies them; the result carries their updated
versions for the caller to store.

Example usage:

    from emogeo.core.emotional import AnalysisRequest, EmotionalGeometryEngine

    engine = EmotionalGeometryEngine()
    result = engine.analyze(AnalysisRequest.from_dict({
        "emotions": {"sadness": 9, "fear": 6},
        "messages": [{"role": "user", "content": "ok"}],
    }))
    if result.directive.crisis_level == "critical":
        ...
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from emogeo.core.config.settings import EngineSettings, get_settings
from emogeo.core.emotional.classifier import classify
from emogeo.core.emotional.constants import CrisisMode
from emogeo.core.emotional.context import (
    ChatMessage,
    ClassificationResult,
    EmotionTrendEntry,
    EmotionVector,
    GeometrySnapshot,
    PersonalContext,
    ProtocolDirective,
    ResponseTypeSignal,
    TraumaIndicators,
    TrendReport,
    snake_case,
)
from emogeo.core.emotional.geometry import compute_geometry
from emogeo.core.emotional.protocol import select_protocol
from emogeo.core.emotional.rulesets import ClassificationRuleSet, get_ruleset
from emogeo.core.emotional.text_signals import (
    assess_trauma_indicators,
    classify_response_type,
    extract_personal_info,
)
from emogeo.core.emotional.trends import EmotionHistory, analyze_trends, build_trend_entry
from emogeo.utils.logging import get_logger

logger = get_logger(__name__)


def _crisis_mode_or_none(value: Any) -> CrisisMode | None:
    if isinstance(value, CrisisMode):
        return value
    if isinstance(value, str):
        try:
            return CrisisMode(value.strip().lower())
        except ValueError:
            return None
    return None


@dataclass
class AnalysisRequest:
    """Input of one analysis.

    Attributes:
        emotions: Self-reported intensities.
        biometrics: Optional raw biometric readings.
        history: Past sessions, oldest first.
        personal_context: Context remembered from earlier invocations.
        messages: Chat messages, oldest first.
        previous_crisis_mode: Crisis mode returned by the previous analysis.
        timestamp: Time of this session; defaults to now.
    """

    emotions: EmotionVector
    biometrics: dict[str, Any] | None = None
    history: list[EmotionTrendEntry] = field(default_factory=list)
    personal_context: PersonalContext | None = None
    messages: list[ChatMessage] = field(default_factory=list)
    previous_crisis_mode: CrisisMode | None = None
    timestamp: datetime | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisRequest":
        """Build a request from a loosely-typed mapping (camelCase accepted)."""
        normalized = {snake_case(str(k)): v for k, v in data.items()}
        emotions = normalized.get("emotions")
        biometrics = normalized.get("biometrics")
        context = normalized.get("personal_context")
        history = normalized.get("history") or normalized.get("emotion_history") or []
        messages = normalized.get("messages") or []
        return cls(
            emotions=EmotionVector.from_mapping(emotions if isinstance(emotions, Mapping) else None),
            biometrics=dict(biometrics) if isinstance(biometrics, Mapping) else None,
            history=[
                e if isinstance(e, EmotionTrendEntry) else EmotionTrendEntry.from_dict(e)
                for e in history
                if isinstance(e, (EmotionTrendEntry, Mapping))
            ],
            personal_context=PersonalContext.from_dict(
                context if isinstance(context, Mapping) else None
            ),
            messages=[ChatMessage.from_raw(m) for m in messages],
            previous_crisis_mode=_crisis_mode_or_none(normalized.get("previous_crisis_mode")),
        )


@dataclass
class AnalysisResult:
    """Output of one analysis."""

    geometry: GeometrySnapshot
    classification: ClassificationResult
    trends: TrendReport
    personal_context: PersonalContext
    response_signal: ResponseTypeSignal
    trauma: TraumaIndicators
    directive: ProtocolDirective
    history: EmotionHistory

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "geometry": self.geometry.to_dict(),
            "classification": self.classification.to_dict(),
            "trends": self.trends.to_dict(),
            "personal_context": self.personal_context.to_dict(),
            "response_signal": self.response_signal.to_dict(),
            "trauma_indicators": self.trauma.to_dict(),
            "directive": self.directive.to_dict(),
            "history": self.history.to_list(),
        }


class EmotionalGeometryEngine:
    """Runs the analysis pipeline for one invocation at a time.

    The engine is safe to share between requests: it only reads its
    settings and the (cached, immutable) rule set.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        ruleset: ClassificationRuleSet | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            settings: Engine settings; defaults to the application settings.
            ruleset: Rule set override; defaults to the configured version.

        Raises:
            UnknownRuleSetError: If the configured rule set does not exist.
        """
        self._settings = settings or get_settings().engine
        self._ruleset = ruleset or get_ruleset(
            self._settings.ruleset_version,
            config_dir=self._settings.config_dir,
        )

    @property
    def ruleset(self) -> ClassificationRuleSet:
        """Active classification rule set."""
        return self._ruleset

    @property
    def settings(self) -> EngineSettings:
        """Engine settings."""
        return self._settings

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run the full pipeline for one request.

        Args:
            request: The analysis input.

        Returns:
            AnalysisResult with the updated history and personal context.
        """
        emotions = request.emotions
        geometry = compute_geometry(emotions)
        classification = classify(emotions, geometry, request.biometrics, self._ruleset)

        history = EmotionHistory(request.history, capacity=self._settings.history_capacity)
        trends = analyze_trends(history, window=self._settings.trend_window)

        messages: Sequence[ChatMessage] = request.messages
        personal_context = extract_personal_info(
            messages,
            request.personal_context,
            window=self._settings.personal_info_window,
        )
        response_signal = classify_response_type(messages)
        trauma = assess_trauma_indicators(
            emotions,
            messages,
            window=self._settings.trauma_message_window,
        )

        directive = select_protocol(
            emotions,
            geometry,
            classification,
            trends=trends,
            response_signal=response_signal,
            trauma=trauma,
            biometrics=request.biometrics,
            previous_crisis_mode=request.previous_crisis_mode,
            ruleset=self._ruleset,
            hysteresis=self._settings.crisis_hysteresis,
        )

        updated_history = history.append(
            build_trend_entry(emotions, geometry, classification, request.timestamp)
        )

        logger.info(
            "analysis_completed",
            classification=classification.classification.value,
            mental_stability=classification.mental_stability.value,
            crisis_level=directive.crisis_level.value,
            ruleset=self._ruleset.version,
            history_size=len(updated_history),
        )

        return AnalysisResult(
            geometry=geometry,
            classification=classification,
            trends=trends,
            personal_context=personal_context,
            response_signal=response_signal,
            trauma=trauma,
            directive=directive,
            history=updated_history,
        )
