# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Protocol selection for the downstream companion prompt.

Combines the classifier, trend, response-type and trauma outputs into a
ProtocolDirective. The directive is structured data; turning it into prose
is left to the prompt-construction step.

Crisis level priority (first satisfied wins):
1. any negative intensity >= critical threshold (8) -> critical
2. any negative intensity >= moderate threshold (6) -> moderate
3. otherwise -> none

Trauma and minimal-response handling are evaluated independently and can
co-occur with any crisis level.
"""

from collections.abc import Mapping
from typing import Any

from emogeo.core.emotional.classifier import normalize_biometrics
from emogeo.core.emotional.constants import (
    CRISIS_LEVEL_TO_MODE,
    BiometricField,
    CrisisLevel,
    CrisisMode,
    EmotionDimension,
    MentalStability,
    OpeningIntent,
    Recommendation,
)
from emogeo.core.emotional.context import (
    ClassificationResult,
    EmotionVector,
    GeometrySnapshot,
    ProtocolDirective,
    ResponseTypeSignal,
    TraumaIndicators,
    TrendReport,
)
from emogeo.core.emotional.rulesets import ClassificationRuleSet, get_ruleset
from emogeo.utils.logging import get_logger

logger = get_logger(__name__)

COPING_CURVATURE_ABOVE = 0.6
CELEBRATION_STABILITY_ABOVE = 0.8
RECOMMENDATION_INTENSITY_MIN = 7.0
STABILITY_BUILDING_BELOW = 0.3
STRESS_REDUCTION_ABOVE = 6.0

_EMPATHY_EMOTIONS = frozenset({
    EmotionDimension.SADNESS,
    EmotionDimension.FEAR,
    EmotionDimension.ANGER,
})

_DOMINANT_RECOMMENDATIONS = {
    EmotionDimension.SADNESS: Recommendation.MOOD_ENHANCEMENT,
    EmotionDimension.ANGER: Recommendation.ANGER_MANAGEMENT,
    EmotionDimension.FEAR: Recommendation.ANXIETY_REDUCTION,
}


def determine_crisis_level(
    emotions: EmotionVector,
    ruleset: ClassificationRuleSet,
) -> tuple[CrisisLevel, list[EmotionDimension]]:
    """Determine the crisis level from negative intensities.

    Returns:
        The level and the negative dimensions at or above the critical threshold.
    """
    negatives = emotions.negative_values()
    critical = [d for d, v in negatives.items() if v >= ruleset.crisis_critical_threshold]
    if critical:
        return CrisisLevel.CRITICAL, critical
    if any(v >= ruleset.crisis_moderate_threshold for v in negatives.values()):
        return CrisisLevel.MODERATE, []
    return CrisisLevel.NONE, []


def resolve_crisis_mode(
    level: CrisisLevel,
    previous_mode: CrisisMode | None = None,
    hysteresis: bool = False,
) -> CrisisMode:
    """Advance the crisis lifecycle (normal -> elevated -> crisis -> normal).

    Without hysteresis the mode follows the level directly. With hysteresis,
    a session that was in crisis stays in crisis while the level is still
    moderate and only returns to normal once the level is none.

    Args:
        level: Crisis level of this invocation.
        previous_mode: Mode resupplied by the caller, if any.
        hysteresis: Whether crisis mode is sticky.

    Returns:
        The new crisis mode.
    """
    mode = CRISIS_LEVEL_TO_MODE[level]
    if hysteresis and previous_mode == CrisisMode.CRISIS and level == CrisisLevel.MODERATE:
        return CrisisMode.CRISIS
    return mode


def select_opening_intent(
    classification: ClassificationResult,
    geometry: GeometrySnapshot,
) -> OpeningIntent:
    """Intent of the companion's first reply."""
    if classification.mental_stability == MentalStability.CRITICAL:
        return OpeningIntent.SUPPORT
    if geometry.curvature_level > COPING_CURVATURE_ABOVE:
        return OpeningIntent.COPING
    if classification.dominant_emotion in _EMPATHY_EMOTIONS:
        return OpeningIntent.EMPATHY
    if (
        classification.dominant_emotion == EmotionDimension.JOY
        and geometry.stability_index > CELEBRATION_STABILITY_ABOVE
    ):
        return OpeningIntent.CELEBRATION
    return OpeningIntent.EMPATHY


def build_recommendations(
    emotions: EmotionVector,
    classification: ClassificationResult,
    geometry: GeometrySnapshot,
    biometrics: Mapping[str, Any] | None = None,
) -> list[Recommendation]:
    """Self-care recommendations in priority order.

    General wellness is always last.
    """
    recommendations: list[Recommendation] = []

    dominant = classification.dominant_emotion
    if (
        dominant in _DOMINANT_RECOMMENDATIONS
        and emotions.get(dominant) >= RECOMMENDATION_INTENSITY_MIN
    ):
        recommendations.append(_DOMINANT_RECOMMENDATIONS[dominant])

    if geometry.stability_index < STABILITY_BUILDING_BELOW:
        recommendations.append(Recommendation.STABILITY_BUILDING)

    stress = normalize_biometrics(biometrics).get(BiometricField.STRESS_LEVEL)
    if stress is not None and stress > STRESS_REDUCTION_ABOVE:
        recommendations.append(Recommendation.STRESS_REDUCTION)

    if geometry.curvature_level > COPING_CURVATURE_ABOVE:
        recommendations.append(Recommendation.EMOTIONAL_REGULATION)

    recommendations.append(Recommendation.GENERAL_WELLNESS)
    return recommendations


def select_protocol(
    emotions: EmotionVector,
    geometry: GeometrySnapshot,
    classification: ClassificationResult,
    trends: TrendReport | None = None,
    response_signal: ResponseTypeSignal | None = None,
    trauma: TraumaIndicators | None = None,
    biometrics: Mapping[str, Any] | None = None,
    previous_crisis_mode: CrisisMode | None = None,
    ruleset: ClassificationRuleSet | None = None,
    hysteresis: bool = False,
) -> ProtocolDirective:
    """Build the protocol directive for one invocation.

    Args:
        emotions: Clamped intensities.
        geometry: Geometry snapshot of the intensities.
        classification: Classifier output.
        trends: Trend report over the caller's history.
        response_signal: Brevity classification of the last message.
        trauma: Trauma indicators.
        biometrics: Raw biometric readings.
        previous_crisis_mode: Crisis mode resupplied by the caller.
        ruleset: Rule set with the crisis thresholds; defaults to canonical.
        hysteresis: Keep crisis mode while the level is still moderate.

    Returns:
        ProtocolDirective.
    """
    ruleset = ruleset or get_ruleset()
    trends = trends or TrendReport.empty()
    response_signal = response_signal or ResponseTypeSignal()
    trauma = trauma or TraumaIndicators()

    level, critical_emotions = determine_crisis_level(emotions, ruleset)
    mode = resolve_crisis_mode(level, previous_crisis_mode, hysteresis)

    directive = ProtocolDirective(
        crisis_level=level,
        trauma_protocol_needed=trauma.any,
        minimal_response_category=(
            response_signal.category if response_signal.is_minimal else None
        ),
        trend_insights_to_surface=list(trends.insights),
        critical_emotions=critical_emotions,
        trauma_indicators=trauma.active,
        biometric_flags=list(classification.biometric_flags),
        crisis_mode=mode,
        previous_crisis_mode=previous_crisis_mode,
        opening_intent=select_opening_intent(classification, geometry),
        recommendations=build_recommendations(emotions, classification, geometry, biometrics),
    )

    if directive.crisis_mode_changed:
        logger.info(
            "crisis_mode_changed",
            previous=previous_crisis_mode.value if previous_crisis_mode else None,
            current=mode.value,
            level=level.value,
        )
    if level == CrisisLevel.CRITICAL:
        logger.warning(
            "crisis_level_critical",
            emotions=[d.value for d in critical_emotions],
        )

    return directive
