# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Emotional geometry pipeline.

This package turns self-reported emotion intensities, optional biometrics
and chat messages into a structured directive for a conversational support
agent. It is deterministic arithmetic and keyword matching; nothing here is
a clinical assessment.

Key Components:
- geometry: emotion vectors, curvature, energy and stability index
- classifier: Stable / Unstable / Volatile and mental stability
- rulesets: versioned classification thresholds
- trends: least-squares trends over recent sessions
- text_signals: personal details, minimal replies and trauma keywords
- protocol: crisis level, crisis mode and directive selection
- EmotionalGeometryEngine: runs all of the above for one invocation

Example usage:

    from emogeo.core.emotional import AnalysisRequest, EmotionalGeometryEngine

    engine = EmotionalGeometryEngine()
    result = engine.analyze(AnalysisRequest.from_dict({"emotions": {"joy": 7}}))
    print(result.classification.classification)
"""

from emogeo.core.emotional.classifier import (
    assess_vital_status,
    assess_vitals,
    classify,
    classify_state,
    detect_biometric_flags,
    determine_mental_stability,
)
from emogeo.core.emotional.constants import (
    EMOTION_DIMENSIONS,
    NEGATIVE_DIMENSIONS,
    CrisisLevel,
    CrisisMode,
    EmotionDimension,
    MentalStability,
    OpeningIntent,
    Recommendation,
    ResponseCategory,
    StabilityClass,
    TraumaIndicator,
    VitalStatus,
)
from emogeo.core.emotional.context import (
    ChatMessage,
    ClassificationResult,
    DimensionTrend,
    EmotionTrendEntry,
    EmotionVector,
    GeometrySnapshot,
    PersonalContext,
    ProtocolDirective,
    ResponseTypeSignal,
    TraumaIndicators,
    TrendReport,
)
from emogeo.core.emotional.geometry import compute_geometry
from emogeo.core.emotional.protocol import resolve_crisis_mode, select_protocol
from emogeo.core.emotional.rulesets import (
    ClassificationRuleSet,
    UnknownRuleSetError,
    get_ruleset,
    reload_rulesets,
)
from emogeo.core.emotional.service import (
    AnalysisRequest,
    AnalysisResult,
    EmotionalGeometryEngine,
)
from emogeo.core.emotional.text_signals import (
    assess_trauma_indicators,
    classify_response_type,
    extract_personal_info,
)
from emogeo.core.emotional.trends import (
    EmotionHistory,
    analyze_trends,
    build_trend_entry,
    calculate_trend,
)

__all__ = [
    # Main service
    "EmotionalGeometryEngine",
    "AnalysisRequest",
    "AnalysisResult",
    # Pipeline steps
    "compute_geometry",
    "classify",
    "classify_state",
    "determine_mental_stability",
    "detect_biometric_flags",
    "assess_vital_status",
    "assess_vitals",
    "analyze_trends",
    "calculate_trend",
    "build_trend_entry",
    "extract_personal_info",
    "classify_response_type",
    "assess_trauma_indicators",
    "select_protocol",
    "resolve_crisis_mode",
    # Rule sets
    "ClassificationRuleSet",
    "UnknownRuleSetError",
    "get_ruleset",
    "reload_rulesets",
    # Data structures
    "EmotionVector",
    "GeometrySnapshot",
    "ClassificationResult",
    "EmotionTrendEntry",
    "EmotionHistory",
    "DimensionTrend",
    "TrendReport",
    "ChatMessage",
    "PersonalContext",
    "ResponseTypeSignal",
    "TraumaIndicators",
    "ProtocolDirective",
    # Constants
    "EMOTION_DIMENSIONS",
    "NEGATIVE_DIMENSIONS",
    "EmotionDimension",
    "StabilityClass",
    "MentalStability",
    "CrisisLevel",
    "CrisisMode",
    "ResponseCategory",
    "TraumaIndicator",
    "OpeningIntent",
    "Recommendation",
    "VitalStatus",
]
