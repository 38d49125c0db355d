# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data structures shared by the emotional geometry pipeline.

Every record here is created fresh for one invocation from caller-supplied
input. Pipeline functions never mutate a record they receive; they build and
return new ones. Each record exposes ``to_dict()`` so results can cross a
JSON boundary unchanged.
"""

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from emogeo.core.emotional.constants import (
    EMOTION_DIMENSIONS,
    NEGATIVE_DIMENSIONS,
    CrisisLevel,
    CrisisMode,
    EmotionDimension,
    GeometryConstants,
    MentalStability,
    OpeningIntent,
    Recommendation,
    ResponseCategory,
    StabilityClass,
    TraumaIndicator,
    VitalStatus,
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(key: str) -> str:
    """Convert a camelCase key to snake_case (``heartRate`` -> ``heart_rate``)."""
    return _CAMEL_BOUNDARY.sub("_", key.strip()).lower()


def to_float(value: Any) -> float | None:
    """Coerce a value to a finite float, or None when that is not possible."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def clamp_intensity(value: Any) -> float:
    """Clamp an emotion intensity to [0, 10].

    Infinities clamp to the matching bound; NaN and non-numeric values become 0.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return GeometryConstants.MIN_INTENSITY
    if math.isnan(number):
        return GeometryConstants.MIN_INTENSITY
    return min(GeometryConstants.MAX_INTENSITY, max(GeometryConstants.MIN_INTENSITY, number))


def _dimension_or_none(value: Any) -> EmotionDimension | None:
    if isinstance(value, EmotionDimension):
        return value
    if isinstance(value, str):
        try:
            return EmotionDimension(value.strip().lower())
        except ValueError:
            return None
    return None


def _parse_timestamp(value: Any) -> datetime | None:
    """Accept datetimes, ISO strings or epoch milliseconds."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    number = to_float(value)
    if number is None:
        return None
    try:
        return datetime.fromtimestamp(number / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _unique(values: Iterable[str]) -> list[str]:
    """Drop duplicates, keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        if isinstance(value, str) and value and value not in seen:
            seen[value] = None
    return list(seen)


@dataclass
class EmotionVector:
    """Self-reported intensities for the six emotion dimensions.

    Values are clamped to [0, 10] on construction; out-of-range input is
    never rejected.
    """

    joy: float = 0.0
    sadness: float = 0.0
    anger: float = 0.0
    fear: float = 0.0
    surprise: float = 0.0
    disgust: float = 0.0

    def __post_init__(self) -> None:
        for dimension in EMOTION_DIMENSIONS:
            setattr(self, dimension.value, clamp_intensity(getattr(self, dimension.value)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "EmotionVector":
        """Build a vector from a loosely-typed mapping.

        Keys are matched case-insensitively; missing keys default to 0.
        """
        if not data:
            return cls()
        normalized = {str(k).strip().lower(): v for k, v in data.items()}
        return cls(**{d.value: normalized.get(d.value, 0.0) for d in EMOTION_DIMENSIONS})

    def get(self, dimension: EmotionDimension) -> float:
        """Get the intensity of one dimension."""
        return getattr(self, dimension.value)

    def as_list(self) -> list[float]:
        """Intensities in vector order."""
        return [self.get(d) for d in EMOTION_DIMENSIONS]

    def negative_values(self) -> dict[EmotionDimension, float]:
        """Intensities of the negative dimensions, in vector order."""
        return {d: self.get(d) for d in EMOTION_DIMENSIONS if d in NEGATIVE_DIMENSIONS}

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {d.value: self.get(d) for d in EMOTION_DIMENSIONS}


@dataclass
class GeometrySnapshot:
    """Derived geometry of one emotion vector.

    Attributes:
        vectors: Scaled intensities, in vector order.
        curvatures: Per-dimension deviation from the mean of active vectors.
        energy: Sum of squared vectors.
        stability_index: Inverse of the maximum curvature.
        curvature_level: The maximum curvature.
    """

    vectors: list[float]
    curvatures: list[float]
    energy: float
    stability_index: float
    curvature_level: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "vectors": list(self.vectors),
            "curvatures": list(self.curvatures),
            "energy": self.energy,
            "stability_index": self.stability_index,
            "curvature_level": self.curvature_level,
        }


@dataclass
class ClassificationResult:
    """Categorical view of a geometry snapshot.

    Attributes:
        dominant_emotion: Dimension with the largest vector (None if all zero).
        dominant_curvature: Active dimension with the largest curvature.
        classification: Stable / Unstable / Volatile.
        mental_stability: stable / unstable / critical, negatives only.
        biometric_flags: Fired biometric rules, de-duplicated, rule order.
        vital_status: Status of each known vital reading.
        ruleset_version: Rule set that produced this result.
    """

    dominant_emotion: EmotionDimension | None
    dominant_curvature: EmotionDimension | None
    classification: StabilityClass
    mental_stability: MentalStability
    biometric_flags: list[str] = field(default_factory=list)
    vital_status: dict[str, VitalStatus] = field(default_factory=dict)
    ruleset_version: str = "v2"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "dominant_emotion": self.dominant_emotion.value if self.dominant_emotion else None,
            "dominant_curvature": self.dominant_curvature.value if self.dominant_curvature else None,
            "classification": self.classification.value,
            "mental_stability": self.mental_stability.value,
            "biometric_flags": list(self.biometric_flags),
            "vital_status": {k: v.value for k, v in self.vital_status.items()},
            "ruleset_version": self.ruleset_version,
        }


@dataclass
class EmotionTrendEntry:
    """One past session as remembered by the caller.

    Attributes:
        timestamp: When the session was analyzed (None if unknown).
        emotions: Intensities reported in that session.
        dominant_emotion: Dominant emotion of that session.
        stability_index: Stability index of that session.
    """

    timestamp: datetime | None
    emotions: EmotionVector
    dominant_emotion: EmotionDimension | None
    stability_index: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmotionTrendEntry":
        """Build an entry from a loosely-typed mapping (camelCase accepted)."""
        normalized = {snake_case(str(k)): v for k, v in data.items()}
        emotions = normalized.get("emotions")
        stability = to_float(normalized.get("stability_index"))
        return cls(
            timestamp=_parse_timestamp(normalized.get("timestamp")),
            emotions=(
                emotions if isinstance(emotions, EmotionVector)
                else EmotionVector.from_mapping(emotions if isinstance(emotions, Mapping) else None)
            ),
            dominant_emotion=_dimension_or_none(normalized.get("dominant_emotion")),
            stability_index=stability if stability is not None else 0.0,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "emotions": self.emotions.to_dict(),
            "dominant_emotion": self.dominant_emotion.value if self.dominant_emotion else None,
            "stability_index": self.stability_index,
        }


@dataclass
class DimensionTrend:
    """Least-squares line through one dimension's recent values."""

    dimension: EmotionDimension
    slope: float
    intercept: float

    @property
    def direction(self) -> str:
        """Direction of the line: increasing, decreasing or flat."""
        if self.slope > 0:
            return "increasing"
        if self.slope < 0:
            return "decreasing"
        return "flat"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "slope": self.slope,
            "intercept": self.intercept,
            "direction": self.direction,
        }


@dataclass
class TrendReport:
    """Trend analysis over the most recent sessions.

    Attributes:
        insights: Human-readable insights, in emission order.
        patterns: Per-dimension regression lines.
        mean_stability: Mean stability index over the window.
        dominant_counts: How often each dominant emotion occurred.
        window_size: Number of sessions analyzed.
    """

    insights: list[str] = field(default_factory=list)
    patterns: dict[EmotionDimension, DimensionTrend] = field(default_factory=dict)
    mean_stability: float | None = None
    dominant_counts: dict[str, int] = field(default_factory=dict)
    window_size: int = 0

    @classmethod
    def empty(cls) -> "TrendReport":
        """Report for a history too short to analyze."""
        return cls()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "insights": list(self.insights),
            "patterns": {d.value: t.to_dict() for d, t in self.patterns.items()},
            "mean_stability": self.mean_stability,
            "dominant_counts": dict(self.dominant_counts),
            "window_size": self.window_size,
        }


@dataclass
class ChatMessage:
    """A single chat message; content that is not text reads as ""."""

    role: str
    content: str

    @classmethod
    def from_raw(cls, raw: Any) -> "ChatMessage":
        """Build a message from a mapping, an object or a bare string."""
        if isinstance(raw, ChatMessage):
            return raw
        if isinstance(raw, str):
            return cls(role="user", content=raw)
        if isinstance(raw, Mapping):
            role, content = raw.get("role"), raw.get("content")
        else:
            role, content = getattr(raw, "role", None), getattr(raw, "content", None)
        return cls(
            role=role if isinstance(role, str) else "user",
            content=content if isinstance(content, str) else "",
        )


@dataclass
class PersonalContext:
    """Personal details remembered across invocations.

    Scalar fields are set once and never overwritten; list fields behave
    as ordered sets.
    """

    name: str | None = None
    job: str | None = None
    relationships: list[str] = field(default_factory=list)
    interests: list[str] = field(default_factory=list)
    previous_topics: list[str] = field(default_factory=list)
    challenges: list[str] = field(default_factory=list)
    goals: list[str] = field(default_factory=list)

    @property
    def has_personal_info(self) -> bool:
        """Check if any personal detail is known."""
        return bool(
            self.name
            or self.job
            or self.relationships
            or self.interests
            or self.previous_topics
            or self.challenges
            or self.goals
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "PersonalContext":
        """Build a context from a loosely-typed mapping (camelCase accepted)."""
        if not data:
            return cls()
        normalized = {snake_case(str(k)): v for k, v in data.items()}

        def scalar(key: str) -> str | None:
            value = normalized.get(key)
            if not isinstance(value, str):
                return None
            return value.strip() or None

        def collection(key: str) -> list[str]:
            value = normalized.get(key)
            if isinstance(value, str):
                return _unique([value])
            if isinstance(value, Iterable):
                return _unique(v.strip() for v in value if isinstance(v, str))
            return []

        return cls(
            name=scalar("name"),
            job=scalar("job"),
            relationships=collection("relationships"),
            interests=collection("interests"),
            previous_topics=collection("previous_topics"),
            challenges=collection("challenges"),
            goals=collection("goals"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "job": self.job,
            "relationships": list(self.relationships),
            "interests": list(self.interests),
            "previous_topics": list(self.previous_topics),
            "challenges": list(self.challenges),
            "goals": list(self.goals),
            "has_personal_info": self.has_personal_info,
        }


@dataclass
class ResponseTypeSignal:
    """Brevity classification of the user's last message."""

    is_minimal: bool = False
    category: ResponseCategory = ResponseCategory.NORMAL
    original_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "is_minimal": self.is_minimal,
            "category": self.category.value,
            "original_text": self.original_text,
        }


@dataclass
class TraumaIndicators:
    """Trauma flags raised by emotion thresholds and message keywords.

    Attributes:
        dissociation: Numbness, detachment, unreality.
        hypervigilance: Feeling on edge or unsafe.
        avoidance: Steering away from reminders.
        intrusion: Flashbacks, nightmares, unwanted memories.
        matched_keywords: Keywords found in the scanned messages.
        emotion_rule_triggered: Whether the fear/sadness rule fired.
    """

    dissociation: bool = False
    hypervigilance: bool = False
    avoidance: bool = False
    intrusion: bool = False
    matched_keywords: list[str] = field(default_factory=list)
    emotion_rule_triggered: bool = False

    @property
    def active(self) -> list[TraumaIndicator]:
        """Raised indicators, in enum order."""
        return [i for i in TraumaIndicator if getattr(self, i.value)]

    @property
    def any(self) -> bool:
        """Check if any indicator is raised."""
        return bool(self.active)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "dissociation": self.dissociation,
            "hypervigilance": self.hypervigilance,
            "avoidance": self.avoidance,
            "intrusion": self.intrusion,
            "matched_keywords": list(self.matched_keywords),
            "emotion_rule_triggered": self.emotion_rule_triggered,
        }


@dataclass
class ProtocolDirective:
    """Structured directives handed to the prompt-construction step.

    The directive carries no prose; phrasing is up to the consumer.

    Attributes:
        crisis_level: none / moderate / critical.
        trauma_protocol_needed: Whether any trauma indicator is raised.
        minimal_response_category: Category of a minimal reply, else None.
        trend_insights_to_surface: Trend insights worth mentioning.
        critical_emotions: Negative dimensions at or above the critical threshold.
        trauma_indicators: Raised trauma indicators.
        biometric_flags: Biometric flags from the classification.
        crisis_mode: Lifecycle state after this invocation.
        previous_crisis_mode: Lifecycle state resupplied by the caller.
        opening_intent: Intent for the companion's reply.
        recommendations: Self-care recommendations, in priority order.
    """

    crisis_level: CrisisLevel = CrisisLevel.NONE
    trauma_protocol_needed: bool = False
    minimal_response_category: ResponseCategory | None = None
    trend_insights_to_surface: list[str] = field(default_factory=list)
    critical_emotions: list[EmotionDimension] = field(default_factory=list)
    trauma_indicators: list[TraumaIndicator] = field(default_factory=list)
    biometric_flags: list[str] = field(default_factory=list)
    crisis_mode: CrisisMode = CrisisMode.NORMAL
    previous_crisis_mode: CrisisMode | None = None
    opening_intent: OpeningIntent = OpeningIntent.EMPATHY
    recommendations: list[Recommendation] = field(default_factory=list)

    @property
    def crisis_mode_changed(self) -> bool:
        """Check if this invocation moved the crisis lifecycle."""
        return self.previous_crisis_mode is not None and self.previous_crisis_mode != self.crisis_mode

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "crisis_level": self.crisis_level.value,
            "trauma_protocol_needed": self.trauma_protocol_needed,
            "minimal_response_category": (
                self.minimal_response_category.value if self.minimal_response_category else None
            ),
            "trend_insights_to_surface": list(self.trend_insights_to_surface),
            "critical_emotions": [d.value for d in self.critical_emotions],
            "trauma_indicators": [i.value for i in self.trauma_indicators],
            "biometric_flags": list(self.biometric_flags),
            "crisis_mode": self.crisis_mode.value,
            "previous_crisis_mode": (
                self.previous_crisis_mode.value if self.previous_crisis_mode else None
            ),
            "opening_intent": self.opening_intent.value,
            "recommendations": [r.value for r in self.recommendations],
        }
