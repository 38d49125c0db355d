# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Constants for the emotional geometry engine.

This module defines all enums and fixed numeric parameters used
throughout the geometry, classification and protocol selection steps.
"""

from enum import Enum


class EmotionDimension(str, Enum):
    """The six self-reported emotion dimensions, in vector order."""

    JOY = "joy"
    SADNESS = "sadness"
    ANGER = "anger"
    FEAR = "fear"
    SURPRISE = "surprise"
    DISGUST = "disgust"

    @property
    def label(self) -> str:
        """Display label ("Joy", "Sadness", ...)."""
        return self.value.capitalize()


# Vector order is fixed; every list of six values follows it.
EMOTION_DIMENSIONS: tuple[EmotionDimension, ...] = tuple(EmotionDimension)

NEGATIVE_DIMENSIONS: frozenset[EmotionDimension] = frozenset({
    EmotionDimension.SADNESS,
    EmotionDimension.FEAR,
    EmotionDimension.ANGER,
    EmotionDimension.DISGUST,
})


class StabilityClass(str, Enum):
    """Severity classification of a geometry snapshot."""

    STABLE = "Stable"
    UNSTABLE = "Unstable"
    VOLATILE = "Volatile"

    @property
    def severity(self) -> int:
        """Ordinal severity (0 = Stable)."""
        return _CLASS_SEVERITY[self]


_CLASS_SEVERITY = {
    StabilityClass.STABLE: 0,
    StabilityClass.UNSTABLE: 1,
    StabilityClass.VOLATILE: 2,
}


class MentalStability(str, Enum):
    """Severity view computed over the negative dimensions only."""

    STABLE = "stable"
    UNSTABLE = "unstable"
    CRITICAL = "critical"


class CrisisLevel(str, Enum):
    """Crisis level selected for the downstream prompt."""

    NONE = "none"
    MODERATE = "moderate"
    CRITICAL = "critical"


class CrisisMode(str, Enum):
    """States of the crisis lifecycle (normal -> elevated -> crisis -> normal)."""

    NORMAL = "normal"
    ELEVATED = "elevated"
    CRISIS = "crisis"


CRISIS_LEVEL_TO_MODE = {
    CrisisLevel.NONE: CrisisMode.NORMAL,
    CrisisLevel.MODERATE: CrisisMode.ELEVATED,
    CrisisLevel.CRITICAL: CrisisMode.CRISIS,
}


class ResponseCategory(str, Enum):
    """Sub-category of a (possibly minimal) user reply."""

    DISMISSIVE = "dismissive"
    ACKNOWLEDGMENT = "acknowledgment"
    UNCERTAIN = "uncertain"
    NORMAL = "normal"


class TraumaIndicator(str, Enum):
    """Trauma-related signals that switch on the trauma protocol."""

    DISSOCIATION = "dissociation"
    HYPERVIGILANCE = "hypervigilance"
    AVOIDANCE = "avoidance"
    INTRUSION = "intrusion"


class OpeningIntent(str, Enum):
    """Intent of the companion's first reply for a new analysis."""

    SUPPORT = "support"
    COPING = "coping"
    EMPATHY = "empathy"
    CELEBRATION = "celebration"


class Recommendation(str, Enum):
    """Structured self-care recommendations."""

    MOOD_ENHANCEMENT = "mood_enhancement"
    ANGER_MANAGEMENT = "anger_management"
    ANXIETY_REDUCTION = "anxiety_reduction"
    STABILITY_BUILDING = "stability_building"
    STRESS_REDUCTION = "stress_reduction"
    EMOTIONAL_REGULATION = "emotional_regulation"
    GENERAL_WELLNESS = "general_wellness"


class VitalStatus(str, Enum):
    """Status of a single biometric reading against its normal range."""

    NORMAL = "normal"
    ELEVATED = "elevated"
    HIGH = "high"
    CRITICAL = "critical"


# =============================================================================
# Geometry
# =============================================================================

class GeometryConstants:
    """Fixed parameters of the geometry transform."""

    SCALE = 1.2  # k: intensity -> vector scaling
    EPSILON = 0.01  # guards every division
    MIN_INTENSITY = 0.0
    MAX_INTENSITY = 10.0


# =============================================================================
# Biometrics
# =============================================================================

class BiometricField(str, Enum):
    """Canonical (snake_case) names of known biometric fields."""

    HEART_RATE = "heart_rate"
    SKIN_CONDUCTANCE = "skin_conductance"
    VOICE_PITCH_VARIANCE = "voice_pitch_variance"
    BREATH_RATE = "breath_rate"
    STRESS_LEVEL = "stress_level"
    TEMPERATURE = "temperature"
    OXYGEN_SATURATION = "oxygen_saturation"


# Field names used by other clients for the same measurement
BIOMETRIC_ALIASES = {
    "respiratory_rate": BiometricField.BREATH_RATE,
}

# Normal ranges (inclusive) used by the vital status assessment
VITAL_NORMAL_RANGES = {
    BiometricField.HEART_RATE: (60.0, 100.0),
    BiometricField.BREATH_RATE: (12.0, 20.0),
    BiometricField.TEMPERATURE: (97.0, 99.0),
    BiometricField.OXYGEN_SATURATION: (95.0, 100.0),
}

# Stress is self-reported on a 0-10 scale
STRESS_NORMAL_MAX = 3.0
STRESS_ELEVATED_MAX = 6.0


# =============================================================================
# Trends
# =============================================================================

class TrendThresholds:
    """Thresholds used by the trend analyzer."""

    SLOPE = 1.0  # |slope| at or above this is reported
    LOW_STABILITY = 0.3
    HIGH_STABILITY = 0.7
    RECURRING_DOMINANT = 3  # occurrences of one dominant emotion
    MIN_ENTRIES = 2
