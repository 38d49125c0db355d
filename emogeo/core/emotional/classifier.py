# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""State classifier for geometry snapshots.

Maps a geometry snapshot plus the raw intensities onto categorical labels.
Two decision trees are evaluated independently:

- classification (Stable / Unstable / Volatile) looks at negative
  intensities, the negative share of total intensity and the stability index.
- mental stability (stable / unstable / critical) looks at negative
  intensities only (v2) or also at the stability index (v1).

Both trees are parameterised by a ClassificationRuleSet so product
iterations can coexist.

Because the stability index depends on curvature, raising one negative
intensity can lower the maximum curvature and move a state towards Stable
(e.g. joy 10 with everything else near 0). Rules are evaluated as written.
"""

from collections.abc import Callable, Mapping
from typing import Any

from emogeo.core.emotional.constants import (
    BIOMETRIC_ALIASES,
    STRESS_ELEVATED_MAX,
    STRESS_NORMAL_MAX,
    VITAL_NORMAL_RANGES,
    BiometricField,
    MentalStability,
    StabilityClass,
    VitalStatus,
)
from emogeo.core.emotional.context import (
    ClassificationResult,
    EmotionVector,
    GeometrySnapshot,
    snake_case,
    to_float,
)
from emogeo.core.emotional.geometry import find_dominant_curvature, find_dominant_emotion
from emogeo.core.emotional.rulesets import (
    BiometricThresholds,
    ClassificationRuleSet,
    get_ruleset,
)
from emogeo.utils.logging import get_logger

logger = get_logger(__name__)

FLAG_ELEVATED_HEART_RATE = "Elevated Heart Rate"
FLAG_HIGH_STRESS = "High Stress Response"
FLAG_DYSREGULATION = "Physiological Dysregulation"
FLAG_HIGH_VOLATILITY = "High Emotional Volatility"


def normalize_biometrics(biometrics: Mapping[str, Any] | None) -> dict[BiometricField, float]:
    """Normalize a loose biometric mapping to known fields.

    camelCase keys are converted to snake_case and aliases are resolved.
    Unknown keys and non-numeric values are dropped.

    Args:
        biometrics: Raw readings as supplied by the caller.

    Returns:
        Readings keyed by BiometricField.
    """
    if not biometrics:
        return {}

    readings: dict[BiometricField, float] = {}
    for key, value in biometrics.items():
        name = snake_case(str(key))
        field = BIOMETRIC_ALIASES.get(name)
        if field is None:
            try:
                field = BiometricField(name)
            except ValueError:
                continue
        number = to_float(value)
        if number is not None and not isinstance(value, bool):
            readings.setdefault(field, number)
    return readings


# =============================================================================
# Decision trees
# =============================================================================

def classify_state(
    emotions: EmotionVector,
    stability_index: float,
    ruleset: ClassificationRuleSet,
) -> StabilityClass:
    """Classify a state as Stable, Unstable or Volatile.

    Args:
        emotions: Clamped intensities.
        stability_index: Stability index of the geometry snapshot.
        ruleset: Thresholds to apply.

    Returns:
        The stability class.
    """
    negatives = list(emotions.negative_values().values())

    if any(v >= ruleset.critical_threshold for v in negatives):
        return StabilityClass.VOLATILE
    if ruleset.volatile_high_threshold is not None and any(
        v >= ruleset.volatile_high_threshold for v in negatives
    ):
        return StabilityClass.VOLATILE
    if stability_index < ruleset.volatile_stability_below:
        return StabilityClass.VOLATILE

    total = sum(emotions.as_list())
    if total > 0 and sum(negatives) / total > ruleset.negative_share_above:
        return StabilityClass.UNSTABLE
    elevated = sum(1 for v in negatives if v >= ruleset.elevated_threshold)
    if elevated >= ruleset.elevated_count:
        return StabilityClass.UNSTABLE
    if stability_index < ruleset.unstable_stability_below:
        return StabilityClass.UNSTABLE

    return StabilityClass.STABLE


def determine_mental_stability(
    emotions: EmotionVector,
    stability_index: float,
    ruleset: ClassificationRuleSet,
) -> MentalStability:
    """Severity over the negative dimensions only."""
    negatives = list(emotions.negative_values().values())

    if any(v >= ruleset.mental_critical_threshold for v in negatives):
        return MentalStability.CRITICAL
    if any(v >= ruleset.mental_unstable_threshold for v in negatives):
        return MentalStability.UNSTABLE
    if (
        ruleset.mental_unstable_stability_below is not None
        and stability_index < ruleset.mental_unstable_stability_below
    ):
        return MentalStability.UNSTABLE
    return MentalStability.STABLE


# =============================================================================
# Biometrics
# =============================================================================

def _breath_out_of_range(value: float, t: BiometricThresholds) -> bool:
    return value < t.breath_rate_min or value > t.breath_rate_max


# Rule order is the order flags are reported in.
_BIOMETRIC_RULES: list[tuple[BiometricField, Callable[[float, BiometricThresholds], bool], str]] = [
    (BiometricField.HEART_RATE, lambda v, t: v > t.heart_rate_above, FLAG_ELEVATED_HEART_RATE),
    (BiometricField.STRESS_LEVEL, lambda v, t: v > t.stress_level_above, FLAG_HIGH_STRESS),
    (BiometricField.SKIN_CONDUCTANCE, lambda v, t: v > t.skin_conductance_above, FLAG_HIGH_STRESS),
    (BiometricField.BREATH_RATE, _breath_out_of_range, FLAG_DYSREGULATION),
    (
        BiometricField.VOICE_PITCH_VARIANCE,
        lambda v, t: v > t.voice_pitch_variance_above,
        FLAG_HIGH_VOLATILITY,
    ),
]


def detect_biometric_flags(
    biometrics: Mapping[str, Any] | None,
    thresholds: BiometricThresholds | None = None,
) -> list[str]:
    """Evaluate the biometric rules.

    Each rule fires independently; flags are de-duplicated and keep rule order.

    Args:
        biometrics: Raw readings (camelCase or snake_case keys).
        thresholds: Rule thresholds; defaults to the built-in values.

    Returns:
        Fired flags.
    """
    readings = normalize_biometrics(biometrics)
    if not readings:
        return []
    thresholds = thresholds or BiometricThresholds()

    flags: list[str] = []
    for field, rule, flag in _BIOMETRIC_RULES:
        value = readings.get(field)
        if value is not None and rule(value, thresholds) and flag not in flags:
            flags.append(flag)
    return flags


def assess_vital_status(value: float, low: float, high: float) -> VitalStatus:
    """Status of one reading against its normal range.

    Args:
        value: The reading.
        low: Lower bound of the normal range.
        high: Upper bound of the normal range.

    Returns:
        normal inside the range, critical beyond 20% outside it, else elevated.
    """
    if low <= value <= high:
        return VitalStatus.NORMAL
    if value < low * 0.8 or value > high * 1.2:
        return VitalStatus.CRITICAL
    return VitalStatus.ELEVATED


def assess_stress_status(value: float) -> VitalStatus:
    """Status of a self-reported 0-10 stress level."""
    if value <= STRESS_NORMAL_MAX:
        return VitalStatus.NORMAL
    if value <= STRESS_ELEVATED_MAX:
        return VitalStatus.ELEVATED
    return VitalStatus.HIGH


def assess_vitals(biometrics: Mapping[str, Any] | None) -> dict[str, VitalStatus]:
    """Assess every known vital reading present in the input."""
    readings = normalize_biometrics(biometrics)
    status: dict[str, VitalStatus] = {}
    for field, (low, high) in VITAL_NORMAL_RANGES.items():
        if field in readings:
            status[field.value] = assess_vital_status(readings[field], low, high)
    if BiometricField.STRESS_LEVEL in readings:
        status[BiometricField.STRESS_LEVEL.value] = assess_stress_status(
            readings[BiometricField.STRESS_LEVEL]
        )
    return status


# =============================================================================
# Entry point
# =============================================================================

def classify(
    emotions: EmotionVector,
    geometry: GeometrySnapshot,
    biometrics: Mapping[str, Any] | None = None,
    ruleset: ClassificationRuleSet | None = None,
) -> ClassificationResult:
    """Classify one geometry snapshot.

    Args:
        emotions: Clamped intensities the snapshot was computed from.
        geometry: The geometry snapshot.
        biometrics: Optional raw biometric readings.
        ruleset: Rule set to apply; defaults to the canonical one.

    Returns:
        ClassificationResult.
    """
    ruleset = ruleset or get_ruleset()

    result = ClassificationResult(
        dominant_emotion=find_dominant_emotion(geometry.vectors),
        dominant_curvature=find_dominant_curvature(geometry.vectors, geometry.curvatures),
        classification=classify_state(emotions, geometry.stability_index, ruleset),
        mental_stability=determine_mental_stability(emotions, geometry.stability_index, ruleset),
        biometric_flags=detect_biometric_flags(biometrics, ruleset.biometrics),
        vital_status=assess_vitals(biometrics),
        ruleset_version=ruleset.version,
    )

    logger.debug(
        "state_classified",
        classification=result.classification.value,
        mental_stability=result.mental_stability.value,
        ruleset=ruleset.version,
        flags=len(result.biometric_flags),
    )
    return result
