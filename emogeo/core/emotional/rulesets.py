# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Versioned classification rule sets.

The classifier thresholds went through more than one product iteration.
Rather than merging them, each iteration is kept as a named rule set:

- v1: first dashboard iteration. Any negative emotion >= 6 already makes
  the state Volatile, and mental stability also turns unstable when the
  stability index drops below 0.3.
- v2: canonical rule set (default). Volatile needs a negative emotion >= 8
  or a stability index < 0.2; mental stability looks at negative
  intensities only.

Rule sets are defined in code and may be overridden from
``config/engine/rulesets.yaml``. A missing or unreadable file is logged and
the built-in definitions are used.

Usage:
    from emogeo.core.emotional.rulesets import get_ruleset

    ruleset = get_ruleset("v2")
    print(ruleset.critical_threshold)
"""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from emogeo.core.config.yaml_loader import YAMLLoadError, deep_merge, load_yaml_section
from emogeo.utils.logging import get_logger

logger = get_logger(__name__)

RULESETS_FILENAME = "rulesets.yaml"
CANONICAL_VERSION = "v2"


class UnknownRuleSetError(KeyError):
    """Raised when a rule set version is not defined."""

    def __init__(self, version: str, available: list[str]) -> None:
        self.version = version
        self.available = available
        super().__init__(
            f"Unknown rule set '{version}'; available: {', '.join(available) or 'none'}"
        )


@dataclass(frozen=True)
class BiometricThresholds:
    """Thresholds of the biometric flag rules.

    Attributes:
        heart_rate_above: Heart rate (bpm) that raises "Elevated Heart Rate".
        stress_level_above: Stress level (0-10) that raises "High Stress Response".
        skin_conductance_above: Skin conductance that raises "High Stress Response".
        voice_pitch_variance_above: Variance that raises "High Emotional Volatility".
        breath_rate_min: Lowest breath rate still considered regulated.
        breath_rate_max: Highest breath rate still considered regulated.
    """

    heart_rate_above: float = 90.0
    stress_level_above: float = 7.0
    skin_conductance_above: float = 70.0
    voice_pitch_variance_above: float = 60.0
    breath_rate_min: float = 10.0
    breath_rate_max: float = 20.0


@dataclass(frozen=True)
class ClassificationRuleSet:
    """Thresholds of both classification decision trees and the crisis levels.

    Attributes:
        version: Rule set identifier.
        description: What distinguishes this rule set.
        critical_threshold: Negative intensity that makes a state Volatile.
        volatile_high_threshold: Optional lower negative intensity that also
            makes a state Volatile (v1 only).
        volatile_stability_below: Stability index below which a state is Volatile.
        negative_share_above: Share of negative intensity that makes a state Unstable.
        elevated_threshold: Negative intensity counted as elevated.
        elevated_count: Number of elevated negatives that makes a state Unstable.
        unstable_stability_below: Stability index below which a state is Unstable.
        mental_critical_threshold: Negative intensity for mental stability "critical".
        mental_unstable_threshold: Negative intensity for mental stability "unstable".
        mental_unstable_stability_below: Optional stability index below which
            mental stability is "unstable" (v1 only).
        crisis_critical_threshold: Negative intensity for crisis level "critical".
        crisis_moderate_threshold: Negative intensity for crisis level "moderate".
        biometrics: Biometric flag thresholds.
    """

    version: str
    description: str = ""
    critical_threshold: float = 8.0
    volatile_high_threshold: float | None = None
    volatile_stability_below: float = 0.2
    negative_share_above: float = 0.6
    elevated_threshold: float = 4.0
    elevated_count: int = 2
    unstable_stability_below: float = 0.5
    mental_critical_threshold: float = 8.0
    mental_unstable_threshold: float = 6.0
    mental_unstable_stability_below: float | None = None
    crisis_critical_threshold: float = 8.0
    crisis_moderate_threshold: float = 6.0
    biometrics: BiometricThresholds = field(default_factory=BiometricThresholds)


DEFAULT_RULESETS: dict[str, dict[str, Any]] = {
    "v1": {
        "description": "First dashboard iteration: negatives >= 6 are already Volatile.",
        "volatile_high_threshold": 6.0,
        "mental_unstable_stability_below": 0.3,
    },
    "v2": {
        "description": "Canonical rule set.",
    },
}


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _parse_biometrics(data: dict[str, Any]) -> BiometricThresholds:
    """Parse biometric thresholds from YAML data."""
    defaults = BiometricThresholds()
    return BiometricThresholds(
        heart_rate_above=float(data.get("heart_rate_above", defaults.heart_rate_above)),
        stress_level_above=float(data.get("stress_level_above", defaults.stress_level_above)),
        skin_conductance_above=float(
            data.get("skin_conductance_above", defaults.skin_conductance_above)
        ),
        voice_pitch_variance_above=float(
            data.get("voice_pitch_variance_above", defaults.voice_pitch_variance_above)
        ),
        breath_rate_min=float(data.get("breath_rate_min", defaults.breath_rate_min)),
        breath_rate_max=float(data.get("breath_rate_max", defaults.breath_rate_max)),
    )


def _parse_ruleset(version: str, data: dict[str, Any]) -> ClassificationRuleSet:
    """Parse one rule set from YAML data.

    Args:
        version: Rule set identifier.
        data: Raw YAML data for the rule set.

    Returns:
        ClassificationRuleSet instance.
    """
    defaults = ClassificationRuleSet(version=version)
    biometrics = data.get("biometrics")
    return ClassificationRuleSet(
        version=version,
        description=str(data.get("description", "")),
        critical_threshold=float(data.get("critical_threshold", defaults.critical_threshold)),
        volatile_high_threshold=_optional_float(data.get("volatile_high_threshold")),
        volatile_stability_below=float(
            data.get("volatile_stability_below", defaults.volatile_stability_below)
        ),
        negative_share_above=float(
            data.get("negative_share_above", defaults.negative_share_above)
        ),
        elevated_threshold=float(data.get("elevated_threshold", defaults.elevated_threshold)),
        elevated_count=int(data.get("elevated_count", defaults.elevated_count)),
        unstable_stability_below=float(
            data.get("unstable_stability_below", defaults.unstable_stability_below)
        ),
        mental_critical_threshold=float(
            data.get("mental_critical_threshold", defaults.mental_critical_threshold)
        ),
        mental_unstable_threshold=float(
            data.get("mental_unstable_threshold", defaults.mental_unstable_threshold)
        ),
        mental_unstable_stability_below=_optional_float(
            data.get("mental_unstable_stability_below")
        ),
        crisis_critical_threshold=float(
            data.get("crisis_critical_threshold", defaults.crisis_critical_threshold)
        ),
        crisis_moderate_threshold=float(
            data.get("crisis_moderate_threshold", defaults.crisis_moderate_threshold)
        ),
        biometrics=_parse_biometrics(biometrics if isinstance(biometrics, dict) else {}),
    )


def _build_rulesets(definitions: dict[str, Any]) -> dict[str, ClassificationRuleSet]:
    return {
        str(version).lower(): _parse_ruleset(
            str(version).lower(), data if isinstance(data, dict) else {}
        )
        for version, data in definitions.items()
    }


@lru_cache(maxsize=4)
def load_rulesets(config_dir: str | None = None) -> dict[str, ClassificationRuleSet]:
    """Load all rule sets, applying YAML overrides on top of the built-ins.

    Uses LRU cache to avoid reloading on every access.
    Call `load_rulesets.cache_clear()` to reload.

    Args:
        config_dir: Optional config directory (as string for caching).

    Returns:
        Mapping of version to ClassificationRuleSet.
    """
    rulesets = _build_rulesets(DEFAULT_RULESETS)

    if config_dir is not None:
        path = Path(config_dir) / RULESETS_FILENAME
        try:
            rulesets = _build_rulesets(
                deep_merge(DEFAULT_RULESETS, load_yaml_section(path, "rulesets"))
            )
        except YAMLLoadError as e:
            logger.warning("ruleset_config_unavailable", path=str(path), reason=e.reason)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("ruleset_config_unavailable", path=str(path), reason=str(e))

    logger.debug("rulesets_loaded", versions=sorted(rulesets))
    return rulesets


def get_ruleset(
    version: str = CANONICAL_VERSION,
    config_dir: Path | str | None = None,
) -> ClassificationRuleSet:
    """Get a rule set by version.

    Args:
        version: Rule set identifier (case-insensitive).
        config_dir: Optional directory holding ``rulesets.yaml``.

    Returns:
        The matching ClassificationRuleSet.

    Raises:
        UnknownRuleSetError: If no rule set has that version.
    """
    rulesets = load_rulesets(str(config_dir) if config_dir is not None else None)
    key = version.strip().lower()
    if key not in rulesets:
        raise UnknownRuleSetError(version, sorted(rulesets))
    return rulesets[key]


def reload_rulesets() -> None:
    """Drop cached rule sets so the next lookup re-reads the YAML file."""
    load_rulesets.cache_clear()
