# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for classification rule sets."""

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from emogeo.core.config.settings import DEFAULT_CONFIG_DIR
from emogeo.core.emotional.rulesets import (
    CANONICAL_VERSION,
    ClassificationRuleSet,
    UnknownRuleSetError,
    get_ruleset,
    load_rulesets,
    reload_rulesets,
)


class TestBuiltinRuleSets:
    """Tests for the built-in rule set definitions."""

    def test_canonical_version_is_v2(self) -> None:
        """Test the default rule set is v2."""
        assert CANONICAL_VERSION == "v2"
        assert get_ruleset().version == "v2"

    def test_v2_thresholds(self) -> None:
        """Test the canonical thresholds."""
        ruleset = get_ruleset("v2")

        assert ruleset.critical_threshold == 8.0
        assert ruleset.volatile_high_threshold is None
        assert ruleset.volatile_stability_below == 0.2
        assert ruleset.negative_share_above == 0.6
        assert ruleset.elevated_threshold == 4.0
        assert ruleset.elevated_count == 2
        assert ruleset.unstable_stability_below == 0.5
        assert ruleset.mental_unstable_threshold == 6.0
        assert ruleset.mental_unstable_stability_below is None
        assert ruleset.crisis_moderate_threshold == 6.0
        assert ruleset.biometrics.heart_rate_above == 90.0

    def test_v1_differences(self) -> None:
        """Test the first iteration escalates earlier."""
        ruleset = get_ruleset("v1")

        assert ruleset.volatile_high_threshold == 6.0
        assert ruleset.mental_unstable_stability_below == 0.3
        assert ruleset.critical_threshold == 8.0

    def test_version_lookup_is_case_insensitive(self) -> None:
        """Test versions are matched case-insensitively."""
        assert get_ruleset(" V1 ").version == "v1"

    def test_unknown_version_raises(self) -> None:
        """Test an unknown version raises UnknownRuleSetError."""
        with pytest.raises(UnknownRuleSetError) as exc_info:
            get_ruleset("v9")

        assert isinstance(exc_info.value, KeyError)
        assert exc_info.value.version == "v9"
        assert exc_info.value.available == ["v1", "v2"]


class TestRuleSetConfigFile:
    """Tests for YAML overrides of rule sets."""

    def test_repository_file_matches_builtins(self) -> None:
        """Test the shipped YAML file restates the built-in values."""
        for version in ("v1", "v2"):
            assert get_ruleset(version, DEFAULT_CONFIG_DIR) == get_ruleset(version)

    def test_override_and_new_version(self, tmp_path: Path) -> None:
        """Test file values override built-ins and may add versions."""
        (tmp_path / "rulesets.yaml").write_text(
            "rulesets:\n"
            "  v2:\n"
            "    critical_threshold: 9\n"
            "  v3:\n"
            "    description: experimental\n"
            "    elevated_count: 3\n"
            "    biometrics:\n"
            "      heart_rate_above: 100\n"
        )

        v2 = get_ruleset("v2", tmp_path)
        v3 = get_ruleset("v3", tmp_path)

        assert v2.critical_threshold == 9.0
        assert v2.elevated_threshold == 4.0
        assert v3.elevated_count == 3
        assert v3.biometrics.heart_rate_above == 100.0
        assert v3.biometrics.stress_level_above == 7.0

    def test_missing_file_falls_back_to_builtins(self, tmp_path: Path) -> None:
        """Test a missing file leaves the built-in rule sets in place."""
        rulesets = load_rulesets(str(tmp_path))

        assert sorted(rulesets) == ["v1", "v2"]
        assert rulesets["v2"] == get_ruleset("v2")

    def test_invalid_file_falls_back_to_builtins(self, tmp_path: Path) -> None:
        """Test an unparsable file leaves the built-in rule sets in place."""
        (tmp_path / "rulesets.yaml").write_text("rulesets: [unclosed\n")

        assert get_ruleset("v2", tmp_path) == get_ruleset("v2")

    @pytest.mark.parametrize(
        "override",
        [
            "    critical_threshold: high\n",
            "    critical_threshold: null\n",
            "    elevated_count: [1, 2]\n",
        ],
    )
    def test_bad_values_fall_back_to_builtins(self, tmp_path: Path, override: str) -> None:
        """Test unusable threshold values leave the built-in rule sets in place."""
        (tmp_path / "rulesets.yaml").write_text("rulesets:\n  v2:\n" + override)

        assert get_ruleset("v2", tmp_path) == get_ruleset("v2")

    def test_non_mapping_biometrics_use_defaults(self, tmp_path: Path) -> None:
        """Test a biometrics block that is not a mapping keeps default thresholds."""
        (tmp_path / "rulesets.yaml").write_text(
            "rulesets:\n  v2:\n    elevated_count: 3\n    biometrics: [1, 2]\n"
        )

        ruleset = get_ruleset("v2", tmp_path)

        assert ruleset.elevated_count == 3
        assert ruleset.biometrics == get_ruleset("v2").biometrics

    def test_reload_picks_up_changes(self, tmp_path: Path) -> None:
        """Test reload_rulesets re-reads the file."""
        config = tmp_path / "rulesets.yaml"
        config.write_text("rulesets:\n  v2:\n    elevated_count: 3\n")
        assert get_ruleset("v2", tmp_path).elevated_count == 3

        config.write_text("rulesets:\n  v2:\n    elevated_count: 4\n")
        assert get_ruleset("v2", tmp_path).elevated_count == 3

        reload_rulesets()
        assert get_ruleset("v2", tmp_path).elevated_count == 4

    def test_rulesets_are_read_only(self) -> None:
        """Test cached rule sets cannot be modified by a caller."""
        ruleset = get_ruleset("v2")

        with pytest.raises(FrozenInstanceError):
            ruleset.critical_threshold = 1.0  # type: ignore[misc]
        with pytest.raises(FrozenInstanceError):
            ruleset.biometrics.heart_rate_above = 1.0  # type: ignore[misc]

    def test_rulesets_are_dataclasses(self) -> None:
        """Test loaded rule sets are ClassificationRuleSet instances."""
        assert all(isinstance(r, ClassificationRuleSet) for r in load_rulesets().values())
