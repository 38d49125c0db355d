# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the geometry transform."""

import pytest

from emogeo.core.emotional.constants import EmotionDimension
from emogeo.core.emotional.context import EmotionVector
from emogeo.core.emotional.geometry import (
    calculate_curvature,
    calculate_energy,
    calculate_stability_index,
    compute_emotion_vectors,
    compute_geometry,
    find_dominant_curvature,
    find_dominant_emotion,
)


class TestEmotionVector:
    """Tests for EmotionVector construction."""

    def test_values_are_clamped(self) -> None:
        """Test out-of-range intensities are clamped, never rejected."""
        emotions = EmotionVector(joy=15, sadness=-3, anger=4.5)

        assert emotions.joy == 10.0
        assert emotions.sadness == 0.0
        assert emotions.anger == 4.5

    def test_unusable_values_become_zero(self) -> None:
        """Test non-numeric and NaN intensities read as zero."""
        emotions = EmotionVector.from_mapping(
            {"joy": "high", "fear": float("nan"), "anger": None, "sadness": "7"}
        )

        assert emotions.joy == 0.0
        assert emotions.fear == 0.0
        assert emotions.anger == 0.0
        assert emotions.sadness == 7.0

    def test_infinities_clamp_to_bounds(self) -> None:
        """Test infinite intensities clamp to the matching bound."""
        emotions = EmotionVector.from_mapping(
            {"sadness": float("inf"), "fear": "1e999", "anger": float("-inf")}
        )

        assert emotions.sadness == 10.0
        assert emotions.fear == 10.0
        assert emotions.anger == 0.0

    def test_from_mapping_is_case_insensitive(self) -> None:
        """Test keys are matched regardless of case."""
        emotions = EmotionVector.from_mapping({"Joy": 3, "SADNESS": 2})

        assert emotions.as_list() == [3.0, 2.0, 0.0, 0.0, 0.0, 0.0]

    def test_from_empty_mapping(self) -> None:
        """Test a missing mapping gives the zero vector."""
        assert EmotionVector.from_mapping(None).as_list() == [0.0] * 6


class TestCurvature:
    """Tests for curvature calculation."""

    def test_vectors_are_scaled(self) -> None:
        """Test intensities are scaled by k = 1.2."""
        vectors = compute_emotion_vectors(EmotionVector(joy=5, fear=10))

        assert vectors == pytest.approx([6.0, 0.0, 0.0, 12.0, 0.0, 0.0])

    def test_zero_entries_have_zero_curvature(self) -> None:
        """Test curvature is exactly zero where the vector is zero."""
        curvatures = calculate_curvature([0.0, 10.8, 2.4, 7.2, 0.0, 3.6])

        assert curvatures[0] == 0.0
        assert curvatures[4] == 0.0
        assert all(c > 0 for i, c in enumerate(curvatures) if i not in (0, 4))

    def test_mean_covers_active_entries_only(self) -> None:
        """Test the mean ignores inactive dimensions."""
        curvatures = calculate_curvature([0.0, 10.8, 2.4, 7.2, 0.0, 3.6])

        # mean of active vectors is 6.0
        assert curvatures[1] == pytest.approx(4.8 / 6.01)
        assert curvatures[2] == pytest.approx(3.6 / 6.01)
        assert curvatures[3] == pytest.approx(1.2 / 6.01)
        assert curvatures[5] == pytest.approx(2.4 / 6.01)

    def test_uniform_vector_has_no_curvature(self) -> None:
        """Test equal active vectors have zero curvature."""
        assert calculate_curvature([6.0] * 6) == [0.0] * 6

    def test_no_active_entries(self) -> None:
        """Test an all-zero vector gives all-zero curvature."""
        assert calculate_curvature([0.0] * 6) == [0.0] * 6


class TestEnergyAndStability:
    """Tests for energy and stability index."""

    def test_energy_is_sum_of_squares(self) -> None:
        """Test energy of scaled vectors."""
        assert calculate_energy([0.0, 10.8, 2.4, 7.2, 0.0, 3.6]) == pytest.approx(187.2)

    def test_stability_index_inverts_max_curvature(self) -> None:
        """Test stability index is 1 / (max curvature + eps)."""
        assert calculate_stability_index([0.2, 0.99, 0.5]) == pytest.approx(1.0)

    def test_all_zero_vector(self) -> None:
        """Test the all-zero vector has energy 0 and stability index 100."""
        geometry = compute_geometry(EmotionVector())

        assert geometry.energy == 0.0
        assert geometry.stability_index == pytest.approx(100.0)
        assert geometry.curvature_level == 0.0

    def test_compute_geometry(self, crisis_emotions: EmotionVector) -> None:
        """Test the full transform on a mixed vector."""
        geometry = compute_geometry(crisis_emotions)

        assert geometry.vectors == pytest.approx([0.0, 10.8, 2.4, 7.2, 0.0, 3.6])
        assert geometry.energy == pytest.approx(187.2)
        assert geometry.curvature_level == pytest.approx(4.8 / 6.01)
        assert geometry.stability_index == pytest.approx(1 / (4.8 / 6.01 + 0.01))

    def test_to_dict(self, calm_emotions: EmotionVector) -> None:
        """Test snapshot serialization keeps all fields."""
        data = compute_geometry(calm_emotions).to_dict()

        assert set(data) == {
            "vectors",
            "curvatures",
            "energy",
            "stability_index",
            "curvature_level",
        }
        assert len(data["vectors"]) == 6


class TestDominance:
    """Tests for dominant emotion and dominant curvature."""

    def test_dominant_emotion_is_largest_vector(self, crisis_emotions: EmotionVector) -> None:
        """Test the dominant emotion is the argmax of the vectors."""
        geometry = compute_geometry(crisis_emotions)

        assert find_dominant_emotion(geometry.vectors) == EmotionDimension.SADNESS

    def test_dominant_emotion_tie_keeps_first(self) -> None:
        """Test the first dimension wins a tie."""
        vectors = compute_emotion_vectors(EmotionVector(anger=5, fear=5))

        assert find_dominant_emotion(vectors) == EmotionDimension.ANGER

    def test_dominant_emotion_of_zero_vector(self) -> None:
        """Test there is no dominant emotion when every vector is zero."""
        assert find_dominant_emotion([0.0] * 6) is None

    def test_dominant_curvature_ignores_inactive(self) -> None:
        """Test inactive dimensions never dominate curvature."""
        geometry = compute_geometry(EmotionVector(joy=9, sadness=1))

        assert find_dominant_curvature(geometry.vectors, geometry.curvatures) in (
            EmotionDimension.JOY,
            EmotionDimension.SADNESS,
        )
        assert find_dominant_curvature([0.0] * 6, [0.0] * 6) is None

    def test_dominant_curvature_picks_largest(self, crisis_emotions: EmotionVector) -> None:
        """Test the active dimension furthest from the mean dominates."""
        geometry = compute_geometry(crisis_emotions)

        assert (
            find_dominant_curvature(geometry.vectors, geometry.curvatures)
            == EmotionDimension.SADNESS
        )
