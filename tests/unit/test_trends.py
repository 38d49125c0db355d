# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for trend analysis and the session history."""

from datetime import datetime, timezone

import pytest

from emogeo.core.emotional.classifier import classify
from emogeo.core.emotional.constants import EmotionDimension
from emogeo.core.emotional.context import EmotionTrendEntry, EmotionVector
from emogeo.core.emotional.geometry import compute_geometry
from emogeo.core.emotional.trends import (
    HIGH_STABILITY_INSIGHT,
    LOW_STABILITY_INSIGHT,
    EmotionHistory,
    analyze_trends,
    build_trend_entry,
    calculate_trend,
)


class TestCalculateTrend:
    """Tests for the least-squares fit."""

    def test_increasing_sequence(self) -> None:
        """Test slope and intercept of 1..5."""
        slope, intercept = calculate_trend([1, 2, 3, 4, 5])

        assert slope == pytest.approx(1.0)
        assert intercept == pytest.approx(1.0)

    def test_constant_sequence(self) -> None:
        """Test a constant sequence is flat."""
        assert calculate_trend([3, 3, 3]) == (0.0, 3.0)

    def test_decreasing_sequence(self) -> None:
        """Test a falling sequence has a negative slope."""
        slope, intercept = calculate_trend([10, 8, 6, 4, 2])

        assert slope == pytest.approx(-2.0)
        assert intercept == pytest.approx(10.0)

    def test_short_sequences(self) -> None:
        """Test fewer than two values give a flat line."""
        assert calculate_trend([]) == (0.0, 0.0)
        assert calculate_trend([4]) == (0.0, 4.0)


class TestAnalyzeTrends:
    """Tests for analyze_trends."""

    @pytest.mark.parametrize("size", [0, 1])
    def test_short_history_is_empty(self, size: int, history_factory) -> None:
        """Test fewer than two entries give an empty report."""
        report = analyze_trends([history_factory(sadness=5)] * size)

        assert report.insights == []
        assert report.patterns == {}
        assert report.window_size == 0

    def test_none_history_is_empty(self) -> None:
        """Test a missing history gives an empty report."""
        assert analyze_trends(None).insights == []

    def test_increasing_dimension(self, history_factory) -> None:
        """Test sadness rising by one per session is reported."""
        history = [history_factory(sadness=v) for v in [1, 2, 3, 4, 5]]

        report = analyze_trends(history)

        assert report.insights == [
            "Your sadness levels have been increasing over recent sessions."
        ]
        assert report.patterns[EmotionDimension.SADNESS].direction == "increasing"
        assert report.patterns[EmotionDimension.JOY].direction == "flat"

    def test_slope_just_below_one_is_not_reported(self, history_factory) -> None:
        """Test the slope bound is inclusive at 1 and exclusive below it."""
        history = [history_factory(sadness=v) for v in [1.0, 1.9, 2.8, 3.7, 4.6]]

        report = analyze_trends(history)

        assert report.patterns[EmotionDimension.SADNESS].slope == pytest.approx(0.9)
        assert report.insights == []

    def test_constant_dimension_has_no_insight(self, history_factory) -> None:
        """Test an unchanged dimension emits nothing."""
        history = [history_factory(sadness=4) for _ in range(5)]

        assert analyze_trends(history).insights == []

    def test_decreasing_dimension(self, history_factory) -> None:
        """Test falling fear is reported as decreasing."""
        history = [history_factory(fear=v) for v in [10, 8, 6, 4, 2]]

        report = analyze_trends(history)

        assert "Your fear levels have been decreasing over recent sessions." in report.insights

    def test_window_uses_most_recent_entries(self, history_factory) -> None:
        """Test only the last five sessions are analyzed."""
        history = [history_factory(sadness=v) for v in [9, 9, 1, 2, 3, 4, 5]]

        report = analyze_trends(history)

        assert report.window_size == 5
        assert report.patterns[EmotionDimension.SADNESS].slope == pytest.approx(1.0)

    def test_custom_window(self, history_factory) -> None:
        """Test the window size is configurable."""
        history = [history_factory(sadness=v) for v in [1, 2, 3, 4, 5]]

        assert analyze_trends(history, window=3).window_size == 3

    def test_low_stability(self, history_factory) -> None:
        """Test a low mean stability index is reported."""
        report = analyze_trends([history_factory(stability_index=0.2) for _ in range(3)])

        assert report.insights == [LOW_STABILITY_INSIGHT]
        assert report.mean_stability == pytest.approx(0.2)

    def test_high_stability(self, history_factory) -> None:
        """Test a high mean stability index is reported."""
        report = analyze_trends([history_factory(stability_index=0.9) for _ in range(3)])

        assert report.insights == [HIGH_STABILITY_INSIGHT]

    def test_recurring_dominant_emotion(self, history_factory) -> None:
        """Test a dominant emotion seen three times is reported."""
        history = [
            history_factory(sadness=4, dominant_emotion="sadness"),
            history_factory(sadness=4, dominant_emotion="sadness"),
            history_factory(joy=4, dominant_emotion="joy"),
            history_factory(sadness=4, dominant_emotion="sadness"),
        ]

        report = analyze_trends(history)

        assert "Sadness has been your dominant emotion in 3 of your last 4 sessions." in report.insights
        assert report.dominant_counts == {"sadness": 3, "joy": 1}

    def test_accepts_entry_objects(self) -> None:
        """Test EmotionTrendEntry instances are used as is."""
        entries = [
            EmotionTrendEntry(
                timestamp=None,
                emotions=EmotionVector(anger=v),
                dominant_emotion=EmotionDimension.ANGER,
                stability_index=0.5,
            )
            for v in [2, 4, 6]
        ]

        report = analyze_trends(entries)

        assert report.patterns[EmotionDimension.ANGER].slope == pytest.approx(2.0)
        assert report.to_dict()["patterns"]["anger"]["direction"] == "increasing"


class TestEmotionHistory:
    """Tests for the capped session history."""

    def _entry(self, joy: float) -> EmotionTrendEntry:
        return EmotionTrendEntry(
            timestamp=None,
            emotions=EmotionVector(joy=joy),
            dominant_emotion=EmotionDimension.JOY,
            stability_index=1.0,
        )

    def test_append_returns_new_history(self) -> None:
        """Test appending leaves the original untouched."""
        history = EmotionHistory()

        updated = history.append(self._entry(1))

        assert len(history) == 0
        assert len(updated) == 1

    def test_capacity_drops_oldest(self) -> None:
        """Test entries beyond capacity are dropped from the front."""
        history = EmotionHistory(capacity=3)
        for joy in range(5):
            history = history.append(self._entry(joy))

        assert len(history) == 3
        assert [e.emotions.joy for e in history] == [2.0, 3.0, 4.0]

    def test_default_capacity_is_ten(self) -> None:
        """Test the default history keeps ten sessions."""
        history = EmotionHistory([self._entry(1)] * 12)

        assert history.capacity == 10
        assert len(history) == 10

    def test_invalid_capacity(self) -> None:
        """Test a capacity below one is rejected."""
        with pytest.raises(ValueError):
            EmotionHistory(capacity=0)

    def test_from_entries_parses_mappings(self, history_factory) -> None:
        """Test raw mappings with camelCase keys are parsed."""
        history = EmotionHistory.from_entries([history_factory(sadness=3, dominant_emotion="sadness")])

        entry = history[0]
        assert entry.emotions.sadness == 3.0
        assert entry.dominant_emotion == EmotionDimension.SADNESS
        assert entry.timestamp == datetime(2025, 1, 1, 12, tzinfo=timezone.utc)
        assert history.to_list()[0]["dominant_emotion"] == "sadness"

    def test_epoch_millisecond_timestamps(self) -> None:
        """Test numeric timestamps are read as epoch milliseconds."""
        entry = EmotionTrendEntry.from_dict({"timestamp": 0, "emotions": {}})

        assert entry.timestamp == datetime(1970, 1, 1, tzinfo=timezone.utc)


class TestBuildTrendEntry:
    """Tests for build_trend_entry."""

    def test_entry_from_analysis(self, crisis_emotions: EmotionVector) -> None:
        """Test the entry carries the dominant emotion and stability index."""
        geometry = compute_geometry(crisis_emotions)
        classification = classify(crisis_emotions, geometry)
        timestamp = datetime(2025, 3, 1, tzinfo=timezone.utc)

        entry = build_trend_entry(crisis_emotions, geometry, classification, timestamp)

        assert entry.timestamp == timestamp
        assert entry.dominant_emotion == EmotionDimension.SADNESS
        assert entry.stability_index == geometry.stability_index
        assert entry.emotions is crisis_emotions

    def test_timestamp_defaults_to_now(self, calm_emotions: EmotionVector) -> None:
        """Test a missing timestamp is filled in."""
        geometry = compute_geometry(calm_emotions)

        entry = build_trend_entry(calm_emotions, geometry, classify(calm_emotions, geometry))

        assert entry.timestamp is not None
        assert entry.timestamp.tzinfo is not None
