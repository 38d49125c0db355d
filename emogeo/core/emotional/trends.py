# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Trend analysis over recent sessions.

Looks at the last few sessions a caller remembered and turns them into
short insights:

- per dimension, an ordinary least-squares line over x = 0..n-1; a slope of
  magnitude 1 or more is reported as increasing or decreasing; the bound is
  inclusive, so a dimension rising by exactly one per session is reported
- mean stability index below 0.3 or above 0.7
- a dominant emotion that keeps coming back

The history itself is owned by the caller. EmotionHistory is an immutable
capped sequence: appending returns a new history and drops the oldest
entries beyond capacity.
"""

from collections import Counter
from collections.abc import Iterable, Iterator, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from emogeo.core.emotional.constants import EMOTION_DIMENSIONS, TrendThresholds
from emogeo.core.emotional.context import (
    ClassificationResult,
    DimensionTrend,
    EmotionTrendEntry,
    EmotionVector,
    GeometrySnapshot,
    TrendReport,
)
from emogeo.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TREND_WINDOW = 5
DEFAULT_HISTORY_CAPACITY = 10

LOW_STABILITY_INSIGHT = (
    "Your emotional stability has been lower than usual. "
    "Consider focusing on grounding techniques."
)
HIGH_STABILITY_INSIGHT = "Your emotional stability has been quite good recently. Great progress!"


def calculate_trend(values: Sequence[float]) -> tuple[float, float]:
    """Fit a least-squares line through values at x = 0..n-1.

    Args:
        values: Observations in time order.

    Returns:
        (slope, intercept). Fewer than two values give a flat line.
    """
    n = len(values)
    if n == 0:
        return 0.0, 0.0
    if n == 1:
        return 0.0, float(values[0])

    sum_x = n * (n - 1) / 2
    sum_y = sum(values)
    sum_xy = sum(x * y for x, y in enumerate(values))
    sum_xx = sum(x * x for x in range(n))

    denominator = n * sum_xx - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def _coerce_entry(entry: EmotionTrendEntry | Mapping[str, Any]) -> EmotionTrendEntry:
    if isinstance(entry, EmotionTrendEntry):
        return entry
    return EmotionTrendEntry.from_dict(entry)


def analyze_trends(
    history: Iterable[EmotionTrendEntry | Mapping[str, Any]] | None,
    window: int = DEFAULT_TREND_WINDOW,
) -> TrendReport:
    """Analyze the most recent sessions of a history.

    Args:
        history: Past sessions, oldest first. Mappings are accepted.
        window: Number of most recent sessions to look at.

    Returns:
        TrendReport; empty when fewer than two sessions are available.
    """
    entries = [_coerce_entry(e) for e in history or []]
    if len(entries) < TrendThresholds.MIN_ENTRIES:
        return TrendReport.empty()

    recent = entries[-max(window, TrendThresholds.MIN_ENTRIES):]
    report = TrendReport(window_size=len(recent))

    for dimension in EMOTION_DIMENSIONS:
        values = [entry.emotions.get(dimension) for entry in recent]
        slope, intercept = calculate_trend(values)
        trend = DimensionTrend(dimension=dimension, slope=slope, intercept=intercept)
        report.patterns[dimension] = trend
        if abs(slope) >= TrendThresholds.SLOPE:
            report.insights.append(
                f"Your {dimension.value} levels have been {trend.direction} over recent sessions."
            )

    report.mean_stability = sum(e.stability_index for e in recent) / len(recent)
    if report.mean_stability < TrendThresholds.LOW_STABILITY:
        report.insights.append(LOW_STABILITY_INSIGHT)
    elif report.mean_stability > TrendThresholds.HIGH_STABILITY:
        report.insights.append(HIGH_STABILITY_INSIGHT)

    counts = Counter(e.dominant_emotion for e in recent if e.dominant_emotion is not None)
    report.dominant_counts = {d.value: c for d, c in counts.items()}
    for dimension, count in counts.most_common():
        if count < TrendThresholds.RECURRING_DOMINANT:
            break
        report.insights.append(
            f"{dimension.label} has been your dominant emotion in {count} "
            f"of your last {len(recent)} sessions."
        )

    logger.debug(
        "trends_analyzed",
        window_size=report.window_size,
        insights=len(report.insights),
    )
    return report


def build_trend_entry(
    emotions: EmotionVector,
    geometry: GeometrySnapshot,
    classification: ClassificationResult,
    timestamp: datetime | None = None,
) -> EmotionTrendEntry:
    """Create the history entry describing one analyzed session."""
    return EmotionTrendEntry(
        timestamp=timestamp or datetime.now(timezone.utc),
        emotions=emotions,
        dominant_emotion=classification.dominant_emotion,
        stability_index=geometry.stability_index,
    )


class EmotionHistory:
    """Ordered, capped sequence of past sessions.

    Instances are never modified; append() returns a new history that keeps
    at most ``capacity`` of the most recent entries.

    Usage:
        history = EmotionHistory.from_entries(raw_entries)
        history = history.append(entry)
        report = analyze_trends(history)
    """

    def __init__(
        self,
        entries: Iterable[EmotionTrendEntry] = (),
        capacity: int = DEFAULT_HISTORY_CAPACITY,
    ) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._capacity = capacity
        self._entries: tuple[EmotionTrendEntry, ...] = tuple(entries)[-capacity:]

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[EmotionTrendEntry | Mapping[str, Any]] | None,
        capacity: int = DEFAULT_HISTORY_CAPACITY,
    ) -> "EmotionHistory":
        """Build a history from entries or loosely-typed mappings."""
        return cls((_coerce_entry(e) for e in entries or []), capacity=capacity)

    @property
    def capacity(self) -> int:
        """Maximum number of entries kept."""
        return self._capacity

    @property
    def entries(self) -> tuple[EmotionTrendEntry, ...]:
        """Entries, oldest first."""
        return self._entries

    def append(self, entry: EmotionTrendEntry) -> "EmotionHistory":
        """Return a new history with entry added, oldest entries dropped past capacity."""
        return EmotionHistory((*self._entries, entry), capacity=self._capacity)

    def to_list(self) -> list[dict[str, Any]]:
        """Convert to a list of dictionaries for serialization."""
        return [entry.to_dict() for entry in self._entries]

    def __iter__(self) -> Iterator[EmotionTrendEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> EmotionTrendEntry:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"EmotionHistory(entries={len(self._entries)}, capacity={self._capacity})"
