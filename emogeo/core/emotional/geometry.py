# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Geometry transform for emotion vectors.

Turns raw intensities into the scaled vectors, per-dimension curvature,
energy and stability index consumed by the classifier:

- vectors: intensities scaled by k = 1.2
- curvature: |v - mean(active)| / (mean(active) + eps), 0 for inactive
  dimensions; the mean only covers strictly positive vectors
- energy: sum of squared vectors
- stability index: 1 / (max(curvature) + eps)

An all-zero vector has energy 0 and the maximal stability index 1/eps = 100
even though it describes flat affect. That follows from the formula and is
left as is.
"""

from collections.abc import Sequence

from emogeo.core.emotional.constants import (
    EMOTION_DIMENSIONS,
    EmotionDimension,
    GeometryConstants,
)
from emogeo.core.emotional.context import EmotionVector, GeometrySnapshot


def compute_emotion_vectors(
    emotions: EmotionVector,
    scale: float = GeometryConstants.SCALE,
) -> list[float]:
    """Scale intensities into emotion vectors.

    Args:
        emotions: Clamped intensities.
        scale: Scaling factor k.

    Returns:
        Scaled values in vector order.
    """
    return [intensity * scale for intensity in emotions.as_list()]


def calculate_curvature(
    vectors: Sequence[float],
    epsilon: float = GeometryConstants.EPSILON,
) -> list[float]:
    """Calculate the per-dimension curvature of emotion vectors.

    Args:
        vectors: Scaled emotion vectors.
        epsilon: Division guard.

    Returns:
        Curvature per dimension; exactly 0 where the vector is 0.
    """
    active = [v for v in vectors if v > 0]
    if not active:
        return [0.0 for _ in vectors]

    mean = sum(active) / len(active)
    return [
        0.0 if v <= 0 else abs(v - mean) / (mean + epsilon)
        for v in vectors
    ]


def calculate_energy(vectors: Sequence[float]) -> float:
    """Sum of squared vectors."""
    return sum(v * v for v in vectors)


def calculate_stability_index(
    curvatures: Sequence[float],
    epsilon: float = GeometryConstants.EPSILON,
) -> float:
    """Inverse of the largest curvature, guarded by epsilon."""
    max_curvature = max(curvatures, default=0.0)
    return 1.0 / (max_curvature + epsilon)


def compute_geometry(emotions: EmotionVector) -> GeometrySnapshot:
    """Run the full geometry transform for one emotion vector.

    Args:
        emotions: Clamped intensities.

    Returns:
        GeometrySnapshot with vectors, curvatures, energy and stability.
    """
    vectors = compute_emotion_vectors(emotions)
    curvatures = calculate_curvature(vectors)
    return GeometrySnapshot(
        vectors=vectors,
        curvatures=curvatures,
        energy=calculate_energy(vectors),
        stability_index=calculate_stability_index(curvatures),
        curvature_level=max(curvatures, default=0.0),
    )


def find_dominant_emotion(vectors: Sequence[float]) -> EmotionDimension | None:
    """Dimension with the largest vector; the first one wins a tie.

    Returns:
        The dominant dimension, or None when every vector is 0.
    """
    if not vectors or max(vectors) <= 0:
        return None
    index = max(range(len(vectors)), key=lambda i: (vectors[i], -i))
    return EMOTION_DIMENSIONS[index]


def find_dominant_curvature(
    vectors: Sequence[float],
    curvatures: Sequence[float],
) -> EmotionDimension | None:
    """Active dimension with the largest curvature; the first one wins a tie.

    Returns:
        The dimension, or None when no dimension is active.
    """
    active = [i for i, v in enumerate(vectors) if v > 0]
    if not active:
        return None
    index = max(active, key=lambda i: (curvatures[i], -i))
    return EMOTION_DIMENSIONS[index]
