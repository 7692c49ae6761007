"""Cosine-similarity comparison of stored and captured feature vectors."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
from numpy.linalg import norm

logger = logging.getLogger(__name__)

DEFAULT_MATCH_THRESHOLD = 0.8


def _as_vector(values: Optional[Sequence[float]]) -> Optional[np.ndarray]:
    if values is None:
        return None
    try:
        vector = np.asarray(values, dtype="float64").ravel()
    except (TypeError, ValueError):
        return None
    return vector


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> Optional[float]:
    """Cosine similarity of two equal-length vectors.

    Returns None when either vector is missing, the lengths differ, or one of
    them has zero magnitude (the ratio is undefined there).
    """
    vec_a = _as_vector(a)
    vec_b = _as_vector(b)
    if vec_a is None or vec_b is None:
        return None
    if vec_a.size == 0 or vec_a.shape != vec_b.shape:
        return None

    denom = norm(vec_a) * norm(vec_b)
    if denom == 0 or not np.isfinite(denom):
        return None
    return float(np.dot(vec_a, vec_b) / denom)


def compare_features(
    features1: Optional[Sequence[float]],
    features2: Optional[Sequence[float]],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> bool:
    """Match decision: True iff the cosine similarity is strictly above threshold."""
    similarity = cosine_similarity(features1, features2)
    if similarity is None:
        return False
    return similarity > threshold


__all__ = ["DEFAULT_MATCH_THRESHOLD", "cosine_similarity", "compare_features"]
