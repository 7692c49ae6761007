"""Scan enrolled students for a stored vector matching a captured one."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Sequence

from .comparator import DEFAULT_MATCH_THRESHOLD, cosine_similarity
from .types import MatchResult

logger = logging.getLogger(__name__)

POLICY_FIRST = "first"
POLICY_BEST = "best"
MATCH_POLICIES = (POLICY_FIRST, POLICY_BEST)


def find_matching_student(
    features: Sequence[float],
    students: Iterable[Dict[str, Any]],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
    policy: str = POLICY_FIRST,
) -> Optional[MatchResult]:
    """Linear scan in store order.

    ``first`` returns the earliest student above the threshold. ``best``
    returns the highest similarity above the threshold, the lowest index on
    ties. Students without a stored vector are skipped.
    """
    if policy not in MATCH_POLICIES:
        raise ValueError(f"Unknown match policy: {policy}")

    best: Optional[MatchResult] = None
    scanned = 0
    for index, student in enumerate(students):
        stored = student.get("face_encoding")
        if not stored:
            continue
        scanned += 1
        similarity = cosine_similarity(features, stored)
        if similarity is None or similarity <= threshold:
            continue
        if policy == POLICY_FIRST:
            logger.debug("First match at index %d (sim=%.4f)", index, similarity)
            return MatchResult(student=student, similarity=similarity, index=index)
        if best is None or similarity > best.similarity:
            best = MatchResult(student=student, similarity=similarity, index=index)

    logger.debug("Scanned %d enrolled vectors, match=%s", scanned, best is not None)
    return best


__all__ = ["POLICY_FIRST", "POLICY_BEST", "MATCH_POLICIES", "find_matching_student"]
