"""Recognition state machine for one capture session.

idle -> capturing -> detecting -> matching -> resolved | unresolved

The session exclusively owns the capture handle between ``start`` and the
moment it is released (resolve, cancel or a non-recoverable error). It knows
nothing about HTTP or templates; the capture device, detector, extractor and
candidate source are injected.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional

from .comparator import DEFAULT_MATCH_THRESHOLD
from .detector import DEFAULT_SCORE_THRESHOLD, PERSON_LABEL, RegionDetector, require_faces
from .errors import (
    AttendanceError,
    CameraAccessError,
    ExtractionError,
    InvalidSessionState,
    NoFaceDetectedError,
    RecognitionMiss,
    StoreError,
)
from .extractor import FeatureExtractor
from .matcher import POLICY_FIRST, find_matching_student
from .types import ImageCapture, MatchResult

CaptureFactory = Callable[[], ImageCapture]
CandidateSource = Callable[[], Iterable[Dict[str, Any]]]


class RecognitionState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    DETECTING = "detecting"
    MATCHING = "matching"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


# Failures after which the camera stays on so the user can reposition.
_KEEP_STREAM_ERRORS = (NoFaceDetectedError, ExtractionError, RecognitionMiss, StoreError)


class RecognitionSession:
    def __init__(
        self,
        *,
        capture_factory: CaptureFactory,
        detector: RegionDetector,
        extractor: FeatureExtractor,
        candidates: CandidateSource,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        policy: str = POLICY_FIRST,
        label: str = PERSON_LABEL,
        score_threshold: float = DEFAULT_SCORE_THRESHOLD,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._capture_factory = capture_factory
        self._detector = detector
        self._extractor = extractor
        self._candidates = candidates
        self._threshold = threshold
        self._policy = policy
        self._label = label
        self._score_threshold = score_threshold
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._capture: Optional[ImageCapture] = None
        self._state = RecognitionState.IDLE
        self._last_match: Optional[MatchResult] = None
        self._last_error: Optional[AttendanceError] = None

    @property
    def state(self) -> RecognitionState:
        return self._state

    @property
    def capture_active(self) -> bool:
        return self._capture is not None

    def _release_locked(self) -> None:
        capture = self._capture
        self._capture = None
        if capture is None:
            return
        try:
            capture.release()
        except Exception as exc:
            self._logger.warning("[Recognition] Camera release failed: %s", exc)

    def start(self) -> RecognitionState:
        """Acquire the capture device; any previously held stream is released first."""
        with self._lock:
            self._release_locked()
            self._state = RecognitionState.IDLE
            self._last_match = None
            self._last_error = None
            capture = None
            try:
                capture = self._capture_factory()
                capture.open()
            except Exception as exc:
                if capture is not None:
                    try:
                        capture.release()
                    except Exception as release_exc:
                        self._logger.warning("[Recognition] Camera release failed: %s", release_exc)
                error = exc if isinstance(exc, AttendanceError) else CameraAccessError(str(exc))
                self._last_error = error
                self._logger.warning("[Recognition] Capture could not start: %s", exc)
                if error is exc:
                    raise
                raise error from exc
            self._capture = capture
            self._state = RecognitionState.CAPTURING
            self._logger.info("[Recognition] Capture started")
            return self._state

    def recognize(self) -> MatchResult:
        """Run detect -> extract -> match on one captured frame."""
        with self._lock:
            if self._capture is None or self._state not in (
                RecognitionState.CAPTURING,
                RecognitionState.UNRESOLVED,
            ):
                raise InvalidSessionState(f"Cannot recognize from state '{self._state.value}'")

            try:
                frame = self._capture.read()

                self._state = RecognitionState.DETECTING
                detections = self._detector.detect(frame)
                faces = require_faces(detections, self._label, self._score_threshold)
                self._logger.debug("[Recognition] %d face(s), using %s", len(faces), faces[0].to_dict())
                features = self._extractor.extract(frame, faces[0].box)

                self._state = RecognitionState.MATCHING
                match = find_matching_student(
                    features,
                    self._candidates(),
                    threshold=self._threshold,
                    policy=self._policy,
                )
                if match is None:
                    raise RecognitionMiss()
            except _KEEP_STREAM_ERRORS as exc:
                self._state = RecognitionState.UNRESOLVED
                self._last_error = exc
                self._logger.info("[Recognition] Unresolved: %s", exc)
                raise
            except AttendanceError as exc:
                self._release_locked()
                self._state = RecognitionState.IDLE
                self._last_error = exc
                self._logger.warning("[Recognition] Aborted: %s", exc)
                raise
            except Exception:
                self._release_locked()
                self._state = RecognitionState.IDLE
                self._logger.exception("[Recognition] Unexpected failure")
                raise

            self._release_locked()
            self._state = RecognitionState.RESOLVED
            self._last_match = match
            self._last_error = None
            self._logger.info(
                "[Recognition] ✅ Resolved %s (sim=%.4f)",
                match.student.get("name"),
                match.similarity,
            )
            return match

    def cancel(self) -> RecognitionState:
        with self._lock:
            self._release_locked()
            self._state = RecognitionState.IDLE
            self._last_match = None
            return self._state

    def status(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "state": self._state.value,
                "capture_active": self._capture is not None,
                "last_match": (
                    {
                        "student_id": self._last_match.student.get("id"),
                        "name": self._last_match.student.get("name"),
                        "similarity": round(self._last_match.similarity, 4),
                    }
                    if self._last_match
                    else None
                ),
                "last_error": self._last_error.to_notification() if self._last_error else None,
            }


__all__ = ["CaptureFactory", "RecognitionState", "RecognitionSession"]
