"""Region detection backed by a pre-trained YOLO object detector.

The detector is consumed as a black box: one inference call per image,
returning labelled boxes with confidence scores. Loading the model is the
expensive part, so it happens at most once per detector and concurrent first
callers share a single load.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterator, List, Optional, Sequence

import numpy as np

from .errors import DetectorInitError, NoFaceDetectedError
from .types import Detection, DetectionBox

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "yolov8n.pt"
PERSON_LABEL = "person"
DEFAULT_SCORE_THRESHOLD = 0.5


class Detections(Sequence):
    """Detections produced lazily; the inference runs on first access only."""

    def __init__(self, producer: Callable[[], List[Detection]]) -> None:
        self._producer = producer
        self._items: Optional[List[Detection]] = None
        self._lock = threading.Lock()

    def _resolve(self) -> List[Detection]:
        if self._items is None:
            with self._lock:
                if self._items is None:
                    self._items = list(self._producer())
                    self._producer = None  # type: ignore[assignment]
        return self._items

    @property
    def evaluated(self) -> bool:
        return self._items is not None

    def __getitem__(self, index):
        return self._resolve()[index]

    def __len__(self) -> int:
        return len(self._resolve())

    def __iter__(self) -> Iterator[Detection]:
        return iter(self._resolve())

    def __repr__(self) -> str:
        state = f"{len(self._items)} items" if self._items is not None else "pending"
        return f"<Detections {state}>"


class RegionDetector:
    """Protocol-ish base class; `detect` returns a `Detections` sequence."""

    name: str = "detector"

    def detect(self, image: np.ndarray) -> Detections:  # pragma: no cover - interface
        raise NotImplementedError

    def is_ready(self) -> bool:
        return True


def _load_yolo(model_path: str) -> Any:
    from ultralytics import YOLO

    return YOLO(model_path)


class YoloRegionDetector(RegionDetector):
    name = "yolo"

    def __init__(
        self,
        model_path: str = DEFAULT_MODEL,
        *,
        loader: Optional[Callable[[str], Any]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._model_path = model_path
        self._loader = loader or _load_yolo
        self._model: Any = None
        self._init_error: Optional[DetectorInitError] = None
        self._lock = threading.Lock()
        self._logger = logger or logging.getLogger(__name__)

    def initialize(self) -> Any:
        """Load the model once; a failed load is remembered and re-raised."""
        if self._model is not None:
            return self._model
        with self._lock:
            if self._model is not None:
                return self._model
            if self._init_error is not None:
                raise self._init_error
            self._logger.info("[Detector] Loading detection model %s", self._model_path)
            try:
                self._model = self._loader(self._model_path)
            except Exception as exc:
                self._init_error = DetectorInitError(f"Could not load {self._model_path}: {exc}")
                self._logger.error("[Detector] ❌ Model load failed: %s", exc)
                raise self._init_error from exc
            self._logger.info("[Detector] ✅ Model ready")
            return self._model

    def is_ready(self) -> bool:
        return self._model is not None

    def status(self) -> dict:
        return {
            "model": self._model_path,
            "ready": self._model is not None,
            "error": str(self._init_error) if self._init_error else None,
        }

    def _run(self, model: Any, image: np.ndarray) -> List[Detection]:
        result = model(image, verbose=False)[0]
        names = getattr(result, "names", None) or getattr(model, "names", {}) or {}
        boxes = result.boxes
        if boxes is None or len(boxes) == 0:
            return []

        coords = boxes.xyxy.cpu().numpy()
        scores = boxes.conf.cpu().numpy()
        classes = boxes.cls.cpu().numpy().astype(int)

        detections = []
        for (xmin, ymin, xmax, ymax), score, cls_id in zip(coords, scores, classes):
            detections.append(Detection(
                label=str(names.get(int(cls_id), cls_id)),
                score=float(score),
                box=DetectionBox(float(xmin), float(ymin), float(xmax), float(ymax)),
            ))
        return detections

    def detect(self, image: np.ndarray) -> Detections:
        model = self.initialize()
        return Detections(lambda: self._run(model, image))


def filter_person_detections(
    detections: Sequence[Detection],
    label: str = PERSON_LABEL,
    score_threshold: float = DEFAULT_SCORE_THRESHOLD,
) -> List[Detection]:
    return [d for d in detections if d.label == label and d.score > score_threshold]


def require_faces(
    detections: Sequence[Detection],
    label: str = PERSON_LABEL,
    score_threshold: float = DEFAULT_SCORE_THRESHOLD,
) -> List[Detection]:
    """Qualifying detections, or NoFaceDetectedError when there are none."""
    faces = filter_person_detections(detections, label, score_threshold)
    if not faces:
        raise NoFaceDetectedError(f"No '{label}' detection above {score_threshold}")
    return faces


__all__ = [
    "DEFAULT_MODEL",
    "PERSON_LABEL",
    "DEFAULT_SCORE_THRESHOLD",
    "Detections",
    "RegionDetector",
    "YoloRegionDetector",
    "filter_person_detections",
    "require_faces",
]
