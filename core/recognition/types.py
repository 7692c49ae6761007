"""Plain data carriers for detections and feature vectors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

FeatureVector = List[int]


class ImageCapture(Protocol):
    """Platform capability handing single BGR frames to the recognition session."""

    def open(self) -> None:
        ...

    def read(self) -> Any:
        ...

    def release(self) -> None:
        ...

    def is_open(self) -> bool:
        ...


@dataclass(frozen=True)
class DetectionBox:
    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    def to_dict(self) -> Dict[str, float]:
        return {
            "xmin": self.xmin,
            "ymin": self.ymin,
            "xmax": self.xmax,
            "ymax": self.ymax,
        }


@dataclass(frozen=True)
class Detection:
    label: str
    score: float
    box: DetectionBox

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "score": self.score, "box": self.box.to_dict()}


@dataclass
class MatchResult:
    student: Dict[str, Any]
    similarity: float
    index: int


__all__ = ["FeatureVector", "ImageCapture", "DetectionBox", "Detection", "MatchResult"]
