"""Feature extraction from a cropped image region.

The only shipped extractor is the pixel-slice heuristic: crop, render to an
RGBA buffer and keep the first 128 raw bytes. Vectors stored by one extractor
are meaningless to another, so swapping the implementation invalidates every
enrolled vector.
"""
from __future__ import annotations

import logging
from typing import Optional

import cv2
import numpy as np

from .errors import ExtractionError
from .types import DetectionBox, FeatureVector

logger = logging.getLogger(__name__)

FEATURE_LENGTH = 128


class FeatureExtractor:
    """Anything that turns an image region into a fixed-length vector."""

    name: str = "extractor"

    def extract(self, image: np.ndarray, box: Optional[DetectionBox] = None) -> FeatureVector:  # pragma: no cover - interface
        raise NotImplementedError


def _to_rgba(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    channels = image.shape[2]
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2RGBA)
    raise ExtractionError(f"Unsupported channel count: {channels}")


class PixelSliceExtractor(FeatureExtractor):
    """Raw-byte prefix of the cropped region rendered as RGBA.

    Input images use OpenCV's BGR(A) channel order; the buffer read back is
    R, G, B, A per pixel, row by row.
    """

    name = "pixel-slice"

    def __init__(self, feature_length: int = FEATURE_LENGTH) -> None:
        if feature_length <= 0:
            raise ValueError("feature_length must be positive")
        self.feature_length = feature_length

    def to_rgba(self, image: np.ndarray) -> np.ndarray:
        if image is None or not isinstance(image, np.ndarray) or image.size == 0:
            raise ExtractionError("Could not read image data")
        try:
            rgba = _to_rgba(np.ascontiguousarray(image))
        except cv2.error as exc:
            raise ExtractionError(f"Could not render image: {exc}") from exc
        if rgba.dtype != np.uint8:
            rgba = np.clip(rgba, 0, 255).astype(np.uint8)
        return rgba

    def crop(self, image: np.ndarray, box: Optional[DetectionBox] = None) -> np.ndarray:
        """RGBA canvas sized exactly to the box; off-image pixels stay transparent black."""
        rgba = self.to_rgba(image)
        if box is None:
            return rgba

        # Canvas sizes truncate fractional coordinates.
        left, top = int(box.xmin), int(box.ymin)
        crop_w, crop_h = int(box.width), int(box.height)
        if crop_w <= 0 or crop_h <= 0:
            raise ExtractionError(f"Empty crop region {box.to_dict()}")

        canvas = np.zeros((crop_h, crop_w, 4), dtype=np.uint8)
        height, width = rgba.shape[:2]
        x0, y0 = max(0, left), max(0, top)
        x1, y1 = min(width, left + crop_w), min(height, top + crop_h)
        if x1 > x0 and y1 > y0:
            canvas[y0 - top:y1 - top, x0 - left:x1 - left] = rgba[y0:y1, x0:x1]
        return canvas

    def extract(self, image: np.ndarray, box: Optional[DetectionBox] = None) -> FeatureVector:
        buffer = self.crop(image, box).tobytes()
        features = list(buffer[: self.feature_length])
        logger.debug("Extracted %d features (box=%s)", len(features), box.to_dict() if box else None)
        return features


__all__ = ["FEATURE_LENGTH", "FeatureExtractor", "PixelSliceExtractor"]
