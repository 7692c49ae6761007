"""Frame decoding helpers and a capture backed by an uploaded frame."""
from __future__ import annotations

import base64
import binascii
from typing import Optional

import cv2
import numpy as np

from core.recognition.errors import CameraAccessError, ExtractionError


def decode_image_bytes(data: Optional[bytes]) -> np.ndarray:
    """Decode JPEG/PNG/WEBP bytes into a BGR array."""
    if not data:
        raise ExtractionError("Missing image data")
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise ExtractionError("Invalid image format")
    return image


def decode_base64_image(payload: Optional[str]) -> bytes:
    """Strip an optional data-URL prefix and decode base64 image data."""
    if not payload:
        raise ExtractionError("Missing image data")
    if "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ExtractionError("Could not decode base64 image data") from exc


class StaticImageCapture:
    """ImageCapture over a single frame sent by the browser."""

    def __init__(self, frame: np.ndarray) -> None:
        self._frame = frame
        self._open = False

    def open(self) -> None:
        self._open = True

    def read(self) -> np.ndarray:
        if not self._open:
            raise CameraAccessError("Capture is not open")
        return self._frame

    def release(self) -> None:
        self._open = False

    def is_open(self) -> bool:
        return self._open
