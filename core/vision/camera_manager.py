"""Camera device management behind a small capture interface."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Protocol

import cv2
import numpy as np

from core.recognition.errors import CameraAccessError


logger = logging.getLogger(__name__)


class CameraProvider(Protocol):
    """Abstraction for objects that can supply cv2.VideoCapture."""

    def open(self, index: int) -> cv2.VideoCapture:
        ...


class DefaultCameraProvider:
    """Real provider that uses OpenCV to create VideoCapture objects."""

    def open(self, index: int) -> cv2.VideoCapture:
        capture = cv2.VideoCapture(index)
        if not capture or not capture.isOpened():
            if capture is not None:
                capture.release()
            raise CameraAccessError(f"Cannot open camera index {index}")
        return capture


@dataclass
class CameraConfig:
    index: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    warmup_frames: int = 3
    buffer_size: Optional[int] = 2


class CameraManager:
    """Owns one cv2.VideoCapture handle; implements ImageCapture."""

    def __init__(
        self,
        index: int = 0,
        provider: Optional[CameraProvider] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        warmup_frames: int = 3,
        buffer_size: Optional[int] = 2,
    ):
        self.config = CameraConfig(
            index=index,
            width=width,
            height=height,
            warmup_frames=warmup_frames,
            buffer_size=buffer_size,
        )
        self.provider = provider or DefaultCameraProvider()
        self._capture: Optional[cv2.VideoCapture] = None

    def open(self) -> None:
        if self.is_open():
            return
        try:
            capture = self.provider.open(self.config.index)
        except CameraAccessError:
            raise
        except Exception as exc:
            raise CameraAccessError(f"Cannot open camera index {self.config.index}: {exc}") from exc
        try:
            self._configure_capture(capture)
        except Exception as exc:
            capture.release()
            raise CameraAccessError(f"Cannot configure camera index {self.config.index}: {exc}") from exc
        self._capture = capture

    def _configure_capture(self, capture: cv2.VideoCapture) -> None:
        try:
            if self.config.width:
                capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
            if self.config.height:
                capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
            if self.config.buffer_size is not None and hasattr(cv2, "CAP_PROP_BUFFERSIZE"):
                capture.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)

            actual_w = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
            actual_h = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
            fps = capture.get(cv2.CAP_PROP_FPS)
            logger.info(
                "Camera ready: %sx%s @ %.2f fps",
                actual_w,
                actual_h,
                fps or 0,
            )

            warmup = max(0, self.config.warmup_frames)
            if warmup:
                logger.debug("Warming up camera (%s frames)", warmup)
                success = 0
                for _ in range(warmup):
                    ret, _frame = capture.read()
                    if ret:
                        success += 1
                    time.sleep(0.05)
                logger.debug("Warmup frames ok=%s/%s", success, warmup)
        except cv2.error as exc:
            logger.warning("Unable to configure camera: %s", exc)

    def release(self) -> None:
        capture = self._capture
        self._capture = None
        if capture is not None:
            capture.release()
            logger.info("Camera %s released", self.config.index)

    def read(self) -> np.ndarray:
        if self._capture is None:
            raise CameraAccessError("Camera is not open")
        ret, frame = self._capture.read()
        if not ret or frame is None:
            raise CameraAccessError("Unable to read frame from camera")
        return frame

    def is_open(self) -> bool:
        return bool(self._capture is not None and self._capture.isOpened())
