import cv2
import numpy as np
import pytest

from app import create_app
from app import globals as app_globals
from core.recognition.detector import RegionDetector
from core.recognition.types import Detection, DetectionBox
from database import DatabaseManager


class FakeDetector(RegionDetector):
    """Returns a fixed list of detections; ``None`` means one person box covering the frame."""

    name = "fake"

    def __init__(self, detections=None, error=None):
        self.detections = detections
        self.error = error
        self.calls = 0

    def detect(self, image):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.detections is not None:
            return list(self.detections)
        height, width = image.shape[:2]
        return [Detection("person", 0.9, DetectionBox(0, 0, width, height))]


class FakeCapture:
    def __init__(self, frame=None, open_error=None):
        self.frame = frame if frame is not None else solid_frame((30, 20, 10))
        self.open_error = open_error
        self.opened = 0
        self.released = 0
        self._open = False

    def open(self):
        self.opened += 1
        if self.open_error is not None:
            raise self.open_error
        self._open = True

    def read(self):
        return self.frame

    def release(self):
        self.released += 1
        self._open = False

    def is_open(self):
        return self._open


def solid_frame(bgr, size=(40, 40)):
    frame = np.zeros((size[1], size[0], 3), dtype=np.uint8)
    frame[:, :] = bgr
    return frame


def png_bytes(frame):
    ok, buf = cv2.imencode('.png', frame)
    assert ok
    return buf.tobytes()


def rgba_vector(bgr, length=128):
    """Feature vector the pixel-slice extractor yields for a solid BGR frame."""
    b, g, r = bgr
    return ([r, g, b, 255] * (length // 4 + 1))[:length]


@pytest.fixture
def db(tmp_path):
    return DatabaseManager(tmp_path / 'attendance.db')


@pytest.fixture
def fake_detector():
    return FakeDetector()


@pytest.fixture
def fake_capture():
    return FakeCapture()


@pytest.fixture
def app(tmp_path, fake_detector, fake_capture):
    app = create_app(
        {
            'TESTING': True,
            'DATABASE_PATH': str(tmp_path / 'attendance.db'),
            'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
            'LOG_DIR': str(tmp_path / 'logs'),
        },
        detector=fake_detector,
        capture_factory=lambda: fake_capture,
    )
    yield app
    app_globals.camera_service.cleanup()


@pytest.fixture
def client(app):
    return app.test_client()
