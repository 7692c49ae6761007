import numpy as np
import pytest

from core.recognition.errors import CameraAccessError
from core.vision.camera_manager import CameraManager
from core.vision.pipeline import StaticImageCapture, decode_base64_image


class _FakeVideoCapture:
    def __init__(self, frames_ok=True):
        self.frames_ok = frames_ok
        self.settings = {}
        self.released = False
        self.reads = 0

    def set(self, prop, value):
        self.settings[prop] = value
        return True

    def get(self, prop):
        return self.settings.get(prop, 0)

    def read(self):
        self.reads += 1
        if not self.frames_ok:
            return False, None
        return True, np.zeros((4, 4, 3), dtype=np.uint8)

    def isOpened(self):
        return not self.released

    def release(self):
        self.released = True


class _Provider:
    def __init__(self, capture=None, error=None):
        self.capture = capture or _FakeVideoCapture()
        self.error = error
        self.opened = []

    def open(self, index):
        self.opened.append(index)
        if self.error is not None:
            raise self.error
        return self.capture


def test_open_read_release():
    provider = _Provider()
    camera = CameraManager(index=2, provider=provider, width=320, height=240, warmup_frames=2)

    camera.open()
    assert camera.is_open()
    assert provider.opened == [2]
    assert provider.capture.reads == 2

    frame = camera.read()
    assert frame.shape == (4, 4, 3)

    camera.release()
    assert not camera.is_open()
    assert provider.capture.released


def test_open_is_idempotent():
    provider = _Provider()
    camera = CameraManager(provider=provider, warmup_frames=0)
    camera.open()
    camera.open()
    assert provider.opened == [0]


def test_open_failure_becomes_camera_error():
    camera = CameraManager(provider=_Provider(error=OSError('busy')), warmup_frames=0)
    with pytest.raises(CameraAccessError):
        camera.open()
    assert not camera.is_open()


def test_configure_failure_releases_device():
    class _BadProperties(_FakeVideoCapture):
        def get(self, prop):
            return 'not-a-number'

    provider = _Provider(_BadProperties())
    camera = CameraManager(provider=provider, width=320, warmup_frames=0)

    with pytest.raises(CameraAccessError):
        camera.open()
    assert provider.capture.released
    assert not camera.is_open()


def test_read_requires_open_camera_and_frame():
    camera = CameraManager(provider=_Provider(_FakeVideoCapture(frames_ok=False)), warmup_frames=0)
    with pytest.raises(CameraAccessError):
        camera.read()
    camera.open()
    with pytest.raises(CameraAccessError):
        camera.read()


def test_static_capture_requires_open():
    capture = StaticImageCapture(np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(CameraAccessError):
        capture.read()
    capture.open()
    assert capture.read().shape == (2, 2, 3)
    capture.release()
    assert not capture.is_open()


def test_base64_data_url_prefix_is_stripped():
    assert decode_base64_image('data:image/png;base64,aGVsbG8=') == b'hello'
