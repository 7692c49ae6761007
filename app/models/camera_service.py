"""
Camera Service - Quản lý camera và phiên nhận diện
Holds the single server-side recognition session and its camera
"""
import threading
from typing import Any, Dict, Optional

from core.recognition.session import CaptureFactory, RecognitionSession
from core.recognition.types import MatchResult
from core.vision.camera_manager import CameraManager
from logging_config import face_recognition_logger


class CameraService:
    """Service quản lý camera và phiên nhận diện"""

    def __init__(
        self,
        face_recognition_manager,
        camera_index: int = 0,
        width: int = 640,
        height: int = 480,
        warmup_frames: int = 3,
        buffer_size: int = 2,
        capture_factory: Optional[CaptureFactory] = None,
        logger=None
    ):
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.warmup_frames = warmup_frames
        self.buffer_size = buffer_size
        self.logger = logger
        self._capture_factory = capture_factory or self._default_capture
        self._manager = face_recognition_manager
        self._session: Optional[RecognitionSession] = None
        self._lock = threading.Lock()

    def _default_capture(self) -> CameraManager:
        return CameraManager(
            index=self.camera_index,
            width=self.width,
            height=self.height,
            warmup_frames=self.warmup_frames,
            buffer_size=self.buffer_size,
        )

    def _get_or_create_session(self) -> RecognitionSession:
        if self._session is None:
            self._session = self._manager.create_session(self._capture_factory)
        return self._session

    def start(self) -> Dict[str, Any]:
        """Bật camera cho phiên nhận diện"""
        with self._lock:
            session = self._get_or_create_session()
            session.start()
            if self.logger:
                self.logger.info(f"[Camera] 📷 Camera {self.camera_index} started")
            return session.status()

    def recognize(self) -> MatchResult:
        with self._lock:
            session = self._get_or_create_session()
            match = session.recognize()
        face_recognition_logger.log_face_recognized(
            match.student.get('name'),
            match.similarity,
            student_id=match.student.get('id'),
        )
        return match

    def cancel(self) -> Dict[str, Any]:
        with self._lock:
            session = self._get_or_create_session()
            session.cancel()
            if self.logger:
                self.logger.info(f"[Camera] Camera {self.camera_index} released")
            return session.status()

    def get_status(self) -> Dict[str, Any]:
        """Lấy trạng thái camera"""
        session = self._session
        status = session.status() if session else {
            'state': 'idle',
            'capture_active': False,
            'last_match': None,
            'last_error': None,
        }
        status.update({
            'camera_index': self.camera_index,
            'resolution': f"{self.width}x{self.height}",
        })
        return status

    def cleanup(self):
        """Dọn dẹp tài nguyên"""
        with self._lock:
            if self._session is not None:
                self._session.cancel()
            self._session = None
