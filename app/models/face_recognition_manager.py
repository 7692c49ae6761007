"""
Face Recognition Manager - Quản lý nhận diện khuôn mặt
Wires detector, extractor and matcher together for enrollment and one-shot recognition
"""
from typing import Any, Dict, Optional, Sequence

from core.recognition.detector import RegionDetector
from core.recognition.errors import ExtractionError
from core.recognition.extractor import FeatureExtractor
from core.recognition.matcher import POLICY_FIRST
from core.recognition.session import CaptureFactory, RecognitionSession
from core.recognition.types import MatchResult
from core.vision.pipeline import StaticImageCapture, decode_image_bytes
from logging_config import face_recognition_logger


class FaceRecognitionManager:
    """Service quản lý nhận diện khuôn mặt"""

    def __init__(
        self,
        database,
        detector: RegionDetector,
        extractor: FeatureExtractor,
        similarity_threshold: float = 0.8,
        match_policy: str = POLICY_FIRST,
        detection_label: str = 'person',
        detection_score_threshold: float = 0.5,
        logger=None
    ):
        self.db = database
        self.detector = detector
        self.extractor = extractor
        self.similarity_threshold = similarity_threshold
        self.match_policy = match_policy
        self.detection_label = detection_label
        self.detection_score_threshold = detection_score_threshold
        self.logger = logger

    def extract_enrollment_features(self, image_bytes: Optional[bytes]) -> Optional[list]:
        """Vector từ toàn bộ ảnh đăng ký; None nếu không trích xuất được"""
        if not image_bytes:
            return None
        try:
            image = decode_image_bytes(image_bytes)
            return self.extractor.extract(image)
        except ExtractionError as exc:
            face_recognition_logger.log_recognition_error(f"enrollment extraction failed: {exc}")
            if self.logger:
                self.logger.warning(f"[FaceRecognition] ⚠️ No usable features from photo: {exc}")
            return None

    def enroll_student(
        self,
        name: str,
        photo_bytes: Optional[bytes] = None,
        photo_url: Optional[str] = None,
        face_encoding: Optional[Sequence[int]] = None,
    ) -> Dict[str, Any]:
        """Register a student; features come from the photo unless supplied."""
        if face_encoding is None:
            face_encoding = self.extract_enrollment_features(photo_bytes)
        student = self.db.create_student(name, photo_url=photo_url, face_encoding=face_encoding)
        face_recognition_logger.log_enrollment(
            student['name'],
            student['id'],
            len(face_encoding) if face_encoding else None,
        )
        return student

    def reenroll_student(
        self,
        student_id: str,
        name: Optional[str] = None,
        photo_bytes: Optional[bytes] = None,
        photo_url: Optional[str] = None,
        face_encoding: Optional[Sequence[int]] = None,
    ) -> Dict[str, Any]:
        if face_encoding is None and photo_bytes:
            face_encoding = self.extract_enrollment_features(photo_bytes)
        return self.db.update_student(
            student_id,
            name=name,
            photo_url=photo_url,
            face_encoding=face_encoding,
        )

    def create_session(self, capture_factory: CaptureFactory) -> RecognitionSession:
        return RecognitionSession(
            capture_factory=capture_factory,
            detector=self.detector,
            extractor=self.extractor,
            candidates=self.db.list_students,
            threshold=self.similarity_threshold,
            policy=self.match_policy,
            label=self.detection_label,
            score_threshold=self.detection_score_threshold,
            logger=self.logger,
        )

    def recognize_image(self, image_bytes: bytes) -> MatchResult:
        """Nhận diện trên một khung hình do trình duyệt gửi lên"""
        frame = decode_image_bytes(image_bytes)
        session = self.create_session(lambda: StaticImageCapture(frame))
        session.start()
        try:
            match = session.recognize()
        finally:
            session.cancel()
        face_recognition_logger.log_face_recognized(
            match.student.get('name'),
            match.similarity,
            student_id=match.student.get('id'),
        )
        return match

    def get_stats(self) -> Dict[str, Any]:
        detector_status = self.detector.status() if hasattr(self.detector, 'status') else {
            'ready': self.detector.is_ready(),
        }
        return {
            'detector': detector_status,
            'extractor': getattr(self.extractor, 'name', type(self.extractor).__name__),
            'similarity_threshold': self.similarity_threshold,
            'match_policy': self.match_policy,
        }
