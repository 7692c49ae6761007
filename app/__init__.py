"""
App package initialization
Khởi tạo Flask application và cấu hình
"""
import os

from flask import Flask

from logging_config import setup_logging
from database import DatabaseManager
from app import globals as app_globals
from app import config
from app.models import (
    CameraService,
    AttendanceTracker,
    FaceRecognitionManager,
)
from core.recognition.detector import YoloRegionDetector
from core.recognition.extractor import PixelSliceExtractor
from core.recognition.matcher import MATCH_POLICIES


def _init_recognition_services(app, detector=None, extractor=None):
    """Khởi tạo detector và extractor (model chỉ được tải ở lần nhận diện đầu tiên)"""
    if detector is None:
        detector = YoloRegionDetector(app.config['DETECTOR_MODEL'], logger=app.logger)
        app.logger.info(f"[STARTUP] Detector configured: {app.config['DETECTOR_MODEL']} (lazy load)")
    if extractor is None:
        extractor = PixelSliceExtractor(feature_length=app.config['FEATURE_LENGTH'])

    policy = app.config['MATCH_POLICY']
    if policy not in MATCH_POLICIES:
        app.logger.warning(f"[STARTUP] ⚠️ Unknown MATCH_POLICY '{policy}', using 'first'")
        app.config['MATCH_POLICY'] = 'first'
    return detector, extractor


def create_app(config_overrides=None, *, detector=None, extractor=None, capture_factory=None):
    """Factory function để tạo Flask application"""
    app = Flask(__name__)

    app.config.update(config.as_dict())
    if config_overrides:
        app.config.update(config_overrides)

    # Thiết lập logging
    setup_logging(app, log_dir=app.config['LOG_DIR'], log_level=app.config['LOG_LEVEL'])

    app.logger.info(f"[STARTUP] Working directory: {os.getcwd()}")
    app.logger.info(f"[STARTUP] Database path: {os.path.abspath(app.config['DATABASE_PATH'])}")

    # 1. Database
    app_globals.database = DatabaseManager(app.config['DATABASE_PATH'])

    # 2. Recognition pipeline
    detector, extractor = _init_recognition_services(app, detector, extractor)
    app_globals.face_recognition_manager = FaceRecognitionManager(
        database=app_globals.database,
        detector=detector,
        extractor=extractor,
        similarity_threshold=app.config['FACE_MATCH_THRESHOLD'],
        match_policy=app.config['MATCH_POLICY'],
        detection_label=app.config['DETECTION_LABEL'],
        detection_score_threshold=app.config['DETECTION_SCORE_THRESHOLD'],
        logger=app.logger
    )
    app.logger.info("[STARTUP] ✅ FaceRecognitionManager initialized")

    # 3. Camera
    app_globals.camera_service = CameraService(
        app_globals.face_recognition_manager,
        camera_index=app.config['CAMERA_INDEX'],
        width=app.config['CAMERA_WIDTH'],
        height=app.config['CAMERA_HEIGHT'],
        warmup_frames=app.config['CAMERA_WARMUP_FRAMES'],
        buffer_size=app.config['CAMERA_BUFFER_SIZE'],
        capture_factory=capture_factory,
        logger=app.logger
    )
    app.logger.info("[STARTUP] ✅ CameraService initialized")

    # 4. Attendance
    app_globals.attendance_tracker = AttendanceTracker(
        database=app_globals.database,
        logger=app.logger
    )
    app.logger.info("[STARTUP] ✅ AttendanceTracker initialized")

    try:
        stats = app_globals.attendance_tracker.get_attendance_stats()
        app.logger.info(
            f"[STARTUP] Today: {stats['present_today']} present, {stats['late_today']} late, "
            f"{stats['absent_today']} absent of {stats['total_students']} students"
        )
    except Exception as e:
        app.logger.warning(f"[STARTUP] Failed to load today's statistics: {e}")

    # Đăng ký middleware
    from app.middleware.errors import register_error_handlers
    register_error_handlers(app)

    # Đăng ký blueprints
    from app.routes import register_blueprints
    register_blueprints(app)

    return app
