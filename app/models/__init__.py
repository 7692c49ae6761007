"""
Models Package - Business logic models
Centralized business logic separated from Flask routes
"""

from .camera_service import CameraService
from .attendance_tracker import AttendanceTracker
from .face_recognition_manager import FaceRecognitionManager

__all__ = [
    'CameraService',
    'AttendanceTracker',
    'FaceRecognitionManager',
]
