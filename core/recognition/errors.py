"""Error taxonomy shared by the recognition core and the Flask layer.

Every error carries the title/description pair shown to the operator, so the
HTTP boundary can turn any of them into a single notification.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AttendanceError(RuntimeError):
    """Base class for errors surfaced to the user as one notification."""

    title = "Error"
    description = "Something went wrong"
    status_code = 500
    recoverable = True

    def __init__(self, message: Optional[str] = None, *, description: Optional[str] = None) -> None:
        super().__init__(message or self.description)
        if description is not None:
            self.description = description

    def to_notification(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "variant": "destructive",
        }


class CameraAccessError(AttendanceError):
    """Camera permission or hardware denial."""

    title = "Camera Error"
    description = "Could not access camera"
    status_code = 503


class DetectorInitError(AttendanceError):
    """Detection model could not be loaded; terminal for the session."""

    title = "Recognition Error"
    description = "Face detection model is unavailable"
    status_code = 503
    recoverable = False


class NoFaceDetectedError(AttendanceError):
    title = "No Face Detected"
    description = "Please position your face in the camera"
    status_code = 400


class ExtractionError(AttendanceError):
    title = "Recognition Error"
    description = "Failed to recognize face"
    status_code = 400


class RecognitionMiss(AttendanceError):
    title = "Student Not Recognized"
    description = "Face not found in database"
    status_code = 404


class StoreError(AttendanceError):
    """Any failure of the enrollment/attendance store."""

    title = "Error"
    description = "Storage operation failed"
    status_code = 500


class InvalidInputError(StoreError):
    """Request data rejected before it reaches the store."""

    description = "Invalid input"
    status_code = 400


class InvalidSessionState(AttendanceError):
    title = "Recognition Error"
    description = "Start the camera before recognizing"
    status_code = 409


__all__ = [
    "AttendanceError",
    "CameraAccessError",
    "DetectorInitError",
    "NoFaceDetectedError",
    "ExtractionError",
    "RecognitionMiss",
    "StoreError",
    "InvalidInputError",
    "InvalidSessionState",
]
