"""
Attendance Tracker - Quản lý logic điểm danh
Marking, daily statistics and CSV export on top of the store
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from core.recognition.errors import InvalidInputError
from database import ATTENDANCE_STATUSES
from logging_config import face_recognition_logger


def parse_iso_date(value, field='date') -> Optional[date]:
    """Parse 'YYYY-MM-DD'; None stays None, anything else invalid raises InvalidInputError."""
    if value in (None, ''):
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError as exc:
        raise InvalidInputError(f"Invalid {field}: {value!r}", description=f"Invalid {field}, expected YYYY-MM-DD") from exc


class AttendanceTracker:
    """Service quản lý logic điểm danh"""

    def __init__(self, database, logger=None):
        self.db = database
        self.logger = logger

    def mark_attendance(self, student_id: str, status: str, attendance_date=None) -> Dict[str, Any]:
        """Upsert the (student, date) record; returns the stored row."""
        status = str(status or '').strip().lower()
        if status not in ATTENDANCE_STATUSES:
            raise InvalidInputError(
                f"Invalid status {status!r}",
                description=f"Status must be one of: {', '.join(ATTENDANCE_STATUSES)}",
            )
        if not student_id:
            raise InvalidInputError("Missing student_id", description="Please select a student")

        record = self.db.mark_attendance(
            student_id,
            status,
            attendance_date=parse_iso_date(attendance_date),
        )
        face_recognition_logger.log_attendance_marked(student_id, status)
        if self.logger:
            self.logger.info(f"[AttendanceTracker] ✅ {student_id} marked {status}")
        return record

    def list_attendance(self, attendance_date=None) -> List[Dict[str, Any]]:
        return self.db.list_attendance(parse_iso_date(attendance_date))

    def get_attendance_stats(self, attendance_date=None) -> Dict[str, Any]:
        """Thống kê hôm nay: tổng, có mặt, vắng, muộn, tỷ lệ"""
        return self.db.get_attendance_stats(parse_iso_date(attendance_date) or date.today())

    def export_attendance(self, start_date, end_date) -> Tuple[str, str]:
        """Returns (download filename, CSV text) for the inclusive range."""
        start = parse_iso_date(start_date, 'start_date') or date.today()
        end = parse_iso_date(end_date, 'end_date') or start
        if end < start:
            raise InvalidInputError(
                f"end_date {end} before start_date {start}",
                description="End date must not be before start date",
            )
        csv_text = self.db.export_attendance(start.isoformat(), end.isoformat())
        filename = f"attendance_{start.isoformat()}_to_{end.isoformat()}.csv"
        if self.logger:
            self.logger.info(f"[AttendanceTracker] Exported {filename}")
        return filename, csv_text
