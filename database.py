"""
Database module for Attendance Tracker
Students, their optional reference vectors, and daily attendance in SQLite
"""

import csv
import io
import json
import sqlite3
import time
import uuid
from datetime import datetime, date
from pathlib import Path
import logging

from core.recognition.errors import InvalidInputError, StoreError
from logging_config import database_logger

logger = logging.getLogger(__name__)

ATTENDANCE_STATUSES = ('present', 'absent', 'late')
EXPORT_HEADERS = ['Date', 'Time', 'Student', 'Status']
UNKNOWN_STUDENT = 'Unknown'


def format_attendance_csv(records):
    """Render attendance rows as CSV text: header first, '\\n' separated, no trailing newline."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(EXPORT_HEADERS)
    for record in records:
        writer.writerow([
            record.get('date'),
            record.get('time'),
            record.get('student_name') or UNKNOWN_STUDENT,
            record.get('status'),
        ])
    return buffer.getvalue().rstrip('\n')


def compute_attendance_rate(total_students, present, late):
    """(present + late) / total * 100 rounded half-up; 0 without students."""
    if not total_students:
        return 0
    rate = (present + late) / total_students * 100
    return int(rate + 0.5)


class DatabaseManager:
    def __init__(self, db_path="attendance_tracker.db"):
        self.db_path = str(db_path)
        if self.db_path != ':memory:':
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.init_database()

    def get_connection(self):
        """Tạo kết nối database"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute('PRAGMA foreign_keys = ON')
        return conn

    def init_database(self):
        """Khởi tạo database và các bảng"""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS students (
                    id VARCHAR(36) PRIMARY KEY,
                    name VARCHAR(100) NOT NULL,
                    photo_url VARCHAR(255),
                    face_encoding TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS attendance (
                    id VARCHAR(36) PRIMARY KEY,
                    student_id VARCHAR(36) NOT NULL,
                    date DATE NOT NULL,
                    time VARCHAR(8) NOT NULL,
                    status VARCHAR(10) NOT NULL DEFAULT 'present',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE (student_id, date),
                    FOREIGN KEY (student_id) REFERENCES students(id)
                )
            ''')

            cursor.execute('CREATE INDEX IF NOT EXISTS idx_students_name ON students(name)')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_attendance_date ON attendance(date)')
            conn.commit()
        logger.info("Database ready at %s", self.db_path)

    @staticmethod
    def _student_from_row(row):
        if row is None:
            return None
        student = dict(row)
        encoding = student.get('face_encoding')
        student['face_encoding'] = json.loads(encoding) if encoding else None
        return student

    @staticmethod
    def _encode_features(face_encoding):
        if face_encoding is None:
            return None
        try:
            return json.dumps([int(v) for v in face_encoding])
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"Invalid face encoding: {exc}") from exc

    # === STUDENTS ===
    def list_students(self):
        """Danh sách sinh viên, sắp xếp theo tên"""
        started = time.perf_counter()
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute('SELECT * FROM students ORDER BY name ASC, created_at ASC')
                students = [self._student_from_row(r) for r in cursor.fetchall()]
        except sqlite3.Error as exc:
            database_logger.log_error('list_students', exc)
            raise StoreError("Failed to fetch students") from exc
        database_logger.log_query('SELECT', 'students', time.perf_counter() - started)
        return students

    def get_student(self, student_id):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute('SELECT * FROM students WHERE id = ?', (student_id,))
                return self._student_from_row(cursor.fetchone())
        except sqlite3.Error as exc:
            database_logger.log_error('get_student', exc)
            raise StoreError("Failed to fetch student") from exc

    def count_students(self):
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute('SELECT COUNT(*) FROM students')
            return cursor.fetchone()[0]

    def create_student(self, name, photo_url=None, face_encoding=None):
        """Thêm sinh viên mới"""
        name = (name or '').strip()
        if not name:
            raise InvalidInputError("Student name is required", description="Please enter student name")

        student_id = str(uuid.uuid4())
        encoded = self._encode_features(face_encoding)
        now = datetime.now().isoformat(sep=' ', timespec='seconds')
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute('''
                    INSERT INTO students (id, name, photo_url, face_encoding, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                ''', (student_id, name, photo_url, encoded, now, now))
                conn.commit()
        except sqlite3.Error as exc:
            database_logger.log_error('create_student', exc)
            raise StoreError("Failed to add student", description="Failed to add student") from exc

        logger.info(f"Added student: {name} ({student_id})")
        return self.get_student(student_id)

    def update_student(self, student_id, name=None, photo_url=None, face_encoding=None):
        """Đăng ký lại: cập nhật tên, ảnh hoặc vector của sinh viên"""
        fields = []
        values = []
        if name is not None:
            name = name.strip()
            if not name:
                raise InvalidInputError("Student name is required", description="Please enter student name")
            fields.append('name = ?')
            values.append(name)
        if photo_url is not None:
            fields.append('photo_url = ?')
            values.append(photo_url)
        if face_encoding is not None:
            fields.append('face_encoding = ?')
            values.append(self._encode_features(face_encoding))

        if not fields:
            return self.get_student(student_id)

        fields.append('updated_at = ?')
        values.append(datetime.now().isoformat(sep=' ', timespec='seconds'))
        values.append(student_id)

        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(f"UPDATE students SET {', '.join(fields)} WHERE id = ?", values)
                conn.commit()
                updated = cursor.rowcount
        except sqlite3.Error as exc:
            database_logger.log_error('update_student', exc)
            raise StoreError("Failed to update student") from exc

        if not updated:
            raise StoreError(f"Student {student_id} not found", description="Student not found")
        logger.info(f"Updated student {student_id}")
        return self.get_student(student_id)

    # === ATTENDANCE ===
    def mark_attendance(self, student_id, status, attendance_date=None, at=None):
        """Điểm danh; một bản ghi cho mỗi (sinh viên, ngày), lần sau ghi đè"""
        if status not in ATTENDANCE_STATUSES:
            raise InvalidInputError(f"Invalid status {status!r}", description="Failed to mark attendance")

        at = at or datetime.now()
        if attendance_date is None:
            attendance_date = at.date()
        if isinstance(attendance_date, date):
            attendance_date = attendance_date.isoformat()
        time_value = at.strftime('%H:%M:%S')

        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute('SELECT 1 FROM students WHERE id = ?', (student_id,))
                if cursor.fetchone() is None:
                    raise StoreError(f"Student {student_id} not found", description="Student not found")

                cursor.execute('''
                    INSERT INTO attendance (id, student_id, date, time, status)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT (student_id, date)
                    DO UPDATE SET status = excluded.status, time = excluded.time
                ''', (str(uuid.uuid4()), student_id, attendance_date, time_value, status))
                conn.commit()

                cursor.execute('''
                    SELECT * FROM attendance WHERE student_id = ? AND date = ?
                ''', (student_id, attendance_date))
                record = dict(cursor.fetchone())
        except sqlite3.Error as exc:
            database_logger.log_error('mark_attendance', exc)
            raise StoreError("Failed to mark attendance", description="Failed to mark attendance") from exc

        logger.info(f"Marked {student_id} as {status} on {attendance_date} at {time_value}")
        return record

    def list_attendance(self, attendance_date=None):
        """Danh sách điểm danh kèm tên và ảnh sinh viên, mới nhất trước"""
        query = '''
            SELECT a.*, s.name AS student_name, s.photo_url AS student_photo_url
            FROM attendance a
            LEFT JOIN students s ON a.student_id = s.id
        '''
        params = ()
        if attendance_date:
            query += ' WHERE a.date = ?'
            params = (str(attendance_date),)
        query += ' ORDER BY a.created_at DESC, a.rowid DESC'

        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return [dict(r) for r in cursor.fetchall()]
        except sqlite3.Error as exc:
            database_logger.log_error('list_attendance', exc)
            raise StoreError("Failed to fetch attendance records",
                             description="Failed to fetch attendance records") from exc

    def get_attendance_by_date_range(self, start_date, end_date):
        """Lấy điểm danh theo khoảng thời gian"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute('''
                    SELECT a.date, a.time, a.status, s.name AS student_name
                    FROM attendance a
                    LEFT JOIN students s ON a.student_id = s.id
                    WHERE a.date BETWEEN ? AND ?
                    ORDER BY a.date DESC, a.time ASC, a.rowid ASC
                ''', (str(start_date), str(end_date)))
                return [dict(r) for r in cursor.fetchall()]
        except sqlite3.Error as exc:
            database_logger.log_error('get_attendance_by_date_range', exc)
            raise StoreError("Failed to export attendance report",
                             description="Failed to export attendance report") from exc

    def export_attendance(self, start_date, end_date):
        return format_attendance_csv(self.get_attendance_by_date_range(start_date, end_date))

    def get_attendance_stats(self, attendance_date=None):
        """Thống kê điểm danh trong ngày"""
        if attendance_date is None:
            attendance_date = date.today()
        attendance_date = str(attendance_date)

        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute('SELECT COUNT(*) FROM students')
                total_students = cursor.fetchone()[0]

                cursor.execute('''
                    SELECT status, COUNT(*) AS count FROM attendance
                    WHERE date = ?
                    GROUP BY status
                ''', (attendance_date,))
                counts = {row['status']: row['count'] for row in cursor.fetchall()}
        except sqlite3.Error as exc:
            database_logger.log_error('get_attendance_stats', exc)
            raise StoreError("Failed to fetch statistics") from exc

        present = counts.get('present', 0)
        absent = counts.get('absent', 0)
        late = counts.get('late', 0)
        return {
            'total_students': total_students,
            'present_today': present,
            'absent_today': absent,
            'late_today': late,
            'attendance_rate': compute_attendance_rate(total_students, present, late),
            'date': attendance_date,
        }
