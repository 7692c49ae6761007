"""
Data utilities
Helper functions cho data transformation và validation
"""
import json

from flask import request

from core.recognition.errors import InvalidInputError


def get_request_data():
    """Lấy request data từ JSON hoặc form."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def parse_feature_vector(value):
    """
    Phân tích vector đặc trưng từ list hoặc chuỗi JSON.
    Returns: list[int] hoặc None nếu không có.
    """
    if value is None or value == '':
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as exc:
            raise InvalidInputError("face_encoding is not valid JSON",
                             description="Invalid face encoding") from exc
    if not isinstance(value, (list, tuple)):
        raise InvalidInputError("face_encoding must be a list", description="Invalid face encoding")
    try:
        return [int(v) for v in value]
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("face_encoding must contain numbers",
                         description="Invalid face encoding") from exc


def serialize_student_record(student, include_encoding=False):
    """Chuyển đổi bản ghi sinh viên thành dict trả về client."""
    if not student:
        return None
    data = dict(student)
    encoding = data.pop('face_encoding', None)
    data['has_face_encoding'] = bool(encoding)
    if include_encoding:
        data['face_encoding'] = encoding
    return data


def serialize_attendance_record(row):
    """Bản ghi điểm danh kèm thông tin sinh viên lồng bên trong."""
    data = dict(row)
    name = data.pop('student_name', None)
    photo_url = data.pop('student_photo_url', None)
    data['student'] = {
        'id': data.get('student_id'),
        'name': name or 'Unknown',
        'photo_url': photo_url,
    }
    return data


def serialize_match(match):
    return {
        'student': serialize_student_record(match.student),
        'similarity': round(match.similarity, 4),
    }
