"""
API routes for students
Các API endpoint cho đăng ký và tra cứu sinh viên
"""
from flask import Blueprint, jsonify, request, current_app

from app import globals as app_globals
from core.recognition.errors import InvalidInputError, StoreError
from app.utils import (
    get_request_data,
    parse_feature_vector,
    serialize_student_record,
    read_photo_upload,
    save_student_photo,
    safe_delete_file
)

student_api_bp = Blueprint('student_api', __name__, url_prefix='/api/students')


def _read_photo(data):
    return read_photo_upload(
        file_storage=request.files.get('photo'),
        base64_payload=data.get('photo_data'),
    )


@student_api_bp.route('', methods=['GET'])
def get_students():
    """Lấy danh sách sinh viên (theo tên)."""
    students = app_globals.database.list_students()
    include_encoding = request.args.get('include_encoding', '').lower() in ('1', 'true', 'yes')
    return jsonify({
        'success': True,
        'data': [serialize_student_record(s, include_encoding) for s in students],
    })


@student_api_bp.route('', methods=['POST'])
def create_student():
    """Đăng ký sinh viên mới (ảnh tùy chọn)."""
    data = get_request_data()
    name = (data.get('name') or '').strip()
    if not name:
        raise InvalidInputError("Student name is required", description="Please enter student name")

    face_encoding = parse_feature_vector(data.get('face_encoding'))
    photo_bytes, extension = _read_photo(data)

    photo_path = photo_url = None
    if photo_bytes:
        photo_path, photo_url = save_student_photo(photo_bytes, extension)

    try:
        student = app_globals.face_recognition_manager.enroll_student(
            name,
            photo_bytes=photo_bytes,
            photo_url=photo_url,
            face_encoding=face_encoding,
        )
    except StoreError:
        safe_delete_file(photo_path)
        raise

    current_app.logger.info(f"Registered student {student['name']} ({student['id']})")
    return jsonify({
        'success': True,
        'message': 'Student added successfully',
        'student': serialize_student_record(student),
    }), 201


@student_api_bp.route('/<student_id>', methods=['GET'])
def get_student(student_id):
    student = app_globals.database.get_student(student_id)
    if not student:
        return jsonify({'success': False, 'message': 'Student not found'}), 404
    return jsonify({'success': True, 'student': serialize_student_record(student)})


@student_api_bp.route('/<student_id>', methods=['PUT'])
def reregister_student(student_id):
    """Đăng ký lại: cập nhật tên, ảnh hoặc vector đặc trưng."""
    if not app_globals.database.get_student(student_id):
        return jsonify({'success': False, 'message': 'Student not found'}), 404

    data = get_request_data()
    name = data.get('name')
    face_encoding = parse_feature_vector(data.get('face_encoding'))
    photo_bytes, extension = _read_photo(data)

    photo_path = photo_url = None
    if photo_bytes:
        photo_path, photo_url = save_student_photo(photo_bytes, extension)

    try:
        student = app_globals.face_recognition_manager.reenroll_student(
            student_id,
            name=name,
            photo_bytes=photo_bytes,
            photo_url=photo_url,
            face_encoding=face_encoding,
        )
    except StoreError:
        safe_delete_file(photo_path)
        raise

    return jsonify({
        'success': True,
        'message': 'Student updated successfully',
        'student': serialize_student_record(student),
    })
