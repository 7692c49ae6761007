"""
Utils package
"""
from .file_utils import (
    safe_delete_file,
    read_photo_upload,
    save_student_photo,
    validate_image_bytes
)
from .data_utils import (
    get_request_data,
    parse_feature_vector,
    serialize_student_record,
    serialize_attendance_record,
    serialize_match
)

__all__ = [
    'safe_delete_file',
    'read_photo_upload',
    'save_student_photo',
    'validate_image_bytes',
    'get_request_data',
    'parse_feature_vector',
    'serialize_student_record',
    'serialize_attendance_record',
    'serialize_match'
]
