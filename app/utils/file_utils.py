"""
File utilities
Xử lý file upload, validation và storage cho ảnh sinh viên
"""
import io
import os
import time
from pathlib import Path

from flask import current_app as app
from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

from core.recognition.errors import InvalidInputError, StoreError
from core.vision.pipeline import decode_base64_image


def safe_delete_file(path):
    """Cố gắng xóa một file mà không báo lỗi nếu thất bại."""
    if not path:
        return
    try:
        os.remove(path)
    except OSError:
        app.logger.debug("Could not remove file %s", path)


def photo_directory():
    folder = Path(app.config['UPLOAD_FOLDER']) / app.config['PHOTO_SUBDIR']
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def validate_image_bytes(data):
    """
    Xác thực dữ liệu ảnh.
    Returns: (success: bool, error_message: str)
    """
    if not data:
        return False, "Empty image"
    if len(data) > app.config['MAX_FILE_SIZE']:
        return False, f"File too large (max {app.config['MAX_FILE_SIZE']} bytes)"
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        return False, f"Invalid image: {exc}"
    return True, ""


def _extension_for(filename):
    _, ext = os.path.splitext(filename or '')
    return (ext or '').lower().lstrip('.')


def read_photo_upload(file_storage=None, base64_payload=None):
    """
    Đọc ảnh từ file upload hoặc base64 (webcam).
    Returns: (bytes, extension) hoặc (None, None) nếu không có ảnh.
    """
    if file_storage is not None and file_storage.filename:
        ext = _extension_for(file_storage.filename)
        if ext not in app.config['ALLOWED_EXTENSIONS']:
            allowed = ', '.join(sorted(app.config['ALLOWED_EXTENSIONS']))
            raise InvalidInputError(f"Unsupported file type .{ext}",
                             description=f"Invalid file type. Allowed: {allowed}")
        data = file_storage.read()
    elif base64_payload:
        data = decode_base64_image(base64_payload)
        ext = 'jpg'
    else:
        return None, None

    ok, error_msg = validate_image_bytes(data)
    if not ok:
        raise InvalidInputError(error_msg, description=f"Invalid photo: {error_msg}")
    return data, ext


def save_student_photo(data, extension):
    """Lưu ảnh sinh viên; trả về (đường dẫn file, URL công khai)."""
    filename = secure_filename(f"{int(time.time() * 1000)}.{extension}")
    file_path = photo_directory() / filename
    try:
        with open(file_path, 'wb') as fp:
            fp.write(data)
    except OSError as exc:
        raise StoreError(f"Could not store photo: {exc}", description="Failed to upload photo") from exc
    app.logger.info("Saved student photo %s", file_path)
    return str(file_path), f"/photos/{filename}"
