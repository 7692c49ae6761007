"""
Main routes
Trang gốc và phục vụ ảnh sinh viên
"""
from flask import Blueprint, jsonify, send_from_directory, abort

from app.utils.file_utils import photo_directory

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    return jsonify({
        'name': 'Attendance Tracker',
        'endpoints': [
            '/api/students',
            '/api/attendance',
            '/api/attendance/mark',
            '/api/statistics',
            '/api/reports/export',
            '/api/recognition/start',
            '/api/recognition/recognize',
            '/api/recognition/cancel',
            '/api/recognition/status',
            '/api/system/health',
        ],
    })


@main_bp.route('/photos/<path:filename>')
def student_photo(filename):
    """Ảnh sinh viên đã lưu."""
    folder = photo_directory()
    if not (folder / filename).is_file():
        abort(404)
    return send_from_directory(folder, filename)
