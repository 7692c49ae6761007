"""
API routes for camera-based recognition
Bật camera, nhận diện một khung hình, hủy phiên
"""
from flask import Blueprint, jsonify, request

from app import globals as app_globals
from app.utils import get_request_data, serialize_match
from core.vision.pipeline import decode_base64_image

camera_api_bp = Blueprint('camera_api', __name__, url_prefix='/api/recognition')


def _uploaded_frame():
    """Khung hình do trình duyệt gửi lên (file hoặc base64), nếu có."""
    image_file = request.files.get('image')
    if image_file is not None and image_file.filename:
        return image_file.read()
    payload = get_request_data().get('image_data')
    if payload:
        return decode_base64_image(payload)
    return None


@camera_api_bp.route('/start', methods=['POST'])
def api_start_recognition():
    """Bật camera (giải phóng luồng cũ nếu đang mở)."""
    status = app_globals.camera_service.start()
    return jsonify({'success': True, 'status': status})


@camera_api_bp.route('/recognize', methods=['POST'])
def api_recognize():
    """Nhận diện trên khung hình gửi lên, hoặc khung hình hiện tại của camera."""
    frame_bytes = _uploaded_frame()
    if frame_bytes is not None:
        match = app_globals.face_recognition_manager.recognize_image(frame_bytes)
        status = None
    else:
        match = app_globals.camera_service.recognize()
        status = app_globals.camera_service.get_status()

    payload = serialize_match(match)
    return jsonify({
        'success': True,
        'message': f"Welcome, {payload['student']['name']}!",
        'notification': {
            'title': 'Student Recognized',
            'description': f"Welcome, {payload['student']['name']}!",
        },
        'status': status,
        **payload,
    })


@camera_api_bp.route('/cancel', methods=['POST'])
def api_cancel_recognition():
    status = app_globals.camera_service.cancel()
    return jsonify({'success': True, 'status': status})


@camera_api_bp.route('/status', methods=['GET'])
def api_recognition_status():
    return jsonify({
        'success': True,
        'status': app_globals.camera_service.get_status(),
        'recognition': app_globals.face_recognition_manager.get_stats(),
    })
