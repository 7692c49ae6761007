"""
API routes for system status
Các API cho trạng thái hệ thống
"""
from flask import Blueprint, jsonify, current_app

from app import globals as app_globals

system_api_bp = Blueprint('system_api', __name__, url_prefix='/api/system')


@system_api_bp.route('/health')
def api_system_health():
    """API trạng thái hệ thống"""
    return jsonify({
        'success': True,
        'students': app_globals.database.count_students(),
        'camera': app_globals.camera_service.get_status(),
        'recognition': app_globals.face_recognition_manager.get_stats(),
        'feature_length': current_app.config['FEATURE_LENGTH'],
    })
