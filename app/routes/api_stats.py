"""
API routes for statistics
Các API endpoint cho thống kê
"""
from flask import Blueprint, jsonify, request

from app import globals as app_globals

stats_api_bp = Blueprint('stats_api', __name__, url_prefix='/api')


@stats_api_bp.route('/statistics')
def api_statistics():
    """API thống kê hôm nay (hoặc ngày được chọn)"""
    stats = app_globals.attendance_tracker.get_attendance_stats(request.args.get('date'))
    return jsonify({'success': True, **stats})
