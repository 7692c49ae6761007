"""
API routes for attendance
Các API endpoint cho điểm danh
"""
from flask import Blueprint, jsonify, request

from app import globals as app_globals
from app.utils import get_request_data, serialize_attendance_record

attendance_api_bp = Blueprint('attendance_api', __name__, url_prefix='/api/attendance')


@attendance_api_bp.route('/mark', methods=['POST'])
def api_mark_attendance():
    """Điểm danh thủ công hoặc sau khi nhận diện (present / late / absent)."""
    data = get_request_data()
    status = data.get('status') or 'present'
    record = app_globals.attendance_tracker.mark_attendance(
        data.get('student_id'),
        status,
        attendance_date=data.get('date'),
    )
    return jsonify({
        'success': True,
        'message': f"Attendance marked as {record['status']}",
        'record': record,
        'stats': app_globals.attendance_tracker.get_attendance_stats(),
    })


@attendance_api_bp.route('', methods=['GET'])
def api_list_attendance():
    """Danh sách điểm danh, lọc theo ngày nếu có."""
    rows = app_globals.attendance_tracker.list_attendance(request.args.get('date'))
    return jsonify({
        'success': True,
        'data': [serialize_attendance_record(r) for r in rows],
    })
