"""
API routes for reports
Các API endpoint cho báo cáo
"""
from flask import Blueprint, Response, request, current_app

from app import globals as app_globals

reports_api_bp = Blueprint('reports_api', __name__, url_prefix='/api/reports')


@reports_api_bp.route('/export', methods=['GET'])
def api_export_attendance():
    """Xuất CSV điểm danh trong khoảng ngày."""
    filename, csv_text = app_globals.attendance_tracker.export_attendance(
        request.args.get('start_date'),
        request.args.get('end_date'),
    )
    current_app.logger.info("Attendance report exported: %s", filename)
    return Response(
        csv_text,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )
