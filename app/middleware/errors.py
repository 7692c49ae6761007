"""
Error handling middleware
Chuyển mọi lỗi nghiệp vụ thành một thông báo JSON duy nhất cho người dùng
"""
from flask import jsonify, request, current_app
from werkzeug.exceptions import HTTPException

from core.recognition.errors import AttendanceError
from logging_config import api_logger, log_request_info


def notification_response(title, description, status_code, **extra):
    payload = {
        'success': False,
        'notification': {
            'title': title,
            'description': description,
            'variant': 'destructive',
        },
    }
    payload.update(extra)
    return jsonify(payload), status_code


def register_error_handlers(app):
    """Đăng ký error handlers và request logging."""

    @app.before_request
    def _log_request():
        if request.path.startswith('/api/'):
            log_request_info(request)

    @app.errorhandler(AttendanceError)
    def _handle_attendance_error(error):
        level = current_app.logger.warning if error.recoverable else current_app.logger.error
        level("[%s] %s: %s", request.endpoint, type(error).__name__, error)
        api_logger.log_error(request.endpoint, str(error), error.status_code)
        return notification_response(
            error.title,
            error.description,
            error.status_code,
            error=type(error).__name__,
        )

    @app.errorhandler(HTTPException)
    def _handle_http_error(error):
        if not request.path.startswith('/api/'):
            return error
        return notification_response('Error', error.description, error.code)

    @app.errorhandler(Exception)
    def _handle_unexpected(error):
        current_app.logger.error(f"Unhandled error on {request.endpoint}: {error}", exc_info=True)
        api_logger.log_error(request.endpoint, str(error))
        return notification_response('Error', 'Unexpected server error', 500)
