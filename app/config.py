"""
Configuration constants và settings
"""
import os

# Flask
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB

# Storage
DATABASE_PATH = os.getenv('DATABASE_PATH', 'attendance_tracker.db')
UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', 'uploads')
PHOTO_SUBDIR = 'student-photos'
LOG_DIR = os.getenv('LOG_DIR', 'logs')
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

# Upload configuration
ALLOWED_EXTENSIONS = {'jpg', 'jpeg', 'png', 'webp'}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

# Camera configuration
CAMERA_INDEX = int(os.getenv('CAMERA_INDEX', '0'))
CAMERA_WIDTH = int(os.getenv('CAMERA_WIDTH', '640'))
CAMERA_HEIGHT = int(os.getenv('CAMERA_HEIGHT', '480'))
CAMERA_WARMUP_FRAMES = int(os.getenv('CAMERA_WARMUP_FRAMES', '3'))
CAMERA_BUFFER_SIZE = int(os.getenv('CAMERA_BUFFER_SIZE', '2'))

# Detection / matching
DETECTOR_MODEL = os.getenv('DETECTOR_MODEL', 'yolov8n.pt')
DETECTION_LABEL = os.getenv('DETECTION_LABEL', 'person')
DETECTION_SCORE_THRESHOLD = float(os.getenv('DETECTION_SCORE_THRESHOLD', '0.5'))
FEATURE_LENGTH = int(os.getenv('FEATURE_LENGTH', '128'))
FACE_MATCH_THRESHOLD = float(os.getenv('FACE_MATCH_THRESHOLD', '0.8'))
MATCH_POLICY = os.getenv('MATCH_POLICY', 'first').strip().lower()


def as_dict():
    """Các giá trị cấu hình để nạp vào app.config"""
    return {
        'SECRET_KEY': SECRET_KEY,
        'MAX_CONTENT_LENGTH': MAX_CONTENT_LENGTH,
        'DATABASE_PATH': DATABASE_PATH,
        'UPLOAD_FOLDER': UPLOAD_FOLDER,
        'PHOTO_SUBDIR': PHOTO_SUBDIR,
        'LOG_DIR': LOG_DIR,
        'LOG_LEVEL': LOG_LEVEL,
        'ALLOWED_EXTENSIONS': set(ALLOWED_EXTENSIONS),
        'MAX_FILE_SIZE': MAX_FILE_SIZE,
        'CAMERA_INDEX': CAMERA_INDEX,
        'CAMERA_WIDTH': CAMERA_WIDTH,
        'CAMERA_HEIGHT': CAMERA_HEIGHT,
        'CAMERA_WARMUP_FRAMES': CAMERA_WARMUP_FRAMES,
        'CAMERA_BUFFER_SIZE': CAMERA_BUFFER_SIZE,
        'DETECTOR_MODEL': DETECTOR_MODEL,
        'DETECTION_LABEL': DETECTION_LABEL,
        'DETECTION_SCORE_THRESHOLD': DETECTION_SCORE_THRESHOLD,
        'FEATURE_LENGTH': FEATURE_LENGTH,
        'FACE_MATCH_THRESHOLD': FACE_MATCH_THRESHOLD,
        'MATCH_POLICY': MATCH_POLICY,
    }
