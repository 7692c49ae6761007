"""
Global state module
Service instances shared by the blueprints; populated by create_app()
"""

database = None
camera_service = None
attendance_tracker = None
face_recognition_manager = None
