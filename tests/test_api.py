import base64
import io
from datetime import date

from app import globals as app_globals
from core.recognition.errors import DetectorInitError
from core.recognition.types import Detection, DetectionBox

from conftest import png_bytes, rgba_vector, solid_frame

COLOR = (30, 20, 10)


def _enroll(client, name, **extra):
    response = client.post('/api/students', json={'name': name, **extra})
    assert response.status_code == 201
    return response.get_json()['student']


def test_index_lists_endpoints(client):
    response = client.get('/')
    assert response.status_code == 200
    assert '/api/students' in response.get_json()['endpoints']


def test_create_and_list_students(client):
    _enroll(client, 'Zoe')
    created = _enroll(client, 'Anna', face_encoding=rgba_vector(COLOR))

    assert created['has_face_encoding'] is True
    assert 'face_encoding' not in created

    data = client.get('/api/students').get_json()['data']
    assert [s['name'] for s in data] == ['Anna', 'Zoe']

    fetched = client.get(f"/api/students/{created['id']}").get_json()['student']
    assert fetched['name'] == 'Anna'


def test_create_student_without_name_returns_notification(client):
    response = client.post('/api/students', json={'name': '  '})
    body = response.get_json()

    assert response.status_code == 400
    assert body['success'] is False
    assert body['error'] == 'InvalidInputError'
    assert body['notification'] == {
        'title': 'Error',
        'description': 'Please enter student name',
        'variant': 'destructive',
    }


def test_create_student_with_photo_stores_vector_and_serves_photo(client):
    photo = png_bytes(solid_frame(COLOR))
    response = client.post(
        '/api/students',
        data={'name': 'Minh', 'photo': (io.BytesIO(photo), 'minh.png')},
        content_type='multipart/form-data',
    )
    assert response.status_code == 201
    student = response.get_json()['student']
    assert student['has_face_encoding'] is True
    assert student['photo_url'].startswith('/photos/')

    stored = app_globals.database.get_student(student['id'])
    assert stored['face_encoding'] == rgba_vector(COLOR)

    served = client.get(student['photo_url'])
    assert served.status_code == 200
    assert served.data == photo


def test_unknown_student_is_404(client):
    assert client.get('/api/students/nope').status_code == 404
    assert client.get('/photos/nope.png').status_code == 404


def test_reregister_student(client):
    student = _enroll(client, 'Lan')
    response = client.put(f"/api/students/{student['id']}", json={'face_encoding': [1, 2, 3]})
    assert response.status_code == 200
    assert response.get_json()['student']['has_face_encoding'] is True


def test_mark_attendance_and_statistics(client):
    student = _enroll(client, 'Anna')
    other = _enroll(client, 'Binh')

    response = client.post('/api/attendance/mark', json={'student_id': student['id']})
    assert response.status_code == 200
    assert response.get_json()['record']['status'] == 'present'

    client.post('/api/attendance/mark', json={'student_id': other['id'], 'status': 'late'})

    stats = client.get('/api/statistics').get_json()
    assert stats['success'] is True
    assert stats['total_students'] == 2
    assert stats['present_today'] == 1
    assert stats['late_today'] == 1
    assert stats['attendance_rate'] == 100

    rows = client.get(f"/api/attendance?date={date.today().isoformat()}").get_json()['data']
    assert {r['student']['name'] for r in rows} == {'Anna', 'Binh'}


def test_mark_attendance_rejects_bad_status(client):
    student = _enroll(client, 'Anna')
    response = client.post('/api/attendance/mark', json={'student_id': student['id'], 'status': 'gone'})
    assert response.status_code == 400
    assert response.get_json()['success'] is False


def test_mark_attendance_non_string_status_is_rejected(client):
    student = _enroll(client, 'Anna')
    response = client.post('/api/attendance/mark', json={'student_id': student['id'], 'status': 5})
    body = response.get_json()
    assert response.status_code == 400
    assert body['error'] == 'InvalidInputError'


def test_mark_attendance_normalises_status_case(client):
    student = _enroll(client, 'Anna')
    response = client.post('/api/attendance/mark', json={'student_id': student['id'], 'status': ' LATE '})
    assert response.status_code == 200
    assert response.get_json()['record']['status'] == 'late'


def test_mark_attendance_bad_date_is_rejected(client):
    student = _enroll(client, 'Anna')
    response = client.post('/api/attendance/mark', json={'student_id': student['id'], 'date': '01/02/2024'})
    assert response.status_code == 400


def test_unsupported_photo_type_is_rejected(client):
    response = client.post(
        '/api/students',
        data={'name': 'Minh', 'photo': (io.BytesIO(b'GIF89a'), 'minh.gif')},
        content_type='multipart/form-data',
    )
    assert response.status_code == 400
    assert app_globals.database.count_students() == 0


def test_export_returns_csv_attachment(client):
    student = _enroll(client, 'Anna')
    client.post('/api/attendance/mark', json={
        'student_id': student['id'], 'status': 'present', 'date': '2024-01-01',
    })

    response = client.get('/api/reports/export?start_date=2024-01-01&end_date=2024-01-31')
    assert response.status_code == 200
    assert response.mimetype == 'text/csv'
    assert response.headers['Content-Disposition'] == (
        'attachment; filename=attendance_2024-01-01_to_2024-01-31.csv'
    )
    lines = response.get_data(as_text=True).split('\n')
    assert lines[0] == 'Date,Time,Student,Status'
    assert lines[1].startswith('2024-01-01,')
    assert lines[1].endswith(',Anna,present')


def test_export_rejects_inverted_range(client):
    response = client.get('/api/reports/export?start_date=2024-02-01&end_date=2024-01-01')
    assert response.status_code == 400
    assert response.get_json()['notification']['variant'] == 'destructive'


def test_recognize_uploaded_frame(client):
    _enroll(client, 'Anna', face_encoding=rgba_vector(COLOR))
    frame = png_bytes(solid_frame(COLOR))

    response = client.post(
        '/api/recognition/recognize',
        data={'image': (io.BytesIO(frame), 'frame.png')},
        content_type='multipart/form-data',
    )
    body = response.get_json()
    assert response.status_code == 200
    assert body['student']['name'] == 'Anna'
    assert body['message'] == 'Welcome, Anna!'


def test_recognize_base64_frame_miss(client):
    _enroll(client, 'Anna', face_encoding=[255, 0, 0, 0] * 32)
    payload = 'data:image/png;base64,' + base64.b64encode(png_bytes(solid_frame((0, 0, 0)))).decode()

    response = client.post('/api/recognition/recognize', json={'image_data': payload})
    body = response.get_json()
    assert response.status_code == 404
    assert body['notification']['title'] == 'Student Not Recognized'
    assert body['notification']['description'] == 'Face not found in database'


def test_camera_session_flow(client, fake_capture):
    _enroll(client, 'Anna', face_encoding=rgba_vector(COLOR))

    started = client.post('/api/recognition/start').get_json()
    assert started['status']['state'] == 'capturing'
    assert started['status']['capture_active'] is True

    body = client.post('/api/recognition/recognize').get_json()
    assert body['student']['name'] == 'Anna'
    assert body['status']['state'] == 'resolved'
    assert body['status']['capture_active'] is False
    assert fake_capture.released == 1


def test_recognize_without_start_is_conflict(client):
    response = client.post('/api/recognition/recognize')
    assert response.status_code == 409


def test_no_face_keeps_camera_running(client, fake_detector, fake_capture):
    fake_detector.detections = [Detection('dog', 0.9, DetectionBox(0, 0, 10, 10))]
    client.post('/api/recognition/start')

    response = client.post('/api/recognition/recognize')
    assert response.status_code == 400
    assert response.get_json()['notification']['title'] == 'No Face Detected'

    status = client.get('/api/recognition/status').get_json()['status']
    assert status['state'] == 'unresolved'
    assert status['capture_active'] is True

    cancelled = client.post('/api/recognition/cancel').get_json()['status']
    assert cancelled['state'] == 'idle'
    assert fake_capture.released == 1


def test_detector_failure_is_service_unavailable(client, fake_detector):
    fake_detector.error = DetectorInitError('no weights')
    client.post('/api/recognition/start')

    response = client.post('/api/recognition/recognize')
    assert response.status_code == 503
    status = client.get('/api/recognition/status').get_json()['status']
    assert status['capture_active'] is False


def test_system_health(client):
    _enroll(client, 'Anna')
    body = client.get('/api/system/health').get_json()
    assert body['students'] == 1
    assert body['feature_length'] == 128
    assert body['camera']['state'] == 'idle'
