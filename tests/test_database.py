from datetime import date, datetime

import pytest

from core.recognition.errors import StoreError
from database import compute_attendance_rate, format_attendance_csv


def test_csv_format_matches_report_layout():
    records = [
        {'date': '2024-01-01', 'time': '09:00', 'student_name': 'Alice', 'status': 'present'},
        {'date': '2024-01-01', 'time': '09:05', 'student_name': 'Bob', 'status': 'late'},
    ]
    assert format_attendance_csv(records) == (
        "Date,Time,Student,Status\n"
        "2024-01-01,09:00,Alice,present\n"
        "2024-01-01,09:05,Bob,late"
    )


def test_csv_header_only_and_unknown_student():
    assert format_attendance_csv([]) == "Date,Time,Student,Status"
    row = {'date': '2024-01-02', 'time': '08:00', 'student_name': None, 'status': 'absent'}
    assert format_attendance_csv([row]).splitlines()[1] == "2024-01-02,08:00,Unknown,absent"


@pytest.mark.parametrize('total, present, late, expected', [
    (10, 6, 1, 70),
    (0, 0, 0, 0),
    (3, 1, 0, 33),
    (8, 1, 0, 13),
    (3, 2, 0, 67),
])
def test_attendance_rate(total, present, late, expected):
    assert compute_attendance_rate(total, present, late) == expected


def test_students_listed_by_name(db):
    db.create_student('Charlie')
    db.create_student('alice', face_encoding=[1, 2, 3])
    db.create_student('Bob')

    names = [s['name'] for s in db.list_students()]
    assert names == sorted(names)
    assert db.count_students() == 3

    alice = next(s for s in db.list_students() if s['name'] == 'alice')
    assert alice['face_encoding'] == [1, 2, 3]


def test_create_student_requires_name(db):
    with pytest.raises(StoreError) as excinfo:
        db.create_student('   ')
    assert excinfo.value.description == 'Please enter student name'


def test_update_student(db):
    student = db.create_student('Alice')
    updated = db.update_student(student['id'], face_encoding=[9, 9], photo_url='/photos/1.png')
    assert updated['face_encoding'] == [9, 9]
    assert updated['photo_url'] == '/photos/1.png'
    assert updated['name'] == 'Alice'

    with pytest.raises(StoreError):
        db.update_student('missing', name='Nobody')


def test_mark_attendance_upserts_one_record_per_day(db):
    student = db.create_student('Alice')
    day = date(2024, 3, 4)

    db.mark_attendance(student['id'], 'present', day, at=datetime(2024, 3, 4, 8, 0, 0))
    record = db.mark_attendance(student['id'], 'late', day, at=datetime(2024, 3, 4, 9, 15, 0))

    rows = db.list_attendance(day)
    assert len(rows) == 1
    assert rows[0]['status'] == 'late'
    assert rows[0]['time'] == '09:15:00'
    assert rows[0]['student_name'] == 'Alice'
    assert record['status'] == 'late'


def test_mark_attendance_rejects_unknown_student_and_status(db):
    student = db.create_student('Alice')
    with pytest.raises(StoreError):
        db.mark_attendance('missing', 'present')
    with pytest.raises(StoreError):
        db.mark_attendance(student['id'], 'excused')


def test_stats_for_day(db):
    day = date(2024, 5, 6)
    students = [db.create_student(f'Student {i}') for i in range(10)]
    statuses = ['present'] * 6 + ['late'] + ['absent'] * 3
    for student, status in zip(students, statuses):
        db.mark_attendance(student['id'], status, day)

    stats = db.get_attendance_stats(day)
    assert stats == {
        'total_students': 10,
        'present_today': 6,
        'absent_today': 3,
        'late_today': 1,
        'attendance_rate': 70,
        'date': '2024-05-06',
    }
    assert db.get_attendance_stats(date(2024, 5, 7))['attendance_rate'] == 0


def test_export_range_ordering(db):
    alice = db.create_student('Alice')
    bob = db.create_student('Bob')
    db.mark_attendance(bob['id'], 'late', date(2024, 1, 1), at=datetime(2024, 1, 1, 9, 5))
    db.mark_attendance(alice['id'], 'present', date(2024, 1, 1), at=datetime(2024, 1, 1, 9, 0))
    db.mark_attendance(alice['id'], 'absent', date(2024, 1, 2), at=datetime(2024, 1, 2, 10, 0))
    db.mark_attendance(alice['id'], 'present', date(2024, 1, 5), at=datetime(2024, 1, 5, 8, 0))

    assert db.export_attendance('2024-01-01', '2024-01-02') == (
        "Date,Time,Student,Status\n"
        "2024-01-02,10:00:00,Alice,absent\n"
        "2024-01-01,09:00:00,Alice,present\n"
        "2024-01-01,09:05:00,Bob,late"
    )
