import json
from datetime import datetime, time
from pathlib import Path

import pytest

from qr_attendance.data import AttendanceStore, Database, RosterStore
from qr_attendance.models import AttendanceStatus, Student
from qr_attendance.services import AttendanceService, DuplicateAttendanceError, StudentNotFoundError

ROSTER = [
    Student("student-001", "Alice Johnson", "CS001", "alice@university.edu", "Computer Science"),
    Student("student-002", "Bob Smith", "CS002", "bob@university.edu", "Computer Science"),
    Student("student-003", "Carol Davis", "CS003", "carol@university.edu", "Computer Science"),
]


def _build_service(tmp_path: Path) -> tuple[AttendanceService, Database]:
    database = Database(tmp_path / "attendance.db")
    database.initialize()
    roster_store = RosterStore(database)
    roster_store.save(ROSTER)
    service = AttendanceService(roster_store, AttendanceStore(database))
    return service, database


def _payload(student: Student) -> str:
    return json.dumps(student.identity_fields())


def test_record_scan_prevents_duplicates(tmp_path):
    service, database = _build_service(tmp_path)

    first = service.record_scan(_payload(ROSTER[0]), now=datetime(2024, 3, 4, 9, 5))
    assert first.status is AttendanceStatus.PRESENT
    assert first.date == "2024-03-04"

    with database.connect() as connection:
        row = connection.execute(
            "SELECT student_id, student_name, roll_number, date, status FROM attendance_records WHERE id = ?",
            (first.id,),
        ).fetchone()

    assert row["student_id"] == "student-001"
    assert row["student_name"] == "Alice Johnson"
    assert row["roll_number"] == "CS001"
    assert row["date"] == "2024-03-04"
    assert row["status"] == "present"

    with pytest.raises(DuplicateAttendanceError) as excinfo:
        service.record_scan(_payload(ROSTER[0]), now=datetime(2024, 3, 4, 11, 0))

    assert excinfo.value.existing == first
    assert excinfo.value.student.id == "student-001"
    assert len(service.all_records()) == 1


def test_record_scan_by_roll_number_and_next_day(tmp_path):
    service, _ = _build_service(tmp_path)

    service.record_scan("CS002", now=datetime(2024, 3, 4, 9, 0))
    second_day = service.record_scan("CS002", now=datetime(2024, 3, 5, 9, 40))

    assert second_day.status is AttendanceStatus.LATE
    assert [record.date for record in service.all_records()] == ["2024-03-04", "2024-03-05"]


def test_duplicate_of_late_record_reports_existing_status(tmp_path):
    service, _ = _build_service(tmp_path)
    late = service.record_scan("CS002", now=datetime(2024, 3, 4, 9, 30))

    with pytest.raises(DuplicateAttendanceError) as excinfo:
        service.record_scan(_payload(ROSTER[1]), now=datetime(2024, 3, 4, 9, 45))

    assert str(excinfo.value) == "Bob Smith attendance already recorded today."
    assert "present" not in str(excinfo.value)
    assert excinfo.value.existing.status is AttendanceStatus.LATE
    assert excinfo.value.existing == late


def test_unknown_payload_raises_and_writes_nothing(tmp_path):
    service, _ = _build_service(tmp_path)

    with pytest.raises(StudentNotFoundError) as excinfo:
        service.record_scan("not-a-student", now=datetime(2024, 3, 4, 9, 0))

    assert excinfo.value.payload == "not-a-student"
    assert service.all_records() == []


def test_configure_changes_late_threshold(tmp_path):
    service, _ = _build_service(tmp_path)
    service.configure(class_start=time(10, 0), grace_minutes=0)

    on_time = service.record_scan("student-001", now=datetime(2024, 3, 4, 10, 0))
    late = service.record_scan("student-002", now=datetime(2024, 3, 4, 10, 0, 30))

    assert on_time.status is AttendanceStatus.PRESENT
    assert late.status is AttendanceStatus.LATE


def test_stats_breakdown_and_recent(tmp_path):
    service, _ = _build_service(tmp_path)
    now = datetime(2024, 3, 4, 9, 30)

    service.record_scan("student-001", now=datetime(2024, 3, 4, 8, 55))
    service.record_scan("student-002", now=now)

    stats = service.stats(now=now)
    assert stats.total_students == 3
    assert stats.present_today == 2
    assert stats.absent_today == 1
    assert stats.late_today == 1
    assert stats.attendance_rate == pytest.approx(66.666, rel=1e-3)

    breakdown = service.daily_breakdown(now=now, days=2)
    assert [(tally.present, tally.late, tally.absent) for tally in breakdown] == [(0, 0, 3), (1, 1, 1)]

    recent = service.recent_attendance(limit=1)
    assert [record.student_id for record in recent] == ["student-002"]
