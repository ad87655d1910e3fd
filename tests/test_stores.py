from datetime import datetime
from pathlib import Path

from qr_attendance.data import AttendanceStore, Database, RosterStore
from qr_attendance.data.sample_data import SAMPLE_STUDENTS, seed_sample_data
from qr_attendance.models import AttendanceRecord, AttendanceStatus, Student


def _database(tmp_path: Path) -> Database:
    database = Database(tmp_path / "attendance.db")
    database.initialize()
    return database


def _record(identifier: str, student_id: str, status: AttendanceStatus) -> AttendanceRecord:
    return AttendanceRecord(
        id=identifier,
        student_id=student_id,
        student_name="Name",
        roll_number="R1",
        timestamp="2024-03-04T09:00:00.000Z",
        date="2024-03-04",
        status=status,
    )


def test_roster_round_trip_keeps_order(tmp_path):
    store = RosterStore(_database(tmp_path))
    students = [
        Student("student-b", "Bob Smith", "CS002", "bob@university.edu", "Computer Science"),
        Student("student-a", "Alice Johnson", "CS001", "alice@university.edu", "Computer Science"),
    ]

    store.save(students)

    assert store.load() == students


def test_roster_save_replaces_previous_contents(tmp_path):
    store = RosterStore(_database(tmp_path))
    store.save([Student("student-a", "Alice Johnson")])
    store.save([Student("student-c", "Carol Davis")])

    assert [student.id for student in store.load()] == ["student-c"]


def test_attendance_store_appends_in_order_without_dedup(tmp_path):
    store = AttendanceStore(_database(tmp_path))

    store.append(_record("r-1", "student-a", AttendanceStatus.PRESENT))
    store.append(_record("r-2", "student-a", AttendanceStatus.LATE))

    loaded = store.load()
    assert [record.id for record in loaded] == ["r-1", "r-2"]
    assert loaded[1].status is AttendanceStatus.LATE


def test_seed_sample_data_only_fills_empty_stores(tmp_path):
    database = _database(tmp_path)
    roster = RosterStore(database)
    attendance = AttendanceStore(database)
    now = datetime(2024, 3, 4, 9, 5)

    assert seed_sample_data(roster, attendance, now=now) is True
    assert [student.id for student in roster.load()] == [student.id for student in SAMPLE_STUDENTS]
    records = attendance.load()
    assert [record.id for record in records] == ["att-001", "att-002", "att-003"]
    assert [record.status for record in records] == [
        AttendanceStatus.PRESENT,
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
    ]
    assert {record.date for record in records} == {"2024-03-04"}

    assert seed_sample_data(roster, attendance, now=now) is False
    assert len(attendance.load()) == 3


def test_seed_sample_data_leaves_custom_roster_alone(tmp_path):
    database = _database(tmp_path)
    roster = RosterStore(database)
    attendance = AttendanceStore(database)
    roster.save([Student("student-x", "Xavier Lee", "MA001")])

    assert seed_sample_data(roster, attendance, now=datetime(2024, 3, 4, 9, 5)) is False
    assert [student.id for student in roster.load()] == ["student-x"]
    assert attendance.load() == []
