from datetime import datetime, time, timedelta, timezone

import pytest

from qr_attendance.models import AttendanceRecord, AttendanceStatus, Student
from qr_attendance.services import DecisionKind, evaluate
from qr_attendance.services.decision import classify_arrival, new_record_id
from qr_attendance.utils import local_date

ALICE = Student("student-001", "Alice Johnson", "CS001", "alice@university.edu", "Computer Science")


def _record_for(student: Student, day: str, status: AttendanceStatus = AttendanceStatus.PRESENT) -> AttendanceRecord:
    return AttendanceRecord(
        id=f"{student.id}-existing",
        student_id=student.id,
        student_name=student.name,
        roll_number=student.roll_number,
        timestamp=f"{day}T09:00:00.000Z",
        date=day,
        status=status,
    )


@pytest.mark.parametrize(
    ("moment", "expected"),
    [
        (datetime(2024, 3, 4, 8, 30), AttendanceStatus.PRESENT),
        (datetime(2024, 3, 4, 9, 0), AttendanceStatus.PRESENT),
        (datetime(2024, 3, 4, 9, 15), AttendanceStatus.PRESENT),
        (datetime(2024, 3, 4, 9, 15, 1), AttendanceStatus.LATE),
        (datetime(2024, 3, 4, 13, 0), AttendanceStatus.LATE),
    ],
)
def test_classify_arrival_default_window(moment, expected):
    assert classify_arrival(moment) is expected


def test_classify_arrival_custom_start_and_grace():
    start = time(10, 30)
    assert classify_arrival(datetime(2024, 3, 4, 10, 35), class_start=start, grace_minutes=5) is AttendanceStatus.PRESENT
    assert classify_arrival(datetime(2024, 3, 4, 10, 35, 1), class_start=start, grace_minutes=5) is AttendanceStatus.LATE
    assert classify_arrival(datetime(2024, 3, 4, 10, 30, 1), class_start=start, grace_minutes=0) is AttendanceStatus.LATE


def test_evaluate_accepts_first_scan_of_the_day():
    now = datetime(2024, 3, 4, 9, 5)

    decision = evaluate(ALICE, [], now)

    assert decision.kind is DecisionKind.ACCEPTED
    assert decision.accepted
    assert decision.existing is None
    record = decision.record
    assert record.student_id == "student-001"
    assert record.student_name == "Alice Johnson"
    assert record.roll_number == "CS001"
    assert record.date == "2024-03-04"
    assert record.status is AttendanceStatus.PRESENT
    assert record.id.startswith("student-001-")
    assert record.timestamp.endswith("Z")


def test_evaluate_marks_late_arrival():
    decision = evaluate(ALICE, [], datetime(2024, 3, 4, 9, 16))
    assert decision.record.status is AttendanceStatus.LATE


def test_evaluate_reports_duplicate_for_same_day():
    existing = _record_for(ALICE, "2024-03-04", AttendanceStatus.LATE)

    decision = evaluate(ALICE, [existing], datetime(2024, 3, 4, 15, 0))

    assert decision.kind is DecisionKind.DUPLICATE
    assert not decision.accepted
    assert decision.record is None
    assert decision.existing is existing


def test_evaluate_ignores_records_from_other_days_and_students():
    bob = Student("student-002", "Bob Smith", "CS002")
    records = [_record_for(ALICE, "2024-03-03"), _record_for(bob, "2024-03-04")]

    decision = evaluate(ALICE, records, datetime(2024, 3, 4, 9, 0))

    assert decision.accepted
    assert decision.record.date == "2024-03-04"


def test_evaluate_rejects_missing_student():
    with pytest.raises(TypeError):
        evaluate(None, [], datetime(2024, 3, 4, 9, 0))


def test_evaluate_rejects_empty_identifier():
    with pytest.raises(ValueError):
        evaluate(Student("", "Nobody"), [], datetime(2024, 3, 4, 9, 0))


def test_evaluate_uses_local_day_for_aware_timestamps():
    moment = datetime(2024, 3, 4, 12, 0, tzinfo=timezone.utc)

    decision = evaluate(ALICE, [], moment)

    assert decision.record.date == local_date(moment)
    assert decision.record.timestamp == "2024-03-04T12:00:00.000Z"


def test_evaluate_does_not_mutate_existing_records():
    records = [_record_for(ALICE, "2024-03-03")]
    evaluate(ALICE, records, datetime(2024, 3, 4, 9, 0))
    assert len(records) == 1


def test_midnight_rollover_starts_a_new_day():
    late_night = datetime(2024, 3, 4, 23, 59, 59)
    first = evaluate(ALICE, [], late_night).record

    next_morning = late_night + timedelta(seconds=2)
    decision = evaluate(ALICE, [first], next_morning)

    assert decision.accepted
    assert decision.record.date == "2024-03-05"


def test_new_record_ids_are_unique():
    identifiers = {new_record_id("student-001") for _ in range(50)}
    assert len(identifiers) == 50
