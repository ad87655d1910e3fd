from datetime import date

from qr_attendance.models import AttendanceRecord, AttendanceStatus, Student
from qr_attendance.services import attendance_shares, daily_breakdown, recent_records, summarize


def _students(count: int) -> list[Student]:
    return [Student(f"student-{index:03d}", f"Student {index}", f"CS{index:03d}") for index in range(1, count + 1)]


def _record(student_id: str, day: str, status: AttendanceStatus = AttendanceStatus.PRESENT, suffix: str = "") -> AttendanceRecord:
    return AttendanceRecord(
        id=f"{student_id}-{day}{suffix}",
        student_id=student_id,
        student_name=student_id,
        roll_number="",
        timestamp=f"{day}T09:00:00.000Z",
        date=day,
        status=status,
    )


def test_summarize_counts_todays_records_only():
    students = _students(5)
    records = [
        _record("student-001", "2024-03-04"),
        _record("student-002", "2024-03-04"),
        _record("student-003", "2024-03-04", AttendanceStatus.LATE),
        _record("student-004", "2024-03-03"),
    ]

    stats = summarize(students, records, "2024-03-04")

    assert stats.total_students == 5
    assert stats.present_today == 3
    assert stats.absent_today == 2
    assert stats.attendance_rate == 60.0
    assert stats.late_today == 1
    assert stats.is_consistent


def test_summarize_accepts_date_objects():
    stats = summarize(_students(2), [_record("student-001", "2024-03-04")], date(2024, 3, 4))
    assert stats.present_today == 1
    assert stats.attendance_rate == 50.0


def test_summarize_empty_roster_has_zero_rate():
    stats = summarize([], [], "2024-03-04")

    assert stats.total_students == 0
    assert stats.present_today == 0
    assert stats.absent_today == 0
    assert stats.attendance_rate == 0.0


def test_summarize_leaves_absent_negative_when_records_outnumber_roster():
    students = _students(1)
    records = [_record("student-001", "2024-03-04"), _record("student-099", "2024-03-04")]

    stats = summarize(students, records, "2024-03-04")

    assert stats.absent_today == -1
    assert stats.absent_display == 0
    assert not stats.is_consistent
    assert stats.attendance_rate == 200.0


def test_daily_breakdown_returns_oldest_first():
    students = _students(4)
    records = [
        _record("student-001", "2024-03-04"),
        _record("student-002", "2024-03-04", AttendanceStatus.LATE),
        _record("student-001", "2024-03-06"),
    ]

    tallies = daily_breakdown(students, records, "2024-03-06", days=3)

    assert [tally.date for tally in tallies] == [date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 6)]
    assert (tallies[0].present, tallies[0].late, tallies[0].absent) == (1, 1, 2)
    assert (tallies[1].present, tallies[1].late, tallies[1].absent) == (0, 0, 4)
    assert (tallies[2].present, tallies[2].late, tallies[2].absent) == (1, 0, 3)
    assert tallies[0].weekday_label == "Mon"


def test_recent_records_newest_first_and_limited():
    records = [_record("student-001", f"2024-03-{day:02d}") for day in range(1, 13)]

    recent = recent_records(records, limit=10)

    assert len(recent) == 10
    assert recent[0].date == "2024-03-12"
    assert recent[-1].date == "2024-03-03"


def test_recent_records_handles_short_and_empty_input():
    records = [_record("student-001", "2024-03-01"), _record("student-002", "2024-03-01")]
    assert [record.student_id for record in recent_records(records)] == ["student-002", "student-001"]
    assert recent_records([], limit=10) == []
    assert recent_records(records, limit=0) == []


def test_attendance_shares_split_on_time_late_and_absent():
    records = [
        _record("student-001", "2024-03-04"),
        _record("student-002", "2024-03-04", AttendanceStatus.LATE),
    ]

    shares = attendance_shares(summarize(_students(4), records, "2024-03-04"))

    assert shares == [("present", 1, 25.0), ("late", 1, 25.0), ("absent", 2, 50.0)]


def test_attendance_shares_empty_class_is_all_zero():
    shares = attendance_shares(summarize([], [], "2024-03-04"))

    assert [percent for _, _, percent in shares] == [0.0, 0.0, 0.0]


def test_attendance_shares_clamp_absent_when_records_exceed_roster():
    records = [_record(f"student-{index:03d}", "2024-03-04") for index in range(1, 4)]

    shares = attendance_shares(summarize(_students(1), records, "2024-03-04"))

    assert shares[2] == ("absent", 0, 0.0)
    assert shares[0] == ("present", 3, 100.0)
