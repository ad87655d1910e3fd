from __future__ import annotations

import logging
from datetime import datetime

from qr_attendance.data.stores import AttendanceStore, RosterStore
from qr_attendance.models import AttendanceRecord, AttendanceStatus, Student
from qr_attendance.utils import isoformat_utc, local_date

logger = logging.getLogger(__name__)

SAMPLE_STUDENTS: tuple[Student, ...] = (
    Student("student-001", "Alice Johnson", "CS001", "alice.johnson@university.edu", "Computer Science"),
    Student("student-002", "Bob Smith", "CS002", "bob.smith@university.edu", "Computer Science"),
    Student("student-003", "Carol Davis", "CS003", "carol.davis@university.edu", "Computer Science"),
    Student("student-004", "David Wilson", "EE001", "david.wilson@university.edu", "Electrical Engineering"),
    Student("student-005", "Emma Brown", "EE002", "emma.brown@university.edu", "Electrical Engineering"),
)

_SAMPLE_STATUSES = (
    AttendanceStatus.PRESENT,
    AttendanceStatus.PRESENT,
    AttendanceStatus.LATE,
)


def seed_sample_data(roster: RosterStore, attendance: AttendanceStore, now: datetime | None = None) -> bool:
    """Populate an empty roster with a demo class. Returns True when anything was written.

    Demo attendance is only written alongside the demo roster.
    """

    if roster.load():
        return False

    moment = now or datetime.now()
    roster.save(
        Student(s.id, s.name, s.roll_number, s.email, s.course) for s in SAMPLE_STUDENTS
    )

    if not attendance.load():
        timestamp = isoformat_utc(moment)
        today = local_date(moment)
        for index, (student, status) in enumerate(zip(SAMPLE_STUDENTS, _SAMPLE_STATUSES), start=1):
            attendance.append(
                AttendanceRecord(
                    id=f"att-{index:03d}",
                    student_id=student.id,
                    student_name=student.name,
                    roll_number=student.roll_number,
                    timestamp=timestamp,
                    date=today,
                    status=status,
                )
            )

    logger.info("Seeded sample roster and attendance data")
    return True
