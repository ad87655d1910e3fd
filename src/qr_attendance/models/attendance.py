from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Mapping


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    LATE = "late"
    # Only ever derived for display; scanning never stores it.
    ABSENT = "absent"


@dataclass(slots=True)
class Student:
    id: str
    name: str
    roll_number: str = ""
    email: str = ""
    course: str = ""

    @property
    def display_name(self) -> str:
        name = self.name.strip()
        return name if name else self.roll_number or self.id

    def identity_fields(self) -> dict[str, str]:
        """Fields embedded in the student's QR code."""
        return {
            "id": self.id,
            "name": self.name,
            "rollNumber": self.roll_number,
            "course": self.course,
        }


@dataclass(slots=True, frozen=True)
class AttendanceRecord:
    id: str
    student_id: str
    student_name: str
    roll_number: str
    timestamp: str
    date: str
    status: AttendanceStatus = AttendanceStatus.PRESENT

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AttendanceRecord":
        return cls(
            id=str(row["id"]),
            student_id=str(row["student_id"]),
            student_name=row["student_name"] or "",
            roll_number=row["roll_number"] or "",
            timestamp=str(row["timestamp"]),
            date=str(row["date"]),
            status=AttendanceStatus(row["status"]),
        )


@dataclass(slots=True, frozen=True)
class AttendanceStats:
    total_students: int
    present_today: int
    absent_today: int
    attendance_rate: float
    late_today: int = 0

    @property
    def is_consistent(self) -> bool:
        """False when more students checked in than are enrolled."""
        return self.absent_today >= 0

    @property
    def absent_display(self) -> int:
        return max(self.absent_today, 0)


@dataclass(slots=True, frozen=True)
class DailyTally:
    date: date
    present: int
    late: int
    absent: int

    @property
    def weekday_label(self) -> str:
        return self.date.strftime("%a")


@dataclass(slots=True)
class StudentDraft:
    """Unsaved form input for adding or editing a student."""

    name: str = ""
    roll_number: str = ""
    email: str = ""
    course: str = ""

    def cleaned(self) -> "StudentDraft":
        return StudentDraft(
            name=self.name.strip(),
            roll_number=self.roll_number.strip(),
            email=self.email.strip(),
            course=self.course.strip(),
        )
