from .attendance import (
    AttendanceRecord,
    AttendanceStats,
    AttendanceStatus,
    DailyTally,
    Student,
    StudentDraft,
)

__all__ = [
    "AttendanceRecord",
    "AttendanceStats",
    "AttendanceStatus",
    "DailyTally",
    "Student",
    "StudentDraft",
]
