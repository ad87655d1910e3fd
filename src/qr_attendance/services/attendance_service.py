from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Callable

from qr_attendance.data import AttendanceStore, RosterStore
from qr_attendance.models import AttendanceRecord, AttendanceStats, DailyTally, Student
from qr_attendance.services.decision import (
    DEFAULT_CLASS_START,
    DEFAULT_GRACE_MINUTES,
    evaluate,
)
from qr_attendance.services.resolver import resolve_student
from qr_attendance.services.stats import daily_breakdown, recent_records, summarize
from qr_attendance.utils import local_date

logger = logging.getLogger(__name__)


class StudentNotFoundError(LookupError):
    """Raised when a scanned payload matches no registered student."""

    def __init__(self, payload: str) -> None:
        self.payload = payload
        super().__init__("QR code doesn't match any registered student.")


class DuplicateAttendanceError(RuntimeError):
    """Raised when a student has already been logged for the day."""

    def __init__(self, student: Student, existing: AttendanceRecord) -> None:
        self.student = student
        self.existing = existing
        super().__init__(f"{student.display_name} attendance already recorded today.")


class AttendanceService:
    def __init__(
        self,
        roster_store: RosterStore,
        attendance_store: AttendanceStore,
        *,
        class_start: time = DEFAULT_CLASS_START,
        grace_minutes: float = DEFAULT_GRACE_MINUTES,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._roster_store = roster_store
        self._attendance_store = attendance_store
        self._class_start = class_start
        self._grace_minutes = grace_minutes
        self._clock = clock

    def configure(self, *, class_start: time, grace_minutes: float) -> None:
        self._class_start = class_start
        self._grace_minutes = grace_minutes

    def record_scan(self, payload: str, *, now: datetime | None = None) -> AttendanceRecord:
        """Resolve a scanned payload, decide, and append the accepted record."""

        student = resolve_student(payload, self._roster_store.load())
        if student is None:
            logger.warning("No student matches scanned payload %r", payload)
            raise StudentNotFoundError(payload)
        return self.record_student(student, now=now)

    def record_student(self, student: Student, *, now: datetime | None = None) -> AttendanceRecord:
        moment = now or self._clock()
        decision = evaluate(
            student,
            self._attendance_store.load(),
            moment,
            class_start=self._class_start,
            grace_minutes=self._grace_minutes,
        )

        if not decision.accepted:
            logger.info("Duplicate scan for %s on %s", student.id, decision.existing.date)
            raise DuplicateAttendanceError(student, decision.existing)

        record = decision.record
        self._attendance_store.append(record)
        logger.info("Marked %s as %s at %s", student.id, record.status.value, record.timestamp)
        return record

    def all_records(self) -> list[AttendanceRecord]:
        return self._attendance_store.load()

    def stats(self, *, now: datetime | None = None) -> AttendanceStats:
        today = local_date(now or self._clock())
        return summarize(self._roster_store.load(), self._attendance_store.load(), today)

    def daily_breakdown(self, *, now: datetime | None = None, days: int = 5) -> list[DailyTally]:
        today = local_date(now or self._clock())
        return daily_breakdown(self._roster_store.load(), self._attendance_store.load(), today, days=days)

    def recent_attendance(self, limit: int = 10) -> list[AttendanceRecord]:
        return recent_records(self._attendance_store.load(), limit=limit)
