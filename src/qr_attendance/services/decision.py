from __future__ import annotations

import itertools
import time as _time
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum
from typing import Iterable, Optional

from qr_attendance.models import AttendanceRecord, AttendanceStatus, Student
from qr_attendance.utils import isoformat_utc, local_date, to_local

DEFAULT_CLASS_START = time(hour=9, minute=0)
DEFAULT_GRACE_MINUTES = 15.0

_record_sequence = itertools.count(1)


class DecisionKind(str, Enum):
    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"


@dataclass(slots=True, frozen=True)
class ScanDecision:
    kind: DecisionKind
    record: Optional[AttendanceRecord] = None
    existing: Optional[AttendanceRecord] = None

    @property
    def accepted(self) -> bool:
        return self.kind is DecisionKind.ACCEPTED


def classify_arrival(
    now: datetime,
    *,
    class_start: time = DEFAULT_CLASS_START,
    grace_minutes: float = DEFAULT_GRACE_MINUTES,
) -> AttendanceStatus:
    """Present up to and including ``grace_minutes`` after class start, late afterwards."""

    local_now = to_local(now)
    cutoff = datetime.combine(local_now.date(), class_start)
    if local_now <= cutoff:
        return AttendanceStatus.PRESENT

    minutes_late = (local_now - cutoff).total_seconds() / 60
    if minutes_late > grace_minutes:
        return AttendanceStatus.LATE
    return AttendanceStatus.PRESENT


def find_record_for_day(
    student_id: str,
    records: Iterable[AttendanceRecord],
    day: str,
) -> Optional[AttendanceRecord]:
    for record in records:
        if record.student_id == student_id and record.date == day:
            return record
    return None


def new_record_id(student_id: str) -> str:
    return f"{student_id}-{_time.time_ns()}-{next(_record_sequence)}"


def evaluate(
    student: Student,
    existing_records: Iterable[AttendanceRecord],
    now: datetime,
    *,
    class_start: time = DEFAULT_CLASS_START,
    grace_minutes: float = DEFAULT_GRACE_MINUTES,
) -> ScanDecision:
    """Decide whether a scan for ``student`` at ``now`` creates a new record.

    A student already holding a record for the local calendar day of ``now``
    gets a duplicate decision and no record. Otherwise the new record is
    classified against the class start time and returned for the caller to
    persist. Nothing is written here.
    """

    if student is None:
        raise TypeError("evaluate() requires a resolved student, got None")
    if not student.id:
        raise ValueError("Student identifier must not be empty.")

    today = local_date(now)
    existing = find_record_for_day(student.id, existing_records, today)
    if existing is not None:
        return ScanDecision(kind=DecisionKind.DUPLICATE, existing=existing)

    record = AttendanceRecord(
        id=new_record_id(student.id),
        student_id=student.id,
        student_name=student.name,
        roll_number=student.roll_number,
        timestamp=isoformat_utc(now),
        date=today,
        status=classify_arrival(now, class_start=class_start, grace_minutes=grace_minutes),
    )
    return ScanDecision(kind=DecisionKind.ACCEPTED, record=record)
