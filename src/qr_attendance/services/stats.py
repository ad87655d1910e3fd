from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

from qr_attendance.models import AttendanceRecord, AttendanceStats, AttendanceStatus, DailyTally, Student
from qr_attendance.utils import parse_date
from qr_attendance.utils.time import DATE_FORMAT


def _day_key(day: str | date) -> str:
    return day.strftime(DATE_FORMAT) if isinstance(day, date) else day


def summarize(
    all_students: Sequence[Student],
    all_records: Sequence[AttendanceRecord],
    today: str | date,
) -> AttendanceStats:
    day = _day_key(today)
    todays_records = [record for record in all_records if record.date == day]

    total_students = len(all_students)
    present_today = len(todays_records)
    # Left unclamped: a negative value means records outnumber the roster.
    absent_today = total_students - present_today
    attendance_rate = (present_today / total_students) * 100 if total_students > 0 else 0.0
    late_today = sum(1 for record in todays_records if record.status is AttendanceStatus.LATE)

    return AttendanceStats(
        total_students=total_students,
        present_today=present_today,
        absent_today=absent_today,
        attendance_rate=attendance_rate,
        late_today=late_today,
    )


def daily_breakdown(
    all_students: Sequence[Student],
    all_records: Sequence[AttendanceRecord],
    end_date: str | date,
    *,
    days: int = 5,
) -> list[DailyTally]:
    last_day = parse_date(end_date)
    tallies: list[DailyTally] = []

    for offset in range(days - 1, -1, -1):
        day = last_day - timedelta(days=offset)
        stats = summarize(all_students, all_records, day)
        tallies.append(
            DailyTally(
                date=day,
                present=stats.present_today - stats.late_today,
                late=stats.late_today,
                absent=stats.absent_display,
            )
        )

    return tallies


def recent_records(all_records: Sequence[AttendanceRecord], limit: int = 10) -> list[AttendanceRecord]:
    if limit <= 0:
        return []
    return list(reversed(all_records[-limit:]))


def attendance_shares(stats: AttendanceStats) -> list[tuple[str, int, float]]:
    """Split today's class into on-time, late and absent slices for a pie chart.

    Each entry is ``(status, count, percent)``; percentages are of the slice
    total and are all zero when nothing is recorded and nobody is enrolled.
    """

    counts = (
        (AttendanceStatus.PRESENT.value, stats.present_today - stats.late_today),
        (AttendanceStatus.LATE.value, stats.late_today),
        (AttendanceStatus.ABSENT.value, stats.absent_display),
    )
    total = sum(count for _, count in counts)
    return [(status, count, (count / total) * 100 if total else 0.0) for status, count in counts]
