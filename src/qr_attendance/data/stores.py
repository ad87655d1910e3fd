from __future__ import annotations

import logging
from typing import Iterable

from qr_attendance.data.database import Database
from qr_attendance.models import AttendanceRecord, Student

logger = logging.getLogger(__name__)


class RosterStore:
    """Enrolled students, saved and loaded as a whole collection."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def load(self) -> list[Student]:
        with self._database.connect() as connection:
            rows = connection.execute(
                """
                SELECT id, name, roll_number, email, course
                  FROM students
              ORDER BY position ASC, rowid ASC
                """
            ).fetchall()

        return [
            Student(
                id=row["id"],
                name=row["name"],
                roll_number=row["roll_number"],
                email=row["email"],
                course=row["course"],
            )
            for row in rows
        ]

    def save(self, students: Iterable[Student]) -> None:
        payload = [
            (
                student.id,
                student.name,
                student.roll_number,
                student.email,
                student.course,
                position,
            )
            for position, student in enumerate(students)
        ]

        with self._database.connect() as connection:
            connection.execute("DELETE FROM students")
            connection.executemany(
                """
                INSERT INTO students (id, name, roll_number, email, course, position)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                payload,
            )
        logger.debug("Saved roster with %d students", len(payload))


class AttendanceStore:
    """Append-only attendance log. Performs no duplicate checks of its own."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def load(self) -> list[AttendanceRecord]:
        with self._database.connect() as connection:
            rows = connection.execute(
                """
                SELECT id, student_id, student_name, roll_number, timestamp, date, status
                  FROM attendance_records
              ORDER BY seq ASC
                """
            ).fetchall()

        return [AttendanceRecord.from_row(row) for row in rows]

    def append(self, record: AttendanceRecord) -> None:
        with self._database.connect() as connection:
            connection.execute(
                """
                INSERT INTO attendance_records (
                    id, student_id, student_name, roll_number, timestamp, date, status
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.student_id,
                    record.student_name,
                    record.roll_number,
                    record.timestamp,
                    record.date,
                    record.status.value,
                ),
            )
