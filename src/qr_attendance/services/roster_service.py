from __future__ import annotations

import logging
import time
from typing import Callable

from qr_attendance.data import RosterStore
from qr_attendance.models import Student, StudentDraft

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "Name"),
    ("roll_number", "Roll number"),
    ("email", "Email"),
    ("course", "Course"),
)


class StudentValidationError(ValueError):
    """Raised when a roster form is submitted with missing fields."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Please fill in all required fields: {', '.join(missing)}.")


class StudentNotInRosterError(LookupError):
    """Raised when editing or deleting a student id that is not enrolled."""


class RosterService:
    def __init__(self, store: RosterStore, *, clock: Callable[[], float] = time.time) -> None:
        self._store = store
        self._clock = clock

    def list_students(self) -> list[Student]:
        return self._store.load()

    def add_student(self, draft: StudentDraft) -> Student:
        cleaned = self._validate(draft)
        students = self._store.load()

        student = Student(
            id=self._new_student_id({student.id for student in students}),
            name=cleaned.name,
            roll_number=cleaned.roll_number,
            email=cleaned.email,
            course=cleaned.course,
        )
        students.append(student)
        self._store.save(students)
        logger.info("Added student %s (%s)", student.name, student.id)
        return student

    def update_student(self, student_id: str, draft: StudentDraft) -> Student:
        cleaned = self._validate(draft)
        students = self._store.load()

        for index, current in enumerate(students):
            if current.id == student_id:
                updated = Student(
                    id=current.id,
                    name=cleaned.name,
                    roll_number=cleaned.roll_number,
                    email=cleaned.email,
                    course=cleaned.course,
                )
                students[index] = updated
                self._store.save(students)
                logger.info("Updated student %s", student_id)
                return updated

        raise StudentNotInRosterError(f"No student with id {student_id!r}.")

    def delete_student(self, student_id: str) -> Student:
        students = self._store.load()
        remaining = [student for student in students if student.id != student_id]
        if len(remaining) == len(students):
            raise StudentNotInRosterError(f"No student with id {student_id!r}.")

        removed = next(student for student in students if student.id == student_id)
        self._store.save(remaining)
        logger.info("Deleted student %s", student_id)
        return removed

    @staticmethod
    def _validate(draft: StudentDraft) -> StudentDraft:
        cleaned = draft.cleaned()
        missing = [label for attr, label in REQUIRED_FIELDS if not getattr(cleaned, attr)]
        if missing:
            raise StudentValidationError(missing)
        return cleaned

    def _new_student_id(self, taken: set[str]) -> str:
        base = f"student-{int(self._clock() * 1000)}"
        candidate = base
        suffix = 1
        while candidate in taken:
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate
