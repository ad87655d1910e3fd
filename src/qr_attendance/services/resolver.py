from __future__ import annotations

from typing import Optional, Sequence

from qr_attendance.models import Student
from qr_attendance.services.qr_codec import parse_payload


def find_student(roster: Sequence[Student], text: str) -> Optional[Student]:
    """Exact match on student identifier first, then on roll number."""

    for student in roster:
        if student.id == text:
            return student
    for student in roster:
        if student.roll_number and student.roll_number == text:
            return student
    return None


def resolve_student(payload: str, roster: Sequence[Student]) -> Optional[Student]:
    text = (payload or "").strip()
    if not text:
        return None

    identity = parse_payload(text)
    if identity is not None:
        identifier = str(identity["id"]).strip()
        for student in roster:
            if student.id == identifier:
                return student
        # Unknown to the roster; the code itself still carries a full identity.
        return Student(
            id=identifier,
            name=str(identity.get("name") or ""),
            roll_number=str(identity.get("rollNumber") or ""),
            course=str(identity.get("course") or ""),
        )

    return find_student(roster, text)
