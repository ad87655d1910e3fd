from pathlib import Path

import pytest

from qr_attendance.data import Database, RosterStore
from qr_attendance.models import StudentDraft
from qr_attendance.services import RosterService, StudentNotInRosterError, StudentValidationError

FIXED_CLOCK = 1_709_542_800.5


def _service(tmp_path: Path) -> RosterService:
    database = Database(tmp_path / "attendance.db")
    database.initialize()
    return RosterService(RosterStore(database), clock=lambda: FIXED_CLOCK)


def _draft(name: str = "Alice Johnson", roll: str = "CS001") -> StudentDraft:
    return StudentDraft(name=name, roll_number=roll, email="alice@university.edu", course="Computer Science")


def test_add_student_assigns_time_based_id(tmp_path):
    service = _service(tmp_path)

    student = service.add_student(_draft(name="  Alice Johnson  "))

    assert student.id == "student-1709542800500"
    assert student.name == "Alice Johnson"
    assert service.list_students() == [student]


def test_add_student_avoids_id_collisions(tmp_path):
    service = _service(tmp_path)

    first = service.add_student(_draft())
    second = service.add_student(_draft(name="Bob Smith", roll="CS002"))

    assert first.id != second.id
    assert second.id == f"{first.id}-1"
    assert [student.name for student in service.list_students()] == ["Alice Johnson", "Bob Smith"]


def test_add_student_requires_every_field(tmp_path):
    service = _service(tmp_path)

    with pytest.raises(StudentValidationError) as excinfo:
        service.add_student(StudentDraft(name="Alice", roll_number=" ", email="", course="CS"))

    assert excinfo.value.missing == ["Roll number", "Email"]
    assert service.list_students() == []


def test_update_student_keeps_id_and_order(tmp_path):
    service = _service(tmp_path)
    alice = service.add_student(_draft())
    bob = service.add_student(_draft(name="Bob Smith", roll="CS002"))

    updated = service.update_student(alice.id, _draft(name="Alice Cooper", roll="CS010"))

    assert updated.id == alice.id
    assert [student.name for student in service.list_students()] == ["Alice Cooper", "Bob Smith"]
    assert service.list_students()[1] == bob


def test_update_and_delete_unknown_student(tmp_path):
    service = _service(tmp_path)

    with pytest.raises(StudentNotInRosterError):
        service.update_student("student-404", _draft())
    with pytest.raises(StudentNotInRosterError):
        service.delete_student("student-404")


def test_delete_student(tmp_path):
    service = _service(tmp_path)
    alice = service.add_student(_draft())

    removed = service.delete_student(alice.id)

    assert removed == alice
    assert service.list_students() == []
