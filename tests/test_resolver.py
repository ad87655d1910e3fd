import json

from qr_attendance.models import Student
from qr_attendance.services import resolve_student
from qr_attendance.services.resolver import find_student

ROSTER = [
    Student("student-001", "Alice Johnson", "CS001", "alice@university.edu", "Computer Science"),
    Student("student-002", "Bob Smith", "CS002", "bob@university.edu", "Computer Science"),
]


def test_structured_payload_prefers_roster_entry():
    payload = json.dumps({"id": "student-001", "name": "Alice J. (old)", "rollNumber": "CS001", "course": "CS"})

    student = resolve_student(payload, ROSTER)

    assert student is ROSTER[0]
    assert student.name == "Alice Johnson"


def test_structured_payload_unknown_to_roster_builds_student():
    payload = json.dumps({"id": "student-900", "name": "Visiting Student", "rollNumber": "EX900", "course": "Exchange"})

    student = resolve_student(payload, ROSTER)

    assert student == Student("student-900", "Visiting Student", "EX900", "", "Exchange")


def test_plain_text_matches_identifier_then_roll_number():
    assert resolve_student("student-002", ROSTER) is ROSTER[1]
    assert resolve_student("CS001", ROSTER) is ROSTER[0]
    assert resolve_student("  CS002\n", ROSTER) is ROSTER[1]


def test_identifier_match_wins_over_roll_number():
    roster = [Student("s-1", "Roll Holder", "X-9"), Student("X-9", "Id Holder", "R-1")]
    assert find_student(roster, "X-9").name == "Id Holder"


def test_unresolvable_payloads_return_none():
    assert resolve_student("", ROSTER) is None
    assert resolve_student("   ", ROSTER) is None
    assert resolve_student("CS999", ROSTER) is None
    assert resolve_student('{"name": "No Id"}', ROSTER) is None
    assert resolve_student('{"id": ""}', ROSTER) is None
    assert resolve_student("[1, 2, 3]", ROSTER) is None


def test_empty_roll_number_never_matches():
    roster = [Student("student-003", "No Roll", "")]
    assert find_student(roster, "") is None
