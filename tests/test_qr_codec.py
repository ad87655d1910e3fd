import json

import pytest

from qr_attendance.models import Student
from qr_attendance.services import resolve_student
from qr_attendance.services.qr_codec import (
    current_images,
    decode_image,
    encode_payload,
    generate_qr_image,
    image_to_data_uri,
    normalize_payload_text,
    parse_payload,
    qr_filename,
)

ALICE = Student("student-001", "Alice Johnson", "CS001", "alice@university.edu", "Computer Science")


def test_encode_payload_carries_identity_without_email():
    data = json.loads(encode_payload(ALICE))
    assert data == {"id": "student-001", "name": "Alice Johnson", "rollNumber": "CS001", "course": "Computer Science"}


def test_parse_payload_requires_string_id():
    assert parse_payload(encode_payload(ALICE))["id"] == "student-001"
    assert parse_payload("CS001") is None
    assert parse_payload('{"id": 7}') is None
    assert parse_payload('"student-001"') is None


def test_normalize_payload_text():
    assert normalize_payload_text(b"  CS001\n") == "CS001"
    assert normalize_payload_text("José") == "José"
    assert normalize_payload_text(b"") == ""


def test_generate_qr_image_uses_fill_color():
    image = generate_qr_image(ALICE, fill_color="#1e40af")

    assert image.mode == "RGB"
    assert image.width == image.height
    assert (30, 64, 175) in {color for _, color in image.getcolors(maxcolors=16)}
    assert image_to_data_uri(image).startswith("data:image/png;base64,")


def test_qr_filename():
    assert qr_filename(ALICE) == "CS001_Alice_Johnson_QR.png"
    assert qr_filename(Student("student-009", "No Roll")) == "student-009_No_Roll_QR.png"


def test_generated_code_decodes_back_to_payload():
    pytest.importorskip("zxingcpp")

    payloads = decode_image(generate_qr_image(ALICE))

    assert payloads == [encode_payload(ALICE)]


def test_encoded_payload_resolves_to_same_student():
    roster = [Student("student-002", "Bob Smith", "CS002"), ALICE]
    assert resolve_student(encode_payload(ALICE), roster).id == "student-001"


def test_current_images_drops_edited_and_removed_students():
    bob = Student("student-002", "Bob Smith", "CS002", course="Computer Science")
    carol = Student("student-003", "Carol Davis", "CS003", course="Computer Science")
    images = {student.id: generate_qr_image(student) for student in (ALICE, bob, carol)}
    payloads = {student.id: encode_payload(student) for student in (ALICE, bob, carol)}
    renamed_bob = Student("student-002", "Robert Smith", "CS002", course="Computer Science")

    kept = current_images([ALICE, renamed_bob], images, payloads)

    assert list(kept) == ["student-001"]
    assert kept["student-001"] is images["student-001"]


def test_current_images_ignores_email_only_edits():
    images = {ALICE.id: generate_qr_image(ALICE)}
    payloads = {ALICE.id: encode_payload(ALICE)}
    new_email = Student(ALICE.id, ALICE.name, ALICE.roll_number, "alice@example.org", ALICE.course)

    assert list(current_images([new_email], images, payloads)) == [ALICE.id]
