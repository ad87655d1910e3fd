from pathlib import Path

from PIL import Image

from qr_attendance.models import AttendanceRecord, AttendanceStatus, Student
from qr_attendance.services.export import (
    CSV_HEADERS,
    attendance_csv_text,
    render_print_sheet,
    save_qr_codes,
    write_attendance_csv,
)

RECORDS = [
    AttendanceRecord(
        id="att-001",
        student_id="student-001",
        student_name="Alice Johnson",
        roll_number="CS001",
        timestamp="2024-03-04T09:00:00.000Z",
        date="2024-03-04",
        status=AttendanceStatus.PRESENT,
    ),
    AttendanceRecord(
        id="att-002",
        student_id="student-002",
        student_name="Smith, Bob",
        roll_number="CS002",
        timestamp="2024-03-04T09:20:00.000Z",
        date="2024-03-04",
        status=AttendanceStatus.LATE,
    ),
]


def test_csv_text_has_header_and_quotes_commas():
    lines = attendance_csv_text(RECORDS).splitlines()

    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[1] == "2024-03-04,Alice Johnson,CS001,present,2024-03-04T09:00:00.000Z"
    assert lines[2] == '2024-03-04,"Smith, Bob",CS002,late,2024-03-04T09:20:00.000Z'


def test_write_attendance_csv(tmp_path: Path):
    target = tmp_path / "exports" / "attendance_report.csv"

    count = write_attendance_csv(RECORDS, target)

    assert count == 2
    assert target.read_text(encoding="utf-8").startswith("Date,Student,Roll Number,Status,Time\n")


def test_save_qr_codes_writes_named_pngs(tmp_path: Path):
    students = [
        Student("student-001", "Alice Johnson", "CS001", course="Computer Science"),
        Student("student-002", "Mary Ann Lee", "CS/002", course="Computer Science"),
    ]

    written = save_qr_codes(students, tmp_path)

    assert [path.name for path in written] == ["CS001_Alice_Johnson_QR.png", "CS_002_Mary_Ann_Lee_QR.png"]
    for path in written:
        with Image.open(path) as image:
            assert image.format == "PNG"


def test_print_sheet_escapes_and_skips_missing_images():
    students = [
        Student("student-001", "Alice <Admin>", "CS001", course="Computer Science"),
        Student("student-002", "Bob Smith", "CS002", course="Computer Science"),
    ]
    images = {"student-001": Image.new("RGB", (10, 10), "white")}

    sheet = render_print_sheet(students, images)

    assert "Alice &lt;Admin&gt;" in sheet
    assert "Bob Smith" not in sheet
    assert sheet.count("data:image/png;base64,") == 1
