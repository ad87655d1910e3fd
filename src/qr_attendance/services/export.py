from __future__ import annotations

import csv
import html
import io
import logging
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from PIL import Image

from qr_attendance.models import AttendanceRecord, Student
from qr_attendance.services.qr_codec import (
    DEFAULT_FILL_COLOR,
    generate_qr_image,
    image_to_data_uri,
    qr_filename,
)

logger = logging.getLogger(__name__)

CSV_HEADERS: tuple[str, ...] = ("Date", "Student", "Roll Number", "Status", "Time")


def attendance_rows(records: Iterable[AttendanceRecord]) -> list[list[str]]:
    return [
        [record.date, record.student_name, record.roll_number, record.status.value, record.timestamp]
        for record in records
    ]


def attendance_csv_text(records: Iterable[AttendanceRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(attendance_rows(records))
    return buffer.getvalue()


def write_attendance_csv(records: Sequence[AttendanceRecord], path: Path) -> int:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        handle.write(attendance_csv_text(records))
    logger.info("Exported %d attendance records to %s", len(records), path)
    return len(records)


def save_qr_codes(
    students: Iterable[Student],
    directory: Path,
    *,
    images: Mapping[str, Image.Image] | None = None,
    fill_color: str = DEFAULT_FILL_COLOR,
) -> list[Path]:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    cache = images or {}

    written: list[Path] = []
    for student in students:
        image = cache.get(student.id)
        if image is None:
            image = generate_qr_image(student, fill_color=fill_color)
        target = directory / qr_filename(student)
        image.save(target, format="PNG")
        written.append(target)

    logger.info("Saved %d QR codes to %s", len(written), directory)
    return written


_PRINT_STYLE = """
body { font-family: Arial, sans-serif; margin: 20px; }
.qr-card {
  display: inline-block;
  margin: 15px;
  padding: 20px;
  border: 2px solid #e2e8f0;
  border-radius: 8px;
  text-align: center;
  width: 200px;
  break-inside: avoid;
}
.student-name { font-weight: bold; margin-bottom: 5px; }
.student-roll { color: #666; margin-bottom: 15px; }
.student-course { margin-top: 10px; font-size: 12px; color: #666; }
.qr-image { max-width: 150px; height: auto; }
"""


def render_print_sheet(students: Iterable[Student], images: Mapping[str, Image.Image]) -> str:
    """Printable HTML page with one card per student that has a generated code."""

    cards: list[str] = []
    for student in students:
        image = images.get(student.id)
        if image is None:
            continue
        cards.append(
            '<div class="qr-card">'
            f'<div class="student-name">{html.escape(student.name)}</div>'
            f'<div class="student-roll">{html.escape(student.roll_number)}</div>'
            f'<img src="{image_to_data_uri(image)}" alt="QR Code" class="qr-image" />'
            f'<div class="student-course">{html.escape(student.course)}</div>'
            "</div>"
        )

    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\" />\n"
        "<title>Student QR Codes</title>\n"
        f"<style>{_PRINT_STYLE}</style>\n"
        "</head>\n<body>\n<h1>Student QR Codes - Class Attendance</h1>\n"
        f"<div class=\"qr-grid\">{''.join(cards)}</div>\n"
        "</body>\n</html>\n"
    )
