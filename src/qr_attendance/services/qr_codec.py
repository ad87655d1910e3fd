from __future__ import annotations

import base64
import io
import json
import logging
import re
import unicodedata
from typing import Any, Mapping, Optional, Sequence

import qrcode
import qrcode.constants
from PIL import Image

from qr_attendance.models import Student

logger = logging.getLogger(__name__)

DEFAULT_FILL_COLOR = "#1e40af"
DEFAULT_BACK_COLOR = "#ffffff"
DEFAULT_BOX_SIZE = 8
DEFAULT_BORDER = 4


def normalize_payload_text(raw: bytes | str) -> str:
    if not raw:
        return ""

    if isinstance(raw, str):
        decoded = raw
    else:
        try:
            decoded = raw.decode("utf-8")
        except UnicodeDecodeError:
            decoded = raw.decode("utf-8", errors="ignore")

    normalized = unicodedata.normalize("NFC", decoded)
    return normalized.strip()


def encode_payload(student: Student) -> str:
    return json.dumps(student.identity_fields(), ensure_ascii=False, separators=(",", ":"))


def parse_payload(text: str) -> Optional[dict[str, Any]]:
    """Return the structured identity in ``text`` or None when it is not one."""

    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None

    if not isinstance(data, dict):
        return None

    identifier = data.get("id")
    if not isinstance(identifier, str) or not identifier.strip():
        return None
    return data


def generate_qr_image(
    student: Student,
    *,
    fill_color: str = DEFAULT_FILL_COLOR,
    back_color: str = DEFAULT_BACK_COLOR,
    box_size: int = DEFAULT_BOX_SIZE,
    border: int = DEFAULT_BORDER,
) -> Image.Image:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(encode_payload(student))
    qr.make(fit=True)

    rendered = qr.make_image(fill_color=fill_color, back_color=back_color)
    return rendered.get_image().convert("RGB")


def current_images(
    students: Sequence[Student],
    images: Mapping[str, Image.Image],
    payloads: Mapping[str, str],
) -> dict[str, Image.Image]:
    """Keep only images whose encoded payload still matches the student.

    ``payloads`` maps student id to the payload each image was generated from.
    """

    return {
        student.id: images[student.id]
        for student in students
        if student.id in images and payloads.get(student.id) == encode_payload(student)
    }


def image_to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def image_to_data_uri(image: Image.Image) -> str:
    encoded = base64.b64encode(image_to_png_bytes(image)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def qr_filename(student: Student) -> str:
    name_token = re.sub(r"\s+", "_", student.name.strip())
    roll_token = student.roll_number.strip() or student.id
    filename = f"{roll_token}_{name_token}_QR.png"
    return re.sub(r'[<>:"/\\|?*]', "_", filename)


def decode_image(image: Any) -> list[str]:
    """Decode every QR code in a PIL image or an OpenCV frame to raw text."""

    import zxingcpp  # type: ignore[import-not-found]

    if isinstance(image, Image.Image):
        image = image.convert("L")

    read_options: dict[str, Any] = {
        "formats": zxingcpp.BarcodeFormat.QRCode,
        "try_rotate": True,
        "try_downscale": True,
    }
    text_mode = getattr(zxingcpp, "TextMode", None)
    if text_mode is not None:
        read_options["text_mode"] = text_mode.HRI

    payloads: list[str] = []
    for result in zxingcpp.read_barcodes(image, **read_options):
        if hasattr(result, "valid") and not result.valid:
            continue

        payload = normalize_payload_text(getattr(result, "text", ""))
        if not payload:
            raw_bytes = getattr(result, "bytes", b"") or b""
            if not isinstance(raw_bytes, (bytes, bytearray)):
                raw_bytes = bytes(raw_bytes)
            payload = normalize_payload_text(bytes(raw_bytes))
        if payload:
            payloads.append(payload)

    return payloads
