from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(log_path: Path | None, level: str | int = "INFO") -> logging.Logger:
    """Attach file and console handlers to the package logger once."""

    package_logger = logging.getLogger("qr_attendance")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    package_logger.setLevel(level)

    if getattr(package_logger, "_qr_attendance_configured", False):
        return package_logger

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.setLevel(level)
        package_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.setLevel(level)
    package_logger.addHandler(console_handler)

    package_logger._qr_attendance_configured = True  # type: ignore[attr-defined]
    package_logger.info("QR Attendance startup")
    return package_logger
