from __future__ import annotations

import sys
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent
SRC_DIR = PACKAGE_DIR.parent
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from qr_attendance.config.log_setup import configure_logging
from qr_attendance.config.settings import settings


def main() -> None:
    logger = configure_logging(settings.log_path, settings.log_level)
    logger.info(settings.describe())

    from qr_attendance.ui.app import AttendanceApp

    app = AttendanceApp()
    app.run()


if __name__ == "__main__":
    main()
