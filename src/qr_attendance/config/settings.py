from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import time
from pathlib import Path

from dotenv import load_dotenv

from qr_attendance.config.user_settings_store import DEFAULT_SETTINGS, UserSettingsStore
from qr_attendance.utils import InvalidClockTime, parse_clock_time

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[3]
ENV_PATH = BASE_DIR / ".env"
load_dotenv(ENV_PATH)

APP_NAME = os.getenv("APP_NAME", "QR Attendance")
user_settings_store = UserSettingsStore()

APP_DATA_DIR = Path(user_settings_store.get("app_data_dir", DEFAULT_SETTINGS["app_data_dir"])).expanduser()
APP_DATA_DIR.mkdir(parents=True, exist_ok=True)

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, fallback: object) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return bool(fallback)
    return raw.strip().lower() in _TRUTHY


def _class_start(store: UserSettingsStore) -> time:
    raw = os.getenv("CLASS_START_TIME") or store.get("class_start_time", DEFAULT_SETTINGS["class_start_time"])
    try:
        return parse_clock_time(str(raw))
    except InvalidClockTime as exc:
        logger.warning("Invalid class start time %r (%s); using %s", raw, exc, DEFAULT_SETTINGS["class_start_time"])
        return parse_clock_time(DEFAULT_SETTINGS["class_start_time"])


def _grace_minutes(store: UserSettingsStore) -> float:
    raw = os.getenv("LATE_GRACE_MINUTES") or store.get("late_grace_minutes", DEFAULT_SETTINGS["late_grace_minutes"])
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid late grace minutes %r; using %s", raw, DEFAULT_SETTINGS["late_grace_minutes"])
        return float(DEFAULT_SETTINGS["late_grace_minutes"])


@dataclass(frozen=True)
class Settings:
    app_name: str = APP_NAME
    database_path: Path = Path(os.getenv("DATABASE_PATH", str(APP_DATA_DIR / "attendance.db")))
    log_path: Path = Path(os.getenv("LOG_PATH", str(APP_DATA_DIR / "qr_attendance.log")))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    qr_camera_index: int = int(os.getenv("QR_CAMERA_INDEX", "0"))
    class_start_time: time = field(default_factory=lambda: _class_start(user_settings_store))
    late_grace_minutes: float = field(default_factory=lambda: _grace_minutes(user_settings_store))
    qr_fill_color: str = user_settings_store.get("qr_fill_color", DEFAULT_SETTINGS["qr_fill_color"])
    seed_sample_data: bool = _env_flag(
        "SEED_SAMPLE_DATA", user_settings_store.get("seed_sample_data", DEFAULT_SETTINGS["seed_sample_data"])
    )

    def describe(self) -> str:
        return (
            f"Settings(app_name={self.app_name}, "
            f"database_path={self.database_path}, "
            f"log_path={self.log_path}, "
            f"qr_camera_index={self.qr_camera_index}, "
            f"class_start_time={self.class_start_time:%H:%M}, "
            f"late_grace_minutes={self.late_grace_minutes}, "
            f"seed_sample_data={self.seed_sample_data})"
        )


settings = Settings()


def refresh_settings_from_store() -> Settings:
    """Rebuild the settings object from the current user store values."""

    global settings, APP_DATA_DIR  # noqa: PLW0603 - module-level singletons

    user_settings_store.reload()

    app_data_dir = Path(user_settings_store.get("app_data_dir", DEFAULT_SETTINGS["app_data_dir"])).expanduser()
    app_data_dir.mkdir(parents=True, exist_ok=True)
    APP_DATA_DIR = app_data_dir

    settings = Settings(
        app_name=APP_NAME,
        database_path=Path(os.getenv("DATABASE_PATH", str(APP_DATA_DIR / "attendance.db"))),
        log_path=settings.log_path,
        log_level=settings.log_level,
        qr_camera_index=settings.qr_camera_index,
        class_start_time=_class_start(user_settings_store),
        late_grace_minutes=_grace_minutes(user_settings_store),
        qr_fill_color=user_settings_store.get("qr_fill_color", DEFAULT_SETTINGS["qr_fill_color"]),
        seed_sample_data=_env_flag(
            "SEED_SAMPLE_DATA", user_settings_store.get("seed_sample_data", DEFAULT_SETTINGS["seed_sample_data"])
        ),
    )
    logger.info("Settings refreshed: %s", settings.describe())
    return settings
