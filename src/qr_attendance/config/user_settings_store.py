from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = os.getenv("APP_NAME", "QR Attendance")
DOCUMENTS_PATH = Path(os.path.expanduser("~")) / "Documents"
DEFAULT_POINTER_DIR = DOCUMENTS_PATH / DEFAULT_APP_NAME
DEFAULT_SETTINGS_FILENAME = "user_settings.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
	"class_start_time": "09:00",
	"late_grace_minutes": 15,
	"qr_fill_color": "#1e40af",
	"seed_sample_data": False,
	"app_data_dir": str(DEFAULT_POINTER_DIR),
}


@dataclass
class UserSettingsStore:
	"""Load and persist user-configurable settings in a JSON file.

	A pointer copy lives in ``pointer_dir`` so the app can find a relocated
	data folder on the next start; the full copy lives in the data folder.
	"""

	pointer_dir: Path = field(default_factory=lambda: DEFAULT_POINTER_DIR)
	settings_filename: str = DEFAULT_SETTINGS_FILENAME
	_data: Dict[str, Any] = field(init=False, default_factory=dict)
	app_data_dir: Path = field(init=False)
	settings_file: Path = field(init=False)

	def __post_init__(self) -> None:
		self.pointer_dir = Path(self.pointer_dir)
		self.pointer_dir.mkdir(parents=True, exist_ok=True)
		self.reload()

	# ------------------------------------------------------------------
	# Public API
	# ------------------------------------------------------------------
	@property
	def data(self) -> Dict[str, Any]:
		return dict(self._data)

	def get(self, key: str, default: Any = None) -> Any:
		return self._data.get(key, default)

	def reload(self) -> None:
		pointer_path = self.pointer_dir / self.settings_filename
		pointer_data = self._load_json(pointer_path)

		app_data_raw = pointer_data.get("app_data_dir") or str(self.pointer_dir)
		self.app_data_dir = Path(app_data_raw).expanduser()
		self.app_data_dir.mkdir(parents=True, exist_ok=True)

		self.settings_file = self.app_data_dir / self.settings_filename
		file_data = self._load_json(self.settings_file)

		combined = dict(DEFAULT_SETTINGS)
		combined.update(pointer_data)
		combined.update(file_data)
		combined["app_data_dir"] = str(self.app_data_dir)
		self._data = self._coerce(combined)

	def update(self, **kwargs: Any) -> Dict[str, Any]:
		new_data = dict(self._data)
		app_data_dir_changed = False

		if kwargs.get("app_data_dir"):
			new_dir = Path(kwargs.pop("app_data_dir")).expanduser()
			if new_dir != self.app_data_dir:
				app_data_dir_changed = True
			new_data["app_data_dir"] = str(new_dir)
		kwargs.pop("app_data_dir", None)

		for key, value in kwargs.items():
			if key in DEFAULT_SETTINGS:
				new_data[key] = value
			else:
				logger.warning("Ignoring unknown setting %r", key)

		self._data = new_data

		if app_data_dir_changed:
			self.app_data_dir = Path(self._data["app_data_dir"]).expanduser()
			self.app_data_dir.mkdir(parents=True, exist_ok=True)
			self.settings_file = self.app_data_dir / self.settings_filename

		self._persist()
		return dict(self._data)

	# ------------------------------------------------------------------
	# Internal helpers
	# ------------------------------------------------------------------
	def _persist(self) -> None:
		pointer_path = self.pointer_dir / self.settings_filename

		with pointer_path.open("w", encoding="utf-8") as handle:
			json.dump(self._data, handle, indent=2)

		if self.settings_file != pointer_path:
			with self.settings_file.open("w", encoding="utf-8") as handle:
				json.dump(self._data, handle, indent=2)

	@staticmethod
	def _coerce(data: Dict[str, Any]) -> Dict[str, Any]:
		"""Replace hand-edited values of the wrong type with their defaults."""
		cleaned = dict(data)

		grace = cleaned.get("late_grace_minutes")
		if isinstance(grace, bool) or not isinstance(grace, (int, float)) or grace < 0:
			logger.warning("Invalid late_grace_minutes %r in settings; using default", grace)
			cleaned["late_grace_minutes"] = DEFAULT_SETTINGS["late_grace_minutes"]

		for key in ("class_start_time", "qr_fill_color"):
			if not isinstance(cleaned.get(key), str):
				logger.warning("Invalid %s %r in settings; using default", key, cleaned.get(key))
				cleaned[key] = DEFAULT_SETTINGS[key]

		cleaned["seed_sample_data"] = bool(cleaned.get("seed_sample_data"))
		return cleaned

	@staticmethod
	def _load_json(path: Path) -> Dict[str, Any]:
		if not path.exists():
			return {}
		try:
			with path.open("r", encoding="utf-8") as handle:
				data = json.load(handle)
		except (OSError, ValueError) as exc:
			logger.warning("Could not read settings file %s: %s", path, exc)
			return {}
		return data if isinstance(data, dict) else {}
