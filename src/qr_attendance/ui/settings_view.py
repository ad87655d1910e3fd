from __future__ import annotations

import re
from pathlib import Path
from tkinter import BooleanVar, StringVar
from typing import Any, Callable

import customtkinter as ctk
from customtkinter import filedialog

from qr_attendance.config.user_settings_store import DEFAULT_SETTINGS, UserSettingsStore
from qr_attendance.ui.theme import (
    APP_ACCENT,
    APP_ACCENT_HOVER,
    APP_BG,
    APP_BORDER,
    APP_DIVIDER,
    APP_SURFACE,
    APP_SURFACE_ALT,
    APP_TEXT,
    APP_TEXT_MUTED,
    TONE_COLORS,
)
from qr_attendance.utils import InvalidClockTime, parse_clock_time

HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


class SettingsView(ctk.CTkFrame):
    """Settings form backed by the UserSettingsStore."""

    def __init__(
        self,
        master: Any,
        *,
        store: UserSettingsStore,
        on_settings_saved: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        super().__init__(master, fg_color=APP_BG)
        self._store = store
        self._on_settings_saved = on_settings_saved

        self._class_start_var = StringVar()
        self._grace_minutes_var = StringVar()
        self._fill_color_var = StringVar()
        self._app_data_dir_var = StringVar()
        self._seed_sample_var = BooleanVar(value=False)

        self._status_label: ctk.CTkLabel | None = None

        self._build_layout()
        self.refresh()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        """Reload the form inputs from the underlying store."""

        data = self._store.data
        self._class_start_var.set(str(data.get("class_start_time", DEFAULT_SETTINGS["class_start_time"])))
        self._grace_minutes_var.set(str(data.get("late_grace_minutes", DEFAULT_SETTINGS["late_grace_minutes"])))
        self._fill_color_var.set(str(data.get("qr_fill_color", DEFAULT_SETTINGS["qr_fill_color"])))
        self._app_data_dir_var.set(str(data.get("app_data_dir", DEFAULT_SETTINGS["app_data_dir"])))
        self._seed_sample_var.set(bool(data.get("seed_sample_data", DEFAULT_SETTINGS["seed_sample_data"])))

    def _build_layout(self) -> None:
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        container = ctk.CTkFrame(self, fg_color=APP_SURFACE, corner_radius=18)
        container.grid(row=0, column=0, padx=24, pady=24, sticky="nsew")
        container.grid_columnconfigure(0, weight=0)
        container.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            container,
            text="Settings",
            font=ctk.CTkFont(size=28, weight="bold"),
            text_color=APP_TEXT,
        ).grid(row=0, column=0, columnspan=2, sticky="w", padx=28, pady=(28, 8))

        ctk.CTkLabel(
            container,
            text=(
                "Set when class starts, how long students may arrive before being marked late, "
                "and where attendance data is stored. Timing changes apply to the next scan."
            ),
            justify="left",
            wraplength=640,
            text_color=APP_TEXT_MUTED,
        ).grid(row=1, column=0, columnspan=2, sticky="w", padx=28, pady=(0, 20))

        row_index = 2
        row_index = self._build_text_field(
            container,
            row=row_index,
            label="Class start time",
            variable=self._class_start_var,
            helper="24-hour clock, for example 09:00.",
            width=90,
        )
        row_index = self._build_text_field(
            container,
            row=row_index,
            label="Late after (minutes)",
            variable=self._grace_minutes_var,
            helper="Check-ins more than this many minutes after the start time are marked late.",
            width=90,
        )
        row_index = self._build_text_field(
            container,
            row=row_index,
            label="QR code colour",
            variable=self._fill_color_var,
            helper="Hex colour used for the dark modules of generated QR codes.",
            width=120,
        )
        row_index = self._build_app_data_field(container, row=row_index)

        ctk.CTkCheckBox(
            container,
            text="Load sample students when the roster is empty",
            variable=self._seed_sample_var,
            onvalue=True,
            offvalue=False,
            text_color=APP_TEXT,
            fg_color=APP_ACCENT,
            hover_color=APP_ACCENT_HOVER,
        ).grid(row=row_index, column=0, columnspan=2, sticky="w", padx=28, pady=(0, 14))
        row_index += 1

        buttons_row = ctk.CTkFrame(container, fg_color=APP_SURFACE)
        buttons_row.grid(row=row_index, column=0, columnspan=2, sticky="ew", padx=28, pady=(12, 24))
        buttons_row.grid_columnconfigure(0, weight=1)

        ctk.CTkButton(
            buttons_row,
            text="Reset to defaults",
            width=160,
            text_color=APP_TEXT,
            fg_color=APP_SURFACE_ALT,
            hover_color=APP_DIVIDER,
            command=self._handle_reset,
        ).grid(row=0, column=1, padx=(0, 8))

        ctk.CTkButton(
            buttons_row,
            text="Save changes",
            width=180,
            fg_color=APP_ACCENT,
            hover_color=APP_ACCENT_HOVER,
            command=self._handle_save,
        ).grid(row=0, column=2)

        self._status_label = ctk.CTkLabel(
            container,
            text="",
            text_color=APP_TEXT_MUTED,
            wraplength=640,
            justify="left",
        )
        self._status_label.grid(row=row_index + 1, column=0, columnspan=2, sticky="w", padx=28, pady=(0, 12))

    def _build_text_field(
        self,
        parent: ctk.CTkFrame,
        *,
        row: int,
        label: str,
        variable: StringVar,
        helper: str,
        width: int,
    ) -> int:
        ctk.CTkLabel(parent, text=label, text_color=APP_TEXT, font=ctk.CTkFont(size=18)).grid(
            row=row, column=0, sticky="w", padx=28, pady=(0, 6)
        )
        ctk.CTkEntry(
            parent,
            textvariable=variable,
            width=width,
            fg_color=APP_BG,
            border_color=APP_BORDER,
            text_color=APP_TEXT,
        ).grid(row=row, column=1, sticky="w", padx=(12, 28), pady=(0, 6))
        ctk.CTkLabel(
            parent,
            text=helper,
            text_color=APP_TEXT_MUTED,
            wraplength=480,
            font=ctk.CTkFont(size=14),
        ).grid(row=row + 1, column=0, columnspan=2, sticky="w", padx=28, pady=(0, 14))
        return row + 2

    def _build_app_data_field(self, parent: ctk.CTkFrame, *, row: int) -> int:
        ctk.CTkLabel(parent, text="App data directory", text_color=APP_TEXT, font=ctk.CTkFont(size=18)).grid(
            row=row, column=0, sticky="w", padx=28, pady=(0, 6)
        )

        field_container = ctk.CTkFrame(parent, fg_color=APP_SURFACE)
        field_container.grid(row=row, column=1, sticky="w", padx=(12, 28), pady=(0, 6))

        ctk.CTkEntry(
            field_container,
            textvariable=self._app_data_dir_var,
            fg_color=APP_BG,
            border_color=APP_BORDER,
            text_color=APP_TEXT,
            width=480,
        ).grid(row=0, column=0, sticky="w", padx=(0, 12))
        ctk.CTkButton(
            field_container,
            text="Browse",
            width=100,
            text_color=APP_TEXT,
            fg_color=APP_SURFACE_ALT,
            hover_color=APP_DIVIDER,
            command=self._choose_app_data_dir,
        ).grid(row=0, column=1, sticky="w")

        ctk.CTkLabel(
            parent,
            text="This folder stores the attendance database, the log file and exported QR sheets.",
            text_color=APP_TEXT_MUTED,
            wraplength=540,
            font=ctk.CTkFont(size=14),
            justify="left",
        ).grid(row=row + 1, column=0, columnspan=2, sticky="w", padx=28, pady=(0, 14))
        return row + 2

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _handle_reset(self) -> None:
        self._class_start_var.set(str(DEFAULT_SETTINGS["class_start_time"]))
        self._grace_minutes_var.set(str(DEFAULT_SETTINGS["late_grace_minutes"]))
        self._fill_color_var.set(str(DEFAULT_SETTINGS["qr_fill_color"]))
        self._app_data_dir_var.set(str(DEFAULT_SETTINGS["app_data_dir"]))
        self._seed_sample_var.set(bool(DEFAULT_SETTINGS["seed_sample_data"]))
        self._set_status("Fields reset. Save to persist the changes.", tone="info")

    def _handle_save(self) -> None:
        errors: list[str] = []

        class_start = self._class_start_var.get().strip()
        try:
            parse_clock_time(class_start)
        except InvalidClockTime as exc:
            errors.append(f"Class start time: {exc}")

        grace_minutes = self._validate_minutes(self._grace_minutes_var.get(), errors=errors)

        fill_color = self._fill_color_var.get().strip()
        if not HEX_COLOR_PATTERN.match(fill_color):
            errors.append("QR code colour must look like #1e40af.")

        app_data_raw = self._app_data_dir_var.get().strip()
        app_data_dir: Path | None = None
        if app_data_raw:
            candidate = Path(app_data_raw).expanduser()
            try:
                candidate.mkdir(parents=True, exist_ok=True)
                app_data_dir = candidate
            except OSError:
                errors.append("Unable to create or access the selected app data directory.")
        else:
            errors.append("App data directory is required.")

        if errors:
            self._set_status("\n".join(errors), tone="warning")
            return

        updated = self._store.update(
            class_start_time=class_start,
            late_grace_minutes=grace_minutes,
            qr_fill_color=fill_color.lower(),
            app_data_dir=str(app_data_dir),
            seed_sample_data=bool(self._seed_sample_var.get()),
        )
        self.refresh()
        self._set_status("Settings saved successfully.", tone="success")

        if self._on_settings_saved is not None:
            self._on_settings_saved(updated)

    def _validate_minutes(self, raw: str, *, errors: list[str]) -> int | float | None:
        value = raw.strip()
        if not value:
            errors.append("Late threshold is required.")
            return None
        try:
            parsed = float(value)
        except ValueError:
            errors.append("Late threshold must be a number of minutes.")
            return None
        if parsed < 0:
            errors.append("Late threshold cannot be negative.")
            return None
        return int(parsed) if parsed.is_integer() else parsed

    def _choose_app_data_dir(self) -> None:
        initial_dir = self._app_data_dir_var.get().strip() or None
        selected = filedialog.askdirectory(title="Select app data directory", initialdir=initial_dir)
        if selected:
            self._app_data_dir_var.set(str(Path(selected).expanduser()))

    def _set_status(self, message: str, *, tone: str = "info") -> None:
        if self._status_label is None:
            return
        self._status_label.configure(text=message, text_color=TONE_COLORS.get(tone, APP_TEXT_MUTED))
