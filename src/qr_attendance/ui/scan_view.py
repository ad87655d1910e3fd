from __future__ import annotations

import logging
import threading
from tkinter import StringVar
from typing import Any, Callable

import customtkinter as ctk
from PIL import Image, ImageOps

from qr_attendance.data import StorageError
from qr_attendance.models import AttendanceRecord
from qr_attendance.services import AttendanceService, DuplicateAttendanceError, QRScanner, StudentNotFoundError
from qr_attendance.ui.theme import (
    APP_ACCENT,
    APP_ACCENT_HOVER,
    APP_BG,
    APP_BORDER,
    APP_CARD,
    APP_DIVIDER,
    APP_SURFACE,
    APP_SURFACE_ALT,
    APP_TEXT,
    APP_TEXT_MUTED,
    STATUS_COLORS,
    TONE_COLORS,
)
from qr_attendance.utils import format_scan_time

logger = logging.getLogger(__name__)

PREVIEW_SIZE = (360, 360)


class ScanView(ctk.CTkFrame):
    """Camera scanning and manual check-in.

    Every decoded payload goes straight to the attendance service; the
    outcome of the latest attempt is shown in the result card.
    """

    def __init__(
        self,
        master,
        attendance_service: AttendanceService,
        *,
        camera_index: int = 0,
        on_scanning_changed: Callable[[bool], None] | None = None,
        on_attendance_recorded: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(master, fg_color=APP_BG)
        self._service = attendance_service
        self._scanner = QRScanner(camera_index=camera_index)
        self._on_scanning_changed = on_scanning_changed
        self._on_attendance_recorded = on_attendance_recorded

        self._scanner_status_var = StringVar(value="Scanner idle")
        self._manual_var = StringVar(value="")
        self._result_title_var = StringVar(value="No scans yet")
        self._result_detail_var = StringVar(value="Scan a student QR code or enter an ID below.")
        self._result_status_var = StringVar(value="")

        self._scanner_status_label: ctk.CTkLabel | None = None
        self._result_status_label: ctk.CTkLabel | None = None
        self._control_button: ctk.CTkButton | None = None
        self._preview_label: ctk.CTkLabel | None = None
        self._preview_image: ctk.CTkImage | None = None
        self._preview_busy = False
        placeholder = Image.new("RGB", PREVIEW_SIZE, APP_SURFACE_ALT)
        self._preview_placeholder = ctk.CTkImage(light_image=placeholder, dark_image=placeholder, size=PREVIEW_SIZE)

        self._build_layout()

    def _build_layout(self) -> None:
        self.grid_columnconfigure(0, weight=3, uniform="scan")
        self.grid_columnconfigure(1, weight=2, uniform="scan")
        self.grid_rowconfigure(1, weight=1)

        ctk.CTkLabel(
            self,
            text="Scan attendance",
            font=ctk.CTkFont(size=28, weight="bold"),
            text_color=APP_TEXT,
        ).grid(row=0, column=0, columnspan=2, padx=24, pady=(24, 12), sticky="w")

        camera_panel = ctk.CTkFrame(self, corner_radius=12, fg_color=APP_SURFACE)
        camera_panel.grid(row=1, column=0, padx=(24, 8), pady=(0, 24), sticky="nsew")
        camera_panel.grid_columnconfigure(0, weight=1)

        header_row = ctk.CTkFrame(camera_panel, fg_color=APP_SURFACE)
        header_row.grid(row=0, column=0, padx=20, pady=(18, 8), sticky="ew")
        header_row.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(
            header_row,
            text="QR scanner",
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=APP_TEXT,
        ).grid(row=0, column=0, sticky="w")
        self._control_button = ctk.CTkButton(
            header_row,
            text="Start scanner",
            width=150,
            fg_color=APP_ACCENT,
            hover_color=APP_ACCENT_HOVER,
            command=self._handle_toggle_scanner,
        )
        self._control_button.grid(row=0, column=1, sticky="e")

        self._preview_label = ctk.CTkLabel(
            camera_panel,
            text="Camera preview inactive",
            image=self._preview_placeholder,
            compound="center",
            text_color=APP_TEXT_MUTED,
        )
        self._preview_label.grid(row=1, column=0, padx=20, pady=8)

        self._scanner_status_label = ctk.CTkLabel(
            camera_panel, textvariable=self._scanner_status_var, text_color=APP_TEXT_MUTED
        )
        self._scanner_status_label.grid(row=2, column=0, padx=20, pady=(0, 8), sticky="w")

        ctk.CTkLabel(
            camera_panel,
            text="Manual entry (student ID or roll number)",
            font=ctk.CTkFont(size=16),
            text_color=APP_TEXT,
        ).grid(row=3, column=0, padx=20, pady=(8, 0), sticky="w")

        manual_row = ctk.CTkFrame(camera_panel, fg_color=APP_SURFACE)
        manual_row.grid(row=4, column=0, padx=20, pady=(2, 18), sticky="ew")
        manual_row.grid_columnconfigure(0, weight=1)
        entry = ctk.CTkEntry(
            manual_row,
            textvariable=self._manual_var,
            placeholder_text="CS001",
            fg_color=APP_BG,
            border_color=APP_BORDER,
            text_color=APP_TEXT,
            placeholder_text_color=APP_TEXT_MUTED,
        )
        entry.grid(row=0, column=0, sticky="ew")
        entry.bind("<Return>", lambda _event: self._handle_manual_submit())
        ctk.CTkButton(
            manual_row,
            text="Record",
            width=110,
            fg_color=APP_SURFACE_ALT,
            hover_color=APP_DIVIDER,
            text_color=APP_TEXT,
            command=self._handle_manual_submit,
        ).grid(row=0, column=1, padx=(8, 0))

        result_panel = ctk.CTkFrame(self, corner_radius=12, fg_color=APP_SURFACE)
        result_panel.grid(row=1, column=1, padx=(8, 24), pady=(0, 24), sticky="nsew")
        result_panel.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            result_panel,
            text="Last scan",
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=APP_TEXT,
        ).grid(row=0, column=0, padx=20, pady=(18, 8), sticky="w")

        card = ctk.CTkFrame(result_panel, corner_radius=10, fg_color=APP_CARD, border_color=APP_BORDER, border_width=1)
        card.grid(row=1, column=0, padx=20, pady=(0, 18), sticky="ew")
        card.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(
            card,
            textvariable=self._result_title_var,
            font=ctk.CTkFont(size=18, weight="bold"),
            text_color=APP_TEXT,
        ).grid(row=0, column=0, padx=16, pady=(14, 0), sticky="w")
        self._result_status_label = ctk.CTkLabel(
            card,
            textvariable=self._result_status_var,
            font=ctk.CTkFont(size=14, weight="bold"),
            text_color=APP_TEXT_MUTED,
        )
        self._result_status_label.grid(row=1, column=0, padx=16, sticky="w")
        ctk.CTkLabel(
            card,
            textvariable=self._result_detail_var,
            text_color=APP_TEXT_MUTED,
            wraplength=260,
            justify="left",
        ).grid(row=2, column=0, padx=16, pady=(0, 14), sticky="w")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        if not self._scanner.is_running:
            self._set_scanner_status("Scanner idle")

    def set_camera_index(self, camera_index: int) -> None:
        if self._scanner.is_running:
            self._scanner.stop()
        self._scanner = QRScanner(camera_index=camera_index)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def _handle_manual_submit(self) -> None:
        text = self._manual_var.get().strip()
        if not text:
            self._show_result("Nothing to record", "Enter a student ID or roll number first.", tone="warning")
            return
        if self._record(text):
            self._manual_var.set("")

    def _record(self, payload: str) -> bool:
        try:
            record = self._service.record_scan(payload)
        except StudentNotFoundError:
            self._show_result(
                "Student not found",
                "Student not found. Please check the QR code.",
                tone="warning",
            )
            return False
        except DuplicateAttendanceError as exc:
            self._show_result(
                exc.student.name,
                str(exc),
                status=exc.existing.status.value,
                tone="info",
            )
            return False
        except StorageError as exc:
            self._show_result("Not recorded", f"Failed to save attendance: {exc}", tone="warning")
            return False

        self._show_record(record)
        if self._on_attendance_recorded is not None:
            self._on_attendance_recorded()
        return True

    def _show_record(self, record: AttendanceRecord) -> None:
        status = record.status.value
        detail = f"{record.roll_number} · checked in at {format_scan_time(record.timestamp)}"
        if status == "late":
            detail += "\nMarked late: arrived after the grace period."
        self._show_result(record.student_name, detail, status=status, tone="success")

    def _show_result(self, title: str, detail: str, *, status: str = "", tone: str = "info") -> None:
        self._result_title_var.set(title)
        self._result_detail_var.set(detail)
        self._result_status_var.set(status.upper())
        if self._result_status_label is not None:
            color = STATUS_COLORS.get(status) or TONE_COLORS.get(tone, APP_TEXT_MUTED)
            self._result_status_label.configure(text_color=color)

    # ------------------------------------------------------------------
    # Scanner lifecycle
    # ------------------------------------------------------------------
    def _handle_toggle_scanner(self) -> None:
        if self._scanner.is_running:
            self._stop_scanner()
        else:
            self._start_scanner()

    def _start_scanner(self) -> None:
        if self._control_button is not None:
            self._control_button.configure(state="disabled")
        self._set_scanner_status("Starting scanner…")
        self._reset_preview("Camera preview inactive")

        def _start() -> None:
            def _on_payload(payload: str) -> None:
                self.after(0, lambda: self._handle_payload(payload))

            def _on_error(message: str) -> None:
                self.after(0, lambda: self._handle_scanner_error(message))

            def _on_frame(frame: Any) -> None:
                self.after(0, lambda f=frame: self._handle_frame(f))

            started = self._scanner.start(_on_payload, on_error=_on_error, on_frame=_on_frame)

            def _finalize() -> None:
                if not self.winfo_exists():
                    return
                if not started or not self._scanner.is_running:
                    if self._scanner_status_var.get() == "Starting scanner…":
                        self._set_scanner_status("Scanner unavailable.", tone="warning")
                    self._configure_control(running=False)
                    return
                self._configure_control(running=True)
                self._reset_preview("Waiting for camera…")
                self._set_scanner_status("Scanner active", tone="success")

            self.after(0, _finalize)

        threading.Thread(target=_start, daemon=True).start()

    def _stop_scanner(self) -> None:
        if self._control_button is not None:
            self._control_button.configure(state="disabled")
        self._set_scanner_status("Stopping scanner…")

        def _stop() -> None:
            self._scanner.stop()

            def _finalize() -> None:
                if not self.winfo_exists():
                    return
                self._configure_control(running=False)
                if self._scanner_status_var.get() == "Stopping scanner…":
                    self._set_scanner_status("Scanner idle")
                self._reset_preview("Camera preview inactive")

            self.after(0, _finalize)

        threading.Thread(target=_stop, daemon=True).start()

    def _configure_control(self, *, running: bool) -> None:
        if self._control_button is not None:
            self._control_button.configure(
                state="normal",
                text="Stop scanner" if running else "Start scanner",
            )
        if self._on_scanning_changed is not None:
            self._on_scanning_changed(running)

    def _handle_payload(self, payload: str) -> None:
        if not payload.strip():
            return
        self._record(payload)

    def _handle_scanner_error(self, message: str) -> None:
        self._set_scanner_status(message, tone="warning")
        self._configure_control(running=False)
        self._reset_preview("Camera preview inactive")

    def _handle_frame(self, frame: Any) -> None:
        if not self.winfo_exists() or self._preview_label is None or self._preview_busy:
            return
        if frame is None or not self._scanner.is_running:
            return

        self._preview_busy = True
        try:
            import cv2  # type: ignore[import-not-found]

            rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            square_image = ImageOps.fit(
                Image.fromarray(rgb_frame),
                PREVIEW_SIZE,
                method=Image.Resampling.LANCZOS,
                centering=(0.5, 0.5),
            )
            self._preview_image = ctk.CTkImage(light_image=square_image, dark_image=square_image, size=PREVIEW_SIZE)
            self._preview_label.configure(image=self._preview_image, text="")
        except (ImportError, ValueError) as exc:
            logger.debug("Preview frame skipped: %s", exc)
        finally:
            self._preview_busy = False

    def _reset_preview(self, text: str) -> None:
        if self._preview_label is not None:
            self._preview_label.configure(image=self._preview_placeholder, text=text)
        self._preview_image = None
        self._preview_busy = False

    def _set_scanner_status(self, message: str, tone: str = "info") -> None:
        self._scanner_status_var.set(message)
        if self._scanner_status_label is not None:
            self._scanner_status_label.configure(text_color=TONE_COLORS.get(tone, APP_TEXT_MUTED))

    def destroy(self) -> None:  # pragma: no cover - lifecycle hook
        self._scanner.stop()
        super().destroy()
