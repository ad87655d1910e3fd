from __future__ import annotations

import logging
import webbrowser
from pathlib import Path
from tkinter import StringVar, filedialog
from typing import Callable

import customtkinter as ctk
from PIL import Image

from qr_attendance.data import StorageError
from qr_attendance.models import Student
from qr_attendance.services import RosterService
from qr_attendance.services.export import render_print_sheet, save_qr_codes
from qr_attendance.services.qr_codec import current_images, encode_payload, generate_qr_image, qr_filename
from qr_attendance.ui.theme import (
    APP_ACCENT,
    APP_ACCENT_HOVER,
    APP_BG,
    APP_CARD,
    APP_DIVIDER,
    APP_SURFACE,
    APP_SURFACE_ALT,
    APP_TEXT,
    APP_TEXT_MUTED,
    TONE_COLORS,
)

logger = logging.getLogger(__name__)

PREVIEW_SIZE = (150, 150)
GRID_COLUMNS = 3


class QRCodesView(ctk.CTkFrame):
    def __init__(
        self,
        master,
        roster_service: RosterService,
        *,
        fill_color: Callable[[], str],
        output_dir: Callable[[], Path],
    ) -> None:
        super().__init__(master, fg_color=APP_BG)
        self._service = roster_service
        self._fill_color = fill_color
        self._output_dir = output_dir

        self._students: list[Student] = []
        self._images: dict[str, Image.Image] = {}
        self._payloads: dict[str, str] = {}
        self._previews: dict[str, ctk.CTkImage] = {}

        self._summary_var = StringVar(value="")
        self._status_var = StringVar(value="")
        self._status_label: ctk.CTkLabel | None = None
        self._generate_button: ctk.CTkButton | None = None
        self._bulk_buttons: list[ctk.CTkButton] = []

        self._build_layout()

    def _build_layout(self) -> None:
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        header = ctk.CTkFrame(self, fg_color=APP_BG)
        header.grid(row=0, column=0, padx=24, pady=(24, 8), sticky="ew")
        header.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            header,
            text="QR code generator",
            font=ctk.CTkFont(size=28, weight="bold"),
            text_color=APP_TEXT,
        ).grid(row=0, column=0, sticky="w")

        self._generate_button = ctk.CTkButton(
            header,
            text="Generate all QR codes",
            width=200,
            fg_color=APP_ACCENT,
            hover_color=APP_ACCENT_HOVER,
            command=self._handle_generate_all,
        )
        self._generate_button.grid(row=0, column=1, padx=(8, 0))

        for column, (text, command) in enumerate(
            (("Save all", self._handle_save_all), ("Print all", self._handle_print_all)), start=2
        ):
            button = ctk.CTkButton(
                header,
                text=text,
                width=120,
                fg_color=APP_SURFACE_ALT,
                hover_color=APP_DIVIDER,
                text_color=APP_TEXT,
                command=command,
                state="disabled",
            )
            button.grid(row=0, column=column, padx=(8, 0))
            self._bulk_buttons.append(button)

        ctk.CTkLabel(header, textvariable=self._summary_var, text_color=APP_TEXT_MUTED).grid(
            row=1, column=0, columnspan=4, sticky="w", pady=(6, 0)
        )

        self._status_label = ctk.CTkLabel(self, textvariable=self._status_var, text_color=APP_TEXT_MUTED)
        self._status_label.grid(row=1, column=0, padx=24, sticky="w")

        self._cards_frame = ctk.CTkScrollableFrame(self, fg_color=APP_SURFACE, corner_radius=12)
        self._cards_frame.grid(row=2, column=0, padx=24, pady=(8, 24), sticky="nsew")
        self._cards_frame.grid_columnconfigure(tuple(range(GRID_COLUMNS)), weight=1, uniform="qr")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        try:
            self._students = self._service.list_students()
        except StorageError as exc:
            self._set_status(f"Failed to load students: {exc}", tone="warning")
            return

        self._images = current_images(self._students, self._images, self._payloads)
        self._payloads = {key: self._payloads[key] for key in self._images}
        self._render_cards()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _render_cards(self) -> None:
        for widget in self._cards_frame.winfo_children():
            widget.destroy()
        self._previews.clear()

        courses = {student.course for student in self._students if student.course}
        self._summary_var.set(
            f"{len(self._students)} students · {len(self._images)} codes generated · {len(courses)} courses"
        )
        bulk_state = "normal" if self._images else "disabled"
        for button in self._bulk_buttons:
            button.configure(state=bulk_state)
        if self._generate_button is not None:
            self._generate_button.configure(state="normal" if self._students else "disabled")

        if not self._students:
            ctk.CTkLabel(
                self._cards_frame,
                text="Add students first to generate their QR codes for attendance.",
                text_color=APP_TEXT_MUTED,
            ).grid(row=0, column=0, columnspan=GRID_COLUMNS, padx=12, pady=12, sticky="w")
            return

        for index, student in enumerate(self._students):
            card = ctk.CTkFrame(self._cards_frame, corner_radius=10, fg_color=APP_CARD)
            card.grid(row=index // GRID_COLUMNS, column=index % GRID_COLUMNS, padx=8, pady=8, sticky="nsew")

            ctk.CTkLabel(
                card,
                text=student.name,
                font=ctk.CTkFont(size=16, weight="bold"),
                text_color=APP_TEXT,
            ).pack(padx=12, pady=(12, 0))
            ctk.CTkLabel(card, text=f"{student.roll_number} · {student.course}", text_color=APP_TEXT_MUTED).pack(
                padx=12
            )

            image = self._images.get(student.id)
            if image is None:
                ctk.CTkLabel(card, text="Not generated", text_color=APP_TEXT_MUTED, height=PREVIEW_SIZE[1]).pack(
                    padx=12, pady=8
                )
                continue

            preview = ctk.CTkImage(light_image=image, dark_image=image, size=PREVIEW_SIZE)
            self._previews[student.id] = preview
            ctk.CTkLabel(card, text="", image=preview).pack(padx=12, pady=8)
            ctk.CTkButton(
                card,
                text="Save",
                width=100,
                fg_color=APP_SURFACE_ALT,
                hover_color=APP_DIVIDER,
                text_color=APP_TEXT,
                command=lambda s=student: self._handle_save_one(s),
            ).pack(padx=12, pady=(0, 12))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _handle_generate_all(self) -> None:
        fill_color = self._fill_color()
        try:
            self._images = {
                student.id: generate_qr_image(student, fill_color=fill_color) for student in self._students
            }
            self._payloads = {student.id: encode_payload(student) for student in self._students}
        except ValueError as exc:
            logger.exception("QR generation failed")
            self._set_status(f"Failed to generate QR codes: {exc}", tone="warning")
            return

        self._render_cards()
        self._set_status(f"Generated {len(self._images)} QR codes successfully.", tone="success")

    def _handle_save_one(self, student: Student) -> None:
        image = self._images.get(student.id)
        if image is None:
            return
        file_name = filedialog.asksaveasfilename(
            title="Save QR code",
            defaultextension=".png",
            filetypes=[("PNG image", "*.png")],
            initialfile=qr_filename(student),
        )
        if not file_name:
            return
        try:
            image.save(file_name, format="PNG")
        except OSError as exc:
            self._set_status(f"Failed to save QR code: {exc}", tone="warning")
            return
        self._set_status(f"Saved {Path(file_name).name}.", tone="success")

    def _handle_save_all(self) -> None:
        directory = filedialog.askdirectory(title="Choose a folder for the QR codes", initialdir=str(self._output_dir()))
        if not directory:
            return
        generated = [student for student in self._students if student.id in self._images]
        try:
            written = save_qr_codes(generated, Path(directory), images=self._images)
        except OSError as exc:
            self._set_status(f"Failed to save QR codes: {exc}", tone="warning")
            return
        self._set_status(f"Saved {len(written)} QR codes to {directory}.", tone="success")

    def _handle_print_all(self) -> None:
        sheet = render_print_sheet(self._students, self._images)
        target = self._output_dir() / "student_qr_codes.html"
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(sheet, encoding="utf-8")
        except OSError as exc:
            self._set_status(f"Failed to write print sheet: {exc}", tone="warning")
            return
        webbrowser.open(target.resolve().as_uri())
        self._set_status(f"Opened print sheet {target.name} in your browser.", tone="success")

    def _set_status(self, message: str, tone: str = "info") -> None:
        self._status_var.set(message)
        if self._status_label is not None:
            self._status_label.configure(text_color=TONE_COLORS.get(tone, APP_TEXT_MUTED))
