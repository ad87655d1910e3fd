from __future__ import annotations

import tkinter.messagebox as messagebox
from tkinter import StringVar
from typing import Callable

import customtkinter as ctk

from qr_attendance.data import StorageError
from qr_attendance.models import Student, StudentDraft
from qr_attendance.services import RosterService, StudentNotInRosterError, StudentValidationError
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
    APP_WARNING,
    TONE_COLORS,
)

FORM_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("name", "Full name", "Alice Johnson"),
    ("roll_number", "Roll number", "CS001"),
    ("email", "Email", "alice.johnson@university.edu"),
    ("course", "Course", "Computer Science"),
)


class StudentsView(ctk.CTkFrame):
    """Roster management: add, edit and delete enrolled students."""

    def __init__(
        self,
        master,
        roster_service: RosterService,
        *,
        on_roster_changed: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(master, fg_color=APP_BG)
        self._service = roster_service
        self._on_roster_changed = on_roster_changed
        self._editing_id: str | None = None

        self._field_vars: dict[str, StringVar] = {key: StringVar() for key, _, _ in FORM_FIELDS}
        self._status_var = StringVar(value="")
        self._form_title_var = StringVar(value="Add student")
        self._count_var = StringVar(value="")
        self._status_label: ctk.CTkLabel | None = None
        self._submit_button: ctk.CTkButton | None = None
        self._cancel_button: ctk.CTkButton | None = None

        self._build_layout()

    def _build_layout(self) -> None:
        self.grid_rowconfigure(1, weight=1)
        self.grid_columnconfigure(0, weight=2, uniform="students")
        self.grid_columnconfigure(1, weight=3, uniform="students")

        ctk.CTkLabel(
            self,
            text="Student management",
            font=ctk.CTkFont(size=28, weight="bold"),
            text_color=APP_TEXT,
        ).grid(row=0, column=0, columnspan=2, padx=24, pady=(24, 12), sticky="w")

        form = ctk.CTkFrame(self, corner_radius=12, fg_color=APP_SURFACE)
        form.grid(row=1, column=0, padx=(24, 8), pady=(0, 24), sticky="nsew")
        form.grid_columnconfigure(0, weight=1)
        self._build_form(form)

        roster_panel = ctk.CTkFrame(self, corner_radius=12, fg_color=APP_SURFACE)
        roster_panel.grid(row=1, column=1, padx=(8, 24), pady=(0, 24), sticky="nsew")
        roster_panel.grid_columnconfigure(0, weight=1)
        roster_panel.grid_rowconfigure(1, weight=1)

        ctk.CTkLabel(
            roster_panel,
            textvariable=self._count_var,
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=APP_TEXT,
        ).grid(row=0, column=0, padx=20, pady=(18, 8), sticky="w")

        self._roster_list = ctk.CTkScrollableFrame(roster_panel, fg_color=APP_SURFACE_ALT)
        self._roster_list.grid(row=1, column=0, padx=12, pady=(0, 12), sticky="nsew")

    def _build_form(self, frame: ctk.CTkFrame) -> None:
        label_font = ctk.CTkFont(size=16)

        ctk.CTkLabel(
            frame,
            textvariable=self._form_title_var,
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=APP_TEXT,
        ).grid(row=0, column=0, padx=20, pady=(18, 12), sticky="w")

        row = 1
        for key, label, placeholder in FORM_FIELDS:
            ctk.CTkLabel(frame, text=label, font=label_font, text_color=APP_TEXT).grid(
                row=row, column=0, padx=20, pady=(6, 0), sticky="w"
            )
            ctk.CTkEntry(
                frame,
                textvariable=self._field_vars[key],
                placeholder_text=placeholder,
                fg_color=APP_BG,
                border_color=APP_BORDER,
                text_color=APP_TEXT,
                placeholder_text_color=APP_TEXT_MUTED,
            ).grid(row=row + 1, column=0, padx=20, pady=(2, 6), sticky="ew")
            row += 2

        button_row = ctk.CTkFrame(frame, fg_color=APP_SURFACE)
        button_row.grid(row=row, column=0, padx=20, pady=(12, 6), sticky="ew")
        button_row.grid_columnconfigure(0, weight=1)

        self._cancel_button = ctk.CTkButton(
            button_row,
            text="Cancel",
            width=110,
            fg_color=APP_SURFACE_ALT,
            hover_color=APP_DIVIDER,
            text_color=APP_TEXT,
            command=self._reset_form,
        )
        self._cancel_button.grid(row=0, column=1, padx=(0, 8))
        self._cancel_button.grid_remove()

        self._submit_button = ctk.CTkButton(
            button_row,
            text="Add student",
            width=160,
            fg_color=APP_ACCENT,
            hover_color=APP_ACCENT_HOVER,
            command=self._handle_submit,
        )
        self._submit_button.grid(row=0, column=2)

        self._status_label = ctk.CTkLabel(
            frame,
            textvariable=self._status_var,
            text_color=APP_TEXT_MUTED,
            wraplength=320,
            justify="left",
        )
        self._status_label.grid(row=row + 1, column=0, padx=20, pady=(4, 18), sticky="w")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        try:
            students = self._service.list_students()
        except StorageError as exc:
            self._set_status(f"Failed to load students: {exc}", tone="warning")
            return
        self._render_roster(students)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _render_roster(self, students: list[Student]) -> None:
        for widget in self._roster_list.winfo_children():
            widget.destroy()

        self._count_var.set(f"Enrolled students ({len(students)})")

        if not students:
            ctk.CTkLabel(
                self._roster_list,
                text="No students yet. Add the first one using the form.",
                text_color=APP_TEXT_MUTED,
            ).pack(anchor="w", padx=12, pady=6)
            return

        for student in students:
            card = ctk.CTkFrame(self._roster_list, corner_radius=10, fg_color=APP_CARD)
            card.pack(fill="x", padx=8, pady=4)
            card.grid_columnconfigure(0, weight=1)

            ctk.CTkLabel(
                card,
                text=student.name,
                font=ctk.CTkFont(size=16, weight="bold"),
                text_color=APP_TEXT,
            ).grid(row=0, column=0, padx=12, pady=(8, 0), sticky="w")
            ctk.CTkLabel(
                card,
                text=f"{student.roll_number} · {student.course} · {student.email}",
                text_color=APP_TEXT_MUTED,
            ).grid(row=1, column=0, padx=12, pady=(0, 8), sticky="w")

            ctk.CTkButton(
                card,
                text="Edit",
                width=70,
                fg_color=APP_SURFACE_ALT,
                hover_color=APP_DIVIDER,
                text_color=APP_TEXT,
                command=lambda s=student: self._start_edit(s),
            ).grid(row=0, column=1, rowspan=2, padx=(0, 6))
            ctk.CTkButton(
                card,
                text="Delete",
                width=70,
                fg_color=APP_WARNING,
                hover_color="#B91C1C",
                command=lambda s=student: self._handle_delete(s),
            ).grid(row=0, column=2, rowspan=2, padx=(0, 12))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _current_draft(self) -> StudentDraft:
        return StudentDraft(**{key: var.get() for key, var in self._field_vars.items()})

    def _handle_submit(self) -> None:
        draft = self._current_draft()
        try:
            if self._editing_id is not None:
                student = self._service.update_student(self._editing_id, draft)
                message = f"{student.name} has been updated successfully."
            else:
                student = self._service.add_student(draft)
                message = f"{student.name} has been added to the roster."
        except StudentValidationError as exc:
            self._set_status(str(exc), tone="warning")
            return
        except (StudentNotInRosterError, StorageError) as exc:
            self._set_status(f"Failed to save student: {exc}", tone="warning")
            return

        self._reset_form()
        self._set_status(message, tone="success")
        self._notify_changed()

    def _start_edit(self, student: Student) -> None:
        self._editing_id = student.id
        for key, var in self._field_vars.items():
            var.set(getattr(student, key))
        self._form_title_var.set("Edit student")
        if self._submit_button is not None:
            self._submit_button.configure(text="Update student")
        if self._cancel_button is not None:
            self._cancel_button.grid()
        self._set_status("")

    def _handle_delete(self, student: Student) -> None:
        confirmed = messagebox.askyesno(
            "Delete student",
            f"Remove {student.name} ({student.roll_number}) from the roster?",
        )
        if not confirmed:
            return

        try:
            self._service.delete_student(student.id)
        except (StudentNotInRosterError, StorageError) as exc:
            self._set_status(f"Failed to delete student: {exc}", tone="warning")
            return

        if self._editing_id == student.id:
            self._reset_form()
        self._set_status(f"{student.name} has been removed.", tone="success")
        self._notify_changed()

    def _reset_form(self) -> None:
        self._editing_id = None
        for var in self._field_vars.values():
            var.set("")
        self._form_title_var.set("Add student")
        if self._submit_button is not None:
            self._submit_button.configure(text="Add student")
        if self._cancel_button is not None:
            self._cancel_button.grid_remove()

    def _notify_changed(self) -> None:
        self.refresh()
        if self._on_roster_changed is not None:
            self._on_roster_changed()

    def _set_status(self, message: str, tone: str = "info") -> None:
        self._status_var.set(message)
        if self._status_label is not None:
            self._status_label.configure(text_color=TONE_COLORS.get(tone, APP_TEXT_MUTED))
