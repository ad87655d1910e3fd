from __future__ import annotations

from datetime import datetime
from tkinter import StringVar, filedialog

import customtkinter as ctk

from qr_attendance.data import StorageError
from qr_attendance.models import AttendanceStats
from qr_attendance.services import AttendanceService, attendance_shares
from qr_attendance.services.export import write_attendance_csv
from qr_attendance.ui.theme import (
    APP_ACCENT,
    APP_ACCENT_HOVER,
    APP_BG,
    APP_CARD,
    APP_SURFACE,
    APP_SURFACE_ALT,
    APP_TEXT,
    APP_TEXT_MUTED,
    STATUS_COLORS,
    TONE_COLORS,
)
from qr_attendance.utils import format_relative_time


class DashboardView(ctk.CTkFrame):
    RECENT_LIMIT = 10
    PIE_SIZE = 160

    def __init__(self, master, attendance_service: AttendanceService) -> None:
        super().__init__(master, fg_color=APP_BG)
        self._service = attendance_service

        self._total_var = StringVar(value="0")
        self._present_var = StringVar(value="0")
        self._absent_var = StringVar(value="0")
        self._rate_var = StringVar(value="0.0%")
        self._status_var = StringVar(value="")
        self._status_label: ctk.CTkLabel | None = None

        self._build_layout()

    # ------------------------------------------------------------------
    # Layout construction
    # ------------------------------------------------------------------
    def _build_layout(self) -> None:
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        header = ctk.CTkFrame(self, fg_color=APP_BG)
        header.grid(row=0, column=0, padx=24, pady=(24, 12), sticky="ew")
        header.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            header,
            text="Attendance dashboard",
            font=ctk.CTkFont(size=28, weight="bold"),
            text_color=APP_TEXT,
        ).grid(row=0, column=0, sticky="w")

        ctk.CTkButton(
            header,
            text="Export CSV",
            width=160,
            fg_color=APP_ACCENT,
            hover_color=APP_ACCENT_HOVER,
            command=self._export_csv,
        ).grid(row=0, column=1, sticky="e")

        self._status_label = ctk.CTkLabel(header, textvariable=self._status_var, text_color=APP_TEXT_MUTED)
        self._status_label.grid(row=1, column=0, columnspan=2, sticky="w", pady=(6, 0))

        cards = ctk.CTkFrame(self, fg_color=APP_BG)
        cards.grid(row=1, column=0, padx=24, pady=(0, 12), sticky="ew")
        cards.grid_columnconfigure((0, 1, 2, 3), weight=1, uniform="cards")

        for column, (label, variable) in enumerate(
            (
                ("Total students", self._total_var),
                ("Present today", self._present_var),
                ("Absent today", self._absent_var),
                ("Attendance rate", self._rate_var),
            )
        ):
            card = ctk.CTkFrame(cards, corner_radius=12, fg_color=APP_CARD)
            card.grid(row=0, column=column, padx=6, sticky="nsew")
            ctk.CTkLabel(card, text=label, text_color=APP_TEXT_MUTED, font=ctk.CTkFont(size=15)).pack(
                anchor="w", padx=16, pady=(14, 0)
            )
            ctk.CTkLabel(
                card,
                textvariable=variable,
                text_color=APP_TEXT,
                font=ctk.CTkFont(size=30, weight="bold"),
            ).pack(anchor="w", padx=16, pady=(0, 14))

        body = ctk.CTkFrame(self, fg_color=APP_BG)
        body.grid(row=2, column=0, padx=24, pady=(0, 24), sticky="nsew")
        body.grid_columnconfigure(0, weight=2, uniform="body")
        body.grid_columnconfigure(1, weight=3, uniform="body")
        body.grid_rowconfigure(0, weight=1)

        breakdown_panel = ctk.CTkFrame(body, corner_radius=12, fg_color=APP_SURFACE)
        breakdown_panel.grid(row=0, column=0, padx=(6, 6), sticky="nsew")
        ctk.CTkLabel(
            breakdown_panel,
            text="Last five days",
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=APP_TEXT,
        ).pack(anchor="w", padx=20, pady=(18, 8))
        self._breakdown_list = ctk.CTkFrame(breakdown_panel, fg_color=APP_SURFACE)
        self._breakdown_list.pack(fill="both", expand=True, padx=12, pady=(0, 12))

        ctk.CTkLabel(
            breakdown_panel,
            text="Today",
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=APP_TEXT,
        ).pack(anchor="w", padx=20, pady=(8, 8))
        pie_row = ctk.CTkFrame(breakdown_panel, fg_color=APP_SURFACE)
        pie_row.pack(fill="x", padx=12, pady=(0, 16))
        self._pie_canvas = ctk.CTkCanvas(
            pie_row,
            width=self.PIE_SIZE,
            height=self.PIE_SIZE,
            bg=APP_SURFACE,
            highlightthickness=0,
        )
        self._pie_canvas.pack(side="left", padx=(8, 16))
        self._pie_legend = ctk.CTkFrame(pie_row, fg_color=APP_SURFACE)
        self._pie_legend.pack(side="left", fill="y")

        recent_panel = ctk.CTkFrame(body, corner_radius=12, fg_color=APP_SURFACE)
        recent_panel.grid(row=0, column=1, padx=(6, 6), sticky="nsew")
        ctk.CTkLabel(
            recent_panel,
            text="Recent attendance",
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=APP_TEXT,
        ).pack(anchor="w", padx=20, pady=(18, 8))
        self._recent_list = ctk.CTkScrollableFrame(recent_panel, fg_color=APP_SURFACE_ALT)
        self._recent_list.pack(fill="both", expand=True, padx=12, pady=(0, 12))

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        now = datetime.now()
        try:
            stats = self._service.stats(now=now)
            breakdown = self._service.daily_breakdown(now=now)
            recent = self._service.recent_attendance(limit=self.RECENT_LIMIT)
        except StorageError as exc:
            self._set_status(f"Failed to load attendance: {exc}", tone="warning")
            return

        self._render_stats(stats)
        self._render_pie(stats)
        self._render_breakdown(breakdown)
        self._render_recent(recent, now)

    def _render_stats(self, stats: AttendanceStats) -> None:
        self._total_var.set(str(stats.total_students))
        self._present_var.set(str(stats.present_today))
        self._absent_var.set(str(stats.absent_display))
        self._rate_var.set(f"{stats.attendance_rate:.1f}%")
        if not stats.is_consistent:
            self._set_status(
                "More check-ins than enrolled students today. Some records may belong to removed students.",
                tone="warning",
            )
        else:
            self._set_status("")

    def _render_pie(self, stats: AttendanceStats) -> None:
        self._pie_canvas.delete("all")
        for widget in self._pie_legend.winfo_children():
            widget.destroy()

        shares = attendance_shares(stats)
        bounds = (4, 4, self.PIE_SIZE - 4, self.PIE_SIZE - 4)
        if not any(count for _, count, _ in shares):
            self._pie_canvas.create_oval(*bounds, outline=APP_TEXT_MUTED, width=2)
        else:
            start = 90.0
            for status, count, percent in shares:
                if not count:
                    continue
                extent = percent * 3.6
                color = STATUS_COLORS.get(status, APP_TEXT_MUTED)
                if extent >= 360:
                    self._pie_canvas.create_oval(*bounds, fill=color, outline=color)
                else:
                    # Tk measures arcs counter-clockwise; negative extent draws clockwise from 12 o'clock.
                    self._pie_canvas.create_arc(
                        *bounds, start=start, extent=-extent, fill=color, outline=APP_SURFACE
                    )
                start -= extent

        for status, count, percent in shares:
            ctk.CTkLabel(
                self._pie_legend,
                text=f"● {status.capitalize()}: {count} ({percent:.1f}%)",
                text_color=STATUS_COLORS.get(status, APP_TEXT),
            ).pack(anchor="w", pady=2)

    def _render_breakdown(self, breakdown) -> None:
        for widget in self._breakdown_list.winfo_children():
            widget.destroy()

        header_font = ctk.CTkFont(size=14, weight="bold")
        for column, text in enumerate(("Day", "Present", "Late", "Absent")):
            ctk.CTkLabel(self._breakdown_list, text=text, font=header_font, text_color=APP_TEXT_MUTED).grid(
                row=0, column=column, padx=8, pady=4, sticky="w"
            )

        for row, tally in enumerate(breakdown, start=1):
            values = (
                f"{tally.weekday_label} {tally.date:%d/%m}",
                str(tally.present),
                str(tally.late),
                str(tally.absent),
            )
            for column, text in enumerate(values):
                ctk.CTkLabel(self._breakdown_list, text=text, text_color=APP_TEXT).grid(
                    row=row, column=column, padx=8, pady=2, sticky="w"
                )

    def _render_recent(self, records, now: datetime) -> None:
        for widget in self._recent_list.winfo_children():
            widget.destroy()

        if not records:
            ctk.CTkLabel(
                self._recent_list,
                text="No attendance records yet. Start scanning QR codes!",
                text_color=APP_TEXT_MUTED,
            ).pack(anchor="w", padx=12, pady=6)
            return

        for record in records:
            card = ctk.CTkFrame(self._recent_list, corner_radius=10, fg_color=APP_CARD)
            card.pack(fill="x", padx=8, pady=4)
            card.grid_columnconfigure(0, weight=1)

            ctk.CTkLabel(
                card,
                text=record.student_name or record.student_id,
                font=ctk.CTkFont(size=16, weight="bold"),
                text_color=APP_TEXT,
            ).grid(row=0, column=0, padx=12, pady=(8, 0), sticky="w")
            ctk.CTkLabel(card, text=record.roll_number, text_color=APP_TEXT_MUTED).grid(
                row=1, column=0, padx=12, pady=(0, 8), sticky="w"
            )
            ctk.CTkLabel(
                card,
                text=record.status.value,
                text_color=STATUS_COLORS.get(record.status.value, APP_TEXT),
                font=ctk.CTkFont(size=14, weight="bold"),
            ).grid(row=0, column=1, padx=12, pady=(8, 0), sticky="e")
            try:
                when = format_relative_time(record.timestamp, now=now)
            except ValueError:
                when = record.timestamp
            ctk.CTkLabel(card, text=when, text_color=APP_TEXT_MUTED).grid(
                row=1, column=1, padx=12, pady=(0, 8), sticky="e"
            )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _export_csv(self) -> None:
        file_name = filedialog.asksaveasfilename(
            title="Export attendance to CSV",
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")],
            initialfile="attendance_report.csv",
        )
        if not file_name:
            return

        try:
            count = write_attendance_csv(self._service.all_records(), file_name)
        except (OSError, StorageError) as exc:
            self._set_status(f"Failed to export CSV: {exc}", tone="warning")
            return

        self._set_status(f"Exported {count} rows to CSV.", tone="success")

    def _set_status(self, message: str, tone: str = "info") -> None:
        self._status_var.set(message)
        if self._status_label is not None:
            self._status_label.configure(text_color=TONE_COLORS.get(tone, APP_TEXT_MUTED))
