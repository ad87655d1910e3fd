from __future__ import annotations

import logging
import tkinter.messagebox as messagebox

import customtkinter as ctk

from qr_attendance.config import settings as settings_module
from qr_attendance.config.settings import refresh_settings_from_store, user_settings_store
from qr_attendance.data import AttendanceStore, Database, RosterStore, StorageError
from qr_attendance.data.sample_data import seed_sample_data
from qr_attendance.services import AttendanceService, RosterService
from qr_attendance.ui.components import Sidebar
from qr_attendance.ui.dashboard_view import DashboardView
from qr_attendance.ui.navigation import NAV_ITEMS
from qr_attendance.ui.qr_codes_view import QRCodesView
from qr_attendance.ui.scan_view import ScanView
from qr_attendance.ui.settings_view import SettingsView
from qr_attendance.ui.students_view import StudentsView
from qr_attendance.ui.theme import APP_BG

logger = logging.getLogger(__name__)


class AttendanceApp:
    def __init__(self) -> None:
        settings = settings_module.settings

        ctk.set_appearance_mode("light")

        self._root = ctk.CTk()
        self._root.title(settings.app_name)
        self._root.geometry("1280x720")
        self._root.minsize(1080, 640)
        self._root.configure(fg_color=APP_BG)

        self._root.grid_rowconfigure(0, weight=1)
        self._root.grid_columnconfigure(1, weight=1)

        self._open_database()

        self._nav = Sidebar(self._root, items=NAV_ITEMS, on_select=self._show_view, title=settings.app_name)
        self._nav.grid(row=0, column=0, sticky="nsw")

        self._content = ctk.CTkFrame(self._root, corner_radius=0, fg_color=APP_BG)
        self._content.grid(row=0, column=1, sticky="nsew")
        self._content.grid_rowconfigure(0, weight=1)
        self._content.grid_columnconfigure(0, weight=1)

        self._views: dict[str, ctk.CTkFrame] = {}
        self._build_views()

        self._nav.select("dashboard")
        self._root.protocol("WM_DELETE_WINDOW", self._on_close)

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------
    def _open_database(self) -> None:
        settings = settings_module.settings
        self._database = Database(settings.database_path)
        try:
            self._database.initialize()
        except StorageError as exc:
            messagebox.showerror(
                title="Database unavailable",
                message=f"{exc}\n\nChoose a writable app data directory in Settings.",
            )

        roster_store = RosterStore(self._database)
        attendance_store = AttendanceStore(self._database)

        if settings.seed_sample_data:
            try:
                seed_sample_data(roster_store, attendance_store)
            except StorageError:
                logger.exception("Sample data could not be written")

        self._roster_service = RosterService(roster_store)
        self._attendance_service = AttendanceService(
            roster_store,
            attendance_store,
            class_start=settings.class_start_time,
            grace_minutes=settings.late_grace_minutes,
        )
        logger.info("Using database %s", self._database.path)

    def _build_views(self) -> None:
        settings = settings_module.settings
        for view in self._views.values():
            view.destroy()

        self._views = {
            "dashboard": DashboardView(self._content, self._attendance_service),
            "students": StudentsView(
                self._content,
                self._roster_service,
                on_roster_changed=self._handle_roster_changed,
            ),
            "qr_codes": QRCodesView(
                self._content,
                self._roster_service,
                fill_color=lambda: settings_module.settings.qr_fill_color,
                output_dir=lambda: settings_module.APP_DATA_DIR,
            ),
            "scan": ScanView(
                self._content,
                self._attendance_service,
                camera_index=settings.qr_camera_index,
                on_scanning_changed=self._handle_scanning_changed,
            ),
            "settings": SettingsView(
                self._content,
                store=user_settings_store,
                on_settings_saved=self._handle_settings_saved,
            ),
        }
        for view in self._views.values():
            view.grid(row=0, column=0, sticky="nsew")
            view.grid_remove()

    def _show_view(self, key: str) -> None:
        for view in self._views.values():
            view.grid_remove()
        view = self._views.get(key)
        if view is None:
            return
        view.grid()
        view.refresh()

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------
    def _handle_roster_changed(self) -> None:
        self._views["qr_codes"].refresh()

    def _handle_scanning_changed(self, scanning: bool) -> None:
        self._nav.set_navigation_enabled(not scanning)

    def _handle_settings_saved(self, _updated: dict[str, object]) -> None:
        previous_db_path = self._database.path
        settings = refresh_settings_from_store()

        if settings.database_path != previous_db_path:
            logger.info("Database moved from %s to %s", previous_db_path, settings.database_path)
            self._open_database()
            self._build_views()
            self._views["settings"].grid()
            self._views["settings"].refresh()
            return

        self._attendance_service.configure(
            class_start=settings.class_start_time,
            grace_minutes=settings.late_grace_minutes,
        )

    def _on_close(self) -> None:
        scan_view = self._views.get("scan")
        if isinstance(scan_view, ScanView):
            scan_view.destroy()
        self._root.destroy()

    def run(self) -> None:
        self._root.mainloop()
        logger.info("Window closed")
