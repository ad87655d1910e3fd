from __future__ import annotations

from qr_attendance.ui.components import NavigationItem


NAV_ITEMS: tuple[NavigationItem, ...] = (
    NavigationItem(key="dashboard", label="Dashboard"),
    NavigationItem(key="students", label="Students"),
    NavigationItem(key="qr_codes", label="QR codes"),
    NavigationItem(key="scan", label="Scan attendance"),
    NavigationItem(key="settings", label="Settings", pinned_bottom=True),
)
