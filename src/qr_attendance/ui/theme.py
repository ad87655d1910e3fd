from __future__ import annotations

# Core surfaces
APP_BG = "#F4F6FB"
APP_SURFACE = "#FFFFFF"
APP_SURFACE_ALT = "#EEF2FA"
APP_CARD = "#FFFFFF"
APP_SIDEBAR = "#1E2A4A"

# Borders and outlines
APP_BORDER = "#D5DCEA"
APP_DIVIDER = "#E3E8F2"

# Accent colors
APP_ACCENT = "#1E40AF"
APP_ACCENT_HOVER = "#2550C8"

# Text colors
APP_TEXT = "#1B2333"
APP_TEXT_MUTED = "#5F6B82"
APP_TEXT_ON_DARK = "#F3F5FA"

# Status colors
APP_SUCCESS = "#16A34A"
APP_WARNING = "#DC2626"
APP_LATE = "#D97706"

TONE_COLORS = {
    "info": APP_TEXT_MUTED,
    "success": APP_SUCCESS,
    "warning": APP_WARNING,
}

STATUS_COLORS = {
    "present": APP_SUCCESS,
    "late": APP_LATE,
    "absent": APP_WARNING,
}
