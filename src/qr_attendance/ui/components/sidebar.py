from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

import customtkinter as ctk

from qr_attendance.ui.theme import (
    APP_ACCENT,
    APP_ACCENT_HOVER,
    APP_SIDEBAR,
    APP_TEXT_MUTED,
    APP_TEXT_ON_DARK,
)

BUTTON_HEIGHT = 44


@dataclass(frozen=True)
class NavigationItem:
    key: str
    label: str
    pinned_bottom: bool = False


class Sidebar(ctk.CTkFrame):
    def __init__(
        self,
        master,
        items: Iterable[NavigationItem],
        on_select: Callable[[str], None],
        *,
        title: str = "",
        width: int = 220,
    ) -> None:
        super().__init__(master, width=width, corner_radius=0, fg_color=APP_SIDEBAR)
        self._items = list(items)
        self._on_select = on_select
        self._enabled = True
        self._selection_key: str | None = None
        self._buttons: dict[str, ctk.CTkButton] = {}

        self.grid_columnconfigure(0, weight=1)
        self.grid_propagate(False)

        ctk.CTkLabel(
            self,
            text=title,
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=APP_TEXT_ON_DARK,
        ).grid(row=0, column=0, padx=16, pady=(20, 16), sticky="w")

        button_font = ctk.CTkFont(size=16, weight="bold")
        top_items = [item for item in self._items if not item.pinned_bottom]
        bottom_items = [item for item in self._items if item.pinned_bottom]

        row_index = 1
        for item in top_items:
            self._buttons[item.key] = self._make_button(item, button_font)
            self._buttons[item.key].grid(row=row_index, column=0, padx=12, pady=4, sticky="ew")
            row_index += 1

        self.grid_rowconfigure(row_index, weight=1)
        row_index += 1

        for item in bottom_items:
            self._buttons[item.key] = self._make_button(item, button_font)
            self._buttons[item.key].grid(row=row_index, column=0, padx=12, pady=12, sticky="ew")
            row_index += 1

    def _make_button(self, item: NavigationItem, font: ctk.CTkFont) -> ctk.CTkButton:
        return ctk.CTkButton(
            self,
            text=item.label,
            anchor="w",
            height=BUTTON_HEIGHT,
            command=lambda k=item.key: self.select(k),
            fg_color=APP_SIDEBAR,
            hover_color=APP_ACCENT_HOVER,
            text_color=APP_TEXT_ON_DARK,
            font=font,
            border_spacing=8,
        )

    def select(self, key: str) -> None:
        if key not in self._buttons or not self._enabled:
            return
        if self._selection_key:
            self._buttons[self._selection_key].configure(fg_color=APP_SIDEBAR)
        self._buttons[key].configure(fg_color=APP_ACCENT)
        self._selection_key = key
        self._on_select(key)

    def set_navigation_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        state = "normal" if enabled else "disabled"
        for key, button in self._buttons.items():
            button.configure(state=state)
            if enabled or key == self._selection_key:
                button.configure(text_color=APP_TEXT_ON_DARK)
            else:
                button.configure(text_color=APP_TEXT_MUTED)
