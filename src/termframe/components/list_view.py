"""ListView component with filtering and keyboard navigation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from termframe.ansi import Color
from termframe.buffer import Cell
from termframe.node import Node
from termframe.utils import truncate_to_width, visible_width

if TYPE_CHECKING:
    from termframe.keys import KeyEvent
    from termframe.tui import TUI


def _normalize_to_single_line(text: str) -> str:
    return re.sub(r"[\r\n]+", " ", text).strip()


@dataclass
class SelectItem:
    value: str
    label: str = ""
    description: str | None = None

    @property
    def display(self) -> str:
        return self.label or self.value


class ListView(Node):
    """A scrolling, single-selection list.

    Up/Down move the selection (wrapping at both ends), Enter fires
    ``on_select`` and Escape fires ``on_cancel``.  The list is as tall as
    its node; when the items do not fit, the last row shows a
    ``(current/total)`` indicator.
    """

    def __init__(
        self,
        items: list[SelectItem] | None = None,
        *,
        fg: Color = None,
        bg: Color = None,
        selected_fg: Color = "black",
        selected_bg: Color = "cyan",
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("focusable", True)
        super().__init__(**kwargs)
        self._items: list[SelectItem] = list(items or [])
        self._filtered_items: list[SelectItem] = list(self._items)
        self._selected_index = 0
        self.fg = fg
        self.bg = bg
        self.selected_fg = selected_fg
        self.selected_bg = selected_bg

        self.on_select: Callable[[SelectItem], None] | None = None
        self.on_cancel: Callable[[], None] | None = None
        self.on_selection_change: Callable[[SelectItem], None] | None = None

    # ------------------------------------------------------------------
    # Items and selection
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[SelectItem]:
        return list(self._filtered_items)

    @property
    def selected_index(self) -> int:
        return self._selected_index

    def set_items(self, items: list[SelectItem]) -> None:
        self._items = list(items)
        self._filtered_items = list(self._items)
        self._selected_index = 0

    def set_filter(self, filter_text: str) -> None:
        self._filtered_items = [
            item
            for item in self._items
            if item.value.lower().startswith(filter_text.lower())
        ]
        self._selected_index = 0

    def set_selected_index(self, index: int) -> None:
        self._selected_index = max(0, min(index, len(self._filtered_items) - 1))

    def get_selected_item(self) -> SelectItem | None:
        if self._selected_index < len(self._filtered_items):
            return self._filtered_items[self._selected_index]
        return None

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_input(self, ctx: TUI, key: KeyEvent) -> bool:
        count = len(self._filtered_items)

        if key.matches("up"):
            if count:
                self._selected_index = count - 1 if self._selected_index == 0 else self._selected_index - 1
                self._notify_selection_change()
                ctx.request_redraw()
            return True
        if key.matches("down"):
            if count:
                self._selected_index = 0 if self._selected_index >= count - 1 else self._selected_index + 1
                self._notify_selection_change()
                ctx.request_redraw()
            return True
        if key.matches("home", "end"):
            if count:
                self._selected_index = 0 if key.matches("home") else count - 1
                self._notify_selection_change()
                ctx.request_redraw()
            return True
        if key.matches("enter"):
            item = self.get_selected_item()
            if item is not None and self.on_select:
                self.on_select(item)
            return True
        if key.matches("escape"):
            if self.on_cancel:
                self.on_cancel()
                return True
            return False
        return False

    def _notify_selection_change(self) -> None:
        item = self.get_selected_item()
        if item is not None and self.on_selection_change:
            self.on_selection_change(item)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def visible_range(self) -> tuple[int, int]:
        """Return the ``[start, end)`` item indices currently on screen."""
        total = len(self._filtered_items)
        rows = self.height
        if total > rows:
            rows = max(1, rows - 1)  # scroll indicator
        start = max(0, min(self._selected_index - rows // 2, total - rows))
        return start, min(start + rows, total)

    def _format_item(self, item: SelectItem, prefix: str) -> str:
        width = self.width
        display = item.display
        desc = _normalize_to_single_line(item.description) if item.description else None
        if desc and width > 40:
            value = truncate_to_width(display, min(30, width - len(prefix) - 4), "")
            spacing = " " * max(1, 32 - visible_width(value))
            remaining = width - len(prefix) - visible_width(value) - len(spacing) - 2
            if remaining > 10:
                return prefix + value + spacing + truncate_to_width(desc, remaining, "")
        return prefix + truncate_to_width(display, width - len(prefix), "…")

    def render(self, ctx: TUI) -> None:
        if self.width <= 0 or self.height <= 0:
            return
        if self.bg is not None:
            ctx.buffer.fill(self.x, self.y, self.width, self.height, Cell(" ", self.fg, self.bg))

        if not self._filtered_items:
            self.draw_text(ctx, 0, 0, truncate_to_width("  No matching items", self.width, "…"),
                           self.fg, self.bg)
            return

        start, end = self.visible_range()
        for row, i in enumerate(range(start, end)):
            item = self._filtered_items[i]
            if i == self._selected_index:
                line = truncate_to_width(self._format_item(item, "→ "), self.width, "", pad=True)
                fg, bg = (self.selected_fg, self.selected_bg) if self.is_focused else (self.fg, self.bg)
                self.draw_text(ctx, 0, row, line, fg, bg)
            else:
                self.draw_text(ctx, 0, row, self._format_item(item, "  "), self.fg, self.bg)

        if start > 0 or end < len(self._filtered_items):
            info = f"  ({self._selected_index + 1}/{len(self._filtered_items)})"
            self.draw_text(ctx, 0, self.height - 1, truncate_to_width(info, self.width, ""),
                           self.fg, self.bg)
