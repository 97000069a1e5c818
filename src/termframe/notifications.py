"""Transient notifications drawn above everything else.

Expiry runs in the frame loop's housekeeping step; ``expire`` reports
whether anything disappeared so the loop knows to redraw.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from termframe.ansi import Color
from termframe.node import Node
from termframe.utils import truncate_to_width, visible_width

if TYPE_CHECKING:
    from termframe.tui import TUI

LEVEL_COLORS: dict[str, tuple[Color, Color]] = {
    "info": ("black", "cyan"),
    "success": ("black", "green"),
    "warning": ("black", "yellow"),
    "error": ("bright_white", "red"),
}

DEFAULT_DURATION = 3.0


@dataclass
class Notification:
    message: str
    level: str
    expires_at: float


class Notifications(Node):
    """Stack of toasts anchored to the bottom-right corner."""

    def __init__(
        self,
        max_visible: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(z_index=1_000, name="notifications")
        self.max_visible = max_visible
        self._clock = clock
        self.entries: list[Notification] = []

    def notify(self, message: str, duration: float | None = None, level: str = "info") -> Notification:
        if level not in LEVEL_COLORS:
            raise ValueError(f"Unknown notification level: {level!r}")
        ttl = DEFAULT_DURATION if duration is None else duration
        entry = Notification(message, level, self._clock() + ttl)
        self.entries.append(entry)
        return entry

    def expire(self, now: float | None = None) -> bool:
        """Drop elapsed entries; return ``True`` if any were removed."""
        now = self._clock() if now is None else now
        kept = [e for e in self.entries if e.expires_at > now]
        changed = len(kept) != len(self.entries)
        self.entries = kept
        return changed

    @property
    def active(self) -> bool:
        return bool(self.entries)

    def render(self, ctx: TUI) -> None:
        buffer = ctx.buffer
        shown = self.entries[-self.max_visible:]
        max_width = max(1, buffer.width // 2)
        y = buffer.height - 1
        for entry in reversed(shown):
            if y < 0:
                break
            text = truncate_to_width(f" {entry.message} ", max_width, ellipsis="…")
            fg, bg = LEVEL_COLORS[entry.level]
            x = max(0, buffer.width - visible_width(text) - 1)
            buffer.write_text(x, y, text, fg, bg)
            y -= 1
