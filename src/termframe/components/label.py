"""Label component - static or store-bound text, clipped to its box."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from termframe.ansi import Color
from termframe.buffer import Cell
from termframe.node import Node
from termframe.utils import truncate_to_width, visible_width

if TYPE_CHECKING:
    from termframe.tui import TUI


class Label(Node):
    """Displays one or more lines of text.

    Lines longer than the label are truncated with an ellipsis.  A label may
    be bound to a store path so it follows that value reactively.
    """

    def __init__(
        self,
        text: str = "",
        *,
        fg: Color = None,
        bg: Color = None,
        width: int | None = None,
        height: int | None = None,
        align: str = "left",
        **kwargs: Any,
    ) -> None:
        lines = text.split("\n")
        super().__init__(
            width=width if width is not None else max((visible_width(line) for line in lines), default=0),
            height=height if height is not None else len(lines),
            **kwargs,
        )
        self._text = text
        self.fg = fg
        self.bg = bg
        self.align = align
        self._subscription: int | None = None

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        self._text = text

    def bind(
        self,
        ctx: TUI,
        path: str,
        fmt: Callable[[Any], str] = str,
    ) -> None:
        """Follow the store value at *path*, formatted by *fmt*."""
        self.unbind(ctx)

        def on_change(old: Any, new: Any, _path: str) -> None:
            self.set_text(fmt(new) if new is not None else "")
            ctx.request_redraw()

        self._subscription = ctx.store.subscribe(path, on_change)

    def unbind(self, ctx: TUI) -> None:
        if self._subscription is not None:
            ctx.store.unsubscribe(self._subscription)
            self._subscription = None

    def render(self, ctx: TUI) -> None:
        if self.width <= 0 or self.height <= 0:
            return
        if self.bg is not None:
            ctx.buffer.fill(self.x, self.y, self.width, self.height, Cell(" ", self.fg, self.bg))
        for dy, line in enumerate(self._text.split("\n")[: self.height]):
            line = truncate_to_width(line, self.width, ellipsis="…")
            dx = 0
            if self.align == "right":
                dx = self.width - visible_width(line)
            elif self.align == "center":
                dx = (self.width - visible_width(line)) // 2
            self.draw_text(ctx, max(0, dx), dy, line, self.fg, self.bg)
