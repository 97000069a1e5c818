"""Box component - a stack container with a background and optional border."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from termframe.ansi import Color
from termframe.buffer import Cell, FrameBuffer
from termframe.layout import Orientation, StackPanel
from termframe.utils import truncate_to_width

if TYPE_CHECKING:
    from termframe.tui import TUI


def draw_border(
    buffer: FrameBuffer,
    x: int,
    y: int,
    width: int,
    height: int,
    fg: Color = None,
    bg: Color = None,
    title: str = "",
) -> None:
    """Draw a single-line box outline, with *title* set into the top edge."""
    if width < 2 or height < 2:
        return
    right, bottom = x + width - 1, y + height - 1
    for xx in range(x + 1, right):
        buffer.set(xx, y, Cell("─", fg, bg))
        buffer.set(xx, bottom, Cell("─", fg, bg))
    for yy in range(y + 1, bottom):
        buffer.set(x, yy, Cell("│", fg, bg))
        buffer.set(right, yy, Cell("│", fg, bg))
    buffer.set(x, y, Cell("┌", fg, bg))
    buffer.set(right, y, Cell("┐", fg, bg))
    buffer.set(x, bottom, Cell("└", fg, bg))
    buffer.set(right, bottom, Cell("┘", fg, bg))
    if title and width > 4:
        label = truncate_to_width(f" {title} ", width - 4, ellipsis="…")
        buffer.write_text(x + 2, y, label, fg, bg, max_x=right)


class Box(StackPanel):
    """Stacks its children inside a filled (and optionally bordered) area.

    With a border the content box is inset by one cell on every side, so
    children never overwrite the outline.
    """

    def __init__(
        self,
        orientation: Orientation = "vertical",
        spacing: int = 0,
        *,
        title: str = "",
        border: bool = True,
        fg: Color = None,
        bg: Color = None,
        stretch: bool = True,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("padding", 1 if border else 0)
        super().__init__(orientation, spacing, stretch=stretch, **kwargs)
        self.title = title
        self.border = border
        self.fg = fg
        self.bg = bg

    def render(self, ctx: TUI) -> None:
        if self.width <= 0 or self.height <= 0:
            return
        buffer = ctx.buffer
        if self.bg is not None or self.border:
            buffer.fill(self.x, self.y, self.width, self.height, Cell(" ", self.fg, self.bg))
        if self.border:
            draw_border(buffer, self.x, self.y, self.width, self.height,
                        self.fg, self.bg, self.title)
