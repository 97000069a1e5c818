"""Double-buffered cell grid.

``back`` is composed freely during a frame; ``front`` mirrors what the
terminal currently displays and is only updated, cell by cell, by the
renderer after a successful flush.  A ``None`` entry in ``front`` means the
terminal content at that position is unknown and must be repainted.
"""

from __future__ import annotations

from dataclasses import dataclass

from termframe.ansi import Color, validate_color
from termframe.utils import grapheme_width, iter_graphemes


@dataclass(frozen=True)
class Cell:
    """One terminal cell: a grapheme plus its colours."""

    char: str = " "
    fg: Color = None
    bg: Color = None

    def __post_init__(self) -> None:
        validate_color(self.fg)
        validate_color(self.bg)

    @property
    def width(self) -> int:
        return grapheme_width(self.char)


BLANK = Cell()


class FrameBuffer:
    """Front/back pair of ``height x width`` cell grids."""

    def __init__(self, width: int, height: int) -> None:
        self.width = 0
        self.height = 0
        self.back: list[list[Cell]] = []
        self.front: list[list[Cell | None]] = []
        self.resize(width, height)

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        """Reallocate both grids; the front buffer becomes unknown."""
        self.width = max(0, width)
        self.height = max(0, height)
        self.back = [[BLANK] * self.width for _ in range(self.height)]
        self.front = [[None] * self.width for _ in range(self.height)]

    def invalidate_front(self) -> None:
        """Forget what the terminal shows so the next diff repaints every cell."""
        for row in self.front:
            for x in range(len(row)):
                row[x] = None

    # ------------------------------------------------------------------
    # Back-buffer composition
    # ------------------------------------------------------------------

    def clear(self, bg: Color = None, fg: Color = None) -> None:
        blank = Cell(" ", fg, bg)
        for row in self.back:
            for x in range(len(row)):
                row[x] = blank

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Cell | None:
        if not self.in_bounds(x, y):
            return None
        return self.back[y][x]

    def get_front(self, x: int, y: int) -> Cell | None:
        if not self.in_bounds(x, y):
            return None
        return self.front[y][x]

    def set(self, x: int, y: int, cell: Cell) -> None:
        """Write *cell* at ``(x, y)``; out-of-range writes are clipped.

        Overwriting either half of a wide character blanks the other half so
        no orphaned placeholder (or half glyph) survives.
        """
        if not self.in_bounds(x, y):
            return
        row = self.back[y]
        self._break_wide_at(row, x)
        row[x] = cell

    def _break_wide_at(self, row: list[Cell], x: int) -> None:
        old = row[x]
        if old.width == 2 and x + 1 < self.width:
            tail = row[x + 1]
            row[x + 1] = Cell(" ", tail.fg, tail.bg)
        if x > 0 and row[x - 1].width == 2:
            head = row[x - 1]
            row[x - 1] = Cell(" ", head.fg, head.bg)

    def write_text(
        self,
        x: int,
        y: int,
        text: str,
        fg: Color = None,
        bg: Color = None,
        max_x: int | None = None,
    ) -> int:
        """Write *text* starting at ``(x, y)`` and return the next writable column.

        Wide graphemes take two cells: the glyph itself and a blank
        placeholder to its right.  A wide grapheme that does not fit before
        the clip edge (*max_x* or the buffer width) becomes a single blank.
        """
        limit = self.width if max_x is None else min(max_x, self.width)
        col = x
        for g, w in iter_graphemes(text):
            if w == 0:
                continue
            if col >= limit:
                break
            if w == 2 and col + 1 >= limit:
                self.set(col, y, Cell(" ", fg, bg))
                col += 1
                break
            self.set(col, y, Cell(g, fg, bg))
            if w == 2:
                self._place_placeholder(col + 1, y, fg, bg)
            col += w
        return col

    def _place_placeholder(self, x: int, y: int, fg: Color, bg: Color) -> None:
        if not self.in_bounds(x, y):
            return
        row = self.back[y]
        old = row[x]
        if old.width == 2 and x + 1 < self.width:
            tail = row[x + 1]
            row[x + 1] = Cell(" ", tail.fg, tail.bg)
        row[x] = Cell(" ", fg, bg)

    def fill(self, x: int, y: int, width: int, height: int, cell: Cell) -> None:
        """Fill a rectangle with *cell*, clipped to the buffer."""
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(self.width, x + width), min(self.height, y + height)
        for yy in range(y0, y1):
            for xx in range(x0, x1):
                self.set(xx, yy, cell)

    # ------------------------------------------------------------------
    # Front-buffer bookkeeping
    # ------------------------------------------------------------------

    def commit(self, x: int, y: int) -> None:
        """Record that the back cell at ``(x, y)`` is now on screen."""
        self.front[y][x] = self.back[y][x]

    def row_text(self, y: int) -> str:
        """Return the back-buffer characters of row *y*, placeholders included."""
        return "".join(cell.char for cell in self.back[y])
