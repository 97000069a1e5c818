"""Diff-based renderer.

One frame:

1.  Clear the back buffer to the background colour.
2.  Let the screen draw its chrome directly.
3.  Collect the visible tree (screen children, then the active dialog tree,
    then overlays), laying out panels before their children are visited.
4.  Stable-sort the screen and dialog nodes together by ``z_index``;
    overlays are sorted on their own and painted last.
5.  Paint every node; a node that raises is skipped for this frame.
6.  Diff back against front and emit only changed cells, repositioning the
    cursor and switching colours only when needed.
7.  Commit the emitted cells to the front buffer after the write succeeded.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from termframe import ansi
from termframe.buffer import FrameBuffer
from termframe.errors import ComponentRenderError
from termframe.layout import Panel
from termframe.node import Node, walk_visible

if TYPE_CHECKING:
    from termframe.terminal import Terminal
    from termframe.tui import TUI

logger = logging.getLogger(__name__)


def _layout_and_collect(root: Node, include_root: bool) -> list[Node]:
    queue: list[Node] = []

    def visit(node: Node) -> None:
        if isinstance(node, Panel):
            node.layout()
        queue.append(node)

    if not include_root and isinstance(root, Panel) and root.effectively_visible:
        root.layout()
    walk_visible(root, visit, include_root=include_root)
    return queue


def z_sorted(nodes: Iterable[Node]) -> list[Node]:
    """Stable sort by ascending ``z_index``; ties keep traversal order."""
    return sorted(nodes, key=lambda node: node.z_index)


class Renderer:
    """Paints a node tree into a ``FrameBuffer`` and flushes the difference."""

    def __init__(
        self,
        terminal: Terminal,
        buffer: FrameBuffer,
        background: ansi.Color = None,
        foreground: ansi.Color = None,
    ) -> None:
        self.terminal = terminal
        self.buffer = buffer
        self.background = background
        self.foreground = foreground

        self.frame_count = 0
        self.full_redraws = 0
        self.render_errors = 0
        self.last_frame_bytes = 0
        self.last_paint_order: list[Node] = []
        self._force_full = True

    def force_full_redraw(self) -> None:
        """Repaint every cell on the next frame."""
        self._force_full = True

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def render_frame(
        self,
        ctx: TUI,
        screen: Node | None,
        dialog: Node | None = None,
        overlays: Iterable[Node] = (),
    ) -> int:
        """Compose and flush one frame; return the number of bytes written."""
        buffer = self.buffer
        buffer.clear(self.background, self.foreground)

        queue: list[Node] = []
        if screen is not None:
            self._paint_chrome(ctx, screen)
            queue.extend(_layout_and_collect(screen, include_root=False))
        if dialog is not None:
            queue.extend(_layout_and_collect(dialog, include_root=True))

        paint_order = z_sorted(queue)
        for overlay in overlays:
            paint_order.extend(z_sorted(_layout_and_collect(overlay, include_root=True)))
        self.last_paint_order = paint_order

        for node in paint_order:
            self._paint(ctx, node)

        return self.flush()

    def _paint_chrome(self, ctx: TUI, screen: Node) -> None:
        if not screen.effectively_visible:
            return
        self._paint(ctx, screen)

    def _paint(self, ctx: TUI, node: Node) -> None:
        try:
            node.render(ctx)
        except Exception as exc:
            self.render_errors += 1
            error = ComponentRenderError(node, exc)
            logger.error("%s", error, exc_info=exc)

    # ------------------------------------------------------------------
    # Diff / flush
    # ------------------------------------------------------------------

    def flush(self) -> int:
        """Write the back/front difference to the terminal.

        Returns the number of bytes written (0 when nothing changed).
        """
        buffer = self.buffer
        forced = self._force_full
        if forced:
            buffer.invalidate_front()

        out: list[str] = []
        committed: list[tuple[int, int]] = []
        cursor: tuple[int, int] | None = None
        colors: tuple[ansi.Color, ansi.Color] | None = None
        width = buffer.width

        for y in range(buffer.height):
            back_row = buffer.back[y]
            front_row = buffer.front[y]
            x = 0
            while x < width:
                cell = back_row[x]
                span = 2 if cell.width == 2 and x + 1 < width else 1
                changed = front_row[x] != cell or (
                    span == 2 and front_row[x + 1] != back_row[x + 1]
                )
                if not changed:
                    x += span
                    continue

                if cursor != (x, y):
                    out.append(ansi.move_to(x, y))
                if colors != (cell.fg, cell.bg):
                    colors = (cell.fg, cell.bg)
                    out.append(ansi.sgr(cell.fg, cell.bg))
                out.append(cell.char)

                committed.append((x, y))
                if span == 2:
                    committed.append((x + 1, y))
                x += span
                cursor = (x, y)

        if not out:
            self._force_full = False
            self.last_frame_bytes = 0
            self.frame_count += 1
            return 0

        out.append(ansi.SGR_RESET)
        data = "".join(out)
        try:
            self.terminal.write(data)
        except Exception:
            # Terminal state is unknown now; repaint everything next time.
            self._force_full = True
            raise

        for x, y in committed:
            buffer.commit(x, y)

        if forced:
            self.full_redraws += 1
        self._force_full = False
        self.frame_count += 1
        self.last_frame_bytes = len(data.encode("utf-8"))
        return self.last_frame_bytes
