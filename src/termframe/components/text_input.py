"""TextInput component - single-line text entry with horizontal scrolling."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from termframe.ansi import Color
from termframe.buffer import Cell
from termframe.node import Node
from termframe.utils import iter_graphemes

if TYPE_CHECKING:
    from termframe.keys import KeyEvent
    from termframe.tui import TUI


def _is_whitespace(g: str) -> bool:
    return g.isspace()


class TextInput(Node):
    """Single-line editor.

    The cursor is a string index that always sits on a grapheme boundary.
    Supported keys: printable text and bracketed paste, Backspace, Delete,
    Left/Right, Home/End (also Ctrl+A / Ctrl+E), Ctrl+U / Ctrl+K (delete to
    line start / end), Ctrl+W (delete word backwards), Enter (``on_submit``)
    and Escape (``on_escape``).
    """

    def __init__(
        self,
        value: str = "",
        *,
        prompt: str = "> ",
        fg: Color = None,
        bg: Color = None,
        cursor_fg: Color = "black",
        cursor_bg: Color = "white",
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("focusable", True)
        kwargs.setdefault("height", 1)
        super().__init__(**kwargs)
        self._value = value
        self._cursor = len(value)
        self._scroll = 0
        self.prompt = prompt
        self.fg = fg
        self.bg = bg
        self.cursor_fg = cursor_fg
        self.cursor_bg = cursor_bg

        self.on_submit: Callable[[str], None] | None = None
        self.on_escape: Callable[[], None] | None = None
        self.on_change: Callable[[str], None] | None = None

    @property
    def value(self) -> str:
        return self._value

    @property
    def cursor(self) -> int:
        return self._cursor

    def set_value(self, value: str) -> None:
        self._value = value
        self._cursor = min(self._cursor, len(value))
        self._scroll = 0

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_input(self, ctx: TUI, key: KeyEvent) -> bool:
        before = self._value
        handled = self._apply(key)
        if handled:
            ctx.request_redraw()
            if self._value != before and self.on_change:
                self.on_change(self._value)
        return handled

    def _apply(self, key: KeyEvent) -> bool:
        if key.key == "paste":
            self._insert(key.data.replace("\r\n", "").replace("\r", "").replace("\n", ""))
            return True

        if key.matches("escape"):
            if self.on_escape:
                self.on_escape()
                return True
            return False

        if key.matches("enter"):
            if self.on_submit:
                self.on_submit(self._value)
            return True

        if key.matches("backspace"):
            if self._cursor > 0:
                size = len(self._grapheme_before())
                self._value = self._value[: self._cursor - size] + self._value[self._cursor :]
                self._cursor -= size
            return True

        if key.matches("delete", "ctrl+d"):
            if self._cursor < len(self._value):
                size = len(self._grapheme_after())
                self._value = self._value[: self._cursor] + self._value[self._cursor + size :]
            return True

        if key.matches("left", "ctrl+b"):
            self._cursor -= len(self._grapheme_before())
            return True

        if key.matches("right", "ctrl+f"):
            self._cursor += len(self._grapheme_after())
            return True

        if key.matches("home", "ctrl+a"):
            self._cursor = 0
            return True

        if key.matches("end", "ctrl+e"):
            self._cursor = len(self._value)
            return True

        if key.matches("ctrl+u"):
            self._value = self._value[self._cursor :]
            self._cursor = 0
            return True

        if key.matches("ctrl+k"):
            self._value = self._value[: self._cursor]
            return True

        if key.matches("ctrl+w", "alt+backspace"):
            self._delete_word_backwards()
            return True

        text = key.text
        if text is not None:
            self._insert(text)
            return True
        return False

    def _insert(self, text: str) -> None:
        self._value = self._value[: self._cursor] + text + self._value[self._cursor :]
        self._cursor += len(text)

    def _grapheme_before(self) -> str:
        graphemes = [g for g, _ in iter_graphemes(self._value[: self._cursor])]
        return graphemes[-1] if graphemes else ""

    def _grapheme_after(self) -> str:
        for g, _ in iter_graphemes(self._value[self._cursor :]):
            return g
        return ""

    def _delete_word_backwards(self) -> None:
        graphemes = [g for g, _ in iter_graphemes(self._value[: self._cursor])]
        end = self._cursor
        while graphemes and _is_whitespace(graphemes[-1]):
            self._cursor -= len(graphemes.pop())
        while graphemes and not _is_whitespace(graphemes[-1]):
            self._cursor -= len(graphemes.pop())
        self._value = self._value[: self._cursor] + self._value[end:]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _scroll_to_cursor(self, graphemes: list[tuple[str, int]], cursor_index: int, available: int) -> None:
        if cursor_index < self._scroll:
            self._scroll = cursor_index
        # The cursor cell itself needs one column.
        while self._scroll < cursor_index and (
            sum(w for _, w in graphemes[self._scroll : cursor_index]) + 1 > available
        ):
            self._scroll += 1

    def render(self, ctx: TUI) -> None:
        if self.width <= 0 or self.height <= 0:
            return
        if self.bg is not None:
            ctx.buffer.fill(self.x, self.y, self.width, 1, Cell(" ", self.fg, self.bg))

        col = self.draw_text(ctx, 0, 0, self.prompt, self.fg, self.bg) - self.x
        available = self.width - col
        if available <= 0:
            return

        graphemes = list(iter_graphemes(self._value))
        cursor_index = len(list(iter_graphemes(self._value[: self._cursor])))
        self._scroll_to_cursor(graphemes, cursor_index, available)

        limit = self.width
        for i in range(self._scroll, len(graphemes) + 1):
            if col >= limit:
                break
            g = graphemes[i][0] if i < len(graphemes) else " "
            if i == cursor_index and self.is_focused:
                fg, bg = self.cursor_fg, self.cursor_bg
            else:
                fg, bg = self.fg, self.bg
            if i == len(graphemes) and i != cursor_index:
                break
            col = self.draw_text(ctx, col, 0, g, fg, bg) - self.x
