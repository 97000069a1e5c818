"""Screens, modal dialogs, and the two LIFO stacks that own them.

The screen stack holds the screens below the current one; the dialog stack
is independent and, while non-empty, its top dialog is the exclusive focus
and input scope.  Each screen remembers its focused node when another
screen is pushed over it and gets it back when it resumes.
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING

from termframe.ansi import Color
from termframe.components.box import Box
from termframe.errors import InitializationError
from termframe.layout import Panel, layout_tree
from termframe.node import Node

if TYPE_CHECKING:
    from termframe.tui import TUI

logger = logging.getLogger(__name__)


def _remember(node: Node | None) -> weakref.ref[Node] | None:
    return weakref.ref(node) if node is not None else None


def _recall(ref: weakref.ref[Node] | None) -> Node | None:
    return ref() if ref is not None else None


def _is_within(node: Node, root: Node) -> bool:
    current: Node | None = node
    while current is not None:
        if current is root:
            return True
        current = current.parent
    return False


class Screen(Panel):
    """A full-terminal root node.

    Child panels are stretched over the whole screen; other children keep
    the positions the application gives them.  ``render`` draws chrome
    directly into the buffer before the tree is painted.
    """

    def __init__(self, name: str | None = None) -> None:
        super().__init__(name=name)
        self.saved_focus: weakref.ref[Node] | None = None

    def resize(self, width: int, height: int) -> None:
        self.set_bounds(0, 0, width, height)

    def layout(self) -> None:
        for child in self.children:
            if child.visible and isinstance(child, Panel):
                child.set_bounds(self.content_x, self.content_y,
                                 self.content_width, self.content_height)

    def init(self, ctx: TUI) -> None:
        pass

    def on_exit(self, ctx: TUI) -> None:
        pass

    def on_resume(self, ctx: TUI) -> None:
        pass


class Dialog(Box):
    """A bordered modal box whose children stack vertically inside it."""

    def __init__(
        self,
        width: int,
        height: int,
        title: str = "",
        *,
        fg: Color = None,
        bg: Color = None,
        spacing: int = 0,
        name: str | None = None,
    ) -> None:
        super().__init__(
            "vertical", spacing, title=title, fg=fg, bg=bg,
            width=width, height=height, name=name,
        )
        self.saved_focus: weakref.ref[Node] | None = None

    def center(self, width: int, height: int) -> None:
        """Centre the dialog in a ``width x height`` area."""
        self.x = max(0, (width - self.width) // 2)
        self.y = max(0, (height - self.height) // 2)

    def on_close(self, ctx: TUI) -> None:
        pass


class ScreenManager:
    """Screen stack and dialog stack."""

    def __init__(self, ctx: TUI) -> None:
        self._ctx = ctx
        self._current: Screen | None = None
        self._stack: list[Screen] = []
        self._dialogs: list[Dialog] = []
        self._screen_focus: weakref.ref[Node] | None = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current_screen(self) -> Screen | None:
        return self._current

    @property
    def active_dialog(self) -> Dialog | None:
        return self._dialogs[-1] if self._dialogs else None

    @property
    def screen_depth(self) -> int:
        """Number of screens, current one included."""
        return len(self._stack) + (1 if self._current is not None else 0)

    @property
    def dialog_depth(self) -> int:
        return len(self._dialogs)

    def focus_scope(self) -> Node | None:
        """Root whose nodes may receive focus: the top dialog, else the screen."""
        return self.active_dialog or self._current

    # ------------------------------------------------------------------
    # Screen stack
    # ------------------------------------------------------------------

    def push_screen(self, screen: Screen) -> None:
        """Make *screen* current, stacking the previous one.

        If ``screen.init`` raises, the push is rolled back and
        ``InitializationError`` propagates.
        """
        ctx = self._ctx
        previous = self._current
        # While a dialog is open, focus belongs to the dialog; the screen's
        # own focus is the one parked in ``_screen_focus``.
        if previous is not None:
            previous.saved_focus = (
                self._screen_focus if self._dialogs else _remember(ctx.focus.focused)
            )
        if self._dialogs:
            self._screen_focus = None
        else:
            ctx.focus.blur()
        if previous is not None:
            previous.on_exit(ctx)
            self._stack.append(previous)

        self._current = screen
        screen.resize(ctx.buffer.width, ctx.buffer.height)
        try:
            screen.init(ctx)
        except Exception as exc:
            logger.error("Screen %r failed to initialise", screen, exc_info=exc)
            if not self._dialogs:
                ctx.focus.blur()
            self._current = self._stack.pop() if previous is not None else None
            if previous is not None:
                self._resume(previous)
            ctx.request_redraw()
            raise InitializationError(screen, exc) from exc

        logger.debug("Pushed screen %r (depth %d)", screen, self.screen_depth)
        ctx.request_redraw()

    def pop_screen(self) -> bool:
        """Return to the previous screen; ``False`` if there is none."""
        if not self._stack:
            return False
        ctx = self._ctx
        self._release_screen_focus()
        leaving = self._current
        if leaving is not None:
            leaving.on_exit(ctx)
        self._current = self._stack.pop()
        self._resume(self._current)
        logger.debug("Popped screen %r (depth %d)", leaving, self.screen_depth)
        ctx.request_redraw()
        return True

    def replace_screen(self, screen: Screen) -> None:
        """Swap the current screen for *screen* without growing the stack."""
        ctx = self._ctx
        leaving = self._current
        self._release_screen_focus()
        if leaving is not None:
            leaving.on_exit(ctx)
        self._current = None
        self.push_screen(screen)

    def _resume(self, screen: Screen) -> None:
        ctx = self._ctx
        screen.resize(ctx.buffer.width, ctx.buffer.height)
        screen.on_resume(ctx)
        remembered = _recall(screen.saved_focus)
        screen.saved_focus = None
        if remembered is None:
            return
        if self._dialogs:
            self._screen_focus = _remember(remembered)
        else:
            layout_tree(screen)
            ctx.focus.set_focus(remembered)

    def _release_screen_focus(self) -> None:
        """Drop the leaving screen's focus without disturbing an open dialog."""
        if self._dialogs:
            self._screen_focus = None
        else:
            self._ctx.focus.blur()

    # ------------------------------------------------------------------
    # Dialog stack
    # ------------------------------------------------------------------

    def show_dialog(self, dialog: Dialog) -> None:
        """Open *dialog* modally and focus the first focusable node inside it."""
        ctx = self._ctx
        focused = ctx.focus.focused
        if self._dialogs:
            self._dialogs[-1].saved_focus = _remember(focused)
        else:
            self._screen_focus = _remember(focused)
        ctx.focus.blur()

        self._dialogs.append(dialog)
        dialog.center(ctx.buffer.width, ctx.buffer.height)
        ctx.focus.focus_first(dialog)
        ctx.request_redraw()

    def close_dialog(self) -> bool:
        """Close the top dialog; ``False`` if none is open."""
        if not self._dialogs:
            return False
        ctx = self._ctx
        ctx.focus.blur()
        dialog = self._dialogs.pop()
        dialog.on_close(ctx)

        if self._dialogs:
            top = self._dialogs[-1]
            layout_tree(top)
            remembered = _recall(top.saved_focus)
            top.saved_focus = None
            if remembered is None or not ctx.focus.set_focus(remembered):
                ctx.focus.focus_first(top)
        else:
            remembered = _recall(self._screen_focus)
            self._screen_focus = None
            screen = self._current
            if remembered is not None and screen is not None:
                layout_tree(screen)
                if not _is_within(remembered, screen) or not ctx.focus.set_focus(remembered):
                    ctx.focus.focus_first(screen)

        ctx.request_redraw()
        return True

    # ------------------------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        for screen in (*self._stack, self._current):
            if screen is not None:
                screen.resize(width, height)
        for dialog in self._dialogs:
            dialog.center(width, height)
