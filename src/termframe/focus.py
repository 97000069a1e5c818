"""Focus manager: the single focused-node reference and tab navigation."""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING

from termframe.layout import layout_tree
from termframe.node import Node, collect_effectively_visible

if TYPE_CHECKING:
    from termframe.tui import TUI

logger = logging.getLogger(__name__)


def focus_order(root: Node) -> list[Node]:
    """Visible focusable nodes under *root* in row-major order (y, then x)."""
    candidates = [n for n in collect_effectively_visible(root) if n.focusable]
    return sorted(candidates, key=lambda n: (n.y, n.x))


class FocusManager:
    """Owns which node receives keyboard input.

    Only weakly references the focused node: a node dropped from the tree
    and garbage collected simply stops being focused.
    """

    def __init__(self, ctx: TUI) -> None:
        self._ctx = ctx
        self._focused: weakref.ref[Node] | None = None

    @property
    def focused(self) -> Node | None:
        """The focused node, or ``None``.

        A node that has since been hidden (directly or through an ancestor)
        or made unfocusable loses focus here, before it can see another key.
        """
        node = self._focused() if self._focused is not None else None
        if node is not None and not (node.focusable and node.effectively_visible):
            logger.debug("Dropping focus from %r", node)
            self._blur(node)
            return None
        return node

    def set_focus(self, node: Node | None) -> bool:
        """Move focus to *node* (``None`` clears it).

        A node that is not focusable or not effectively visible is refused
        and the current focus is left as it was.  Returns whether focus now
        rests where the caller asked.
        """
        current = self.focused
        if node is current:
            return True

        if node is None:
            self._blur(current)
            return True

        if not node.focusable or not node.effectively_visible:
            logger.debug("Refusing focus for %r", node)
            return False

        self._blur(current)
        self._focused = weakref.ref(node)
        node.is_focused = True
        node.on_focus(self._ctx)
        self._ctx.request_redraw()
        return True

    def blur(self) -> None:
        """Clear focus, running the focused node's blur hook."""
        self._blur(self.focused)

    def _blur(self, node: Node | None) -> None:
        self._focused = None
        if node is None:
            return
        node.is_focused = False
        node.on_blur(self._ctx)
        self._ctx.request_redraw()

    def focus_first(self, root: Node) -> Node | None:
        """Focus the first node of *root*'s tab order, if there is one."""
        layout_tree(root)
        order = focus_order(root)
        if not order:
            return None
        self.set_focus(order[0])
        return order[0]

    def tab_navigate(self, reverse: bool = False) -> Node | None:
        """Advance focus through the active dialog's (or screen's) tab order.

        The candidate list is rebuilt on every call.
        """
        root = self._ctx.screens.focus_scope()
        if root is None:
            return None
        layout_tree(root)
        order = focus_order(root)
        if not order:
            return None

        current = self.focused
        if current is None or current not in order:
            target = order[-1] if reverse else order[0]
        else:
            index = order.index(current)
            target = order[(index + (-1 if reverse else 1)) % len(order)]

        self.set_focus(target)
        return target
