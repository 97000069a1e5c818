"""Component tree: the ``Node`` shape shared by components, panels, screens
and dialogs, plus the single visibility-aware traversal used by both the
renderer and the focus manager.

Positions are absolute screen coordinates.  Children are exclusively owned
by their parent; ``parent`` is a weak back-reference used only for
visibility and layout queries.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Callable, Iterator

from termframe.ansi import Color

if TYPE_CHECKING:
    from termframe.keys import KeyEvent
    from termframe.tui import TUI


class Node:
    """A retained element of the component tree.

    Subclasses override the hooks they need: ``render`` paints into
    ``ctx.buffer``, ``handle_input`` returns ``True`` when it consumed the
    key, and ``on_focus`` / ``on_blur`` react to focus changes.
    """

    def __init__(
        self,
        x: int = 0,
        y: int = 0,
        width: int = 0,
        height: int = 0,
        *,
        visible: bool = True,
        z_index: int = 0,
        focusable: bool = False,
        name: str | None = None,
    ) -> None:
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.visible = visible
        self.z_index = z_index
        self.focusable = focusable
        self.is_focused = False
        self.name = name
        self.children: list[Node] = []
        self._parent: weakref.ref[Node] | None = None

        # Placement inside a GridPanel
        self.grid_row = 0
        self.grid_column = 0

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return (
            f"<{type(self).__name__}{label} at ({self.x},{self.y}) "
            f"{self.width}x{self.height}>"
        )

    # ------------------------------------------------------------------
    # Tree structure
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Node | None:
        return self._parent() if self._parent is not None else None

    def add_child(self, child: Node) -> Node:
        """Append *child*, detaching it from any previous parent first."""
        ancestor: Node | None = self
        while ancestor is not None:
            if ancestor is child:
                raise ValueError("A node cannot be added below itself")
            ancestor = ancestor.parent
        previous = child.parent
        if previous is not None:
            previous.remove_child(child)
        child._parent = weakref.ref(self)
        self.children.append(child)
        return child

    def remove_child(self, child: Node) -> None:
        """Remove *child* (no-op if absent)."""
        try:
            self.children.remove(child)
        except ValueError:
            return
        child._parent = None

    def clear(self) -> None:
        """Detach every child."""
        for child in self.children:
            child._parent = None
        self.children.clear()

    def descendants(self) -> Iterator[Node]:
        """Yield every descendant in pre-order, ignoring visibility."""
        for child in self.children:
            yield child
            yield from child.descendants()

    # ------------------------------------------------------------------
    # Geometry / visibility
    # ------------------------------------------------------------------

    @property
    def effectively_visible(self) -> bool:
        node: Node | None = self
        while node is not None:
            if not node.visible:
                return False
            node = node.parent
        return True

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def set_bounds(self, x: int, y: int, width: int, height: int) -> None:
        self.x = x
        self.y = y
        self.width = max(0, width)
        self.height = max(0, height)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def render(self, ctx: TUI) -> None:
        """Paint this node into ``ctx.buffer``."""

    def handle_input(self, ctx: TUI, key: KeyEvent) -> bool:
        return False

    def on_focus(self, ctx: TUI) -> None:
        pass

    def on_blur(self, ctx: TUI) -> None:
        pass

    # ------------------------------------------------------------------
    # Drawing helpers
    # ------------------------------------------------------------------

    def draw_text(
        self,
        ctx: TUI,
        dx: int,
        dy: int,
        text: str,
        fg: Color = None,
        bg: Color = None,
    ) -> int:
        """Write *text* at an offset inside this node, clipped to its box."""
        if dy < 0 or dy >= self.height:
            return self.x + dx
        return ctx.buffer.write_text(
            self.x + dx, self.y + dy, text, fg, bg, max_x=self.x + self.width
        )


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def walk_visible(
    root: Node,
    visitor: Callable[[Node], None],
    include_root: bool = True,
) -> None:
    """Pre-order walk that never enters an invisible subtree.

    *visitor* runs on a node before its children are visited, so a visitor
    that lays out panels hands correct bounds to the children.  When
    *include_root* is false the root itself is not visited, but its own
    visibility still gates the walk.
    """
    if not root.effectively_visible:
        return
    if include_root:
        visitor(root)
    stack: list[Iterator[Node]] = [iter(root.children)]
    while stack:
        child = next(stack[-1], None)
        if child is None:
            stack.pop()
            continue
        if not child.visible:
            continue
        visitor(child)
        stack.append(iter(child.children))


def collect_effectively_visible(root: Node, include_root: bool = True) -> list[Node]:
    """Return every effectively visible node under *root* in pre-order."""
    nodes: list[Node] = []
    walk_visible(root, nodes.append, include_root=include_root)
    return nodes
