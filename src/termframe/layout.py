"""Layout panels and composite visibility control.

A panel is a ``Node`` that positions its children.  The renderer calls
``layout()`` on every visible panel before visiting its children, so panels
nest freely: an outer panel assigns bounds to an inner one, which then
arranges its own children inside them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence, Union

from termframe.node import Node, walk_visible

Orientation = Literal["vertical", "horizontal"]


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Fixed:
    """A grid track of exactly ``size`` cells."""

    size: int

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"Fixed track size must be >= 0, got {self.size}")


@dataclass(frozen=True)
class Weighted:
    """A grid track sharing leftover space in proportion to ``weight``."""

    weight: int = 1

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError(f"Track weight must be >= 0, got {self.weight}")


Track = Union[Fixed, Weighted]


def distribute_tracks(tracks: Sequence[Track], extent: int) -> list[int]:
    """Resolve *tracks* against *extent* cells.

    Fixed tracks get their size.  What remains (never negative) is split
    among weighted tracks by floor division on their weights; the last
    weighted track absorbs the rounding remainder.
    """
    fixed_total = sum(t.size for t in tracks if isinstance(t, Fixed))
    remaining = max(0, extent - fixed_total)
    weighted = [i for i, t in enumerate(tracks) if isinstance(t, Weighted)]
    total_weight = sum(tracks[i].weight for i in weighted)  # type: ignore[union-attr]

    sizes = [t.size if isinstance(t, Fixed) else 0 for t in tracks]
    if not weighted:
        return sizes

    assigned = 0
    for i in weighted[:-1]:
        share = remaining * tracks[i].weight // total_weight if total_weight else 0  # type: ignore[union-attr]
        sizes[i] = share
        assigned += share
    sizes[weighted[-1]] = remaining - assigned
    return sizes


def _offsets(origin: int, sizes: Sequence[int]) -> list[int]:
    offsets: list[int] = []
    pos = origin
    for size in sizes:
        offsets.append(pos)
        pos += size
    return offsets


# ---------------------------------------------------------------------------
# Panels
# ---------------------------------------------------------------------------


class Panel(Node):
    """Base class for nodes that arrange their children."""

    def __init__(self, *args, padding: int = 0, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.padding = padding

    @property
    def content_x(self) -> int:
        return self.x + self.padding

    @property
    def content_y(self) -> int:
        return self.y + self.padding

    @property
    def content_width(self) -> int:
        return max(0, self.width - 2 * self.padding)

    @property
    def content_height(self) -> int:
        return max(0, self.height - 2 * self.padding)

    def layout(self) -> None:
        raise NotImplementedError


class StackPanel(Panel):
    """Places visible children one after another along ``orientation``.

    Invisible children are skipped and reserve no space.  Each child keeps
    its own main-axis size; its cross-axis size is clipped to the content
    box, or set to it when ``stretch`` is on.
    """

    def __init__(
        self,
        orientation: Orientation = "vertical",
        spacing: int = 0,
        padding: int = 0,
        *,
        stretch: bool = False,
        **kwargs,
    ) -> None:
        super().__init__(padding=padding, **kwargs)
        if orientation not in ("vertical", "horizontal"):
            raise ValueError(f"Unknown orientation: {orientation!r}")
        self.orientation: Orientation = orientation
        self.spacing = spacing
        self.stretch = stretch

    def layout(self) -> None:
        cx, cy = self.content_x, self.content_y
        cw, ch = self.content_width, self.content_height
        vertical = self.orientation == "vertical"
        pos = cy if vertical else cx

        for child in self.children:
            if not child.visible:
                continue
            if vertical:
                child.x, child.y = cx, pos
                child.width = cw if self.stretch else min(child.width, cw)
                pos += child.height + self.spacing
            else:
                child.x, child.y = pos, cy
                child.height = ch if self.stretch else min(child.height, ch)
                pos += child.width + self.spacing


class GridPanel(Panel):
    """Places children into the cells of a row/column track grid.

    A child's ``grid_row`` / ``grid_column`` select its cell; indices
    beyond the declared tracks clamp to the last track.  Children are sized
    to fill their cell.
    """

    def __init__(
        self,
        rows: Sequence[Track] | None = None,
        columns: Sequence[Track] | None = None,
        padding: int = 0,
        **kwargs,
    ) -> None:
        super().__init__(padding=padding, **kwargs)
        self.rows: list[Track] = list(rows) if rows else [Weighted(1)]
        self.columns: list[Track] = list(columns) if columns else [Weighted(1)]

    def add_child(self, child: Node, row: int = 0, column: int = 0) -> Node:  # type: ignore[override]
        child.grid_row = row
        child.grid_column = column
        return super().add_child(child)

    def column_widths(self) -> list[int]:
        return distribute_tracks(self.columns, self.content_width)

    def row_heights(self) -> list[int]:
        return distribute_tracks(self.rows, self.content_height)

    def layout(self) -> None:
        widths = self.column_widths()
        heights = self.row_heights()
        xs = _offsets(self.content_x, widths)
        ys = _offsets(self.content_y, heights)
        last_row, last_col = len(heights) - 1, len(widths) - 1

        for child in self.children:
            if not child.visible:
                continue
            r = min(max(child.grid_row, 0), last_row)
            c = min(max(child.grid_column, 0), last_col)
            child.set_bounds(xs[c], ys[r], widths[c], heights[r])


# ---------------------------------------------------------------------------
# Tree-wide operations
# ---------------------------------------------------------------------------


def hide(node: Node) -> None:
    """Hide *node* and every descendant, unconditionally."""
    node.visible = False
    for child in node.descendants():
        child.visible = False


def show(node: Node) -> None:
    """Show *node* and every descendant, unconditionally."""
    node.visible = True
    for child in node.descendants():
        child.visible = True


def _layout_visitor(node: Node) -> None:
    if isinstance(node, Panel):
        node.layout()


def layout_tree(root: Node, include_root: bool = True) -> None:
    """Run every visible panel's layout, parents before children."""
    walk_visible(root, _layout_visitor, include_root=include_root)
