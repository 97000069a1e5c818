"""Tests for termframe.renderer -- paint order and the back/front diff."""

from __future__ import annotations

import pytest

from termframe import ansi
from termframe.buffer import Cell
from termframe.components import Label
from termframe.config import TuiConfig
from termframe.node import Node
from termframe.renderer import z_sorted
from termframe.screens import Dialog, Screen
from termframe.tui import TUI

from .virtual_terminal import VirtualTerminal


class Recorder(Node):
    """Node that logs when it paints."""

    def __init__(self, name: str, log: list[str], z_index: int = 0) -> None:
        super().__init__(name=name, z_index=z_index)
        self.log = log

    def render(self, ctx: TUI) -> None:
        self.log.append(self.name or "")


class Exploding(Node):
    def render(self, ctx: TUI) -> None:
        raise RuntimeError("paint failed")


class BadColour(Node):
    def render(self, ctx: TUI) -> None:
        ctx.buffer.set(0, 0, Cell("x", "notacolour"))


def _tui(rows: int = 2, columns: int = 4) -> tuple[TUI, VirtualTerminal, Screen]:
    term = VirtualTerminal(rows=rows, columns=columns)
    tui = TUI(term)
    screen = Screen()
    tui.push_screen(screen)
    return tui, term, screen


# ---------------------------------------------------------------------------
# Paint order
# ---------------------------------------------------------------------------


class TestPaintOrder:
    def test_z_order_paint_sequence(self) -> None:
        tui, _, screen = _tui()
        log: list[str] = []
        a = screen.add_child(Recorder("A", log))
        screen.add_child(Recorder("B", log, z_index=10))
        a.add_child(Recorder("C", log))
        tui.render()
        assert log == ["A", "C", "B"]
        assert [n.name for n in tui.renderer.last_paint_order] == ["A", "C", "B"]

    def test_z_sorted_is_stable(self) -> None:
        nodes = [Node(z_index=z, name=str(i)) for i, z in enumerate([1, 0, 1, 0])]
        assert [n.name for n in z_sorted(nodes)] == ["1", "3", "0", "2"]

    def test_invisible_nodes_not_painted(self) -> None:
        tui, _, screen = _tui()
        log: list[str] = []
        hidden = screen.add_child(Recorder("hidden", log))
        hidden.add_child(Recorder("child", log))
        hidden.visible = False
        screen.add_child(Recorder("shown", log))
        tui.render()
        assert log == ["shown"]

    def test_dialog_shares_z_order_with_screen(self) -> None:
        tui, _, screen = _tui(rows=10, columns=20)
        log: list[str] = []
        screen.add_child(Recorder("base", log))
        screen.add_child(Recorder("top", log, z_index=100))
        dialog = Dialog(10, 4, name="dialog")
        dialog.add_child(Recorder("inside", log))
        tui.show_dialog(dialog)
        tui.render()
        assert log == ["base", "inside", "top"]
        order = [n.name for n in tui.renderer.last_paint_order]
        assert order == ["base", "dialog", "inside", "top"]

    def test_notifications_paint_after_everything(self) -> None:
        tui, _, screen = _tui(rows=3, columns=20)
        log: list[str] = []
        screen.add_child(Recorder("top", log, z_index=5_000))
        tui.notify("hi")
        tui.render()
        order = [n.name for n in tui.renderer.last_paint_order]
        assert order == ["top", "notifications"]

    def test_failing_node_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        tui, _, screen = _tui()
        log: list[str] = []
        screen.add_child(Exploding(name="bad"))
        screen.add_child(Recorder("good", log))
        tui.render()
        assert log == ["good"]
        assert tui.renderer.render_errors == 1
        assert "paint failed" in caplog.text

    def test_bad_colour_skips_only_that_node(self) -> None:
        tui, term, screen = _tui()
        screen.add_child(BadColour(name="bad"))
        screen.add_child(Label("ok", x=0, y=1))
        tui.render()
        assert tui.renderer.render_errors == 1
        assert tui.buffer.get(0, 0) == Cell(" ")
        assert "ok" in term.output


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


class TestDiff:
    def test_first_frame_repaints_everything(self) -> None:
        tui, term, _ = _tui()
        written = tui.render()
        expected = (
            ansi.move_to(0, 0) + ansi.sgr(None, None) + "    "
            + ansi.move_to(0, 1) + "    " + ansi.SGR_RESET
        )
        assert term.output == expected
        assert term.write_count == 1
        assert written == len(expected.encode("utf-8"))
        assert tui.renderer.full_redraws == 1

    def test_unchanged_frame_writes_nothing(self) -> None:
        tui, term, screen = _tui()
        label = screen.add_child(Label("hi"))
        tui.render()
        label.set_text("yo")
        assert tui.render() > 0
        term.clear_buffer()
        assert tui.render() == 0
        assert term.write_count == 0
        assert tui.renderer.last_frame_bytes == 0
        assert tui.renderer.frame_count == 3

    def test_single_changed_cell(self) -> None:
        tui, term, screen = _tui()
        tui.render()
        term.clear_buffer()
        screen.add_child(Label("x", x=2, y=1))
        tui.render()
        assert term.output == ansi.move_to(2, 1) + ansi.sgr(None, None) + "x" + ansi.SGR_RESET

    def test_adjacent_cells_share_one_move(self) -> None:
        tui, term, screen = _tui()
        tui.render()
        term.clear_buffer()
        screen.add_child(Label("ab", x=1, y=0))
        tui.render()
        assert term.output.count("H") == 1
        assert "ab" in term.output

    def test_gap_needs_second_move(self) -> None:
        tui, term, screen = _tui()
        tui.render()
        term.clear_buffer()
        screen.add_child(Label("a", x=0, y=0))
        screen.add_child(Label("b", x=3, y=0))
        tui.render()
        assert term.output == (
            ansi.move_to(0, 0) + ansi.sgr(None, None) + "a"
            + ansi.move_to(3, 0) + "b" + ansi.SGR_RESET
        )

    def test_colour_emitted_only_on_change(self) -> None:
        tui, term, screen = _tui()
        tui.render()
        term.clear_buffer()
        screen.add_child(Label("ab", x=0, y=0, fg="red"))
        screen.add_child(Label("c", x=2, y=0, fg="green"))
        tui.render()
        assert term.output == (
            ansi.move_to(0, 0) + ansi.sgr("red", None) + "ab"
            + ansi.sgr("green", None) + "c" + ansi.SGR_RESET
        )

    def test_wide_character_written_once(self) -> None:
        tui, term, screen = _tui()
        tui.render()
        term.clear_buffer()
        screen.add_child(Label("漢", x=0, y=0))
        tui.render()
        assert term.output == ansi.move_to(0, 0) + ansi.sgr(None, None) + "漢" + ansi.SGR_RESET
        assert tui.buffer.get_front(1, 0) == Cell(" ")

    def test_failed_write_leaves_front_and_forces_full(self) -> None:
        tui, term, screen = _tui()
        tui.render()
        screen.add_child(Label("z", x=0, y=0))
        term.fail_writes = True
        with pytest.raises(OSError):
            tui.render()
        assert tui.buffer.get_front(0, 0) == Cell(" ")
        term.fail_writes = False
        term.clear_buffer()
        tui.render()
        assert term.output.count("z") == 1
        assert term.output.count(" ") == 7
        assert tui.renderer.full_redraws == 2

    def test_force_full_redraw(self) -> None:
        tui, term, _ = _tui()
        tui.render()
        term.clear_buffer()
        tui.force_full_redraw()
        tui.render()
        assert term.output.count(" ") == 8

    def test_background_colour_from_config(self) -> None:
        term = VirtualTerminal(rows=1, columns=2)
        tui = TUI(term, TuiConfig(background="blue"))
        tui.render()
        assert tui.buffer.get(0, 0) == Cell(" ", None, "blue")
        assert ansi.sgr(None, "blue") in term.output
