"""Tests for termframe.stdin_buffer.StdinBuffer."""

from __future__ import annotations

from termframe.stdin_buffer import (
    BRACKETED_PASTE_END,
    BRACKETED_PASTE_START,
    ESC,
    StdinBuffer,
    _extract_complete_sequences,
    _is_complete_sequence,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class Collector:
    """Collects emitted data/paste events for assertions."""

    def __init__(self) -> None:
        self.data: list[str] = []
        self.pastes: list[str] = []

    def on_data(self, d: str) -> None:
        self.data.append(d)

    def on_paste(self, d: str) -> None:
        self.pastes.append(d)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_buffer(timeout: float = 0.01) -> tuple[StdinBuffer, Collector, FakeClock]:
    clock = FakeClock()
    buf = StdinBuffer(timeout=timeout, clock=clock)
    col = Collector()
    buf.on_data(col.on_data)
    buf.on_paste(col.on_paste)
    return buf, col, clock


# ---------------------------------------------------------------------------
# Sequence classification
# ---------------------------------------------------------------------------


class TestIsCompleteSequence:
    def test_plain_text_is_not_escape(self) -> None:
        assert _is_complete_sequence("a") == "not-escape"

    def test_lone_escape_is_incomplete(self) -> None:
        assert _is_complete_sequence(ESC) == "incomplete"

    def test_csi(self) -> None:
        assert _is_complete_sequence("\x1b[") == "incomplete"
        assert _is_complete_sequence("\x1b[1;5") == "incomplete"
        assert _is_complete_sequence("\x1b[1;5A") == "complete"

    def test_ss3(self) -> None:
        assert _is_complete_sequence("\x1bO") == "incomplete"
        assert _is_complete_sequence("\x1bOP") == "complete"

    def test_meta_key(self) -> None:
        assert _is_complete_sequence("\x1bx") == "complete"

    def test_osc_needs_terminator(self) -> None:
        assert _is_complete_sequence("\x1b]0;t") == "incomplete"
        assert _is_complete_sequence("\x1b]0;t\x07") == "complete"


class TestExtractCompleteSequences:
    def test_splits_text_and_sequences(self) -> None:
        sequences, rest = _extract_complete_sequences("a\x1b[Ab")
        assert sequences == ["a", "\x1b[A", "b"]
        assert rest == ""

    def test_keeps_incomplete_tail(self) -> None:
        sequences, rest = _extract_complete_sequences("ab\x1b[1;")
        assert sequences == ["a", "b"]
        assert rest == "\x1b[1;"


# ---------------------------------------------------------------------------
# Buffering
# ---------------------------------------------------------------------------


class TestStdinBuffer:
    def test_complete_input_emitted_immediately(self) -> None:
        buf, col, _ = make_buffer()
        buf.process("hi\x1b[B")
        assert col.data == ["h", "i", "\x1b[B"]
        assert buf.get_buffer() == ""

    def test_split_sequence_is_reassembled(self) -> None:
        buf, col, _ = make_buffer()
        buf.process("\x1b[")
        assert col.data == []
        buf.process("A")
        assert col.data == ["\x1b[A"]

    def test_lone_escape_flushed_after_timeout(self) -> None:
        buf, col, clock = make_buffer(timeout=0.01)
        buf.process(ESC)
        buf.check_timeout()
        assert col.data == []
        clock.now = 0.02
        buf.check_timeout()
        assert col.data == [ESC]
        assert buf.get_buffer() == ""

    def test_flush_returns_pending(self) -> None:
        buf, _, _ = make_buffer()
        buf.process("\x1b[1")
        assert buf.flush() == ["\x1b[1"]
        assert buf.flush() == []

    def test_bracketed_paste(self) -> None:
        buf, col, _ = make_buffer()
        buf.process(f"x{BRACKETED_PASTE_START}hello\nworld{BRACKETED_PASTE_END}y")
        assert col.pastes == ["hello\nworld"]
        assert col.data == ["x", "y"]

    def test_paste_split_across_chunks(self) -> None:
        buf, col, _ = make_buffer()
        buf.process(BRACKETED_PASTE_START + "abc")
        assert col.pastes == []
        buf.process("def" + BRACKETED_PASTE_END)
        assert col.pastes == ["abcdef"]

    def test_clear_discards_state(self) -> None:
        buf, col, _ = make_buffer()
        buf.process(BRACKETED_PASTE_START + "abc")
        buf.clear()
        buf.process("z")
        assert col.data == ["z"]
        assert col.pastes == []
