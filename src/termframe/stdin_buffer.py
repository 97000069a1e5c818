"""StdinBuffer buffers raw input and emits complete sequences.

Terminal reads can split escape sequences across chunks.  Without
buffering, a partial ``ESC [ A`` would be misread as an Escape key followed
by two characters.  Incomplete data is held until more input arrives or the
escape timeout elapses; the input thread polls ``check_timeout`` between
reads, so no event loop is needed.
"""

from __future__ import annotations

import re
import time
from typing import Callable

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


def _is_complete_sequence(data: str) -> str:
    """Classify *data* as ``"complete"``, ``"incomplete"`` or ``"not-escape"``."""
    if not data.startswith(ESC):
        return "not-escape"

    if len(data) == 1:
        return "incomplete"

    after_esc = data[1:]

    if after_esc.startswith("["):
        if after_esc.startswith("[M"):
            return "complete" if len(data) >= 6 else "incomplete"
        return _is_complete_csi_sequence(data)

    if after_esc.startswith("]"):
        if data.endswith(f"{ESC}\\") or data.endswith("\x07"):
            return "complete"
        return "incomplete"

    if after_esc.startswith(("P", "_")):
        return "complete" if data.endswith(f"{ESC}\\") else "incomplete"

    if after_esc.startswith("O"):
        return "complete" if len(after_esc) >= 2 else "incomplete"

    # Meta key: ESC followed by a single character
    return "complete"


def _is_complete_csi_sequence(data: str) -> str:
    if len(data) < 3:
        return "incomplete"

    payload = data[2:]
    if not 0x40 <= ord(payload[-1]) <= 0x7E:
        return "incomplete"

    if payload.startswith("<"):
        return "complete" if _SGR_MOUSE_RE.match(payload) else "incomplete"
    return "complete"


def _extract_complete_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences plus an incomplete remainder."""
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        remaining = buffer[pos:]
        if not remaining.startswith(ESC):
            sequences.append(remaining[0])
            pos += 1
            continue

        for seq_end in range(1, len(remaining) + 1):
            candidate = remaining[:seq_end]
            if _is_complete_sequence(candidate) == "complete":
                sequences.append(candidate)
                pos += seq_end
                break
        else:
            return sequences, remaining

    return sequences, ""


class StdinBuffer:
    """Reassembles raw terminal input into complete key sequences.

    Bracketed pastes are collected whole and reported through ``on_paste``.
    """

    def __init__(
        self,
        *,
        timeout: float = 0.01,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._buffer: str = ""
        self._timeout: float = timeout
        self._clock = clock
        self._deadline: float | None = None
        self._paste_mode: bool = False
        self._paste_buffer: str = ""

        self._on_data: Callable[[str], None] | None = None
        self._on_paste: Callable[[str], None] | None = None

    def on_data(self, callback: Callable[[str], None]) -> None:
        """Set callback for complete sequences."""
        self._on_data = callback

    def on_paste(self, callback: Callable[[str], None]) -> None:
        """Set callback for paste content."""
        self._on_paste = callback

    def _emit_data(self, data: str) -> None:
        if self._on_data:
            self._on_data(data)

    def _emit_paste(self, data: str) -> None:
        if self._on_paste:
            self._on_paste(data)

    def process(self, data: str) -> None:
        """Feed raw input into the buffer."""
        self._deadline = None
        self._buffer += data

        if not self._paste_mode:
            start_index = self._buffer.find(BRACKETED_PASTE_START)
            if start_index == -1:
                sequences, self._buffer = _extract_complete_sequences(self._buffer)
                for sequence in sequences:
                    self._emit_data(sequence)
                if self._buffer:
                    self._deadline = self._clock() + self._timeout
                return

            sequences, _ = _extract_complete_sequences(self._buffer[:start_index])
            for sequence in sequences:
                self._emit_data(sequence)
            self._buffer = self._buffer[start_index + len(BRACKETED_PASTE_START):]
            self._paste_mode = True
            self._paste_buffer = ""

        self._paste_buffer += self._buffer
        self._buffer = ""
        end_index = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end_index == -1:
            return

        pasted = self._paste_buffer[:end_index]
        remaining = self._paste_buffer[end_index + len(BRACKETED_PASTE_END):]
        self._paste_mode = False
        self._paste_buffer = ""
        self._emit_paste(pasted)
        if remaining:
            self.process(remaining)

    def check_timeout(self) -> None:
        """Emit held data once the escape timeout has elapsed."""
        if self._deadline is not None and self._clock() >= self._deadline:
            for sequence in self.flush():
                self._emit_data(sequence)

    def flush(self) -> list[str]:
        """Return and discard whatever is buffered, complete or not."""
        self._deadline = None
        if not self._buffer:
            return []
        sequences = [self._buffer]
        self._buffer = ""
        return sequences

    def clear(self) -> None:
        self._deadline = None
        self._buffer = ""
        self._paste_mode = False
        self._paste_buffer = ""

    def get_buffer(self) -> str:
        return self._buffer
