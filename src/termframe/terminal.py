"""Terminal abstraction for raw-mode stdin/stdout interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that
manages raw mode, the alternate screen, cursor visibility and SIGWINCH
resize notification via ANSI escape sequences.  Input is read with
``read(timeout)`` from the input thread; output is written only by the
frame loop.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import signal
import sys
import termios
import threading
import tty
from typing import Callable, Protocol

from termframe import ansi

logger = logging.getLogger(__name__)


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(self, on_resize: Callable[[], None] | None = None) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    def read(self, timeout: float) -> str: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...


class ProcessTerminal:
    """Terminal backed by ``sys.stdin`` / ``sys.stdout``."""

    def __init__(self, alt_screen: bool = True) -> None:
        self._alt_screen = alt_screen
        self._original_termios: list | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._prev_sigwinch_handler: object = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._started = False

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    # -- start / stop -------------------------------------------------------

    def start(self, on_resize: Callable[[], None] | None = None) -> None:
        """Enable raw mode, switch to the alternate screen and hide the cursor."""
        if self._started:
            return
        fd = sys.stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)

        self._resize_handler = on_resize
        if threading.current_thread() is threading.main_thread():
            self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
            signal.signal(signal.SIGWINCH, self._on_sigwinch)

        if self._alt_screen:
            self._raw_write(ansi.ALT_SCREEN_ENABLE)
        self._raw_write(ansi.HIDE_CURSOR + ansi.CLEAR_SCREEN)
        self._started = True

    def stop(self) -> None:
        """Restore terminal modes; safe to call more than once."""
        if not self._started:
            return
        self._started = False
        self._raw_write(ansi.SGR_RESET + ansi.SHOW_CURSOR)
        if self._alt_screen:
            self._raw_write(ansi.ALT_SCREEN_DISABLE)

        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)  # type: ignore[arg-type]
            self._prev_sigwinch_handler = None
        self._resize_handler = None

        if self._original_termios is not None:
            termios.tcsetattr(
                sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios
            )
            self._original_termios = None

    # -- I/O ----------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write *data* to stdout and flush."""
        sys.stdout.write(data)
        sys.stdout.flush()

    def read(self, timeout: float) -> str:
        """Wait up to *timeout* seconds for input and return what arrived."""
        fd = sys.stdin.fileno()
        ready, _, _ = select.select([fd], [], [], timeout)
        if not ready:
            return ""
        raw = os.read(fd, 4096)
        if not raw:
            return ""
        return self._decoder.decode(raw)

    # -- private ------------------------------------------------------------

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        if self._resize_handler is not None:
            self._resize_handler()

    def _raw_write(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            logger.debug("Terminal write failed during mode switch", exc_info=True)
