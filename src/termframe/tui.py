"""Engine context and frame loop.

``TUI`` owns every piece of engine state (buffers, store, focus, screen and
dialog stacks) and is the context object passed to every component hook.
Only the frame-loop thread touches that state; the input thread talks to
it exclusively through the ``InputQueue``.

Each tick:

1.  Drain the input queue and route every key: active dialog, focused
    node, current screen (skipped while a dialog is modal), then the
    built-in Tab / Shift+Tab / quit bindings.
2.  Housekeeping: expire notifications, pick up terminal resizes.
3.  Render if input was processed or a redraw was requested.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from termframe.buffer import FrameBuffer
from termframe.config import TuiConfig, configure_logging
from termframe.errors import RECOVERABLE_ERRORS, FatalError
from termframe.focus import FocusManager
from termframe.input import InputPoller, InputQueue
from termframe.keys import KeyEvent
from termframe.node import Node
from termframe.notifications import Notification, Notifications
from termframe.renderer import Renderer
from termframe.screens import Dialog, Screen, ScreenManager
from termframe.store import DispatchResult, Store
from termframe.terminal import Terminal

logger = logging.getLogger(__name__)


class TUI:
    """Main controller: frame loop, input routing and the shared context."""

    def __init__(
        self,
        terminal: Terminal,
        config: TuiConfig | None = None,
        store: Store | None = None,
    ) -> None:
        self.terminal = terminal
        self.config = config or TuiConfig()
        self.store = store or Store(history_limit=self.config.history_limit)

        self.buffer = FrameBuffer(terminal.columns, terminal.rows)
        self.renderer = Renderer(
            terminal, self.buffer, self.config.background, self.config.foreground
        )
        self.focus = FocusManager(self)
        self.screens = ScreenManager(self)
        self.notifications = Notifications()

        self.input_queue = InputQueue(self.config.queue_capacity)
        self.poller = InputPoller(
            terminal.read,
            self.input_queue,
            poll_interval=self.config.input_poll_interval,
            escape_timeout=self.config.escape_timeout,
        )

        self.running = False
        self.fatal_error: FatalError | None = None
        self.on_fatal: Callable[[FatalError], None] | None = None
        self._dirty = True

    # ------------------------------------------------------------------
    # Redraw requests
    # ------------------------------------------------------------------

    @property
    def dirty(self) -> bool:
        return self._dirty

    def request_redraw(self) -> None:
        """Render on the next tick."""
        self._dirty = True

    def force_full_redraw(self) -> None:
        """Render on the next tick, repainting every cell."""
        self.renderer.force_full_redraw()
        self._dirty = True

    # ------------------------------------------------------------------
    # Shortcuts to the owned managers
    # ------------------------------------------------------------------

    def push_screen(self, screen: Screen) -> None:
        self.screens.push_screen(screen)

    def pop_screen(self) -> bool:
        return self.screens.pop_screen()

    def replace_screen(self, screen: Screen) -> None:
        self.screens.replace_screen(screen)

    def show_dialog(self, dialog: Dialog) -> None:
        self.screens.show_dialog(dialog)

    def close_dialog(self) -> bool:
        return self.screens.close_dialog()

    def set_focus(self, node: Node | None) -> bool:
        return self.focus.set_focus(node)

    def tab_navigate(self, reverse: bool = False) -> Node | None:
        return self.focus.tab_navigate(reverse)

    def dispatch(self, action: str, payload: Any = None) -> DispatchResult:
        return self.store.dispatch(action, payload)

    def notify(self, message: str, duration: float | None = None, level: str = "info") -> Notification:
        entry = self.notifications.notify(message, duration, level)
        self.request_redraw()
        return entry

    # ------------------------------------------------------------------
    # Input routing
    # ------------------------------------------------------------------

    def handle_key(self, event: KeyEvent) -> bool:
        """Route one key event; return whether anything handled it."""
        dialog = self.screens.active_dialog
        if dialog is not None and dialog.handle_input(self, event):
            return True

        focused = self.focus.focused
        if focused is not None and focused.handle_input(self, event):
            return True

        if dialog is None:
            screen = self.screens.current_screen
            if screen is not None and screen.handle_input(self, event):
                return True

        if event.matches("tab"):
            self.focus.tab_navigate(reverse=False)
            return True
        if event.matches("shift+tab"):
            self.focus.tab_navigate(reverse=True)
            return True
        if self.config.quit_key and event.matches(self.config.quit_key):
            self.stop()
            return True
        return False

    def feed_input(self, data: str) -> None:
        """Enqueue *data* as if the input thread had read it."""
        self.input_queue.put(KeyEvent.from_data(data))

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def render(self) -> int:
        """Render one frame now; return the number of bytes written."""
        self._dirty = False
        overlays = [self.notifications] if self.notifications.active else []
        return self.renderer.render_frame(
            self,
            self.screens.current_screen,
            self.screens.active_dialog,
            overlays,
        )

    def _check_resize(self) -> None:
        width, height = self.terminal.columns, self.terminal.rows
        if (width, height) == (self.buffer.width, self.buffer.height):
            return
        logger.debug("Terminal resized to %dx%d", width, height)
        self.buffer.resize(width, height)
        self.screens.resize(width, height)
        self.force_full_redraw()

    def tick(self, now: float | None = None) -> bool:
        """Run one frame-loop iteration (without sleeping).

        Returns ``True`` if a frame was rendered.
        """
        error = self.input_queue.take_error()
        if error is not None:
            raise error

        events = self.input_queue.drain()
        for event in events:
            try:
                self.handle_key(event)
            except RECOVERABLE_ERRORS as exc:
                # The rest of the drained keys still get routed.
                logger.error("Recovered from %s", exc, exc_info=exc)
                self.force_full_redraw()

        if self.notifications.expire(now):
            self.request_redraw()
        self._check_resize()

        if events or self._dirty:
            self.render()
            return True
        return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _on_resize(self) -> None:
        # Runs in the signal handler; the tick picks up the new size.
        self._dirty = True

    def stop(self) -> None:
        """Ask the frame loop and the input thread to finish."""
        self.running = False
        self.poller.request_stop()

    def run(self) -> FatalError | None:
        """Drive the frame loop until ``stop()`` or a fatal error.

        The terminal is always restored on the way out.  Returns the fatal
        error that stopped the loop, if any.
        """
        handler = None
        if self.config.log_file:
            handler = configure_logging(self.config.log_file, self.config.log_level)

        self.running = True
        self.fatal_error = None
        try:
            self.terminal.start(on_resize=self._on_resize)
            self.poller.start()
            self.force_full_redraw()
            logger.info("Frame loop started at %d fps", self.config.fps)

            interval = self.config.frame_interval
            while self.running:
                started = time.monotonic()
                try:
                    self.tick()
                except RECOVERABLE_ERRORS as exc:
                    logger.error("Recovered from %s", exc, exc_info=exc)
                    self.force_full_redraw()
                except Exception as exc:
                    self.fatal_error = FatalError(exc)
                    logger.critical("%s", self.fatal_error, exc_info=exc)
                    self.running = False
                    break
                if self.running:
                    elapsed = time.monotonic() - started
                    time.sleep(max(self.config.min_sleep, interval - elapsed))
        finally:
            self._shutdown()
            if handler is not None:
                logging.getLogger("termframe").removeHandler(handler)
                handler.close()

        if self.fatal_error is not None and self.on_fatal is not None:
            self.on_fatal(self.fatal_error)
        return self.fatal_error

    def _shutdown(self) -> None:
        self.running = False
        self.poller.stop()
        try:
            self.terminal.stop()
        finally:
            logger.info("Frame loop stopped")
