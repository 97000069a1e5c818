"""Input subsystem: a background polling thread feeding a bounded queue.

The queue is the only synchronised hand-off between the input thread and
the frame loop.  ``put`` never blocks the producer; when the queue is full
the oldest pending event is dropped.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable

from termframe.keys import KeyEvent
from termframe.stdin_buffer import StdinBuffer

logger = logging.getLogger(__name__)

# Blocks for at most ``timeout`` seconds; returns "" when nothing arrived.
ReadFn = Callable[[float], str]


class InputQueue:
    """Thread-safe bounded FIFO of ``KeyEvent``."""

    def __init__(self, capacity: int = 100) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._events: deque[KeyEvent] = deque()
        self._lock = threading.Lock()
        self._error: BaseException | None = None
        self.dropped = 0

    def put(self, event: KeyEvent) -> None:
        with self._lock:
            if len(self._events) >= self.capacity:
                self._events.popleft()
                self.dropped += 1
            self._events.append(event)

    def drain(self) -> list[KeyEvent]:
        """Remove and return every queued event, oldest first."""
        with self._lock:
            events = list(self._events)
            self._events.clear()
        return events

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def fail(self, error: BaseException) -> None:
        """Record a producer failure for the consumer to pick up."""
        with self._lock:
            self._error = error

    @property
    def error(self) -> BaseException | None:
        with self._lock:
            return self._error

    def take_error(self) -> BaseException | None:
        """Return and clear the recorded producer failure, if any."""
        with self._lock:
            error, self._error = self._error, None
        return error


class InputPoller:
    """Daemon thread that reads raw input and enqueues parsed key events."""

    def __init__(
        self,
        read: ReadFn,
        queue: InputQueue,
        *,
        poll_interval: float = 0.05,
        escape_timeout: float = 0.01,
    ) -> None:
        self._read = read
        self._queue = queue
        self._poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._buffer = StdinBuffer(timeout=escape_timeout)
        self._buffer.on_data(self._on_data)
        self._buffer.on_paste(self._on_paste)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="termframe-input", daemon=True
        )
        self._thread.start()

    def request_stop(self) -> None:
        """Signal the thread to stop without waiting for it."""
        self._stop.set()

    def stop(self, timeout: float = 1.0) -> None:
        """Signal the thread to stop polling and wait for it to unwind."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def poll_once(self) -> None:
        """Run a single read/parse cycle on the calling thread."""
        data = self._read(self._poll_interval)
        if data:
            self._buffer.process(data)
        else:
            self._buffer.check_timeout()

    def _run(self) -> None:
        logger.debug("Input thread started")
        try:
            while not self._stop.is_set():
                self.poll_once()
        except Exception as exc:
            self._queue.fail(exc)
            logger.exception("Input thread failed")
        finally:
            for sequence in self._buffer.flush():
                self._on_data(sequence)
            logger.debug("Input thread stopped")

    def _on_data(self, data: str) -> None:
        self._queue.put(KeyEvent.from_data(data))

    def _on_paste(self, data: str) -> None:
        self._queue.put(KeyEvent(data, "paste"))
