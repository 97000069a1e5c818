"""Runtime configuration and log setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from termframe.ansi import Color

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass
class TuiConfig:
    """Frame-loop and rendering settings."""

    fps: int = 30
    queue_capacity: int = 100
    history_limit: int = 100
    background: Color = None
    foreground: Color = None
    alt_screen: bool = True
    quit_key: str | None = "ctrl+c"
    input_poll_interval: float = 0.05
    escape_timeout: float = 0.01
    min_sleep: float = 0.001
    log_file: str | None = None
    log_level: str = "info"

    @property
    def frame_interval(self) -> float:
        return 1.0 / max(1, self.fps)

    @classmethod
    def from_env(cls) -> TuiConfig:
        """Build a config, overriding defaults from ``TERMFRAME_*`` variables."""
        config = cls()
        fps = os.environ.get("TERMFRAME_FPS")
        if fps:
            try:
                config.fps = max(1, int(fps))
            except ValueError:
                logging.getLogger(__name__).warning(
                    "Ignoring invalid TERMFRAME_FPS=%r", fps
                )
        config.log_file = os.environ.get("TERMFRAME_LOG_FILE") or None
        config.log_level = os.environ.get("TERMFRAME_LOG_LEVEL", config.log_level)
        config.alt_screen = os.environ.get("TERMFRAME_ALT_SCREEN") != "0"
        return config


def configure_logging(path: str, level: str = "info") -> logging.Handler:
    """Send runtime logs to *path*.

    stdout belongs to the renderer, so the runtime never logs there.
    Returns the installed handler so callers can remove it again.
    """
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("termframe")
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
