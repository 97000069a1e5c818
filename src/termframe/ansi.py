"""ANSI escape sequences emitted by the renderer and terminal back-end."""

from __future__ import annotations

from typing import Union

# None -> terminal default, int -> 256-colour index, str -> name or "#rrggbb"
Color = Union[int, str, None]

ESC = "\x1b"
CSI = "\x1b["

SGR_RESET = "\x1b[0m"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
ALT_SCREEN_ENABLE = "\x1b[?1049h"
ALT_SCREEN_DISABLE = "\x1b[?1049l"
CLEAR_SCREEN = "\x1b[2J\x1b[H"

_NAMED_COLORS: dict[str, int] = {
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "cyan": 6,
    "white": 7,
    "bright_black": 8,
    "gray": 8,
    "grey": 8,
    "bright_red": 9,
    "bright_green": 10,
    "bright_yellow": 11,
    "bright_blue": 12,
    "bright_magenta": 13,
    "bright_cyan": 14,
    "bright_white": 15,
}


def move_to(x: int, y: int) -> str:
    """Absolute cursor positioning (0-based *x*, *y*)."""
    return f"\x1b[{y + 1};{x + 1}H"


def _color_params(color: Color, background: bool) -> str:
    if color is None:
        return "49" if background else "39"

    if isinstance(color, str):
        if color.startswith("#") and len(color) == 7:
            r = int(color[1:3], 16)
            g = int(color[3:5], 16)
            b = int(color[5:7], 16)
            return f"{48 if background else 38};2;{r};{g};{b}"
        index = _NAMED_COLORS.get(color.lower())
        if index is None:
            raise ValueError(f"Unknown colour: {color!r}")
        color = index

    if not 0 <= color <= 255:
        raise ValueError(f"Colour index out of range: {color}")
    if color < 8:
        return str((40 if background else 30) + color)
    if color < 16:
        return str((100 if background else 90) + color - 8)
    return f"{48 if background else 38};5;{color}"


def validate_color(color: Color) -> None:
    """Raise ``ValueError`` unless *color* is something ``sgr`` can emit."""
    if color is not None:
        _color_params(color, False)


def sgr(fg: Color, bg: Color) -> str:
    """Return a single SGR sequence that resets attributes and sets *fg*/*bg*."""
    return f"\x1b[0;{_color_params(fg, False)};{_color_params(bg, True)}m"
