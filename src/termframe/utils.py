"""Terminal text utilities: grapheme segmentation and cell-width measurement.

Provides functions for splitting text into grapheme clusters, measuring how
many terminal cells each cluster occupies, and truncating text to a column
budget.  The frame buffer relies on these to place wide (East-Asian,
emoji) characters correctly.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterator

import grapheme
import wcwidth as _wcwidth

# CSI / OSC sequences that occupy no cells
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;?]*[A-Za-z]"  # CSI
    r"|\x1b\][^\x07]*\x07"  # OSC
)

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def grapheme_width(g: str) -> int:
    """Return the number of terminal cells a single grapheme cluster occupies.

    Rules:
    1. Zero-width characters (control, combining marks, etc.) -> 0
    2. Emoji (VS16, ZWJ sequences, skin tones, flags) -> 2
    3. Otherwise delegate to wcwidth for the first meaningful codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):  # VS16, ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # regional indicators
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(g[0]), 0)


def iter_graphemes(text: str) -> Iterator[tuple[str, int]]:
    """Yield ``(cluster, width)`` for every grapheme cluster in *text*."""
    if text.isascii():
        for ch in text:
            yield ch, grapheme_width(ch)
        return
    for g in grapheme.graphemes(text):
        yield g, grapheme_width(g)


# ---------------------------------------------------------------------------
# visible_width
# ---------------------------------------------------------------------------


def visible_width(text: str) -> int:
    """Calculate the number of terminal cells *text* occupies.

    * Strips ANSI escape sequences.
    * Uses a fast ASCII path when possible.
    * Caches results for non-ASCII strings.
    """
    if not text:
        return 0

    stripped = _STRIP_RE.sub("", text) if "\x1b" in text else text
    if not stripped:
        return 0

    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(w for _, w in iter_graphemes(stripped))
    return _cache_width(stripped, total)


# ---------------------------------------------------------------------------
# truncate_to_width
# ---------------------------------------------------------------------------


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Truncate *text* to fit within *max_width* terminal cells.

    If the text is wider than *max_width*, it is cut at a grapheme boundary
    and *ellipsis* is appended (the ellipsis counts towards the width).  If
    *pad* is ``True`` the result is right-padded with spaces to exactly
    *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        if pad:
            return text + " " * (max_width - text_width)
        return text

    ellipsis_width = visible_width(ellipsis)
    target_width = max_width - ellipsis_width
    if target_width <= 0:
        return _take_columns(ellipsis, max_width)

    result = _take_columns(text, target_width) + ellipsis

    if pad:
        result_width = visible_width(result)
        if result_width < max_width:
            result += " " * (max_width - result_width)

    return result


def _take_columns(text: str, max_cols: int) -> str:
    """Return the longest grapheme-aligned prefix of *text* within *max_cols*."""
    result: list[str] = []
    cols = 0
    for g, w in iter_graphemes(text):
        if cols + w > max_cols:
            break
        result.append(g)
        cols += w
    return "".join(result)
