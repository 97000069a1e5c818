"""Tests for termframe.utils -- terminal text utilities."""

from __future__ import annotations

from termframe.utils import (
    grapheme_width,
    iter_graphemes,
    truncate_to_width,
    visible_width,
)


# ---------------------------------------------------------------------------
# visible_width
# ---------------------------------------------------------------------------


class TestVisibleWidth:
    """Measure the visible terminal width of text."""

    def test_plain_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_empty_string(self) -> None:
        assert visible_width("") == 0

    def test_ansi_codes_do_not_count(self) -> None:
        assert visible_width("\x1b[1mhi\x1b[0m") == 2

    def test_wide_cjk_characters_count_as_two(self) -> None:
        assert visible_width("漢") == 2

    def test_mixed_ascii_and_wide(self) -> None:
        assert visible_width("A漢B") == 4

    def test_osc_does_not_count(self) -> None:
        assert visible_width("\x1b]0;title\x07abc") == 3

    def test_combining_mark_is_zero_width(self) -> None:
        assert visible_width("e\u0301") == 1


# ---------------------------------------------------------------------------
# Graphemes
# ---------------------------------------------------------------------------


class TestGraphemes:
    def test_control_characters_are_zero_width(self) -> None:
        assert grapheme_width("\x07") == 0

    def test_empty_grapheme(self) -> None:
        assert grapheme_width("") == 0

    def test_emoji_is_wide(self) -> None:
        assert grapheme_width("\U0001F600") == 2

    def test_iter_graphemes_keeps_clusters_together(self) -> None:
        assert list(iter_graphemes("ae\u0301")) == [("a", 1), ("e\u0301", 1)]

    def test_iter_graphemes_reports_wide_width(self) -> None:
        assert list(iter_graphemes("A漢")) == [("A", 1), ("漢", 2)]


# ---------------------------------------------------------------------------
# truncate_to_width
# ---------------------------------------------------------------------------


class TestTruncateToWidth:
    def test_short_text_unchanged(self) -> None:
        assert truncate_to_width("abc", 10) == "abc"

    def test_long_text_gets_ellipsis(self) -> None:
        assert truncate_to_width("abcdefghij", 6) == "abc..."

    def test_custom_ellipsis(self) -> None:
        assert truncate_to_width("abcdefghij", 4, ellipsis="…") == "abc…"

    def test_pad_fills_to_width(self) -> None:
        assert truncate_to_width("ab", 5, pad=True) == "ab   "

    def test_zero_width_returns_empty(self) -> None:
        assert truncate_to_width("abc", 0) == ""

    def test_wide_char_not_split(self) -> None:
        # Two columns left for text: the wide char (2) fits, the next does not.
        result = truncate_to_width("漢字x", 3, ellipsis="…")
        assert result == "漢…"
        assert visible_width(result) == 3

    def test_ellipsis_wider_than_max_width(self) -> None:
        assert truncate_to_width("abcdef", 2) == ".."
