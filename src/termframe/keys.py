"""Keyboard input parsing for legacy (xterm-style) terminal sequences.

``parse_key`` turns one complete input sequence (as split by
``StdinBuffer``) into a key identifier such as ``"a"``, ``"ctrl+a"``,
``"shift+tab"`` or ``"ctrl+left"``.  ``KeyEvent`` bundles the identifier
with the raw data so handlers can match named keys or read typed text.
"""

from __future__ import annotations

from dataclasses import dataclass

KeyId = str

# ---------------------------------------------------------------------------
# Legacy sequence tables
# ---------------------------------------------------------------------------

LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[4~": "end",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1bOP": "f1",
    "\x1bOQ": "f2",
    "\x1bOR": "f3",
    "\x1bOS": "f4",
    "\x1b[15~": "f5",
    "\x1b[17~": "f6",
    "\x1b[18~": "f7",
    "\x1b[19~": "f8",
    "\x1b[20~": "f9",
    "\x1b[21~": "f10",
    "\x1b[23~": "f11",
    "\x1b[24~": "f12",
    "\x1b[Z": "shift+tab",
}

# xterm modifier parameter -> prefix
MODIFIER_PREFIXES: dict[int, str] = {
    2: "shift+",
    3: "alt+",
    4: "shift+alt+",
    5: "ctrl+",
    6: "ctrl+shift+",
    7: "ctrl+alt+",
    8: "ctrl+shift+alt+",
}

_CSI_LETTER_KEYS = {"A": "up", "B": "down", "C": "right", "D": "left", "H": "home", "F": "end",
                    "P": "f1", "Q": "f2", "R": "f3", "S": "f4"}
_CSI_TILDE_KEYS = {2: "insert", 3: "delete", 5: "pageUp", 6: "pageDown", 15: "f5", 17: "f6",
                   18: "f7", 19: "f8", 20: "f9", 21: "f10", 23: "f11", 24: "f12"}


def _build_modified_sequences() -> dict[str, str]:
    table: dict[str, str] = {}
    for mod, prefix in MODIFIER_PREFIXES.items():
        for letter, name in _CSI_LETTER_KEYS.items():
            table[f"\x1b[1;{mod}{letter}"] = prefix + name
        for code, name in _CSI_TILDE_KEYS.items():
            table[f"\x1b[{code};{mod}~"] = prefix + name
    return table


MODIFIED_KEY_SEQUENCES: dict[str, str] = _build_modified_sequences()


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_key(data: str) -> KeyId | None:
    """Parse one complete input sequence into a key identifier, or ``None``."""
    if not data:
        return None

    named = LEGACY_KEY_SEQUENCES.get(data) or MODIFIED_KEY_SEQUENCES.get(data)
    if named is not None:
        return named

    if data == "\x1b":
        return "escape"
    if data in ("\r", "\n"):
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data in ("\x7f", "\x08"):
        return "backspace"
    if data == "\x00":
        return "ctrl+space"

    # Ctrl + letter (0x01 - 0x1a)
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # Alt + key (ESC prefix)
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch == "\x1b":
            return "alt+escape"
        if ch in ("\r", "\n"):
            return "alt+enter"
        if ch in ("\x7f", "\x08"):
            return "alt+backspace"
        if 1 <= ord(ch) <= 26:
            return "ctrl+alt+" + chr(ord(ch) + ord("a") - 1)
        if ch.isupper():
            return "shift+alt+" + ch.lower()
        if ch.isprintable():
            return "alt+" + ch.lower()

    # Plain printable text (single grapheme or a short burst)
    if not data.startswith("\x1b") and data.isprintable():
        return data if len(data) == 1 else None

    return None


def _normalize(key_id: str) -> str:
    """Canonical modifier order so ``"shift+ctrl+x"`` equals ``"ctrl+shift+x"``."""
    if len(key_id) == 1:
        return key_id
    head, _, base = key_id.rpartition("+")
    if not base:  # "ctrl++"
        head, base = head[:-1], "+"
    if len(base) > 1:
        base = base.lower()
    mods = head.lower().split("+") if head else []
    return "+".join([*(m for m in ("ctrl", "shift", "alt") if m in mods), base])


@dataclass(frozen=True)
class KeyEvent:
    """One key press as delivered to input handlers."""

    data: str
    key: KeyId | None = None

    @classmethod
    def from_data(cls, data: str) -> KeyEvent:
        return cls(data, parse_key(data))

    @property
    def text(self) -> str | None:
        """Printable text carried by the event, if any."""
        if self.data and not self.data.startswith("\x1b") and self.data.isprintable():
            return self.data
        return None

    def matches(self, *key_ids: str) -> bool:
        if self.key is None:
            return False
        key = _normalize(self.key)
        return any(_normalize(k) == key for k in key_ids)


def matches_key(data: str, key_id: str) -> bool:
    """Return ``True`` if raw *data* is the key named *key_id*."""
    return KeyEvent.from_data(data).matches(key_id)
