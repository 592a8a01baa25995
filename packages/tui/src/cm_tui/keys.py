"""
Keyboard input decoding.

Turns raw terminal input into key identifiers ("j", "G", "enter", "up",
"ctrl+c", ...). Legacy VT sequences are recognised, plus the plain CSI-u
form sent by terminals using the Kitty keyboard protocol.

API:
- parse_key(data): parse input and return the key identifier string
- is_printable(data): True if data is text to insert rather than a command
"""
from __future__ import annotations

import re

KeyId = str

# ─────────────────────────────────────────────────────────────────────────────
# Legacy sequences
# ─────────────────────────────────────────────────────────────────────────────

_LEGACY_KEY_SEQS: dict[str, list[str]] = {
    "up":       ["\x1b[A", "\x1bOA"],
    "down":     ["\x1b[B", "\x1bOB"],
    "right":    ["\x1b[C", "\x1bOC"],
    "left":     ["\x1b[D", "\x1bOD"],
    "home":     ["\x1b[H", "\x1bOH", "\x1b[1~", "\x1b[7~"],
    "end":      ["\x1b[F", "\x1bOF", "\x1b[4~", "\x1b[8~"],
    "delete":   ["\x1b[3~"],
    "pageUp":   ["\x1b[5~", "\x1b[[5~"],
    "pageDown": ["\x1b[6~", "\x1b[[6~"],
    "shift+tab": ["\x1b[Z"],
}

_SEQ_KEY_IDS: dict[str, KeyId] = {
    seq: key for key, seqs in _LEGACY_KEY_SEQS.items() for seq in seqs
}

_SINGLE_KEY_IDS: dict[str, KeyId] = {
    "\x1b": "escape",
    "\t": "tab",
    "\r": "enter",
    "\n": "enter",
    "\x1bOM": "enter",
    " ": "space",
    "\x7f": "backspace",
    "\x08": "backspace",
}

# ─────────────────────────────────────────────────────────────────────────────
# Kitty CSI-u
# ─────────────────────────────────────────────────────────────────────────────

_CSI_U_RE = re.compile(r"^\x1b\[(\d+)(?::\d*)?(?::\d+)?(?:;(\d+))?(?::\d+)?u$")

_MOD_SHIFT = 1
_MOD_ALT = 2
_MOD_CTRL = 4

_CP_NAMES: dict[int, KeyId] = {
    27: "escape",
    9: "tab",
    13: "enter",
    57414: "enter",
    32: "space",
    127: "backspace",
}


def _parse_csi_u(data: str) -> KeyId | None:
    m = _CSI_U_RE.match(data)
    if not m:
        return None
    cp = int(m.group(1))
    modifier = int(m.group(2)) - 1 if m.group(2) else 0

    name = _CP_NAMES.get(cp)
    if name is None:
        try:
            name = chr(cp)
        except (ValueError, OverflowError):
            return None
        if modifier & _MOD_SHIFT and name.isalpha():
            name = name.upper()

    mods = []
    if modifier & _MOD_CTRL:
        mods.append("ctrl")
    if modifier & _MOD_ALT:
        mods.append("alt")
    return "+".join(mods + [name]) if mods else name


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def parse_key(data: str) -> KeyId | None:
    """Parse raw terminal input and return a key identifier string, or None."""
    if not data:
        return None

    seq_id = _SEQ_KEY_IDS.get(data) or _SINGLE_KEY_IDS.get(data)
    if seq_id:
        return seq_id

    kitty = _parse_csi_u(data)
    if kitty:
        return kitty

    if len(data) == 2 and data[0] == "\x1b" and "a" <= data[1] <= "z":
        return f"alt+{data[1]}"

    if len(data) == 1:
        code = ord(data)
        if 1 <= code <= 26:
            return f"ctrl+{chr(code + 96)}"
        if data.isprintable():
            return data

    return None


def is_printable(data: str) -> bool:
    """True for a single printable character (including space and non-ASCII)."""
    return len(data) == 1 and data.isprintable()
