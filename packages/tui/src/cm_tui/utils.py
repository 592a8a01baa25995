"""
Terminal text utilities shared by both panes.

Provides:
- char_width() / visible_width(): terminal column width, ANSI-aware
- extract_ansi_code() / strip_ansi(): escape sequence handling
- AnsiCodeTracker: track active SGR codes across wrapped rows
- truncate_to_width() / pad_to_width(): fit a row into a pane column
"""
from __future__ import annotations

import re
from typing import NamedTuple

from wcwidth import wcwidth

# ─────────────────────────────────────────────────────────────────────────────
# Width measurement
# ─────────────────────────────────────────────────────────────────────────────
_WIDTH_CACHE_SIZE = 512
_width_cache: dict[str, int] = {}

_ANSI_RE = re.compile(
    r"\x1b\[[0-9;:?]*[A-Za-z~]"          # CSI
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"  # OSC
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"   # APC
)


def char_width(ch: str) -> int:
    """Column width of a single character; control and combining chars are 0."""
    if not ch:
        return 0
    code = ord(ch)
    if 0x20 <= code < 0x7f:
        return 1
    w = wcwidth(ch)
    return w if w > 0 else 0


def strip_ansi(s: str) -> str:
    if "\x1b" not in s:
        return s
    return _ANSI_RE.sub("", s)


def visible_width(s: str) -> int:
    """
    Calculate the visible terminal column width of a string.
    ANSI escape sequences count as zero columns; wide CJK and emoji count as two.
    """
    if not s:
        return 0

    # Fast path: pure ASCII printable
    if s.isascii() and s.isprintable():
        return len(s)

    cached = _width_cache.get(s)
    if cached is not None:
        return cached

    width = sum(char_width(ch) for ch in strip_ansi(s))

    if len(_width_cache) >= _WIDTH_CACHE_SIZE:
        _width_cache.pop(next(iter(_width_cache)))
    _width_cache[s] = width
    return width


# ─────────────────────────────────────────────────────────────────────────────
# ANSI code extraction
# ─────────────────────────────────────────────────────────────────────────────

class AnsiMatch(NamedTuple):
    code: str
    length: int


def extract_ansi_code(s: str, pos: int) -> AnsiMatch | None:
    """Extract the escape sequence starting at pos. Returns None if there is none."""
    if pos >= len(s) or s[pos] != "\x1b":
        return None
    m = _ANSI_RE.match(s, pos)
    if not m:
        return None
    return AnsiMatch(m.group(0), m.end() - pos)


# ─────────────────────────────────────────────────────────────────────────────
# SGR state tracking
# ─────────────────────────────────────────────────────────────────────────────

_SGR_RE = re.compile(r"\x1b\[([\d;]*)m")

# attribute code -> codes that switch it off
_SGR_OFF = {
    "1": ("21", "22"),
    "2": ("22",),
    "3": ("23",),
    "4": ("24",),
    "5": ("25",),
    "7": ("27",),
    "8": ("28",),
    "9": ("29",),
}


class AnsiCodeTracker:
    """Track active SGR attributes so a wrapped row can reopen the styling."""

    __slots__ = ("_attrs", "_fg", "_bg")

    def __init__(self) -> None:
        self._attrs: list[str] = []
        self._fg: str | None = None
        self._bg: str | None = None

    def clear(self) -> None:
        self._attrs = []
        self._fg = None
        self._bg = None

    def process(self, ansi_code: str) -> None:
        """Update state from one escape sequence; non-SGR sequences are ignored."""
        m = _SGR_RE.fullmatch(ansi_code)
        if not m:
            return
        params = m.group(1)
        if params in ("", "0"):
            self.clear()
            return

        parts = params.split(";")
        i = 0
        while i < len(parts):
            code = parts[i]
            if code in ("38", "48"):
                # extended colors: 38;5;n or 38;2;r;g;b
                span = 3 if i + 1 < len(parts) and parts[i + 1] == "5" else 5
                color = ";".join(parts[i:i + span])
                if code == "38":
                    self._fg = color
                else:
                    self._bg = color
                i += span
                continue

            if code == "0":
                self.clear()
            elif code in _SGR_OFF:
                if code not in self._attrs:
                    self._attrs.append(code)
            elif code == "39":
                self._fg = None
            elif code == "49":
                self._bg = None
            elif code.isdigit() and (30 <= int(code) <= 37 or 90 <= int(code) <= 97):
                self._fg = code
            elif code.isdigit() and (40 <= int(code) <= 47 or 100 <= int(code) <= 107):
                self._bg = code
            else:
                self._attrs = [a for a in self._attrs if code not in _SGR_OFF[a]]
            i += 1

    def get_active_codes(self) -> str:
        """Return the escape sequence that restores the current state, or ''."""
        codes = list(self._attrs)
        if self._fg:
            codes.append(self._fg)
        if self._bg:
            codes.append(self._bg)
        if not codes:
            return ""
        return f"\x1b[{';'.join(codes)}m"

    def has_active_codes(self) -> bool:
        return bool(self._attrs or self._fg or self._bg)


# ─────────────────────────────────────────────────────────────────────────────
# Fitting rows into a column
# ─────────────────────────────────────────────────────────────────────────────

def pad_to_width(s: str, width: int) -> str:
    """Pad s with spaces to exactly width columns. Never truncates."""
    vis = visible_width(s)
    if vis >= width:
        return s
    return s + " " * (width - vis)


def truncate_to_width(text: str, max_width: int, ellipsis: str = "…") -> str:
    """
    Truncate text to max_width columns, appending ellipsis when cut.
    ANSI codes are kept but do not count toward the width.
    """
    if visible_width(text) <= max_width:
        return text

    target = max_width - visible_width(ellipsis)
    if target <= 0:
        return ellipsis[:max(0, max_width)]

    out: list[str] = []
    used = 0
    i = 0
    while i < len(text):
        ansi = extract_ansi_code(text, i)
        if ansi:
            out.append(ansi.code)
            i += ansi.length
            continue
        w = char_width(text[i])
        if used + w > target:
            break
        out.append(text[i])
        used += w
        i += 1

    reset = "\x1b[0m" if "\x1b" in text else ""
    return "".join(out) + reset + ellipsis
