"""
Word wrapping for pane rows.

Both panes wrap with the same rule so that a line's row count is predictable:
break after the last space that fits, otherwise hard-break mid-word. Every
character of the input is kept, so joining the segments gives the input back.
"""
from __future__ import annotations

from .utils import AnsiCodeTracker, char_width, extract_ansi_code, visible_width


def _spans(widths: list[int], spaces: list[bool], max_width: int) -> list[tuple[int, int]]:
    """Split glyph indices [0, n) into (start, end) spans that fit max_width."""
    n = len(widths)
    spans: list[tuple[int, int]] = []
    start = 0

    while start < n:
        end = start
        current = 0
        last_space = -1

        while end < n:
            w = widths[end]
            if current + w > max_width:
                break
            if spaces[end]:
                last_space = end
            current += w
            end += 1

        if end >= n:
            spans.append((start, n))
            break

        if last_space > start:
            # keep the trailing space on the earlier row
            spans.append((start, last_space + 1))
            start = last_space + 1
        elif end > start:
            spans.append((start, end))
            start = end
        else:
            # single glyph wider than the row
            spans.append((start, start + 1))
            start += 1

    return spans


def wrap_text(text: str, max_width: int) -> list[str]:
    """
    Wrap text to max_width display columns.

    Always returns at least one segment. A width of zero or less disables
    wrapping; empty text gives a single empty segment.
    """
    if max_width <= 0:
        return [text]
    if not text:
        return [""]
    if visible_width(text) <= max_width:
        return [text]

    widths = [char_width(ch) for ch in text]
    spaces = [ch == " " for ch in text]
    return [text[s:e] for s, e in _spans(widths, spaces, max_width)]


def wrap_styled_line(text: str, max_width: int) -> list[str]:
    """
    Wrap a line that may carry ANSI styling.

    Breaks fall on the same columns as wrap_text() would choose for the plain
    text. Styling active at a break is closed on the earlier row and reopened
    on the next one.
    """
    if max_width <= 0 or visible_width(text) <= max_width:
        return [text or ""]
    if "\x1b" not in text:
        return wrap_text(text, max_width)

    glyphs: list[tuple[list[str], str]] = []
    pending: list[str] = []
    i = 0
    while i < len(text):
        ansi = extract_ansi_code(text, i)
        if ansi:
            pending.append(ansi.code)
            i += ansi.length
            continue
        glyphs.append((pending, text[i]))
        pending = []
        i += 1
    trailing = "".join(pending)

    spans = _spans(
        [char_width(ch) for _, ch in glyphs],
        [ch == " " for _, ch in glyphs],
        max_width,
    )

    tracker = AnsiCodeTracker()
    rows: list[str] = []
    for idx, (s, e) in enumerate(spans):
        parts = [tracker.get_active_codes()]
        for codes, ch in glyphs[s:e]:
            for code in codes:
                tracker.process(code)
            parts.extend(codes)
            parts.append(ch)
        if idx == len(spans) - 1:
            parts.append(trailing)
        elif tracker.has_active_codes():
            parts.append("\x1b[0m")
        rows.append("".join(parts))
    return rows


def locate_cursor(segments: list[str], col: int) -> tuple[int, int]:
    """
    Map a column in the unwrapped text onto (row, column-in-row).

    A cursor sitting exactly on a break belongs to the start of the next row;
    a cursor past the end sits after the last character of the last row.
    """
    if not segments:
        return 0, 0
    total = sum(len(seg) for seg in segments)
    col = max(0, min(col, total))

    offset = 0
    for row, seg in enumerate(segments):
        if col < offset + len(seg):
            return row, col - offset
        offset += len(seg)

    last = len(segments) - 1
    return last, len(segments[last])
