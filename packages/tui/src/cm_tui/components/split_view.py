"""SplitView component: source and preview panes drawn from one aligned model."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from ..aligned import VisualRow
from ..results import PreviewMode
from ..session import EditorSession
from ..utils import pad_to_width, truncate_to_width

Style = Callable[[str], str]


def _plain(text: str) -> str:
    return text


@dataclass
class SplitViewTheme:
    header: Style = field(default=_plain)
    line_number: Style = field(default=_plain)
    cursor_line: Style = field(default=_plain)
    edit_cursor: Style = field(default=lambda s: f"\x1b[7m{s}\x1b[27m")
    separator: Style = field(default=_plain)
    filler: Style = field(default=_plain)

    @classmethod
    def ansi(cls) -> "SplitViewTheme":
        return cls(
            header=lambda s: f"\x1b[1;48;5;236;38;5;252m{s}\x1b[0m",
            line_number=lambda s: f"\x1b[90m{s}\x1b[39m",
            cursor_line=lambda s: f"\x1b[48;5;236m{s}\x1b[49m",
            separator=lambda s: f"\x1b[90m{s}\x1b[39m",
            filler=lambda s: f"\x1b[90m{s}\x1b[39m",
        )


def _with_edit_cursor(content: str, col: int, style: Style) -> str:
    if col >= len(content):
        return content + style(" ")
    return content[:col] + style(content[col]) + content[col + 1:]


class SplitView:
    """
    Renders an EditorSession as two side-by-side panes.

    Output is exactly ``session.height`` rows: a header, then the rows inside
    the session's viewport window, then "~" filler. Both panes take their
    rows from the same window of the same model, so a source line and its
    preview always share a terminal row.
    """

    def __init__(self, session: EditorSession, theme: SplitViewTheme | None = None) -> None:
        self.session = session
        self._theme = theme or SplitViewTheme()

    def invalidate(self) -> None:
        self.session.cache.invalidate()

    def handle_input(self, _data: str) -> None:
        pass

    def render(self, width: int) -> list[str]:
        s = self.session
        if width != s.width:
            s.set_size(width, s.height)
        if s.height <= 0 or width <= 0:
            return []

        source_pane, preview_pane = s.pane_widths()
        show_preview = s.preview_mode is not PreviewMode.HIDDEN and preview_pane > 0

        lines = [self._header(source_pane, preview_pane, show_preview, width)]

        source_rows, preview_rows = s.visible_rows()
        for src, prev in zip(source_rows, preview_rows):
            line = self._source_cell(src, source_pane)
            if show_preview:
                line += self._preview_cell(prev, preview_pane)
            lines.append(truncate_to_width(line, width, ellipsis=""))

        gutter = s.settings.gutter_width
        while len(lines) < s.height:
            lines.append(pad_to_width(self._theme.filler(pad_to_width("~", gutter)), width))

        return lines[:s.height]

    def _header(self, source_pane: int, preview_pane: int, show_preview: bool, width: int) -> str:
        t = self._theme
        header = t.header(pad_to_width(" Source", source_pane))
        if show_preview:
            header += t.separator("│") + t.header(pad_to_width(" Preview", preview_pane - 1))
        return truncate_to_width(header, width, ellipsis="")

    def _source_cell(self, row: VisualRow, pane_width: int) -> str:
        t = self._theme
        s = self.session
        gutter = s.settings.gutter_width
        content_width, _ = s.content_widths()

        number = str(row.line_num).rjust(gutter) if row.line_num else " " * gutter
        content = row.content
        if row.edit_cursor_col is not None:
            content = _with_edit_cursor(content, row.edit_cursor_col, t.edit_cursor)
        if row.is_cursor:
            content = t.cursor_line(pad_to_width(content, content_width))

        cell = t.line_number(number) + " " + content
        return pad_to_width(truncate_to_width(cell, pane_width, ellipsis=""), pane_width)

    def _preview_cell(self, row: VisualRow, pane_width: int) -> str:
        cell = self._theme.separator("│") + " " + row.content
        return pad_to_width(truncate_to_width(cell, pane_width, ellipsis=""), pane_width)
