"""
Default preview renderers.

The alignment builder takes two callbacks: one turning a calculation result
into a single styled string, one turning a markdown source line into already
wrapped rows. These are the stock implementations; the editor can swap in
its own.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import mistune

from .results import LineResult, PreviewMode, looks_like_calculation
from .wrap import wrap_styled_line

Style = Callable[[str], str]


def _plain(text: str) -> str:
    return text


def _sgr(on: str, off: str) -> Style:
    return lambda text: f"\x1b[{on}m{text}\x1b[{off}m"


@dataclass
class PreviewTheme:
    heading: Style = field(default=_plain)
    bold: Style = field(default=_plain)
    italic: Style = field(default=_plain)
    code: Style = field(default=_plain)
    link: Style = field(default=_plain)
    quote: Style = field(default=_plain)
    quote_border: Style = field(default=_plain)
    list_bullet: Style = field(default=_plain)
    hr: Style = field(default=_plain)
    var_name: Style = field(default=_plain)
    value: Style = field(default=_plain)
    changed_value: Style = field(default=_plain)
    error: Style = field(default=_plain)

    @classmethod
    def ansi(cls) -> "PreviewTheme":
        """Colored theme for real terminals."""
        return cls(
            heading=_sgr("1;36", "22;39"),
            bold=_sgr("1", "22"),
            italic=_sgr("3", "23"),
            code=_sgr("33", "39"),
            link=_sgr("4;34", "24;39"),
            quote=_sgr("3;90", "23;39"),
            quote_border=_sgr("90", "39"),
            list_bullet=_sgr("36", "39"),
            hr=_sgr("90", "39"),
            var_name=_sgr("90", "39"),
            value=_sgr("36", "39"),
            changed_value=_sgr("33", "39"),
            error=_sgr("33", "39"),
        )


class MarkdownLineRenderer:
    """
    Renders one markdown source line into preview rows.

    Lines are rendered one at a time so each source line maps to its own
    preview rows; block constructs that span lines (fenced code, tables) are
    shown line by line as they appear.
    """

    def __init__(self, theme: PreviewTheme | None = None) -> None:
        self._theme = theme or PreviewTheme()
        self._md = mistune.create_markdown(renderer=None)  # AST tokens

    def __call__(self, line: str, width: int) -> list[str]:
        if not line.strip():
            return [""]

        rendered = self._render_tokens(self._md(line), width, line)
        if not rendered:
            rendered = [line]

        rows: list[str] = []
        for text in rendered:
            rows.extend(wrap_styled_line(text, width))
        return rows or [""]

    def _render_tokens(self, tokens: list[dict[str, Any]], width: int, raw_line: str) -> list[str]:
        t = self._theme
        lines: list[str] = []
        for token in tokens:
            kind = token.get("type", "")
            if kind == "blank_line":
                continue
            if kind == "heading":
                level = token.get("attrs", {}).get("level", 1)
                text = self._inline(token.get("children", []))
                prefix = "" if level <= 2 else "#" * level + " "
                lines.append(t.heading(t.bold(prefix + text)))
            elif kind == "paragraph":
                lines.append(self._inline(token.get("children", [])))
            elif kind == "list":
                lines.extend(self._render_list(token))
            elif kind == "block_quote":
                inner = self._render_tokens(token.get("children", []), width, raw_line)
                lines.extend(t.quote_border("│ ") + t.quote(ln) for ln in inner or [""])
            elif kind == "thematic_break":
                lines.append(t.hr("─" * max(1, min(width, 8))))
            elif kind == "block_code":
                lines.append(t.code(raw_line.strip()))
            else:
                raw = token.get("raw", "")
                if raw:
                    lines.append(raw.strip("\n"))
        return lines

    def _render_list(self, token: dict[str, Any]) -> list[str]:
        attrs = token.get("attrs", {})
        ordered = attrs.get("ordered", False)
        start = attrs.get("start", 1) or 1
        lines: list[str] = []
        for i, item in enumerate(token.get("children", [])):
            bullet = f"{start + i}. " if ordered else "• "
            parts = []
            for child in item.get("children", []):
                if child.get("type") == "list":
                    parts.extend("  " + ln for ln in self._render_list(child))
                else:
                    parts.append(self._inline(child.get("children", [])) or child.get("raw", ""))
            first = parts[0] if parts else ""
            lines.append(self._theme.list_bullet(bullet) + first)
            lines.extend(parts[1:])
        return lines

    def _inline(self, tokens: list[dict[str, Any]]) -> str:
        t = self._theme
        out = ""
        for token in tokens:
            kind = token.get("type", "")
            if kind in ("text", "softbreak", "linebreak"):
                children = token.get("children")
                out += self._inline(children) if children else token.get("raw", " ")
            elif kind == "strong":
                out += t.bold(self._inline(token.get("children", [])))
            elif kind == "emphasis":
                out += t.italic(self._inline(token.get("children", [])))
            elif kind == "codespan":
                out += t.code(token.get("raw", ""))
            elif kind == "link":
                out += t.link(self._inline(token.get("children", [])))
            elif kind == "image":
                out += self._inline(token.get("children", [])) or token.get("attrs", {}).get("url", "")
            else:
                children = token.get("children")
                out += self._inline(children) if children else token.get("raw", "")
        return out


class CalcLineRenderer:
    """
    Renders a calculation result as one styled preview string.

    FULL shows "name  value", MINIMAL shows "→ value", HIDDEN shows nothing.
    Lines inside a calculation block that the evaluator did not flag as
    calculations (prose, a heading) fall back to the markdown renderer's first
    row. An error is shown for any flagged line, whatever its shape.
    """

    def __init__(
        self,
        mode: PreviewMode = PreviewMode.FULL,
        theme: PreviewTheme | None = None,
        markdown: MarkdownLineRenderer | None = None,
    ) -> None:
        self.mode = mode
        self._theme = theme or PreviewTheme()
        self._markdown = markdown

    def __call__(self, r: LineResult, width: int) -> str:
        t = self._theme
        is_calc = r.is_calc or looks_like_calculation(r.source)

        if r.error and is_calc:
            return t.error("⚠ " + r.error)

        if not is_calc and not r.value:
            if self._markdown is None:
                return ""
            return self._markdown(r.source, width)[0]

        if not r.value:
            return ""

        value_style = t.changed_value if r.was_changed else t.value
        if self.mode is PreviewMode.FULL:
            if r.var_name:
                return t.var_name(r.var_name) + "  " + value_style(r.value)
            return value_style(r.value)
        if self.mode is PreviewMode.MINIMAL:
            return value_style("→ " + r.value)
        return ""
