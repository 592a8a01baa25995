"""
Dual-pane alignment model.

Turns document lines plus their results into two equal-length row sequences,
one per pane, with source-line <-> visual-row maps in both directions.

Each document line becomes one AlignmentUnit: its source segments (wrapped at
the source width) and its preview segments (wrapped at the preview width).
The unit occupies max(len(source), len(preview)) rows in *both* panes; the
shorter side is filled with padding rows. Padding per line rather than per
document is what keeps the panes the same length however the two sides wrap.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Sequence

from .results import LineResult, PreviewMode, iter_blocks
from .wrap import wrap_styled_line, wrap_text

RenderCalcLine = Callable[[LineResult, int], str]
RenderMarkdown = Callable[[str, int], Sequence[str]]


class RowKind(Enum):
    NORMAL = "normal"                  # first row of a line, shows the line number
    WRAPPED = "wrapped"                # continuation of a wrapped line
    PADDING = "padding"                # filler so both panes keep the same height
    CURSOR = "cursor"                  # first row of the cursor line
    CURSOR_WRAPPED = "cursor_wrapped"  # continuation of the cursor line


@dataclass(frozen=True)
class VisualRow:
    """One terminal row in either pane."""
    content: str
    source_line_idx: int
    line_num: int = 0  # 1-based display number, 0 = no number shown
    kind: RowKind = RowKind.NORMAL
    block_id: str = ""
    is_calc: bool = False
    edit_cursor_col: int | None = None  # set on the row holding the inline edit cursor

    @property
    def is_padding(self) -> bool:
        return self.kind is RowKind.PADDING

    @property
    def is_cursor(self) -> bool:
        return self.kind in (RowKind.CURSOR, RowKind.CURSOR_WRAPPED)


@dataclass(frozen=True)
class AlignmentUnit:
    """The paired wrapping of one document line in both panes."""
    line_idx: int
    source_segments: tuple[str, ...]
    preview_segments: tuple[str, ...]
    block_id: str = ""
    is_calc: bool = False
    edit_cursor: tuple[int, int] | None = None  # (row, col) of the inline edit cursor

    @property
    def row_count(self) -> int:
        return max(len(self.source_segments), len(self.preview_segments))

    def source_row(self, j: int, is_cursor: bool) -> VisualRow:
        if j >= len(self.source_segments):
            return VisualRow("", self.line_idx, 0, RowKind.PADDING, self.block_id, self.is_calc)

        if j == 0:
            kind = RowKind.CURSOR if is_cursor else RowKind.NORMAL
        else:
            kind = RowKind.CURSOR_WRAPPED if is_cursor else RowKind.WRAPPED

        cursor_col = None
        if self.edit_cursor is not None and self.edit_cursor[0] == j:
            cursor_col = self.edit_cursor[1]

        return VisualRow(
            content=self.source_segments[j],
            source_line_idx=self.line_idx,
            line_num=self.line_idx + 1 if j == 0 else 0,
            kind=kind,
            block_id=self.block_id,
            is_calc=self.is_calc,
            edit_cursor_col=cursor_col,
        )

    def preview_row(self, j: int) -> VisualRow:
        if j >= len(self.preview_segments):
            return VisualRow("", self.line_idx, 0, RowKind.PADDING, self.block_id, self.is_calc)
        return VisualRow(
            content=self.preview_segments[j],
            source_line_idx=self.line_idx,
            line_num=self.line_idx + 1 if j == 0 else 0,
            kind=RowKind.NORMAL if j == 0 else RowKind.WRAPPED,
            block_id=self.block_id,
            is_calc=self.is_calc,
        )

    def with_source(
        self,
        segments: Sequence[str],
        edit_cursor: tuple[int, int] | None = None,
    ) -> "AlignmentUnit":
        """
        Substitute freshly wrapped source segments for this line.

        The preview keeps its existing rows up to the new source row count and
        drops the rest, so the unit is exactly as tall as the new source.
        """
        count = max(1, len(segments))
        return replace(
            self,
            source_segments=tuple(segments) or ("",),
            preview_segments=self.preview_segments[:count],
            edit_cursor=edit_cursor,
        )


@dataclass(frozen=True)
class AlignedModelInput:
    """Everything the builder reads. Equal inputs give equal models."""
    lines: Sequence[str]
    results: Sequence[LineResult]
    source_content_width: int
    preview_width: int
    cursor_line: int = 0
    preview_mode: PreviewMode = PreviewMode.FULL


@dataclass(frozen=True)
class AlignedModelInvariants:
    source_preview_match: bool  # both panes have the same number of rows
    mapping_complete: bool      # every source line has a first visual row
    reverse_complete: bool      # every visual row has a source line
    monotonic: bool             # first rows increase with source line order

    @property
    def ok(self) -> bool:
        return (
            self.source_preview_match and self.mapping_complete and
            self.reverse_complete and self.monotonic
        )


@dataclass(frozen=True)
class AlignedModel:
    """Computed row structure for both panes. Never mutated after creation."""
    source_rows: tuple[VisualRow, ...] = ()
    preview_rows: tuple[VisualRow, ...] = ()
    source_to_visual: dict[int, int] = field(default_factory=dict)
    visual_to_source: dict[int, int] = field(default_factory=dict)
    total_source_lines: int = 0
    total_visual_lines: int = 0
    units: tuple[AlignmentUnit, ...] = ()
    cursor_line: int = -1

    @classmethod
    def from_units(
        cls,
        units: Sequence[AlignmentUnit],
        total_source_lines: int,
        cursor_line: int,
    ) -> "AlignedModel":
        source_rows: list[VisualRow] = []
        preview_rows: list[VisualRow] = []
        source_to_visual: dict[int, int] = {}
        visual_to_source: dict[int, int] = {}

        for unit in units:
            source_to_visual.setdefault(unit.line_idx, len(source_rows))
            is_cursor = unit.line_idx == cursor_line or unit.edit_cursor is not None
            for j in range(unit.row_count):
                visual_to_source[len(source_rows)] = unit.line_idx
                source_rows.append(unit.source_row(j, is_cursor))
                preview_rows.append(unit.preview_row(j))

        return cls(
            source_rows=tuple(source_rows),
            preview_rows=tuple(preview_rows),
            source_to_visual=source_to_visual,
            visual_to_source=visual_to_source,
            total_source_lines=total_source_lines,
            total_visual_lines=len(source_rows),
            units=tuple(units),
            cursor_line=cursor_line,
        )

    # ── Lookups ───────────────────────────────────────────────────────────────

    def cursor_visual_line(self, source_line: int) -> int:
        """First visual row of source_line, or -1 if the line has no rows."""
        return self.source_to_visual.get(source_line, -1)

    def source_line_at(self, visual_line: int) -> int:
        """Source line owning visual_line, or -1 if out of bounds."""
        return self.visual_to_source.get(visual_line, -1)

    def rows_for_line(self, source_line: int) -> range:
        """Visual row indices occupied by source_line (empty if unmapped)."""
        start = self.cursor_visual_line(source_line)
        if start < 0:
            return range(0)
        end = start
        while self.visual_to_source.get(end) == source_line:
            end += 1
        return range(start, end)

    # ── Scrolling ─────────────────────────────────────────────────────────────

    def visible_range(self, scroll_offset: int, height: int) -> tuple[int, int]:
        """Visible [start, end) rows for a visual-space offset and height."""
        total = self.total_visual_lines
        start = max(0, scroll_offset)
        if start >= total:
            start = max(0, total - 1)
        end = min(start + max(0, height), total)
        return start, max(start, end)

    def scroll_offset_for_cursor(
        self,
        cursor_source_line: int,
        current_scroll_offset: int,
        viewport_height: int,
    ) -> int:
        """Adjust a visual-space offset so the cursor's first row stays visible."""
        cursor_visual = self.cursor_visual_line(cursor_source_line)
        if cursor_visual < 0:
            return current_scroll_offset
        if cursor_visual < current_scroll_offset:
            return cursor_visual
        if cursor_visual >= current_scroll_offset + viewport_height:
            return cursor_visual - viewport_height + 1
        return current_scroll_offset

    # ── Consistency ───────────────────────────────────────────────────────────

    def invariants(self) -> AlignedModelInvariants:
        mapping_complete = all(i in self.source_to_visual for i in range(self.total_source_lines))
        reverse_complete = all(i in self.visual_to_source for i in range(self.total_visual_lines))

        firsts = [self.source_to_visual[k] for k in sorted(self.source_to_visual)]
        monotonic = all(a < b for a, b in zip(firsts, firsts[1:]))

        return AlignedModelInvariants(
            source_preview_match=len(self.source_rows) == len(self.preview_rows),
            mapping_complete=mapping_complete,
            reverse_complete=reverse_complete,
            monotonic=monotonic,
        )


def _preview_segments(
    result: LineResult,
    is_calc_block: bool,
    width: int,
    render_calc_line: RenderCalcLine | None,
    render_markdown: RenderMarkdown | None,
) -> list[str]:
    if is_calc_block and render_calc_line is not None:
        segments = wrap_styled_line(render_calc_line(result, width), width)
    elif render_markdown is not None:
        segments = list(render_markdown(result.source, width))
    else:
        segments = wrap_text(result.source, width)
    return segments or [""]


def compute_aligned_model(
    inp: AlignedModelInput,
    render_calc_line: RenderCalcLine | None = None,
    render_markdown: RenderMarkdown | None = None,
) -> AlignedModel:
    """
    Compute the row alignment for both panes.

    Pure: it reads only its arguments and returns a new model. Results that
    point past the end of the document are skipped; a cursor line that matches
    no result simply marks nothing.
    """
    units: list[AlignmentUnit] = []
    n_lines = len(inp.lines)

    for block in iter_blocks(inp.results):
        is_calc_block = block[0].is_calc
        for r in block:
            if not 0 <= r.line_num < n_lines:
                continue
            units.append(AlignmentUnit(
                line_idx=r.line_num,
                source_segments=tuple(wrap_text(inp.lines[r.line_num], inp.source_content_width)),
                preview_segments=tuple(_preview_segments(
                    r, is_calc_block, inp.preview_width, render_calc_line, render_markdown,
                )),
                block_id=r.block_id,
                is_calc=is_calc_block,
            ))

    return AlignedModel.from_units(units, n_lines, inp.cursor_line)
