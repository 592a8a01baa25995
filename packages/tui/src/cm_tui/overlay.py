"""
Edit-mode overlay.

While a line is being typed, the cached model still holds the rows of the
last committed text. The overlay swaps that one line's rows for the live
buffer's wrapping in both panes, leaving every other line untouched.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from .aligned import AlignedModel
from .wrap import locate_cursor, wrap_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditOverlay:
    line_idx: int
    buffer: str
    cursor_col: int

    def wrap(self, source_width: int) -> tuple[list[str], tuple[int, int]]:
        """Wrapped buffer rows and the (row, col) of the edit cursor within them."""
        segments = wrap_text(self.buffer, source_width)
        return segments, locate_cursor(segments, self.cursor_col)


def apply_edit_overlay(
    model: AlignedModel,
    overlay: EditOverlay | None,
    source_width: int,
) -> AlignedModel:
    """
    Return a model whose overlay line shows the live edit buffer.

    The source pane gets the buffer's rows; the preview pane keeps as many of
    its existing rows as the buffer now needs and pads the rest. Row maps are
    rebuilt, so both panes stay the same length.
    """
    if overlay is None:
        return model

    idx = next((i for i, u in enumerate(model.units) if u.line_idx == overlay.line_idx), None)
    if idx is None:
        logger.debug("edit overlay target line %d has no rows; skipped", overlay.line_idx)
        return model

    segments, cursor = overlay.wrap(source_width)
    units = list(model.units)
    before = units[idx].row_count
    units[idx] = units[idx].with_source(segments, cursor)
    logger.debug(
        "edit overlay on line %d: %d -> %d rows, cursor at %s",
        overlay.line_idx, before, units[idx].row_count, cursor,
    )
    return AlignedModel.from_units(units, model.total_source_lines, model.cursor_line)
