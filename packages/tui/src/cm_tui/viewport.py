"""Scroll state shared by both panes. Offsets are visual rows, never source lines."""
from __future__ import annotations

from .aligned import AlignedModel


class Viewport:
    """
    Persisted scroll position for the split view.

    Both panes render through window(), so whichever pane wraps more in the
    visible stretch can never pull the other one out of step.
    """

    def __init__(self, height: int = 0) -> None:
        self.offset = 0
        self.height = max(0, height)

    def set_height(self, height: int) -> None:
        self.height = max(0, height)

    def reset(self) -> None:
        self.offset = 0

    def _clamp(self, model: AlignedModel, offset: int) -> int:
        max_offset = max(0, model.total_visual_lines - self.height)
        return max(0, min(offset, max_offset))

    def follow(self, model: AlignedModel, cursor_line: int) -> int:
        """Scroll just enough to keep the cursor line's first row on screen."""
        offset = model.scroll_offset_for_cursor(cursor_line, self.offset, self.height)
        self.offset = self._clamp(model, offset)
        return self.offset

    def scroll_by(self, model: AlignedModel, delta: int) -> int:
        self.offset = self._clamp(model, self.offset + delta)
        return self.offset

    def window(self, model: AlignedModel) -> tuple[int, int]:
        """The [start, end) visual rows to draw in both panes."""
        return model.visible_range(self.offset, self.height)
