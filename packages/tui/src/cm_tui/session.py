"""
Editor session: the one owner of document, cursor, edit buffer and layout.

Everything the split view draws comes from aligned_model(), which runs the
cache lookup and then the edit overlay. Every mutating operation bumps the
revision counter and drops the cached model, so a stale layout can never be
served after a keystroke.
"""
from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Sequence

from .aligned import AlignedModel, AlignedModelInput, VisualRow, compute_aligned_model
from .cache import AlignmentCache, CacheKey
from .config import EditorSettings
from .history import History
from .overlay import EditOverlay, apply_edit_overlay
from .render import CalcLineRenderer, MarkdownLineRenderer, PreviewTheme
from .results import LineResult, PreviewMode, ResultsProvider, line_results_from_lines
from .viewport import Viewport

logger = logging.getLogger(__name__)

HEADER_ROWS = 1     # pane titles above the content rows
PREVIEW_MARGIN = 2  # separator column plus one space before preview text


class EditorMode(Enum):
    NORMAL = "normal"
    EDITING = "editing"


class Debouncer:
    """
    Deadline-based debounce driven by the owner's poll loop.

    schedule() pushes the deadline out by the delay; due() reports (once) that
    the quiet period has passed. No timers or threads are involved, so the
    owner stays the only writer of its state.
    """

    def __init__(self, delay_ms: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.delay = max(0, delay_ms) / 1000.0
        self._clock = clock
        self._deadline: float | None = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def schedule(self) -> None:
        self._deadline = self._clock() + self.delay

    def cancel(self) -> None:
        self._deadline = None

    def due(self) -> bool:
        if self._deadline is None or self._clock() < self._deadline:
            return False
        self._deadline = None
        return True


class EditorSession:
    """
    Document editing state for the dual-pane editor.

    Lines are edited in NORMAL mode with whole-line commands (insert, delete,
    yank, paste) or in EDITING mode, where keystrokes go to an edit buffer
    for the cursor line. The buffer is written back on commit, on moving to
    another line, and after the debounce delay while typing, each of which
    re-runs the results provider.
    """

    def __init__(
        self,
        lines: Sequence[str] | None = None,
        results_provider: ResultsProvider | None = None,
        settings: EditorSettings | None = None,
        theme: PreviewTheme | None = None,
        width: int = 80,
        height: int = 24,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or EditorSettings()
        self._provider: ResultsProvider = results_provider or line_results_from_lines
        self._lines: list[str] = list(lines or [])
        self._results: list[LineResult] = self._provider(self._lines)

        self.revision = 0
        self.cursor_line = 0
        self.cursor_col = 0
        self.mode = EditorMode.NORMAL
        self.edit_buffer = ""
        self._edit_original: str | None = None
        self.preview_mode = PreviewMode.FULL

        self.width = max(0, width)
        self.height = max(0, height)
        self.viewport = Viewport(self.pane_height)

        self.yank_buffer = ""
        self.modified = False
        self.status = ""

        self._history: History[list[str]] = History()
        self._history.reset(self._lines)

        self._markdown = MarkdownLineRenderer(theme)
        self._calc = CalcLineRenderer(self.preview_mode, theme, self._markdown)
        self.cache = AlignmentCache(self._cache_key, self._compute)
        self._debouncer = Debouncer(self.settings.debounce_ms, clock)

    @classmethod
    def from_text(cls, text: str, **kwargs) -> "EditorSession":
        return cls(text.split("\n"), **kwargs)

    # ── Document access ──────────────────────────────────────────────────────

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    @property
    def results(self) -> tuple[LineResult, ...]:
        return tuple(self._results)

    @property
    def total_lines(self) -> int:
        return len(self._lines)

    @property
    def debounce_pending(self) -> bool:
        return self._debouncer.pending

    def current_line_text(self) -> str:
        if self.mode is EditorMode.EDITING:
            return self.edit_buffer
        if 0 <= self.cursor_line < len(self._lines):
            return self._lines[self.cursor_line]
        return ""

    # ── Geometry ─────────────────────────────────────────────────────────────

    @property
    def pane_height(self) -> int:
        return max(0, self.height - HEADER_ROWS)

    def set_size(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.viewport.set_height(self.pane_height)
        self.cache.invalidate()

    def pane_widths(self) -> tuple[int, int]:
        """(source pane, preview pane) widths for the current preview mode."""
        return self.settings.pane_widths(self.width, self.preview_mode)

    def content_widths(self) -> tuple[int, int]:
        """Text columns available inside each pane."""
        source_pane, preview_pane = self.pane_widths()
        return (
            self.settings.source_content_width(source_pane),
            max(0, preview_pane - PREVIEW_MARGIN),
        )

    # ── Layout ───────────────────────────────────────────────────────────────

    def _cache_key(self, source_width: int, preview_width: int) -> CacheKey:
        return CacheKey(
            revision=self.revision,
            cursor_line=self.cursor_line,
            preview_mode=self.preview_mode,
            total_lines=len(self._lines),
            source_width=source_width,
            preview_width=preview_width,
        )

    def _compute(self, source_width: int, preview_width: int) -> AlignedModel:
        model = compute_aligned_model(
            AlignedModelInput(
                lines=tuple(self._lines),
                results=tuple(self._results),
                source_content_width=source_width,
                preview_width=preview_width,
                cursor_line=self.cursor_line,
                preview_mode=self.preview_mode,
            ),
            render_calc_line=self._calc,
            render_markdown=self._markdown,
        )
        check = model.invariants()
        if not check.ok:
            logger.warning("aligned model failed consistency checks: %s", check)
        return model

    def edit_overlay(self) -> EditOverlay | None:
        if self.mode is not EditorMode.EDITING:
            return None
        return EditOverlay(self.cursor_line, self.edit_buffer, self.cursor_col)

    def aligned_model(self) -> AlignedModel:
        """The model both panes render from, with the live edit buffer applied."""
        source_width, preview_width = self.content_widths()
        model = self.cache.get(source_width, preview_width)
        return apply_edit_overlay(model, self.edit_overlay(), source_width)

    def visible_rows(self) -> tuple[list[VisualRow], list[VisualRow]]:
        """Source and preview rows inside the shared viewport window."""
        model = self.aligned_model()
        self.viewport.set_height(self.pane_height)
        self.viewport.follow(model, self.cursor_line)
        start, end = self.viewport.window(model)
        return list(model.source_rows[start:end]), list(model.preview_rows[start:end])

    # ── Results ──────────────────────────────────────────────────────────────

    def refresh_results(self) -> None:
        """Re-run the results provider over the current lines."""
        self._debouncer.cancel()
        self._results = self._provider(self._lines)
        self._touch(changed=True)

    def poll(self) -> bool:
        """Apply a debounced live update if it is due. Returns True if one ran."""
        if not self._debouncer.due():
            return False
        if self.mode is EditorMode.EDITING and 0 <= self.cursor_line < len(self._lines):
            self._lines[self.cursor_line] = self.edit_buffer
        self._results = self._provider(self._lines)
        self._touch(changed=True)
        logger.debug("live update of line %d at revision %d", self.cursor_line, self.revision)
        return True

    def _touch(self, changed: bool = False) -> None:
        if changed:
            self.revision += 1
        self.cache.invalidate()

    def _document_changed(self) -> None:
        self.modified = True
        self._history.push(self._lines)
        self.refresh_results()

    def set_lines(self, lines: Sequence[str]) -> None:
        """Replace the whole document, resetting cursor and history."""
        self._lines = list(lines)
        self.mode = EditorMode.NORMAL
        self.edit_buffer = ""
        self._edit_original = None
        self.cursor_line = 0
        self.cursor_col = 0
        self.viewport.reset()
        self._history.reset(self._lines)
        self.modified = False
        self.refresh_results()

    # ── Cursor ───────────────────────────────────────────────────────────────

    def _clamp_cursor(self) -> None:
        self.cursor_line = max(0, min(self.cursor_line, len(self._lines) - 1))
        self.cursor_col = max(0, min(self.cursor_col, len(self.current_line_text())))

    def move_cursor(self, delta_line: int, delta_col: int = 0) -> None:
        """
        Move the cursor. In EDITING mode a line change writes the buffer back
        and loads the target line into it, so editing follows the cursor.
        """
        if delta_line:
            target = max(0, min(self.cursor_line + delta_line, len(self._lines) - 1))
            if target != self.cursor_line:
                if self.mode is EditorMode.EDITING:
                    self._write_back()
                    self.cursor_line = target
                    self._load_edit_line()
                else:
                    self.cursor_line = target
        if delta_col:
            self.cursor_col += delta_col
        self._clamp_cursor()
        self._touch()

    def goto_top(self) -> None:
        self.move_cursor(-self.cursor_line)
        self.cursor_col = 0
        self.viewport.reset()

    def goto_bottom(self) -> None:
        self.move_cursor(len(self._lines) - 1 - self.cursor_line)
        self.cursor_col = 0

    def cursor_home(self) -> None:
        self.cursor_col = 0
        self._touch()

    def cursor_end(self) -> None:
        self.cursor_col = len(self.current_line_text())
        self._touch()

    def scroll(self, delta: int) -> None:
        self.viewport.scroll_by(self.aligned_model(), delta)

    # ── Edit mode ────────────────────────────────────────────────────────────

    def _load_edit_line(self) -> None:
        self.edit_buffer = self._lines[self.cursor_line] if self._lines else ""
        self._edit_original = self.edit_buffer
        self.cursor_col = min(self.cursor_col, len(self.edit_buffer))

    def _write_back(self) -> None:
        """Store the edit buffer into the document if it differs."""
        self._debouncer.cancel()
        if not 0 <= self.cursor_line < len(self._lines):
            return
        changed = self._lines[self.cursor_line] != self.edit_buffer
        self._lines[self.cursor_line] = self.edit_buffer
        if changed or self.edit_buffer != self._edit_original:
            self._document_changed()

    def enter_edit(self, at_end: bool = True) -> None:
        if self.mode is EditorMode.EDITING:
            return
        if not self._lines:
            self._lines.append("")
            self.refresh_results()
        self._clamp_cursor()
        self.mode = EditorMode.EDITING
        self._load_edit_line()
        if at_end:
            self.cursor_col = len(self.edit_buffer)
        self._touch()

    def commit_edit(self) -> None:
        if self.mode is not EditorMode.EDITING:
            return
        self._write_back()
        self.mode = EditorMode.NORMAL
        self.edit_buffer = ""
        self._edit_original = None
        self._clamp_cursor()
        self._touch()

    def cancel_edit(self) -> None:
        """Leave EDITING mode, restoring the line as it was when editing began."""
        if self.mode is not EditorMode.EDITING:
            return
        self._debouncer.cancel()
        original = self._edit_original
        self.mode = EditorMode.NORMAL
        self.edit_buffer = ""
        self._edit_original = None
        if original is not None and 0 <= self.cursor_line < len(self._lines):
            if self._lines[self.cursor_line] != original:
                self._lines[self.cursor_line] = original
                self.refresh_results()
        self._clamp_cursor()
        self._touch()

    def _buffer_changed(self) -> None:
        self._debouncer.schedule()
        self._touch()

    def insert_text(self, text: str) -> None:
        if self.mode is not EditorMode.EDITING or not text:
            return
        text = text.replace("\r", "").replace("\n", " ")
        buf = self.edit_buffer
        self.edit_buffer = buf[:self.cursor_col] + text + buf[self.cursor_col:]
        self.cursor_col += len(text)
        self._buffer_changed()

    def backspace(self) -> None:
        if self.mode is not EditorMode.EDITING:
            return
        if self.cursor_col > 0:
            buf = self.edit_buffer
            self.edit_buffer = buf[:self.cursor_col - 1] + buf[self.cursor_col:]
            self.cursor_col -= 1
            self._buffer_changed()
        elif self.cursor_line > 0:
            # Join with the previous line
            prev = self._lines[self.cursor_line - 1]
            self._debouncer.cancel()
            del self._lines[self.cursor_line]
            self.cursor_line -= 1
            self._lines[self.cursor_line] = prev + self.edit_buffer
            self.edit_buffer = self._lines[self.cursor_line]
            self._edit_original = self.edit_buffer
            self.cursor_col = len(prev)
            self._document_changed()

    def delete_forward(self) -> None:
        if self.mode is not EditorMode.EDITING:
            return
        buf = self.edit_buffer
        if self.cursor_col < len(buf):
            self.edit_buffer = buf[:self.cursor_col] + buf[self.cursor_col + 1:]
            self._buffer_changed()
        elif self.cursor_line < len(self._lines) - 1:
            self._debouncer.cancel()
            nxt = self._lines.pop(self.cursor_line + 1)
            self.edit_buffer = buf + nxt
            self._lines[self.cursor_line] = self.edit_buffer
            self._edit_original = self.edit_buffer
            self._document_changed()

    def split_line(self) -> None:
        """Break the edit buffer at the cursor and keep editing the new line."""
        if self.mode is not EditorMode.EDITING:
            return
        self._debouncer.cancel()
        before = self.edit_buffer[:self.cursor_col]
        after = self.edit_buffer[self.cursor_col:]
        self._lines[self.cursor_line] = before
        self._lines.insert(self.cursor_line + 1, after)
        self.cursor_line += 1
        self.cursor_col = 0
        self.edit_buffer = after
        self._edit_original = after
        self._document_changed()

    # ── Line commands ────────────────────────────────────────────────────────

    def _insert_line(self, at: int, text: str = "") -> None:
        self.commit_edit()
        at = max(0, min(at, len(self._lines)))
        self._lines.insert(at, text)
        self.cursor_line = at
        self.cursor_col = 0
        self._document_changed()

    def insert_line_below(self, text: str = "") -> None:
        at = self.cursor_line + 1 if self._lines else 0
        self._insert_line(at, text)

    def insert_line_above(self, text: str = "") -> None:
        self._insert_line(self.cursor_line, text)

    def delete_line(self) -> None:
        if self.mode is EditorMode.EDITING or not self._lines:
            return
        self.yank_buffer = self._lines.pop(self.cursor_line)
        self._clamp_cursor()
        self.status = "Line deleted"
        self._document_changed()

    def yank_line(self) -> None:
        if not 0 <= self.cursor_line < len(self._lines):
            return
        self.yank_buffer = self._lines[self.cursor_line]
        self.status = "Line yanked"

    def paste_below(self) -> None:
        if not self.yank_buffer:
            return
        self.insert_line_below(self.yank_buffer)
        self.status = "Line pasted"

    def paste_above(self) -> None:
        if not self.yank_buffer:
            return
        self.insert_line_above(self.yank_buffer)
        self.status = "Line pasted above"

    def cycle_preview_mode(self) -> PreviewMode:
        self.preview_mode = self.preview_mode.cycle()
        self._calc.mode = self.preview_mode
        self._touch()
        return self.preview_mode

    # ── History ──────────────────────────────────────────────────────────────

    def _restore(self, snapshot: list[str] | None) -> bool:
        if snapshot is None:
            return False
        self.mode = EditorMode.NORMAL
        self.edit_buffer = ""
        self._edit_original = None
        self._lines = snapshot
        self._clamp_cursor()
        self.modified = True
        self.refresh_results()
        return True

    def undo(self) -> bool:
        self.commit_edit()
        return self._restore(self._history.undo())

    def redo(self) -> bool:
        self.commit_edit()
        return self._restore(self._history.redo())
