"""Tests for cm_tui.viewport: scrolling in visual-row space"""
import pytest

from cm_tui.aligned import AlignedModelInput, compute_aligned_model
from cm_tui.results import line_results_from_lines
from cm_tui.viewport import Viewport


@pytest.fixture
def model():
    # line 0 wraps to rows 0-4; lines 1..5 take one row each (rows 5-9)
    lines = ["a" * 50, "b", "c", "d", "e", "f"]
    return compute_aligned_model(AlignedModelInput(
        lines=lines,
        results=line_results_from_lines(lines),
        source_content_width=10,
        preview_width=60,
    ))


class TestViewport:
    def test_initial_window(self, model):
        vp = Viewport(3)
        assert vp.window(model) == (0, 3)

    def test_follow_scrolls_down_in_visual_rows(self, model):
        vp = Viewport(3)
        offset = vp.follow(model, 3)
        # line 3 is visual row 7, not row 3
        assert offset == 5
        start, end = vp.window(model)
        assert start <= model.cursor_visual_line(3) < end

    def test_follow_scrolls_up(self, model):
        vp = Viewport(3)
        vp.follow(model, 5)
        assert vp.follow(model, 0) == 0

    def test_follow_keeps_offset_when_visible(self, model):
        vp = Viewport(4)
        vp.offset = 4
        assert vp.follow(model, 1) == 4

    def test_scroll_by_clamps(self, model):
        vp = Viewport(3)
        assert vp.scroll_by(model, 100) == model.total_visual_lines - 3
        assert vp.scroll_by(model, -100) == 0

    def test_tall_viewport_never_scrolls(self, model):
        vp = Viewport(50)
        assert vp.follow(model, 5) == 0
        assert vp.scroll_by(model, 3) == 0
        assert vp.window(model) == (0, model.total_visual_lines)

    def test_both_panes_share_window(self, model):
        vp = Viewport(4)
        vp.follow(model, 4)
        start, end = vp.window(model)
        src = model.source_rows[start:end]
        prev = model.preview_rows[start:end]
        assert len(src) == len(prev) == 4
        assert [r.source_line_idx for r in src] == [r.source_line_idx for r in prev]

    def test_set_height_and_reset(self, model):
        vp = Viewport(2)
        vp.follow(model, 5)
        vp.set_height(-1)
        assert vp.height == 0
        vp.reset()
        assert vp.offset == 0

    def test_empty_model(self):
        empty = compute_aligned_model(AlignedModelInput([], [], 10, 10))
        vp = Viewport(5)
        assert vp.follow(empty, 0) == 0
        assert vp.window(empty) == (0, 0)
