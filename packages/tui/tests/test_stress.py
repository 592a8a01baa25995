"""Randomized invariant sweeps. The first seeds always run; the rest need --stress or STRESS_TESTS=1."""
import random
from dataclasses import replace

import pytest

from cm_tui.aligned import AlignedModelInput, compute_aligned_model
from cm_tui.keymap import KeySequencer
from cm_tui.render import CalcLineRenderer, MarkdownLineRenderer
from cm_tui.results import PreviewMode, line_results_from_lines
from cm_tui.session import EditorSession

DEFAULT_SEEDS = 4

WORDS = ["x", "=", "10", "rent", "+", "food", "# Notes", "- item", "中文", "total", "**bold**", ""]


def seeds(count: int) -> list:
    return [s if s < DEFAULT_SEEDS else pytest.param(s, marks=pytest.mark.stress) for s in range(count)]


def random_line(rng: random.Random) -> str:
    return " ".join(rng.choice(WORDS) for _ in range(rng.randint(0, 14)))


def with_values(rng: random.Random):
    def provider(lines):
        out = []
        for r in line_results_from_lines(lines):
            if r.is_calc and rng.random() < 0.7:
                r = replace(r, value=str(rng.randint(0, 10 ** rng.randint(1, 30))))
            elif r.is_calc and rng.random() < 0.2:
                r = replace(r, error="undefined variable")
            out.append(r)
        return out
    return provider


@pytest.mark.parametrize("seed", seeds(40))
def test_builder_invariants(seed):
    rng = random.Random(seed)
    lines = [random_line(rng) for _ in range(rng.randint(0, 25))]
    mode = rng.choice(list(PreviewMode))
    markdown = MarkdownLineRenderer()
    model = compute_aligned_model(
        AlignedModelInput(
            lines=lines,
            results=with_values(rng)(lines),
            source_content_width=rng.randint(1, 60),
            preview_width=rng.randint(0, 60),
            cursor_line=rng.randint(-1, len(lines)),
            preview_mode=mode,
        ),
        CalcLineRenderer(mode, markdown=markdown),
        markdown,
    )
    assert model.invariants().ok
    assert len(model.source_rows) == len(model.preview_rows) == model.total_visual_lines


@pytest.mark.parametrize("seed", seeds(20))
def test_random_keystrokes_keep_panes_aligned(seed):
    rng = random.Random(seed)
    session = EditorSession(
        [random_line(rng) for _ in range(rng.randint(0, 10))],
        results_provider=with_values(rng),
        width=rng.randint(20, 120),
        height=rng.randint(3, 30),
    )
    keys = KeySequencer(session)
    alphabet = ["j", "k", "h", "l", "g", "G", "d", "y", "p", "P", "o", "O", "e", "i",
                "u", "r", "\t", "\r", "\x1b", "\x1b[A", "\x1b[B", "\x7f", "\x1b[3~",
                "a", " ", "1", "=", "中"]

    for _ in range(300):
        keys.feed(rng.choice(alphabet))
        if rng.random() < 0.1:
            session.poll()
        if rng.random() < 0.05:
            session.set_size(rng.randint(10, 120), rng.randint(2, 30))

        model = session.aligned_model()
        assert model.invariants().ok
        assert len(model.source_rows) == len(model.preview_rows)
        assert model.total_source_lines == session.total_lines

        source, preview = session.visible_rows()
        assert len(source) == len(preview) <= session.pane_height
        if session.total_lines:
            assert any(r.source_line_idx == session.cursor_line for r in source) or session.pane_height == 0
