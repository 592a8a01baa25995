"""Tests for cm_tui.keymap: key sequences driving the session"""
import pytest

from cm_tui.keymap import KeySequencer
from cm_tui.results import PreviewMode
from cm_tui.session import EditorMode, EditorSession

UP = "\x1b[A"
DOWN = "\x1b[B"
ESC = "\x1b"
ENTER = "\r"


@pytest.fixture
def session():
    return EditorSession(["# Budget", "rent = 1200", "food = 400"], width=60, height=10)


@pytest.fixture
def keys(session):
    return KeySequencer(session)


class TestNormalMode:
    def test_j_k_move(self, session, keys):
        keys.feed("j")
        assert session.cursor_line == 1
        keys.feed("k")
        assert session.cursor_line == 0

    def test_arrows_move(self, session, keys):
        keys.feed(DOWN)
        keys.feed(DOWN)
        assert session.cursor_line == 2
        keys.feed(UP)
        assert session.cursor_line == 1

    def test_h_l_move_column(self, session, keys):
        keys.feed("l")
        keys.feed("l")
        assert session.cursor_col == 2
        keys.feed("h")
        assert session.cursor_col == 1

    def test_G_and_gg(self, session, keys):
        keys.feed("G")
        assert session.cursor_line == 2
        keys.feed("g")
        assert keys.pending == "g"
        assert session.cursor_line == 2
        keys.feed("g")
        assert keys.pending is None
        assert session.cursor_line == 0

    def test_broken_sequence_handles_second_key(self, session, keys):
        keys.feed("g")
        keys.feed("j")
        assert keys.pending is None
        assert session.cursor_line == 1

    def test_dd_deletes_line(self, session, keys):
        keys.feed_all(["j", "d", "d"])
        assert session.lines == ("# Budget", "food = 400")
        assert session.yank_buffer == "rent = 1200"

    def test_yy_then_p(self, session, keys):
        keys.feed_all(["y", "y", "p"])
        assert session.lines == ("# Budget", "# Budget", "rent = 1200", "food = 400")
        assert session.cursor_line == 1

    def test_dd_then_P(self, session, keys):
        keys.feed_all(["G", "d", "d", "g", "g", "P"])
        assert session.lines == ("food = 400", "# Budget", "rent = 1200")
        assert session.cursor_line == 0

    def test_o_opens_line_below_in_edit_mode(self, session, keys):
        keys.feed("o")
        assert session.lines == ("# Budget", "", "rent = 1200", "food = 400")
        assert session.cursor_line == 1
        assert session.mode is EditorMode.EDITING

    def test_O_opens_line_above(self, session, keys):
        keys.feed_all(["j", "O"])
        assert session.lines[1] == ""
        assert session.cursor_line == 1
        assert session.mode is EditorMode.EDITING

    @pytest.mark.parametrize("key", ["e", ENTER, "i"])
    def test_enter_edit_keys(self, session, keys, key):
        keys.feed(key)
        assert session.mode is EditorMode.EDITING
        assert session.edit_buffer == "# Budget"

    @pytest.mark.parametrize("key", ["\t", "v"])
    def test_cycle_preview(self, session, keys, key):
        keys.feed(key)
        assert session.preview_mode is PreviewMode.MINIMAL
        keys.feed(key)
        assert session.preview_mode is PreviewMode.HIDDEN

    def test_undo_redo(self, session, keys):
        keys.feed_all(["d", "d"])
        assert session.total_lines == 2
        keys.feed("u")
        assert session.total_lines == 3
        keys.feed("r")
        assert session.total_lines == 2

    def test_unbound_key(self, keys):
        assert keys.feed("z") is False

    def test_every_key_drops_cached_layout(self, session, keys):
        session.aligned_model()
        assert session.cache.peek() is not None
        keys.feed("z")
        assert session.cache.peek() is None


class TestEditingMode:
    def test_typing_and_escape_commits(self, session, keys):
        keys.feed_all(["j", "e", "0", ESC])
        assert session.mode is EditorMode.NORMAL
        assert session.lines[1] == "rent = 12000"

    def test_letters_are_text_while_editing(self, session, keys):
        keys.feed_all(["e", " ", "g", "g", "j"])
        assert session.edit_buffer == "# Budget ggj"
        assert session.cursor_line == 0

    def test_enter_splits_line(self, session, keys):
        keys.feed_all(["e", ENTER])
        assert session.lines[:2] == ("# Budget", "")
        assert session.cursor_line == 1
        assert session.mode is EditorMode.EDITING

    def test_up_down_retarget(self, session, keys):
        keys.feed_all(["e", "!", DOWN])
        assert session.lines[0] == "# Budget!"
        assert session.cursor_line == 1
        assert session.edit_buffer == "rent = 1200"
        keys.feed(UP)
        assert session.cursor_line == 0
        assert session.mode is EditorMode.EDITING

    def test_backspace_and_delete(self, session, keys):
        keys.feed_all(["e", "\x7f", "\x7f"])
        assert session.edit_buffer == "# Budg"
        keys.feed_all(["\x1b[H", "\x1b[3~"])
        assert session.edit_buffer == " Budg"

    def test_left_right(self, session, keys):
        keys.feed_all(["e", "\x1b[D", "\x1b[D", "X"])
        assert session.edit_buffer == "# BudgXet"
        keys.feed_all(["\x1b[C", "Y"])
        assert session.edit_buffer == "# BudgXeYt"

    def test_ctrl_c_cancels(self, session, keys):
        keys.feed_all(["e", "x", "y", "\x03"])
        assert session.mode is EditorMode.NORMAL
        assert session.lines[0] == "# Budget"

    def test_unicode_input(self, session, keys):
        keys.feed_all(["e", "é", "中"])
        assert session.edit_buffer == "# Budgeté中"

    def test_pasted_text(self, session, keys):
        keys.feed_all(["e", " and more"])
        assert session.edit_buffer == "# Budget and more"

    def test_kitty_encoded_character(self, session, keys):
        keys.feed_all(["e", "\x1b[97u"])
        assert session.edit_buffer == "# Budgeta"

    def test_alignment_holds_while_typing(self, session, keys):
        keys.feed_all(["j", "e"])
        for ch in " + utilities + insurance + streaming services":
            keys.feed(ch)
            model = session.aligned_model()
            assert model.invariants().ok
            assert len(model.source_rows) == len(model.preview_rows)
