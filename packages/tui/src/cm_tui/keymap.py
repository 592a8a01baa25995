"""
Key dispatch for the editor session.

NORMAL mode uses vim-style single keys and two-key sequences (gg, dd, yy);
EDITING mode sends printable input to the edit buffer. Every key fed in
drops the session's cached layout before it is handled.
"""
from __future__ import annotations

import logging
from typing import Callable

from .keys import KeyId, is_printable, parse_key
from .session import EditorMode, EditorSession

logger = logging.getLogger(__name__)

Action = Callable[[], object]


class KeySequencer:
    """
    Feeds raw terminal input to an EditorSession.

    A first key that can start a sequence ("g", "d", "y") is held in
    ``pending``; the next key either completes the sequence or is handled on
    its own as if nothing was pending.
    """

    def __init__(self, session: EditorSession) -> None:
        self.session = session
        self.pending: KeyId | None = None
        s = session

        self._sequences: dict[KeyId, dict[KeyId, Action]] = {
            "g": {"g": s.goto_top},
            "d": {"d": s.delete_line},
            "y": {"y": s.yank_line},
        }

        self._normal: dict[KeyId, Action] = {
            "j": lambda: s.move_cursor(1),
            "down": lambda: s.move_cursor(1),
            "k": lambda: s.move_cursor(-1),
            "up": lambda: s.move_cursor(-1),
            "h": lambda: s.move_cursor(0, -1),
            "left": lambda: s.move_cursor(0, -1),
            "l": lambda: s.move_cursor(0, 1),
            "right": lambda: s.move_cursor(0, 1),
            "home": s.cursor_home,
            "end": s.cursor_end,
            "G": s.goto_bottom,
            "pageDown": lambda: s.move_cursor(max(1, s.pane_height - 1)),
            "pageUp": lambda: s.move_cursor(-max(1, s.pane_height - 1)),
            "e": s.enter_edit,
            "enter": s.enter_edit,
            "i": lambda: s.enter_edit(at_end=False),
            "o": self._open_below,
            "O": self._open_above,
            "p": s.paste_below,
            "P": s.paste_above,
            "u": s.undo,
            "r": s.redo,
            "tab": s.cycle_preview_mode,
            "v": s.cycle_preview_mode,
        }

        self._editing: dict[KeyId, Action] = {
            "escape": s.commit_edit,
            "ctrl+c": s.cancel_edit,
            "enter": s.split_line,
            "up": lambda: s.move_cursor(-1),
            "down": lambda: s.move_cursor(1),
            "left": lambda: s.move_cursor(0, -1),
            "right": lambda: s.move_cursor(0, 1),
            "home": s.cursor_home,
            "end": s.cursor_end,
            "backspace": s.backspace,
            "delete": s.delete_forward,
            "space": lambda: s.insert_text(" "),
        }

    def _open_below(self) -> None:
        self.session.insert_line_below()
        self.session.enter_edit()

    def _open_above(self) -> None:
        self.session.insert_line_above()
        self.session.enter_edit()

    def feed(self, data: str) -> bool:
        """Handle one chunk of input. Returns True if it did something."""
        self.session.cache.invalidate()
        key = parse_key(data)
        if key is None:
            self.pending = None
            if self.session.mode is EditorMode.EDITING and len(data) > 1 and data.isprintable():
                self.session.insert_text(data)  # pasted text
                return True
            logger.debug("unhandled input %r", data)
            return False

        if self.session.mode is EditorMode.EDITING:
            self.pending = None
            return self._feed_editing(key, data)
        return self._feed_normal(key)

    def feed_all(self, keys: list[str]) -> None:
        for data in keys:
            self.feed(data)

    def _feed_normal(self, key: KeyId) -> bool:
        if self.pending is not None:
            first, self.pending = self.pending, None
            action = self._sequences[first].get(key)
            if action is not None:
                action()
                return True

        if key in self._sequences:
            self.pending = key
            return True

        action = self._normal.get(key)
        if action is None:
            return False
        action()
        return True

    def _feed_editing(self, key: KeyId, data: str) -> bool:
        action = self._editing.get(key)
        if action is not None:
            action()
            return True
        if is_printable(data):
            self.session.insert_text(data)
            return True
        if is_printable(key):
            self.session.insert_text(key)  # CSI-u encoded character
            return True
        return False
