"""
Undo/redo history of document snapshots.

Stores deep clones of state snapshots using copy.deepcopy, so callers can
keep mutating the live state after pushing.
"""
from __future__ import annotations

import copy
from typing import Generic, TypeVar

S = TypeVar("S")

DEFAULT_LIMIT = 100


class History(Generic[S]):
    """
    Linear undo/redo history with clone-on-push semantics.

    The top of the undo stack is always the current state. undo() steps back
    one snapshot and moves the current one onto the redo stack; any new push
    discards the redo stack. Consecutive equal snapshots are stored once.
    """

    def __init__(self, limit: int = DEFAULT_LIMIT) -> None:
        self._undo: list[S] = []
        self._redo: list[S] = []
        self._limit = max(1, limit)

    def push(self, state: S) -> bool:
        """Record *state* as the newest snapshot. Returns False if unchanged."""
        if self._undo and self._undo[-1] == state:
            return False
        self._undo.append(copy.deepcopy(state))
        if len(self._undo) > self._limit:
            del self._undo[0]
        self._redo.clear()
        return True

    def undo(self) -> S | None:
        """Step back and return the previous snapshot, or None at the oldest one."""
        if len(self._undo) <= 1:
            return None
        self._redo.append(self._undo.pop())
        return copy.deepcopy(self._undo[-1])

    def redo(self) -> S | None:
        """Re-apply the most recently undone snapshot, or None if there is none."""
        if not self._redo:
            return None
        state = self._redo.pop()
        self._undo.append(state)
        return copy.deepcopy(state)

    def reset(self, state: S) -> None:
        """Forget everything and start again from *state*."""
        self._undo = [copy.deepcopy(state)]
        self._redo.clear()

    @property
    def can_undo(self) -> bool:
        return len(self._undo) > 1

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def __len__(self) -> int:
        return len(self._undo)
