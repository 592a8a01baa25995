"""
Single-slot cache for the aligned model.

The key is built from the document revision counter (bumped on every
mutation), the cursor line, the preview mode, the line count and both pane
widths. A revision counter cannot collide the way a content fingerprint can,
so a cache hit always means the inputs really are unchanged.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from .aligned import AlignedModel
from .results import PreviewMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheKey:
    revision: int
    cursor_line: int
    preview_mode: PreviewMode
    total_lines: int
    source_width: int
    preview_width: int


class AlignmentCache:
    """
    Memoizes the most recent aligned model.

    key_fn builds the key for the requested widths from the owner's current
    state; compute builds a fresh model for those widths. Only one entry is
    kept: any key change replaces it.
    """

    def __init__(
        self,
        key_fn: Callable[[int, int], CacheKey],
        compute: Callable[[int, int], AlignedModel],
    ) -> None:
        self._key_fn = key_fn
        self._compute = compute
        self._key: CacheKey | None = None
        self._model: AlignedModel | None = None
        self.hits = 0
        self.misses = 0

    def get(self, source_width: int, preview_width: int) -> AlignedModel:
        key = self._key_fn(source_width, preview_width)
        if self._model is not None and self._key == key:
            self.hits += 1
            return self._model

        self.misses += 1
        logger.debug("alignment cache miss: %s", key)
        model = self._compute(source_width, preview_width)
        self._key = key
        self._model = model
        return model

    def invalidate(self) -> None:
        """Drop the stored entry regardless of its key."""
        self._key = None
        self._model = None

    def peek(self) -> AlignedModel | None:
        return self._model

    @property
    def key(self) -> CacheKey | None:
        return self._key
