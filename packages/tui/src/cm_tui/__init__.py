"""
cm_tui: Dual-pane alignment engine for the calc-markdown editor.

Source text on the left, computed results and rendered markdown on the
right, kept row-for-row in step however each side wraps.
"""
from .aligned import (
    AlignedModel,
    AlignedModelInput,
    AlignedModelInvariants,
    AlignmentUnit,
    RowKind,
    VisualRow,
    compute_aligned_model,
)
from .cache import AlignmentCache, CacheKey
from .components import SplitView, SplitViewTheme
from .config import EditorSettings, load_settings, save_settings
from .history import History
from .keymap import KeySequencer
from .keys import parse_key
from .overlay import EditOverlay, apply_edit_overlay
from .render import CalcLineRenderer, MarkdownLineRenderer, PreviewTheme
from .results import (
    LineResult,
    PreviewMode,
    ResultsProvider,
    iter_blocks,
    line_results_from_lines,
    looks_like_calculation,
)
from .session import Debouncer, EditorMode, EditorSession
from .utils import strip_ansi, truncate_to_width, visible_width
from .viewport import Viewport
from .wrap import locate_cursor, wrap_styled_line, wrap_text

__all__ = [
    # aligned
    "AlignedModel",
    "AlignedModelInput",
    "AlignedModelInvariants",
    "AlignmentUnit",
    "RowKind",
    "VisualRow",
    "compute_aligned_model",
    # cache
    "AlignmentCache",
    "CacheKey",
    # components
    "SplitView",
    "SplitViewTheme",
    # config
    "EditorSettings",
    "load_settings",
    "save_settings",
    # history
    "History",
    # keys
    "KeySequencer",
    "parse_key",
    # overlay
    "EditOverlay",
    "apply_edit_overlay",
    # render
    "CalcLineRenderer",
    "MarkdownLineRenderer",
    "PreviewTheme",
    # results
    "LineResult",
    "PreviewMode",
    "ResultsProvider",
    "iter_blocks",
    "line_results_from_lines",
    "looks_like_calculation",
    # session
    "Debouncer",
    "EditorMode",
    "EditorSession",
    # utils
    "strip_ansi",
    "truncate_to_width",
    "visible_width",
    # viewport
    "Viewport",
    # wrap
    "locate_cursor",
    "wrap_styled_line",
    "wrap_text",
]
