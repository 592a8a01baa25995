"""
cm_tui.components: UI components.
"""
from .split_view import SplitView, SplitViewTheme

__all__ = [
    "SplitView",
    "SplitViewTheme",
]
