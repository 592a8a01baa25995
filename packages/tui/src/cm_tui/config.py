"""
Configuration paths and editor settings.

Settings live in ~/.calcmark/settings.json (or $CALCMARK_CONFIG_DIR). Every
field is optional in the file; missing or invalid values fall back to the
defaults below.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any

from .results import PreviewMode

logger = logging.getLogger(__name__)

APP_NAME: str = "calcmark"
CONFIG_DIR_NAME: str = ".calcmark"
VERSION: str = "0.1.0"

ENV_CONFIG_DIR: str = f"{APP_NAME.upper()}_CONFIG_DIR"


# ============================================================================
# Paths
# ============================================================================


def get_config_dir() -> str:
    """Get the config directory (e.g., ~/.calcmark/)."""
    env_dir = os.environ.get(ENV_CONFIG_DIR)
    if env_dir:
        return os.path.expanduser(env_dir)
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)


def get_settings_path() -> str:
    """Get path to settings.json."""
    return os.path.join(get_config_dir(), "settings.json")


def get_debug_log_path() -> str:
    """Get path to debug log file."""
    return os.path.join(get_config_dir(), f"{APP_NAME}-debug.log")


# ============================================================================
# Settings
# ============================================================================


@dataclass
class EditorSettings:
    full_source_percent: int = 55     # source share of the width in FULL preview
    minimal_source_percent: int = 75  # source share of the width in MINIMAL preview
    gutter_width: int = 4             # line-number column
    min_source_width: int = 10
    debounce_ms: int = 50             # quiet period before re-evaluating

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EditorSettings":
        settings = cls()
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                logger.warning("Ignoring invalid setting %s=%r", f.name, value)
                continue
            setattr(settings, f.name, value)
        for name in ("full_source_percent", "minimal_source_percent"):
            if getattr(settings, name) > 100:
                logger.warning("Ignoring invalid setting %s=%r", name, getattr(settings, name))
                setattr(settings, name, getattr(cls, name))
        return settings

    def source_percent(self, mode: PreviewMode) -> int:
        if mode is PreviewMode.FULL:
            return self.full_source_percent
        if mode is PreviewMode.MINIMAL:
            return self.minimal_source_percent
        return 100

    def pane_widths(self, total_width: int, mode: PreviewMode) -> tuple[int, int]:
        """Split total_width into (source pane, preview pane) columns."""
        total_width = max(0, total_width)
        source = total_width * self.source_percent(mode) // 100
        return source, total_width - source

    def source_content_width(self, source_pane_width: int) -> int:
        """Text columns left in the source pane after the gutter and its margins."""
        return max(self.min_source_width, source_pane_width - self.gutter_width - 2)


def load_settings(path: str | None = None) -> EditorSettings:
    """Load settings from JSON. Never raises: problems are logged and defaults used."""
    path = path or get_settings_path()
    if not os.path.exists(path):
        return EditorSettings()
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read settings from %s: %s", path, e)
        return EditorSettings()
    if not isinstance(data, dict):
        logger.warning("Settings file %s does not hold an object", path)
        return EditorSettings()
    return EditorSettings.from_dict(data)


def save_settings(settings: EditorSettings, path: str | None = None) -> None:
    path = path or get_settings_path()
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=2)


def configure_debug_logging(path: str | None = None) -> logging.Handler:
    """Send DEBUG records from this package to a log file."""
    path = path or get_debug_log_path()
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    pkg_logger = logging.getLogger("cm_tui")
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(logging.DEBUG)
    return handler
