"""Terminal probing and character-grid layout."""

from .layout import DEFAULT_CHAR_RATIO, DEFAULT_RESERVED_ROWS, solve_display_size, usable_rows
from .models import ColorDepth, DisplayTarget, TerminalGeometry
from .probe import TerminalProbe, detect_color_depth

__all__ = [
    "ColorDepth",
    "DEFAULT_CHAR_RATIO",
    "DEFAULT_RESERVED_ROWS",
    "DisplayTarget",
    "TerminalGeometry",
    "TerminalProbe",
    "detect_color_depth",
    "solve_display_size",
    "usable_rows",
]
