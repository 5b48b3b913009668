"""UI utilities for terminal output.

- TTY detection for adaptive output formatting
- ANSI color support with graceful degradation
"""

from ecsdeploy.lib.ui.colors import LEVEL_COLORS, ANSIColors, colorize
from ecsdeploy.lib.ui.terminal import is_tty

__all__ = [
    "ANSIColors",
    "LEVEL_COLORS",
    "colorize",
    "is_tty",
]
