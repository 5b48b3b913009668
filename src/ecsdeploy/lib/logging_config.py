"""Logging configuration for ecsdeploy.

Console output is leveled (``[INFO]``, ``[WARNING]``, ...) and colorized when
stderr is a terminal. Third-party SDK loggers are held at WARNING unless
verbose mode is on.
"""

from __future__ import annotations

import logging
import sys

from ecsdeploy.lib.ui.colors import LEVEL_COLORS, colorize
from ecsdeploy.lib.ui.terminal import is_tty

LOGGER_NAMESPACE = "ecsdeploy"

# SDK loggers that are very chatty at DEBUG/INFO
NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "docker", "s3transfer")


class LevelFormatter(logging.Formatter):
    """Formatter that prefixes each message with its bracketed level."""

    def __init__(self, use_colors: bool = False, verbose: bool = False) -> None:
        """Initialize formatter.

        Args:
            use_colors: Colorize the level prefix
            verbose: Include the logger name in each line
        """
        self.use_colors = use_colors
        fmt = "%(message)s"
        if verbose:
            fmt = "%(name)s: %(message)s"
        super().__init__(fmt=fmt)

    def format(self, record: logging.LogRecord) -> str:
        """Format a record as ``[LEVEL] message``."""
        level = f"[{record.levelname}]"
        color = LEVEL_COLORS.get(record.levelname)
        if color:
            level = colorize(level, color, force_tty=self.use_colors)
        return f"{level} {super().format(record)}"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure console logging for a CLI invocation.

    Args:
        verbose: Enable DEBUG output, including SDK loggers
        quiet: Only show errors
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        LevelFormatter(use_colors=is_tty(sys.stderr), verbose=verbose)
    )

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False

    root_logger = logging.getLogger()
    if verbose:
        root_logger.handlers.clear()
        root_logger.addHandler(handler)
        root_logger.setLevel(logging.DEBUG)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for a module.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
