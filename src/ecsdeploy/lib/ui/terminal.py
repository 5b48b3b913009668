"""Terminal detection utilities."""

import sys
from typing import TextIO


def is_tty(stream: TextIO | None = None) -> bool:
    """Check if a stream (stdout by default) is connected to a terminal.

    Used to decide between colored log levels and plain text output suitable
    for CI/CD logs.

    Args:
        stream: Stream to inspect. Defaults to sys.stdout.

    Returns:
        True if the stream is a TTY (interactive terminal), False otherwise.
    """
    target = stream if stream is not None else sys.stdout
    isatty = getattr(target, "isatty", None)
    return bool(isatty and isatty())
