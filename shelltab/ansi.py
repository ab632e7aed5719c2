"""Terminal colors for shelltab's diagnostics.

Only stderr is ever colored: stdout carries completion responses and
generated scripts, which shells read byte for byte.
"""

import logging
import os
import sys
from typing import TextIO

__all__ = [
    "ERROR_CODES",
    "LEVEL_CODES",
    "paint",
    "sgr",
    "should_colorize",
]

_RESET = "\x1b[0m"

# SGR parameters
_BOLD = 1
_DIM = 2
_RED = 31
_YELLOW = 33

# Log levels missing here are printed plain
LEVEL_CODES: dict[int, tuple[int, ...]] = {
    logging.WARNING: (_YELLOW, _DIM),
    logging.ERROR: (_RED, _DIM),
    logging.CRITICAL: (_RED, _BOLD),
}

# "Error: ..." lines of the complete subcommand
ERROR_CODES: tuple[int, ...] = (_RED, _BOLD)


def should_colorize(stream: TextIO | None = None) -> bool:
    """Tell whether colors may be written to `stream` (stderr by default).

    NO_COLOR disables colors, FORCE_COLOR enables them, otherwise only
    terminals get them. A shell requesting completions always reads from
    a pipe, so responses are never colored.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def sgr(*codes: int) -> tuple[str, str]:
    """Return the (start, end) sequences for `codes`, empty strings when there are none."""
    if not codes:
        return ("", "")
    return (f"\x1b[{';'.join(str(code) for code in codes)}m", _RESET)


def paint(text: str, *codes: int) -> str:
    """Wrap `text` in the sequences for `codes`."""
    start, end = sgr(*codes)
    return f"{start}{text}{end}"
