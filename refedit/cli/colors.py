"""Color output support for refedit CLI.

Color palette:
  - Red: errors and removed entries
  - Orange: warnings and declined actions
  - Green: success
  - Blue: contextual information
"""

import os
import sys

# ANSI color codes
_COLORS = {
    'reset': '\033[0m',
    'bold': '\033[1m',
    'red': '\033[91m',
    'orange': '\033[93m',   # Yellow/orange (no true orange in ANSI)
    'green': '\033[92m',
    'blue': '\033[94m',
    'dim': '\033[2m',
}

# Global state
_colors_enabled = True


def init(nocolor: bool = False):
    """Initialize color support.

    Args:
        nocolor: If True, disable colors unconditionally
    """
    global _colors_enabled

    if nocolor:
        _colors_enabled = False
    elif os.environ.get('NO_COLOR'):
        # https://no-color.org/
        _colors_enabled = False
    elif not sys.stdout.isatty():
        _colors_enabled = False
    else:
        _colors_enabled = True


def enabled() -> bool:
    return _colors_enabled


def _wrap(text: str, color: str) -> str:
    if not _colors_enabled:
        return text
    return f"{_COLORS.get(color, '')}{text}{_COLORS['reset']}"


def error(text: str) -> str:
    return _wrap(text, 'red')


def warning(text: str) -> str:
    return _wrap(text, 'orange')


def success(text: str) -> str:
    return _wrap(text, 'green')


def info(text: str) -> str:
    return _wrap(text, 'blue')


def dim(text: str) -> str:
    return _wrap(text, 'dim')


def bold(text: str) -> str:
    return _wrap(text, 'bold')


def count(n: int) -> str:
    return bold(str(n))
