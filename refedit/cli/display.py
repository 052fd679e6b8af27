"""Display utilities for refedit CLI.

Output modes:
- columns: aligned table (default, human-friendly)
- flat: one row per line, tab separated (parsable)
- json: JSON output (programmatic consumption)
"""

import json
import shutil
from enum import Enum
from typing import Any, List, Optional, Sequence


class DisplayMode(Enum):
    """Output display mode."""
    COLUMNS = "columns"
    FLAT = "flat"
    JSON = "json"


_display_mode = DisplayMode.COLUMNS


def init(mode: str = "columns"):
    """Initialize display settings."""
    global _display_mode
    _display_mode = DisplayMode(mode) if mode else DisplayMode.COLUMNS


def get_mode() -> DisplayMode:
    return _display_mode


def get_terminal_width() -> int:
    """Get terminal width, with fallback to 80 columns."""
    try:
        return shutil.get_terminal_size().columns
    except (OSError, ValueError):
        return 80


def format_table(
    rows: Sequence[Sequence[str]],
    headers: Sequence[str],
    mode: Optional[DisplayMode] = None,
    terminal_width: Optional[int] = None,
    indent: int = 0,
) -> List[str]:
    """Format rows according to display mode.

    In columns mode, the last column is truncated to fit the terminal.

    Returns:
        List of formatted lines ready to print
    """
    effective_mode = mode if mode is not None else _display_mode

    if effective_mode == DisplayMode.JSON:
        keys = [h.lower().replace(' ', '_') for h in headers]
        return [json.dumps([dict(zip(keys, row)) for row in rows], ensure_ascii=False, indent=2)]

    if effective_mode == DisplayMode.FLAT:
        return ["\t".join(row) for row in rows]

    if not rows:
        return []

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[:-1]):
            widths[i] = max(widths[i], len(cell))

    width = terminal_width or get_terminal_width()
    prefix = " " * indent
    fixed = indent + sum(w + 2 for w in widths[:-1])
    last_width = max(10, width - fixed)

    def _line(cells):
        parts = [cell.ljust(widths[i]) for i, cell in enumerate(cells[:-1])]
        last = cells[-1]
        if len(last) > last_width:
            last = last[:last_width - 3] + "..."
        parts.append(last)
        return (prefix + "  ".join(parts)).rstrip()

    lines = [_line(list(headers)), prefix + "-" * min(width - indent, fixed - indent + last_width)]
    lines.extend(_line(list(row)) for row in rows)
    return lines


def print_table(rows: Sequence[Sequence[str]], headers: Sequence[str], **kwargs) -> None:
    for line in format_table(rows, headers, **kwargs):
        print(line)


def print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))
