"""Shared helpers for CLI commands."""

import sys
from pathlib import Path
from typing import Optional

from ..core.cascade import CascadeResult, Status
from ..core.document import CatalogDocument
from ..core.errors import ParseError
from . import colors


def load_catalog(path: str) -> Optional[CatalogDocument]:
    """Load a catalog for reading, printing the error on failure."""
    try:
        return CatalogDocument.load(Path(path))
    except ParseError as e:
        print(colors.error(f"Error: {e}"), file=sys.stderr)
    except OSError as e:
        print(colors.error(f"Error: cannot read {path}: {e.strerror}"), file=sys.stderr)
    return None


def result_to_dict(result: CascadeResult) -> dict:
    """Serializable form of a cascade result (for --json)."""
    return {
        'action': result.action,
        'solution': result.solution_id,
        'replacement': result.replacement_id,
        'kind': result.kind.value if result.kind else None,
        'status': result.status.value if result.status else None,
        'success': result.success,
        'counts': dict(result.counts),
        'anomaly': result.anomaly,
        'error': result.error,
        'summary': result.summary(),
    }


def print_result(result: CascadeResult):
    """Print a cascade result with colors matching its outcome."""
    line = result.summary()
    if result.success and result.anomaly:
        print(colors.warning(line))
    elif result.success:
        print(colors.success(line))
    elif result.status == Status.UNREMOVABLE:
        print(colors.warning(line))
    else:
        print(colors.error(line))
