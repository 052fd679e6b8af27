"""Catalog editing commands: remove, replace."""

import sys
from pathlib import Path

from ...core.cascade import CascadeEngine, Status
from ...core.errors import ParseError
from ...core.session import CatalogSession
from ...core.sources import DirectoryMetadataSource, HttpMetadataSource
from .. import colors, display
from ..helpers import print_result, result_to_dict


def _open_for_edit(args):
    """Open the catalog through a session (backup, optional working copy)."""
    work_dir = Path(args.work_dir) if getattr(args, 'work_dir', None) else None
    session = CatalogSession(work_dir)
    try:
        return session.open(args.catalog, working_copy=getattr(args, 'work_copy', False))
    except ParseError as e:
        print(colors.error(f"Error: {e}"), file=sys.stderr)
    except OSError as e:
        print(colors.error(f"Error: cannot open {args.catalog}: {e.strerror}"), file=sys.stderr)
    return None


def _report(args, results) -> int:
    if display.get_mode() == display.DisplayMode.JSON:
        display.print_json([result_to_dict(r) for r in results])
    elif not args.quiet:
        for result in results:
            print_result(result)
    return 0 if all(r.success for r in results) else 1


def cmd_remove(args) -> int:
    """Handle remove command: cascading removal of solutions."""
    doc = _open_for_edit(args)
    if doc is None:
        return 1

    engine = CascadeEngine(doc, trace=getattr(args, 'trace_log', None))
    results = engine.remove_many(args.solutions)

    code = _report(args, results)
    if not args.quiet and display.get_mode() != display.DisplayMode.JSON:
        declined = [r for r in results if r.status == Status.UNREMOVABLE]
        if declined:
            print(colors.dim("  BIOS entries can only be replaced by an older version"))
    return code


def cmd_replace(args) -> int:
    """Handle replace command: swap a solution for a superseded version."""
    doc = _open_for_edit(args)
    if doc is None:
        return 1

    if args.metadata_dir:
        source = DirectoryMetadataSource(Path(args.metadata_dir))
    else:
        source = HttpMetadataSource(args.metadata_url)

    engine = CascadeEngine(doc, metadata_source=source, trace=getattr(args, 'trace_log', None))
    result = engine.replace(args.solution, args.replacement)

    code = _report(args, [result])
    if result.status == Status.NOT_FOUND and not args.quiet \
            and display.get_mode() != display.DisplayMode.JSON:
        print(colors.dim(f"  Use 'refedit chain {args.catalog} {args.solution}' to list candidates"))
    return code
