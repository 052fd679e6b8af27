"""Catalog query commands: fetch, list, chain."""

import sys
from pathlib import Path

from ...core.document import CatalogDocument
from ...core.errors import CatalogUnavailable, NotFound, ParseError
from ...core.indices import RecordIndex
from ...core.listing import list_rows
from ...core.resolver import SupersessionResolver
from ...core.sources import DirectoryCatalogSource, HttpCatalogSource
from .. import colors, display
from ..helpers import load_catalog

LIST_HEADERS = ('Id', 'Version', 'Date', 'Category', 'Name')


def cmd_fetch(args) -> int:
    """Handle fetch command: download a reference catalog."""
    if args.source_dir:
        source = DirectoryCatalogSource(Path(args.source_dir))
    else:
        source = HttpCatalogSource(args.url)

    try:
        data = source.fetch(args.platform, args.os, args.os_version)
    except CatalogUnavailable as e:
        print(colors.error(f"Error: {e}"), file=sys.stderr)
        return 1

    # Refuse to store something that will not load afterwards
    try:
        doc = CatalogDocument.from_bytes(data, source=f"{args.platform} {args.os} {args.os_version}")
    except ParseError as e:
        print(colors.error(f"Error: {e}"), file=sys.stderr)
        return 1

    if args.output:
        dest = Path(args.output)
    else:
        from ...core.config import get_cache_dir
        name = f"{args.platform.lower()}_64_{args.os.lower()}.{args.os_version}.xml"
        dest = get_cache_dir() / name

    try:
        doc.save(dest)
    except OSError as e:
        print(colors.error(f"Error: cannot write {dest}: {e.strerror}"), file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"{colors.success('Fetched')} {len(doc.active_solutions())} active, "
              f"{len(doc.superseded_solutions())} superseded solution(s) into {dest}")
    return 0


def cmd_list(args) -> int:
    """Handle list command: show active solutions matching filters."""
    doc = load_catalog(args.catalog)
    if doc is None:
        return 1

    rows = list_rows(doc.active_solutions(), args.category or (), args.name)

    if display.get_mode() == display.DisplayMode.JSON:
        display.print_json([row.to_dict() for row in rows])
        return 0

    table = [(r.id, r.version, r.date_released, r.category, r.name) for r in rows]
    display.print_table(table, LIST_HEADERS)
    if display.get_mode() == display.DisplayMode.COLUMNS and not args.quiet:
        print(colors.dim(f"\n{len(rows)} solution(s)"))
    return 0


def cmd_chain(args) -> int:
    """Handle chain command: show the superseded versions of a solution."""
    doc = load_catalog(args.catalog)
    if doc is None:
        return 1

    try:
        chain = SupersessionResolver(RecordIndex(doc)).chain(args.solution)
    except NotFound as e:
        print(colors.error(f"Error: {e}"), file=sys.stderr)
        return 1

    if display.get_mode() == display.DisplayMode.JSON:
        display.print_json([
            {'id': s.id, 'version': s.version, 'date_released': s.date_released, 'name': s.name}
            for s in chain
        ])
        return 0

    if not chain:
        if not args.quiet:
            print(colors.info(f"{args.solution} has no superseded versions"))
        return 0

    table = [(s.id, s.version, s.date_released, s.category, s.name) for s in chain]
    display.print_table(table, LIST_HEADERS)
    return 0
