"""Repository sync command."""

import sys
from pathlib import Path

from ...core.sync import RepositorySync
from .. import colors, display
from ..helpers import load_catalog


def cmd_sync(args) -> int:
    """Handle sync command: pre-download solution packages."""
    doc = load_catalog(args.catalog)
    if doc is None:
        return 1

    repo_dir = Path(args.repo) if args.repo else None
    syncer = RepositorySync(repo_dir, max_workers=args.jobs)

    def _progress(result, done, total):
        if args.quiet or display.get_mode() != display.DisplayMode.COLUMNS:
            return
        state = colors.dim('cached') if result.cached else (
            colors.success('ok') if result.success else colors.error('failed'))
        print(f"  [{done}/{total}] {result.item.solution_id} {result.item.filename} {state}")

    report = syncer.sync(doc, args.solutions or None, progress_callback=_progress)

    if display.get_mode() == display.DisplayMode.JSON:
        display.print_json({
            'repository': str(syncer.repo_dir),
            'downloaded': report.downloaded,
            'cached': report.cached,
            'missing': report.missing,
            'failed': [{'url': r.item.url, 'error': r.error} for r in report.failed],
        })
    elif not args.quiet:
        print(f"{colors.count(report.downloaded)} downloaded, "
              f"{colors.count(report.cached)} already present in {syncer.repo_dir}")
        for solution_id in report.missing:
            print(colors.warning(f"  {solution_id}: not in catalog"))
        for failed in report.failed:
            print(colors.error(f"  {failed.item.url}: {failed.error}"), file=sys.stderr)

    return 0 if report.success else 1
