"""
Main CLI entry point for refedit

Commands, with short aliases:
- refedit fetch                  download a reference catalog
- refedit list / refedit ls      list active solutions
- refedit chain / refedit ch     superseded versions of a solution
- refedit remove / refedit rm    cascading removal
- refedit replace / refedit rp   cascading replacement
- refedit sync                   pre-download packages
"""

import argparse
import logging
import sys
from pathlib import Path

from .. import __version__
from ..core.trace import open_trace
from .commands import (
    cmd_chain,
    cmd_fetch,
    cmd_list,
    cmd_remove,
    cmd_replace,
    cmd_sync,
)


class AliasedSubParsersAction(argparse._SubParsersAction):
    """Custom action to support command aliases in argparse."""

    def add_parser(self, name, **kwargs):
        aliases = kwargs.pop('aliases', [])
        parser = super().add_parser(name, **kwargs)

        for alias in aliases:
            self._name_parser_map[alias] = parser

        return parser


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with all commands and aliases."""

    parser = argparse.ArgumentParser(
        prog='refedit',
        description='Edit platform reference catalogs while keeping them consistent',
        epilog='Use "refedit <command> --help" for command-specific help.'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'refedit {__version__}'
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    parser.add_argument('--quiet', '-q', action='store_true', help='Quiet output')
    parser.add_argument('--nocolor', action='store_true', help='Disable colored output')
    parser.add_argument(
        '--trace',
        metavar='FILE',
        help='Append a line-oriented diagnostic trace of edits to FILE'
    )

    # Parent parser for display options (inherited by subparsers)
    display_parent = argparse.ArgumentParser(add_help=False)
    display_parent.add_argument('--json', action='store_true', help='JSON output for scripting')
    display_parent.add_argument('--flat', action='store_true',
                                help='Flat output (one item per line, parsable)')

    # Parent parser for editing options
    edit_parent = argparse.ArgumentParser(add_help=False)
    edit_parent.add_argument(
        '--work-copy',
        action='store_true',
        help='Edit a working copy in the work directory instead of the file itself'
    )
    edit_parent.add_argument('--work-dir', metavar='DIR', help='Directory for working copies')

    parser.register('action', 'parsers', AliasedSubParsersAction)
    subparsers = parser.add_subparsers(dest='command', metavar='<command>')

    # fetch
    fetch_parser = subparsers.add_parser(
        'fetch',
        help='Download the reference catalog of a platform',
        parents=[display_parent]
    )
    fetch_parser.add_argument('platform', help='Platform id (e.g. 8A78)')
    fetch_parser.add_argument('os', help='Operating system (e.g. win11)')
    fetch_parser.add_argument('os_version', help='OS version (e.g. 23H2)')
    fetch_parser.add_argument('--output', '-o', metavar='FILE', help='Where to store the catalog')
    fetch_parser.add_argument('--url', metavar='TEMPLATE',
                              help='Catalog URL template ({platform}, {os}, {os_version})')
    fetch_parser.add_argument('--source-dir', metavar='DIR',
                              help='Read the catalog from a local mirror instead')

    # list
    list_parser = subparsers.add_parser(
        'list', aliases=['ls'],
        help='List active solutions',
        parents=[display_parent]
    )
    list_parser.add_argument('catalog', help='Reference catalog file')
    list_parser.add_argument(
        '--category', '-c',
        action='append',
        metavar='CATEGORY',
        help='Category to list (driver, software, firmware, bios, dock); repeatable'
    )
    list_parser.add_argument('--name', '-n', metavar='TEXT', help='Only names containing TEXT')

    # chain
    chain_parser = subparsers.add_parser(
        'chain', aliases=['ch'],
        help='Show the superseded versions of a solution',
        parents=[display_parent]
    )
    chain_parser.add_argument('catalog', help='Reference catalog file')
    chain_parser.add_argument('solution', help='Active solution id')

    # remove
    remove_parser = subparsers.add_parser(
        'remove', aliases=['rm'],
        help='Remove solutions and the records depending on them',
        parents=[display_parent, edit_parent]
    )
    remove_parser.add_argument('catalog', help='Reference catalog file')
    remove_parser.add_argument('solutions', nargs='+', metavar='ID', help='Solution ids to remove')

    # replace
    replace_parser = subparsers.add_parser(
        'replace', aliases=['rp'],
        help='Replace a solution by one of its superseded versions',
        parents=[display_parent, edit_parent]
    )
    replace_parser.add_argument('catalog', help='Reference catalog file')
    replace_parser.add_argument('solution', help='Active solution id')
    replace_parser.add_argument('replacement', help='Superseded solution id to use instead')
    replace_parser.add_argument('--metadata-dir', metavar='DIR',
                                help='Read CVA descriptors from DIR instead of the network')
    replace_parser.add_argument('--metadata-url', metavar='TEMPLATE',
                                help='CVA URL template ({id}, {range})')

    # sync
    sync_parser = subparsers.add_parser(
        'sync',
        help='Download solution packages into a local repository',
        parents=[display_parent]
    )
    sync_parser.add_argument('catalog', help='Reference catalog file')
    sync_parser.add_argument('solutions', nargs='*', metavar='ID',
                             help='Solution ids (default: all active solutions)')
    sync_parser.add_argument('--repo', metavar='DIR', help='Repository directory')
    sync_parser.add_argument('--jobs', '-j', type=int, default=4, help='Parallel downloads')

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if getattr(args, 'verbose', False):
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s',
            stream=sys.stderr
        )
    elif not getattr(args, 'quiet', False):
        logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s',
                            stream=sys.stderr)

    from . import colors
    colors.init(nocolor=getattr(args, 'nocolor', False))

    from . import display
    if getattr(args, 'json', False):
        display.init(mode='json')
    elif getattr(args, 'flat', False):
        display.init(mode='flat')
    else:
        display.init(mode='columns')

    if not args.command:
        parser.print_help()
        return 1

    args.trace_log = open_trace(Path(args.trace) if args.trace else None)

    try:
        if args.command == 'fetch':
            return cmd_fetch(args)
        elif args.command in ('list', 'ls'):
            return cmd_list(args)
        elif args.command in ('chain', 'ch'):
            return cmd_chain(args)
        elif args.command in ('remove', 'rm'):
            return cmd_remove(args)
        elif args.command in ('replace', 'rp'):
            return cmd_replace(args)
        elif args.command == 'sync':
            return cmd_sync(args)
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    finally:
        args.trace_log.close()


if __name__ == '__main__':
    sys.exit(main())
