#!/usr/bin/env python3
"""
Roam Bridge CLI

Command-line interface for the Roam Research bridge: add blocks to the
daily note, run queries, delete blocks, export the graph and import blocks.
"""

import argparse
import asyncio
import json
import logging
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import Any, List, Optional

from rich.console import Console
from rich.logging import RichHandler

from ..adapters.auth.config import EnvironmentConfigAdapter
from ..adapters.factories import create_graph_service_from_config
from ..adapters.progress.cli import create_cli_progress_adapter
from ..core.exceptions import RoamDomainError
from ..core.services import RoamGraphService
from ..core.validation import InvalidConfigurationError

logger = logging.getLogger(__name__)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the argument parser"""
    parser = argparse.ArgumentParser(
        prog="roambridge",
        description="Drive a Roam Research graph through a headless browser"
    )
    parser.add_argument('--graph', help="Graph name (overrides ROAM_GRAPH)")
    headless = parser.add_mutually_exclusive_group()
    headless.add_argument('--headless', dest='headless', action='store_true', default=None,
                          help="Run the browser headless (default)")
    headless.add_argument('--no-headless', dest='headless', action='store_false',
                          help="Show the browser window")
    parser.add_argument('--working-dir', type=Path,
                        help="Directory for downloads and staging files (default: system temp)")
    parser.add_argument('--skip-download', action='store_true', default=None,
                        help="Export: reuse the newest archive in the working directory")
    parser.add_argument('-v', '--verbose', action='store_true', help="Debug logging")
    parser.add_argument('-q', '--quiet', action='store_true', help="No progress output")

    subparsers = parser.add_subparsers(dest='command', required=True)

    note = subparsers.add_parser('note', help="Add a block to today's daily note")
    note.add_argument('text')

    subparsers.add_parser('daily', help="Print today's daily note as a Markdown list")

    query = subparsers.add_parser('query', help="Run a datalog query and print the rows as JSON")
    query.add_argument('query')

    delete = subparsers.add_parser('delete', help="Delete blocks matching a query (UNSAFE)")
    delete.add_argument('query', help="Query returning block uids")
    delete.add_argument('--limit', type=int, default=1, help="Maximum blocks to delete (default: 1)")

    export = subparsers.add_parser('export', help="Export the whole graph as JSON")
    export.add_argument('--output', '-o', type=Path, help="Write the graph to this file instead of stdout")
    export.add_argument('--keep-archive', action='store_true',
                        help="Keep the downloaded archive after extraction")

    import_ = subparsers.add_parser('import', help="Import blocks from a JSON file")
    import_.add_argument('file', type=Path, help="JSON file holding a list of pages/blocks")

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)]
    )


def format_blocks_as_markdown(rows: List[List[Any]]) -> str:
    """Render query rows as a Markdown bullet list of their first column"""
    return "".join(f"- {row[0]}\n" for row in rows)


def load_import_items(path: Path) -> List[Any]:
    with open(path, 'r', encoding='utf-8') as f:
        items = json.load(f)
    if not isinstance(items, list):
        raise ValueError(f"{path} must contain a JSON list")
    return items


async def run_command(service: RoamGraphService, args, console: Console) -> None:
    """Run the selected subcommand against the graph service"""
    if args.command == 'note':
        await service.create_daily_note_block(args.text)
        console.print(f"Added block to {service.daily_note_uid()}")

    elif args.command == 'daily':
        rows = await service.get_all_blocks_on_daily_note()
        console.print(format_blocks_as_markdown(rows), end="", markup=False, highlight=False)

    elif args.command == 'query':
        rows = await service.run_query(args.query)
        console.print_json(data=rows)

    elif args.command == 'delete':
        deleted = await service.delete_blocks_matching_query(args.query, args.limit)
        console.print(f"Deleted {len(deleted)} block(s)")

    elif args.command == 'export':
        graph = await service.export_graph(auto_remove_archive=not args.keep_archive)
        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(graph, f, ensure_ascii=False, indent=2)
            console.print(f"Graph written to {args.output}")
        else:
            console.print_json(data=graph)

    elif args.command == 'import':
        items = load_import_items(args.file)
        await service.import_blocks(items)
        console.print(f"Imported {len(items)} item(s)")


async def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = create_argument_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    console = Console()
    errors = Console(stderr=True)

    config_adapter = EnvironmentConfigAdapter(validate_on_access=True, overrides={
        'workspace_id': args.graph,
        'run_headless': args.headless,
        'working_directory': args.working_dir,
        'skip_download': args.skip_download,
    })

    uses_progress = args.command in ('export', 'import') and not args.quiet
    progress = create_cli_progress_adapter("auto" if uses_progress else "silent", console=errors)

    try:
        validation = config_adapter.validate_config_detailed()
        for warning in validation.warnings:
            logger.warning(warning)
        if not validation.valid:
            raise InvalidConfigurationError(validation)

        service = create_graph_service_from_config(config_adapter, progress=progress)
        with ExitStack() as stack:
            if hasattr(progress, '__enter__'):
                stack.enter_context(progress)
            async with service:
                await run_command(service, args, console)
    except InvalidConfigurationError as e:
        errors.print(f"❌ {e}", markup=False)
        return 1
    except RoamDomainError as e:
        logger.debug("Command failed", exc_info=True)
        errors.print(f"❌ {e}", markup=False)
        return 1
    except (OSError, ValueError) as e:
        errors.print(f"❌ {e}", markup=False)
        return 1

    return 0


def cli() -> None:
    """Console script entry point"""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    cli()
