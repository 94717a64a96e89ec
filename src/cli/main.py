"""Tabload CLI entry points.
This module exposes sniff, load, and export commands for delimited data.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import TabloadConfig
from core.constants import DEFAULT_START_COLUMN
from core.errors import TabloadError
from core.logging_config import configure_logging
from core.types import LoadOptions, WriteOptions
from export.tabular_writer import save_delimited
from ingest.line_source import file_line_opener
from ingest.schema_sniffer import sniff_schema
from ingest.streaming_loader import load_delimited_file
from progress.progress_tree import ProgressTree
from progress.task import LoggingTask
from store.store_factory import MemmapStoreFactory, open_store


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="tabload", description="Delimited numeric data loader")
    parser.add_argument("--data-root", help="Override TABLOAD_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_sniff_command(subparsers)
    _add_load_command(subparsers)
    _add_export_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Tabload CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args.data_root)
    configure_logging(config.log_level)
    if args.command == "sniff":
        return _run_sniff_command(config, args)
    if args.command == "load":
        return _run_load_command(config, args)
    if args.command == "export":
        return _run_export_command(config, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(data_root: str | None) -> TabloadConfig:
    """Build config with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Runtime config.
    """
    config = TabloadConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return config


def _load_options(config: TabloadConfig, args: argparse.Namespace) -> LoadOptions:
    """Merge command flags over config defaults."""
    return LoadOptions(
        delimiter=args.delimiter or config.delimiter,
        start_column=args.start_column,
        encoding=args.encoding or config.encoding,
    )


def _run_sniff_command(config: TabloadConfig, args: argparse.Namespace) -> int:
    """Handle sniff command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    options = _load_options(config, args)
    schema = sniff_schema(
        file_line_opener(args.source, options.encoding),
        delimiter=options.delimiter,
        start_column=options.start_column,
    )
    print(f"start_row={schema.start_row}")
    print(f"row_count={schema.row_count}")
    print(f"columns={','.join(str(position) for position in schema.column_mask)}")
    return 0


def _run_load_command(config: TabloadConfig, args: argparse.Namespace) -> int:
    """Handle load command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    options = _load_options(config, args)
    factory = MemmapStoreFactory.from_config(config)
    name = args.name or Path(args.source).stem
    task = LoggingTask(name=f"load:{name}")
    progress = ProgressTree.for_task(task, config=config)
    try:
        store = load_delimited_file(
            args.source,
            factory,
            name,
            options,
            cancel_check=task.is_canceled,
            progress=progress,
        )
    except TabloadError:
        factory.discard_store(name)
        raise
    progress.post_end()
    store.flush()
    print(f"store_path={factory.store_path(name)}")
    print(f"rows={store.row_count}")
    print(f"columns={store.column_count}")
    return 0


def _run_export_command(config: TabloadConfig, args: argparse.Namespace) -> int:
    """Handle export command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    store = open_store(Path(args.store).expanduser())
    options = WriteOptions(
        delimiter=args.delimiter or config.delimiter,
        value_format=args.format,
        headers=tuple(args.header) if args.header else None,
        encoding=args.encoding or config.encoding,
    )
    output_path = save_delimited(args.output, store, options)
    print(output_path)
    return 0


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    """Register delimiter, start-column, and encoding flags."""
    parser.add_argument("--delimiter", help="Field delimiter characters, default from config")
    parser.add_argument(
        "--start-column",
        type=int,
        default=DEFAULT_START_COLUMN,
        help="Leading columns to ignore, such as row ids",
    )
    parser.add_argument("--encoding", help="Text encoding, platform default if omitted")


def _add_sniff_command(subparsers: Any) -> None:
    """Register sniff subcommand."""
    parser = subparsers.add_parser("sniff", help="Report data rows and numeric columns")
    parser.add_argument("source", help="Delimited text file")
    _add_source_options(parser)


def _add_load_command(subparsers: Any) -> None:
    """Register load subcommand."""
    parser = subparsers.add_parser("load", help="Load a delimited file into a .npy store")
    parser.add_argument("source", help="Delimited text file")
    parser.add_argument("--name", help="Store name, defaults to the source file stem")
    _add_source_options(parser)


def _add_export_command(subparsers: Any) -> None:
    """Register export subcommand."""
    parser = subparsers.add_parser("export", help="Write a .npy store as delimited text")
    parser.add_argument("store", help="Store file written by the load command")
    parser.add_argument("--output", required=True, help="Destination text file")
    parser.add_argument("--delimiter", help="Output delimiter, default from config")
    parser.add_argument("--format", help="printf-style value pattern, e.g. %%.4f")
    parser.add_argument(
        "--header",
        action="append",
        help="Column header; repeat once per column",
    )
    parser.add_argument("--encoding", help="Text encoding, platform default if omitted")
