"""CacheDB CLI entry points.
This module exposes commands for inspecting and editing a store file.
It maps argparse commands onto client calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys
from typing import Any, Sequence

from cli.demo_command import add_demo_command, run_demo_command
from core.config import CacheDbConfig, load_config_file
from core.errors import CacheDbError
from core.types import Record
from persistence.database_sdk import CacheDbClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="cachedb", description="CacheDB record store CLI")
    parser.add_argument("--data-file", help="Override CACHEDB_DATA_FILE for this command")
    parser.add_argument("--config", help="Optional YAML config file")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_init_command(subparsers)
    _add_add_command(subparsers)
    _add_show_command(subparsers)
    _add_remove_command(subparsers)
    _add_list_command(subparsers)
    add_demo_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CacheDB CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.data_file, args.config)
        if args.command == "init":
            return _run_init_command(client)
        if args.command == "add":
            return _run_add_command(client, args)
        if args.command == "show":
            return _run_show_command(client, args)
        if args.command == "remove":
            return _run_remove_command(client, args)
        if args.command == "list":
            return _run_list_command(client)
        if args.command == "demo":
            return run_demo_command(client, args)
    except CacheDbError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_file: str | None, config_path: str | None) -> CacheDbClient:
    """Build client with optional config file and data-file override.

    Args:
        data_file: Optional override path.
        config_path: Optional YAML config path.

    Returns:
        Configured client.
    """
    config = CacheDbConfig.from_env()
    if config_path:
        config = load_config_file(config_path, base=config)
    if data_file:
        config = replace(config, data_file=Path(data_file).expanduser().resolve())
    return CacheDbClient(config)


def _run_init_command(client: CacheDbClient) -> int:
    """Handle init command."""
    client.load_if_present()
    client.save()
    print(client.data_file)
    return 0


def _run_add_command(client: CacheDbClient, args: argparse.Namespace) -> int:
    """Handle add command.

    Args:
        client: Configured client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    client.load_if_present()
    record = Record(name=args.name, age=args.age)
    client.store.add(record)
    client.save()
    print(record.record_id)
    return 0


def _run_show_command(client: CacheDbClient, args: argparse.Namespace) -> int:
    """Handle show command.

    Args:
        client: Configured client.
        args: Parsed CLI args.

    Returns:
        Exit code; 1 when the record is missing.
    """
    client.load_if_present()
    if args.id:
        record = client.store.get_by_id(args.id)
        key = f"ID: {args.id}"
    else:
        record = client.store.get_by_name(args.name)
        key = f"Name: {args.name}"
    if record is None:
        print(f"No record found with {key}")
        return 1
    print(record.describe())
    return 0


def _run_remove_command(client: CacheDbClient, args: argparse.Namespace) -> int:
    """Handle remove command.

    Args:
        client: Configured client.
        args: Parsed CLI args.

    Returns:
        Exit code; 1 when nothing was removed.
    """
    client.load_if_present()
    if args.id:
        removed = client.store.remove_by_id(*args.id)
    else:
        removed = client.store.remove_by_name(*args.name)
    if not removed:
        print("not-found")
        return 1
    client.save()
    print("removed")
    return 0


def _run_list_command(client: CacheDbClient) -> int:
    """Handle list command."""
    client.load_if_present()
    for record in client.store.snapshot_all():
        print(f"{record.record_id}\t{record.name}\t{record.age}\t{record.created_at_text}")
    return 0


def _add_init_command(subparsers: Any) -> None:
    """Register init subcommand."""
    subparsers.add_parser("init", help="Create the data file if missing")


def _add_add_command(subparsers: Any) -> None:
    """Register add subcommand."""
    parser = subparsers.add_parser("add", help="Add one record and save")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--age", required=True, type=int, help="Age in years")


def _add_show_command(subparsers: Any) -> None:
    """Register show subcommand."""
    parser = subparsers.add_parser("show", help="Print one record")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--id", help="Record identifier")
    group.add_argument("--name", help="Record display name")


def _add_remove_command(subparsers: Any) -> None:
    """Register remove subcommand."""
    parser = subparsers.add_parser("remove", help="Remove records and save")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--id", nargs="+", help="Record identifiers")
    group.add_argument("--name", nargs="+", help="Record display names")


def _add_list_command(subparsers: Any) -> None:
    """Register list subcommand."""
    subparsers.add_parser("list", help="List records in identifier order")
