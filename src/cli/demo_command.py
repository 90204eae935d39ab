"""Demo command wiring for CacheDB CLI.

This module isolates the random record generator used for manual runs
of autosave and the lifecycle hooks against a live store.
"""

from __future__ import annotations

import argparse
import random
import time
from typing import Any

from core.constants import (
    DEFAULT_DEMO_COUNT,
    DEMO_MAX_AGE,
    DEMO_MIN_AGE,
    DEMO_NAMES,
)
from core.logging_config import get_logger
from core.types import Record
from persistence.database_sdk import CacheDbClient
from store.dual_index_store import DualIndexStore

_LOGGER = get_logger(__name__)

_SEED_RECORDS = (("Jason", 19), ("Bob", 50), ("Sarah", 22))


def run_demo_command(client: CacheDbClient, args: argparse.Namespace) -> int:
    """Handle demo command invocation."""
    rng = random.Random(args.seed)
    client.open(load_existing=not args.fresh)
    try:
        with client.guard.fault_boundary("demo"):
            _add_seed_records(client.store)
            for _ in range(args.count):
                record = generate_record(client.store, rng)
                client.store.add(record)
                print(f"{record.record_id}\t{record.name}\t{record.age}\t{client.store.size()}")
                if args.delay > 0:
                    time.sleep(args.delay)
    finally:
        client.close()
    _LOGGER.info("demo_finished", record_count=client.store.size())
    return 0


def generate_record(store: DualIndexStore, rng: random.Random) -> Record:
    """Build a record whose generated name is not already indexed."""
    while True:
        name = f"{rng.choice(DEMO_NAMES)}-{rng.randrange(1000)}"
        if store.get_by_name(name) is None:
            return Record(name=name, age=rng.randint(DEMO_MIN_AGE, DEMO_MAX_AGE))


def _add_seed_records(store: DualIndexStore) -> None:
    missing = [
        Record(name=name, age=age)
        for name, age in _SEED_RECORDS
        if store.get_by_name(name) is None
    ]
    if missing:
        store.add(*missing)


def add_demo_command(subparsers: Any) -> None:
    """Register demo subcommand."""
    parser = subparsers.add_parser(
        "demo",
        help="Generate random records with autosave and shutdown hooks active",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=DEFAULT_DEMO_COUNT,
        help="Number of random records to add",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible names")
    parser.add_argument(
        "--delay",
        type=float,
        default=0.0,
        help="Seconds to sleep between generated records",
    )
    parser.add_argument(
        "--fresh",
        action="store_true",
        help="Start from an empty store instead of loading the data file",
    )
