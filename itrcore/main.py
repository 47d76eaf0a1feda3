"""
main.py — itrcore command-line entry point.

Usage:
  itrcore status                       # which sections are filled in
  itrcore export [-o backup.json]      # print / write a JSON backup
  itrcore import backup.json           # merge a backup into the store
  itrcore compare                      # old vs new regime for the stored data
  itrcore summary [--regime new] [--relief 0] [--advance-tax 0] [--self-assessment 0]
  itrcore clear                        # delete all stored data

The substrate is picked by ITR_STORAGE_BACKEND (memory | file | redis).
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from itrcore.config import Settings, settings
from itrcore.engine.summary import refresh_tax_summary
from itrcore.engine.tax_engine import compare_regimes
from itrcore.records.schemas import Deductions, IncomeDetails, Section
from itrcore.storage.record_store import RecordStore
from itrcore.storage.scheduler import Scheduler
from itrcore.storage.substrate import (
    FileSubstrate,
    KeyValueSubstrate,
    MemorySubstrate,
    create_redis_substrate,
)

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = settings.debug) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s — %(message)s",
    )


def build_store(config: Settings = settings, scheduler: Optional[Scheduler] = None) -> RecordStore:
    """
    Construct the process-wide RecordStore for the configured backend.
    Without `scheduler` the store uses AsyncioScheduler, so auto_save() is
    only usable from inside a running event loop.
    """
    substrate: KeyValueSubstrate
    if config.storage_backend == "redis":
        substrate = create_redis_substrate(config.redis_url, ttl_seconds=config.redis_ttl_seconds)
    elif config.storage_backend == "file":
        substrate = FileSubstrate(config.storage_dir)
    else:
        substrate = MemorySubstrate()
    logger.debug("Using %s substrate key=%s", config.storage_backend, config.storage_key)
    return RecordStore(
        substrate,
        scheduler=scheduler,
        key=config.storage_key,
        autosave_delay=config.autosave_delay_seconds,
    )


# ---------------------------------------------------------------------------
# Commands — each returns the process exit code
# ---------------------------------------------------------------------------

def cmd_status(store: RecordStore, args: argparse.Namespace) -> int:
    for section, done in store.completion_status().items():
        print(f"{section:<16} {'done' if done else '-'}")
    return 0


def cmd_export(store: RecordStore, args: argparse.Namespace) -> int:
    text = store.export()
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        logger.info("Exported snapshot to %s", args.output)
    else:
        print(text)
    return 0


def cmd_import(store: RecordStore, args: argparse.Namespace) -> int:
    try:
        text = Path(args.file).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to read backup %s: %s", args.file, exc)
        print(f"error: could not import {args.file}", file=sys.stderr)
        return 1
    if not store.import_data(text):
        print(f"error: could not import {args.file}", file=sys.stderr)
        return 1
    return 0


def cmd_compare(store: RecordStore, args: argparse.Namespace) -> int:
    snapshot = store.load()
    if Section.income_details.value not in snapshot or Section.deductions.value not in snapshot:
        print("error: income details and deductions must be saved first", file=sys.stderr)
        return 1
    comparison = compare_regimes(
        IncomeDetails.model_validate(snapshot[Section.income_details.value]),
        Deductions.model_validate(snapshot[Section.deductions.value]),
    )
    print(json.dumps(comparison.model_dump(), indent=2))
    return 0


def cmd_summary(store: RecordStore, args: argparse.Namespace) -> int:
    summary = refresh_tax_summary(
        store,
        regime=args.regime,
        relief_under_89=args.relief,
        advance_tax_paid=args.advance_tax,
        self_assessment_tax=args.self_assessment,
    )
    if summary is None:
        print("error: income details and deductions must be saved first", file=sys.stderr)
        return 1
    print(json.dumps(summary.to_record(), indent=2))
    return 0


def cmd_clear(store: RecordStore, args: argparse.Namespace) -> int:
    return 0 if store.clear() else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="itrcore", description="ITR record store and tax engine")
    parser.add_argument("--debug", action="store_true", default=settings.debug, help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show which sections are filled in").set_defaults(func=cmd_status)

    export = sub.add_parser("export", help="Print or write a JSON backup")
    export.add_argument("-o", "--output", help="Write to this file instead of stdout")
    export.set_defaults(func=cmd_export)

    imp = sub.add_parser("import", help="Merge a JSON backup into the store")
    imp.add_argument("file")
    imp.set_defaults(func=cmd_import)

    sub.add_parser("compare", help="Compare old and new regime").set_defaults(func=cmd_compare)

    summary = sub.add_parser("summary", help="Recompute and save the tax summary")
    summary.add_argument("--regime", choices=["old", "new"], default=None,
                         help="Regime to file under (default: the cheaper one)")
    summary.add_argument("--relief", type=float, default=None, help="Relief under Section 89")
    summary.add_argument("--advance-tax", type=float, default=None, help="Advance tax paid")
    summary.add_argument("--self-assessment", type=float, default=None, help="Self-assessment tax paid")
    summary.set_defaults(func=cmd_summary)

    sub.add_parser("clear", help="Delete all stored data").set_defaults(func=cmd_clear)
    return parser


def main(argv: Optional[Sequence[str]] = None, store: Optional[RecordStore] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)
    store = store or build_store()
    try:
        return args.func(store, args)
    except ValidationError as exc:
        print(f"error: stored data is invalid ({exc.error_count()} problem(s))", file=sys.stderr)
        logger.debug("Validation failure: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
