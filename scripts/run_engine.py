#!/usr/bin/env python3
"""
Run the roster decision engine over every active workspace.

Reads the central tables (xlsx workbook or directory of CSVs), resolves
every employee-day of each active workspace, writes daily status rows and
entitlement ledger changes to the database, and prints the run summary as
JSON on stdout.  Structured logs go to stderr.

Exit codes:
    0  every workspace processed
    1  at least one workspace failed (the others were processed)
    2  the run could not start (config, schema or decision table problem)

Usage:
    python3 scripts/run_engine.py --central <path> [options]

Examples:
    # Compute everything, write nothing
    python3 scripts/run_engine.py --central central.xlsx --dry-run

    # Full run against a PostgreSQL database
    python3 scripts/run_engine.py --central central/ --database-url postgresql://...
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

EXIT_OK = 0
EXIT_WORKSPACE_FAILED = 1
EXIT_FATAL = 2


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resolve rosters for all active workspaces.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--central",
        required=True,
        type=Path,
        help="Central tables: an .xlsx workbook or a directory of <tab>.csv files.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file merged over the packaged defaults.",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (default: from config).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve everything but write nothing.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads per roster tab (default: from config).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for structured logs on stderr (default: INFO).",
    )
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict:
    overrides: dict = {}
    if args.database_url:
        overrides["database_url"] = args.database_url
    if args.dry_run:
        overrides["dry_run"] = True
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    return overrides


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    from roster_config import get_active_config
    from roster_ingestion.adapters import open_workbook
    from roster_kernel.db.engine import create_tables, init_engine_from_url, reset_engine
    from roster_kernel.exceptions import RosterKernelError
    from roster_kernel.logging_config import configure_logging
    from roster_services import EngineRunner, workspace_opener

    configure_logging(level=getattr(logging, args.log_level))

    try:
        config = get_active_config(args.config, overrides=_overrides(args))
        central = open_workbook(args.central)
    except (RosterKernelError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_FATAL

    central_path = args.central.resolve()
    base_dir = central_path if central_path.is_dir() else central_path.parent

    init_engine_from_url(config.database_url)
    try:
        create_tables()
        runner = EngineRunner(config, central, workspace_opener(base_dir))
        summary = runner.run()
    except RosterKernelError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_FATAL
    finally:
        reset_engine()

    print(json.dumps(summary.to_dict(), indent=2))
    return EXIT_OK if summary.succeeded else EXIT_WORKSPACE_FAILED


if __name__ == "__main__":
    sys.exit(main())
