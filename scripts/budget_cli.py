#!/usr/bin/env python3
"""
Budget core command line: run due recurring series, close/start periods,
reconcile series.

Usage:
    python3 scripts/budget_cli.py init-db
    python3 scripts/budget_cli.py run-due [--dry-run] [--force] [--max-days-overdue N]
    python3 scripts/budget_cli.py close-period <user-uuid> <YYYY-MM-DD>
    python3 scripts/budget_cli.py start-period <user-uuid> <YYYY-MM-DD>
    python3 scripts/budget_cli.py preview-period <user-uuid> [--start D] [--end D]
    python3 scripts/budget_cli.py reconcile <series-uuid>
    python3 scripts/budget_cli.py missed

Every command prints one JSON document on stdout and runs inside a single
database transaction (committed on success, rolled back on error).
Structured logs go to stderr.

Configuration comes from --config, else $BUDGET_CORE_CONFIG, else defaults;
--db-url and $BUDGET_CORE_DATABASE_URL override the database URL.
"""

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any
from uuid import UUID

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from budget_config import get_active_config  # noqa: E402
from budget_kernel.db.engine import create_tables, init_engine_from_url, session_scope  # noqa: E402
from budget_kernel.exceptions import BudgetCoreError  # noqa: E402
from budget_kernel.logging_config import configure_logging, get_logger  # noqa: E402
from budget_recurring.domain.types import ExecutionOptions  # noqa: E402
from budget_services.core import BudgetCore  # noqa: E402

logger = get_logger("cli")

DEFAULT_DB_URL = "sqlite:///budget.db"


def _uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid UUID: {value!r}") from None


def _date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date (YYYY-MM-DD): {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="budget_cli",
        description="Budget period lifecycle and recurring execution.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  python3 scripts/budget_cli.py run-due --dry-run\n"
            "  python3 scripts/budget_cli.py close-period 6f1c...-... 2025-01-31\n"
        ),
    )
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--db-url", type=str, help="Database URL override")

    sub = parser.add_subparsers(dest="command", required=True)

    run_due = sub.add_parser("run-due", help="Execute due recurring series")
    run_due.add_argument("--dry-run", action="store_true", default=None,
                         help="Report what would fire without writing")
    run_due.add_argument("--force", action="store_true",
                         help="Also fire due series not flagged auto_execute")
    run_due.add_argument("--max-days-overdue", type=int, default=None,
                         help="Oldest overdue age (days) that still fires")

    close = sub.add_parser("close-period", help="Close the user's active period")
    close.add_argument("user_id", type=_uuid)
    close.add_argument("end_date", type=_date)

    start = sub.add_parser("start-period", help="Open a new period for the user")
    start.add_argument("user_id", type=_uuid)
    start.add_argument("start_date", type=_date)

    preview = sub.add_parser("preview-period", help="Totals a close would record")
    preview.add_argument("user_id", type=_uuid)
    preview.add_argument("--start", type=_date, default=None)
    preview.add_argument("--end", type=_date, default=None)

    reconcile = sub.add_parser("reconcile", help="Reconcile one recurring series")
    reconcile.add_argument("series_id", type=_uuid)

    sub.add_parser("missed", help="List active series with missed executions")
    sub.add_parser("init-db", help="Create the budget tables")

    return parser


def run_command(core: BudgetCore, args: argparse.Namespace) -> tuple[int, dict[str, Any]]:
    """Dispatch one parsed command against ``core``.  Returns (exit code, payload)."""
    if args.command == "run-due":
        options = ExecutionOptions(
            dry_run=core.config.dry_run if args.dry_run is None else args.dry_run,
            max_days_overdue=(
                core.config.max_days_overdue
                if args.max_days_overdue is None
                else args.max_days_overdue
            ),
            force_execute=args.force,
        )
        return 0, core.run_due_recurring(options).to_dict()

    if args.command == "close-period":
        result = core.close_period(args.user_id, args.end_date)
        return (0 if result.ok else 1), result.to_dict()

    if args.command == "start-period":
        result = core.start_period(args.user_id, args.start_date)
        return (0 if result.ok else 1), result.to_dict()

    if args.command == "preview-period":
        totals = core.preview_period(args.user_id, args.start, args.end)
        return 0, {
            "total_budget": str(totals.total_budget),
            "total_spent": str(totals.total_spent),
            "total_saved": str(totals.total_saved),
            "category_spending": {k: str(v) for k, v in totals.category_spending.items()},
        }

    if args.command == "reconcile":
        return 0, core.get_reconciliation(args.series_id).to_dict()

    if args.command == "missed":
        return 0, {"missed": [m.to_dict() for m in core.find_missed_executions()]}

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = get_active_config(args.config)
    except (FileNotFoundError, ValueError) as exc:
        print(f"  ERROR: Invalid configuration: {exc}", file=sys.stderr)
        return 1

    configure_logging(level=config.log_level_number)

    db_url = args.db_url or config.database_url or DEFAULT_DB_URL
    init_engine_from_url(db_url)

    if args.command == "init-db":
        create_tables()
        print(json.dumps({"ok": True, "database_url": db_url}))
        return 0

    try:
        with session_scope() as session:
            core = BudgetCore.from_session(session, config=config)
            code, payload = run_command(core, args)
    except BudgetCoreError as exc:
        logger.error("cli_command_failed", extra={"command": args.command}, exc_info=True)
        payload = {"ok": False, "error": {"code": exc.code, "message": str(exc)}}
        code = 1

    print(json.dumps(payload, indent=2, default=str))
    return code


if __name__ == "__main__":
    sys.exit(main())
