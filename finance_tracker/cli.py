"""Command-line interface for the Finance Tracker.

Usage:
  python -m finance_tracker.cli init-db
  python -m finance_tracker.cli summary --email me@example.com --month 2024-06
  python -m finance_tracker.cli serve --port 5000
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .aggregation import build_month_summary, month_period, parse_month
from .config import AppConfig
from .db import connect, init_schema
from .errors import FinanceTrackerError
from .logging_setup import configure_logging, get_logger
from .reports import format_text_report, save_json, summary_to_dict
from .retrieval import fetch_period
from .store import find_user_by_email

logger = get_logger("finance_tracker.cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Personal Finance Tracker")
    p.add_argument("--config", "-c", help="Path to JSON config")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the database schema")

    summary = sub.add_parser("summary", help="Print a month summary for a user")
    summary.add_argument("--email", required=True, help="Account email")
    summary.add_argument("--month", help="Month (YYYY-MM), defaults to the current month")
    summary.add_argument("--json", dest="json_out", help="Write summary JSON to path")

    serve = sub.add_parser("serve", help="Run the development web server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    serve.add_argument("--debug", action="store_true")
    return p.parse_args(argv)


def _summary(cfg: AppConfig, args: argparse.Namespace) -> int:
    period = parse_month(args.month) if args.month else month_period()
    conn = connect(cfg.database)
    try:
        init_schema(conn)
        user = find_user_by_email(conn, args.email.strip().lower())
        if user is None:
            print(f"No user with email {args.email}", file=sys.stderr)
            return 1
        txns = fetch_period(conn, str(user["id"]), period.start, period.end)
    finally:
        conn.close()

    summary = build_month_summary(txns, period)
    print(format_text_report(summary, cfg.currency_symbol))

    if args.json_out:
        save_json(summary_to_dict(summary), args.json_out)
        print(f"\nSaved JSON summary to: {args.json_out}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    cfg = AppConfig.load(args.config)
    configure_logging(cfg.log_level)

    try:
        if args.command == "init-db":
            conn = connect(cfg.database)
            try:
                init_schema(conn)
            finally:
                conn.close()
            print(f"Initialized database at {cfg.database}")
            return 0
        if args.command == "summary":
            return _summary(cfg, args)
        if args.command == "serve":
            from .webapp import create_app

            create_app(cfg).run(host=args.host, port=args.port, debug=args.debug)
            return 0
    except (FinanceTrackerError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
