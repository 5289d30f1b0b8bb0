#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
import time

from db.config import get_config
from services.errors import LedgerError


def _cmd_init(session, args) -> int:
    from services.categories import seed_default_categories
    from services.user_settings import get_or_create_settings

    settings = get_or_create_settings(session)
    created = seed_default_categories(session)
    print(f"Database ready (cycle day {settings.cycle_start_day}, {settings.currency}); {created} categories added.")
    return 0


def _cmd_cycles(session, args) -> int:
    from services.cycles import build_cycle_window
    from services.user_settings import get_or_create_settings

    config = get_config()
    settings = get_or_create_settings(session)
    options = build_cycle_window(
        settings.cycle_start_day,
        today=args.today,
        past_cycles=config.past_cycles,
        future_cycles=config.future_cycles,
    )
    for option in options:
        marker = "*" if option.is_current else " "
        print(f"{marker} {option.value:<10}  {option.label}")
    return 0


def _cmd_due(session, args) -> int:
    from services.recurring import due_rules

    rules = due_rules(session, args.today)
    if not rules:
        print("Nothing due.")
    for rule in rules:
        amount = rule.amount if rule.amount is not None else "variable"
        print(f"{rule.id}  {rule.next_run_date}  {rule.type:<8} {amount:>10}  {rule.description}")
    return 0


def _cmd_pay(session, args) -> int:
    from services.recurring import execute_rule

    created = execute_rule(session, args.rule_id, override_amount=args.amount, effective_date=args.date)
    for tx in created:
        print(f"Recorded {tx.type} {tx.amount} on {tx.date}: {tx.description}")
    return 0


def _cmd_summary(session, args) -> int:
    from services.cycles import build_cycle_window, current_option
    from services.reports import cycle_summary
    from services.user_settings import get_or_create_settings

    settings = get_or_create_settings(session)
    cycle = args.cycle or current_option(build_cycle_window(settings.cycle_start_day)).value
    summary = cycle_summary(session, cycle, settings.cycle_start_day)
    print(f"Income:   {summary['income']:.2f} {settings.currency}")
    print(f"Expenses: {summary['expenses']:.2f} {settings.currency}")
    print(f"Net:      {summary['net']:.2f} {settings.currency}")
    if not summary["categories_df"].empty:
        print(summary["categories_df"].to_string(index=False))
    return 0


def _cmd_scheduler(session, args) -> int:
    from services.scheduler import start_local_scheduler

    scheduler = start_local_scheduler(args.session_factory)
    if scheduler is None:
        print("Recurring scheduler is disabled; set LEDGER_SCHEDULER_ENABLED=true to run it.", file=sys.stderr)
        return 1
    print("Recurring scheduler running; press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        scheduler.shutdown()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Budgeting cycles, ledger and recurring payments")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create tables, the settings row and default categories").set_defaults(func=_cmd_init)

    cycles = sub.add_parser("cycles", help="List budgeting cycles around today")
    cycles.add_argument("--today", default=None, help="Reference date, YYYY-MM-DD")
    cycles.set_defaults(func=_cmd_cycles)

    due = sub.add_parser("due", help="List recurring transactions that are due")
    due.add_argument("--today", default=None, help="Reference date, YYYY-MM-DD")
    due.set_defaults(func=_cmd_due)

    pay = sub.add_parser("pay", help="Execute a recurring transaction now")
    pay.add_argument("rule_id")
    pay.add_argument("--amount", default=None, help="Amount for variable-amount rules")
    pay.add_argument("--date", default=None, help="Effective date, YYYY-MM-DD (default today)")
    pay.set_defaults(func=_cmd_pay)

    summary = sub.add_parser("summary", help="Income and expenses for a cycle")
    summary.add_argument("--cycle", default=None, help="Cycle start date or 'overall' (default current)")
    summary.set_defaults(func=_cmd_summary)

    sub.add_parser("scheduler", help="Run the recurring scheduler in the foreground").set_defaults(func=_cmd_scheduler)
    return parser


def main(argv: list[str] | None = None, session_factory=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=get_config().log_level.upper())

    from db.engine import SessionLocal, init_db

    if session_factory is None:
        init_db()
        session_factory = SessionLocal
    args.session_factory = session_factory

    session = session_factory()
    try:
        return args.func(session, args)
    except LedgerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        session.close()


if __name__ == "__main__":
    raise SystemExit(main())
