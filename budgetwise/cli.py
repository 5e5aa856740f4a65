"""
Command-line interface for BudgetWise.

Thin glue over LedgerSession: parse flags, run the requested commands in a
fixed order, save, then print the summary block.

Exit status:
    0  success
    1  fatal error (bad config, corrupt ledger, backup or I/O failure);
       nothing was saved
    2  one or more commands were rejected for an invalid argument, or the
       recompute pass left some entries unchanged; everything else
       was applied and saved
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from budgetwise import __version__
from budgetwise.audit import configure_logging
from budgetwise.config import (
    AppSettings,
    ConfigError,
    LedgerConfig,
    get_settings,
    load_config,
)
from budgetwise.models.ledger import LedgerSummary
from budgetwise.orchestrator import LedgerSession, create_session
from budgetwise.services.storage import StorageError
from budgetwise.transforms import scale
from budgetwise.validation import InvalidAmountError, parse_amount


EXIT_OK = 0
EXIT_FATAL = 1
EXIT_REJECTED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='budgetwise',
        description='Track your income and expenses.',
        epilog='A summary of totals is printed after every run.',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    parser.add_argument(
        '-i', '--income',
        dest='add_income',
        metavar='AMOUNT',
        help='Add an income amount',
    )
    parser.add_argument(
        '--income-category',
        default=None,
        metavar='CATEGORY',
        help='Category for the income added with --income (default: income)',
    )
    parser.add_argument(
        '-e', '--expense',
        dest='add_expense',
        metavar='CATEGORY,AMOUNT',
        help="Add an expense in the format 'category,amount'",
    )
    parser.add_argument(
        '-t', '--tag',
        dest='tags',
        action='append',
        default=[],
        metavar='TAG',
        help='Tag the income/expense added in this run (repeatable)',
    )
    parser.add_argument(
        '-r', '--remove',
        dest='remove_expense',
        metavar='CATEGORY',
        help='Remove all expenses in a category',
    )
    parser.add_argument(
        '-l', '--list',
        dest='list_expenses',
        action='store_true',
        help='List all recorded expenses',
    )
    parser.add_argument(
        '-c', '--clear',
        action='store_true',
        help='Clear all data',
    )
    parser.add_argument(
        '-s', '--summary',
        action='store_true',
        help='Show summary of expenses by category',
    )
    parser.add_argument(
        '--recompute',
        metavar='FACTOR',
        help='Multiply every income and expense amount by FACTOR (e.g. 1.02)',
    )
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='Config file (default: $BUDGETWISE_CONFIG_PATH or ~/.budgetwise/config.json)',
    )
    parser.add_argument(
        '--data-dir',
        type=Path,
        default=None,
        help='Data directory for this run (overrides the config file)',
    )
    parser.add_argument(
        '--no-backup',
        action='store_true',
        help='Do not back up the previous ledger before saving',
    )
    parser.add_argument(
        '--log-level',
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Diagnostic log level on stderr',
    )
    return parser


def resolve_config(
    args: argparse.Namespace,
    settings: AppSettings,
) -> tuple[LedgerConfig, Path, bool]:
    """
    Load (or create) the config file and apply per-run overrides.

    Returns:
        (config, config_path, created)
    """
    config_path = args.config or settings.config_path
    defaults = LedgerConfig(data_directory=args.data_dir or settings.data_directory)
    config, created = load_config(config_path, defaults=defaults)

    if args.data_dir is not None:
        config = config.model_copy(update={"data_directory": args.data_dir})
    return config, config_path, created


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the budgetwise CLI."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level, settings.log_json)

    try:
        config, config_path, created = resolve_config(args, settings)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL

    session = create_session(
        config,
        settings,
        backup_enabled=False if args.no_backup else None,
    )
    if created:
        session.audit_logger.log_config_materialized(str(config_path))

    try:
        session.open()
        rejected = run_commands(session, args)
        session.save()
        summary = session.summary()
    except StorageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL
    finally:
        session.close()

    print_totals(summary)
    return EXIT_REJECTED if rejected else EXIT_OK


def run_commands(session: LedgerSession, args: argparse.Namespace) -> bool:
    """
    Apply the requested commands in their fixed order.

    Returns True if any command was rejected.
    """
    rejected = False
    audit = session.audit_logger

    if args.add_income is not None:
        try:
            amount = parse_amount(args.add_income)
        except InvalidAmountError as e:
            audit.log_amount_rejected("income", args.add_income, e.reason)
            print(f"Error: invalid income amount: {args.add_income!r}", file=sys.stderr)
            rejected = True
        else:
            if args.income_category is None:
                session.add_income(amount, tags=args.tags)
            else:
                session.add_income(amount, category=args.income_category, tags=args.tags)
            print(f"Added income: ${amount:.2f}")

    if args.add_expense is not None:
        parts = args.add_expense.split(',')
        if len(parts) != 2:
            print(
                "Please provide the expense in the format 'category,amount'",
                file=sys.stderr,
            )
            rejected = True
        else:
            category, raw_amount = parts
            try:
                amount = parse_amount(raw_amount)
            except InvalidAmountError as e:
                audit.log_amount_rejected("expense", raw_amount, e.reason)
                print(f"Error: invalid expense amount: {raw_amount!r}", file=sys.stderr)
                rejected = True
            else:
                session.add_expense(category, amount, tags=args.tags)
                print(f"Added expense: {category} - ${amount:.2f}")

    if args.remove_expense is not None:
        removed = session.remove_expenses_by_category(args.remove_expense)
        print(f"Removed {removed} expense(s) in category: {args.remove_expense}")

    if args.list_expenses:
        print_expenses(session)

    if args.clear:
        session.clear()
        print("All data cleared.")

    if args.summary:
        print_category_summary(session.summarize_by_category())

    if args.recompute is not None:
        try:
            factor = parse_amount(args.recompute)
        except InvalidAmountError as e:
            audit.log_amount_rejected("recompute", args.recompute, e.reason)
            print(f"Error: invalid recompute factor: {args.recompute!r}", file=sys.stderr)
            rejected = True
        else:
            report = session.run_transform(scale(factor))
            print(f"Recomputed {report.transformed} entries (x{factor})")
            for failure in report.failures:
                print(
                    f"Failed to recompute {failure.kind.value} #{failure.index} "
                    f"({failure.category}): {failure.error}",
                    file=sys.stderr,
                )
            if report.failures:
                rejected = True

    return rejected


def print_expenses(session: LedgerSession) -> None:
    expenses = list(session.list_expenses())
    if not expenses:
        print("No expenses recorded.")
        return
    print("=== Expenses ===")
    for expense in expenses:
        print(f"{expense.category} - ${expense.amount:.2f}")


def print_category_summary(totals: dict) -> None:
    print("=== Summary by Category ===")
    for category in sorted(totals):
        print(f"{category} - ${totals[category]:.2f}")


def print_totals(summary: LedgerSummary) -> None:
    print("\n=== Summary ===")
    print(f"Total Income: ${summary.total_income:.2f}")
    print(f"Total Expenses: ${summary.total_expenses:.2f}")
    print(f"Net Income: ${summary.net_income:.2f}")


if __name__ == "__main__":
    sys.exit(main())
