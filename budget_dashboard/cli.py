"""Command-line access to the stored budget.

Examples::

    budget-dashboard add-income "Salary" 5000 --frequency monthly
    budget-dashboard add-expense "Rent" 1800 housing --recurring
    budget-dashboard summary
    budget-dashboard export-csv budget.csv
"""

from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path
from typing import List, Optional

from . import state
from .calculations import dashboard_summary, monthly_trend_dataframe
from .config import STORE_PATH
from .formatting import format_currency, format_percentage
from .interchange import export_to_csv, import_csv_file
from .logger import get_logger, setup_logging
from .models import EXPENSE_CATEGORIES, FREQUENCIES, FinancialData
from .recommendations import load_budget_rules, recommendations_dataframe
from .storage import JsonFileStore, load_financial_data, save_financial_data

logger = get_logger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='budget-dashboard',
        description='Track incomes and expenses and get a 50/30/20 budget recommendation.',
    )
    parser.add_argument('--store', type=Path, default=None, help=f'Store file (default: {STORE_PATH})')
    parser.add_argument('--rules', type=Path, default=None, help='Budget rules JSON file')
    parser.add_argument('--log-level', default=None, help='DEBUG, INFO, WARNING, ERROR')
    sub = parser.add_subparsers(dest='command', required=True)

    summary = sub.add_parser('summary', help='Show totals, recommendations and trend')
    summary.add_argument('--as-of', type=_parse_date, default=None, help='Reference date (YYYY-MM-DD)')

    income = sub.add_parser('add-income', help='Record an income source')
    income.add_argument('source')
    income.add_argument('amount', type=float)
    income.add_argument('--frequency', choices=FREQUENCIES, default='monthly')

    expense = sub.add_parser('add-expense', help='Record an expense')
    expense.add_argument('description')
    expense.add_argument('amount', type=float)
    expense.add_argument('category', choices=EXPENSE_CATEGORIES)
    expense.add_argument('--date', type=_parse_date, default=None, help='Occurrence date (YYYY-MM-DD)')
    expense.add_argument('--recurring', action='store_true')
    expense.add_argument('--frequency', choices=FREQUENCIES, default=None)

    export = sub.add_parser('export-csv', help='Write all records to a CSV file')
    export.add_argument('path', type=Path)

    importer = sub.add_parser('import-csv', help='Append records from a CSV file')
    importer.add_argument('path', type=Path)

    return parser


def print_summary(data: FinancialData, as_of: Optional[date] = None) -> None:
    analysis = data.budget_analysis
    summary = dashboard_summary(data.incomes, data.expenses, as_of)

    print(f"Monthly income:   {format_currency(analysis.total_income)}")
    print(f"Monthly expenses: {format_currency(analysis.total_expenses)}")
    print(f"Net income:       {format_currency(analysis.net_income)}")
    print(f"Savings rate:     {format_percentage(analysis.savings_rate)}")
    print(
        f"\nSplit: {analysis.needs_percentage:g}% needs / "
        f"{analysis.wants_percentage:g}% wants / {analysis.savings_percentage:g}% savings"
    )
    print("\nRecommendations:")
    print(recommendations_dataframe(analysis, formatted=True).to_string(index=False))
    print("\nMonthly trend:")
    print(monthly_trend_dataframe(summary.monthly_trend).to_string(index=False))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    store = JsonFileStore(args.store)
    split, rules = load_budget_rules(args.rules)
    as_of = getattr(args, 'as_of', None)
    data = state.refresh_analysis(load_financial_data(store), as_of, split=split, rules=rules)

    try:
        if args.command == 'summary':
            print_summary(data, as_of)
            return 0
        if args.command == 'export-csv':
            export_to_csv(data, args.path)
            print(f"Exported {len(data.incomes)} incomes and {len(data.expenses)} expenses to {args.path}")
            return 0

        if args.command == 'add-income':
            data = state.add_income(data, state.new_income(args.source, args.amount, args.frequency))
        elif args.command == 'add-expense':
            data = state.add_expense(data, state.new_expense(
                args.description,
                args.amount,
                args.category,
                args.date,
                is_recurring=args.recurring,
                frequency=args.frequency,
            ))
        elif args.command == 'import-csv':
            incomes, expenses = import_csv_file(args.path)
            for income in incomes:
                data = state.add_income(data, income)
            for expense in expenses:
                data = state.add_expense(data, expense)
            print(f"Imported {len(incomes)} incomes and {len(expenses)} expenses")
    except (OSError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}")
        return 1

    data = state.refresh_analysis(data, split=split, rules=rules)
    if not save_financial_data(data, store):
        print("Error: could not save data")
        return 1
    print(
        f"Saved. Monthly income {format_currency(data.budget_analysis.total_income)}, "
        f"expenses {format_currency(data.budget_analysis.total_expenses)}"
    )
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
