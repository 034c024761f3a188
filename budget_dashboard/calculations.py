"""Monthly aggregation utilities for incomes and expenses.

This module provides the frequency normalizer, the monthly income and
expense aggregators, the per-category spending aggregator and the
rolling income vs. expenses trend.  Every function is a pure function of
its arguments; the reference date is always passed in as ``as_of`` and
defaults to today only when omitted.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from .config import TREND_MONTHS
from .models import (
    EXPENSE_CATEGORIES,
    DashboardSummary,
    Expense,
    Income,
    TrendPoint,
)

DateLike = Union[date, datetime, pd.Timestamp]

# Average number of periods per month for sub-monthly frequencies
WEEKS_PER_MONTH = 4.33
BIWEEKLY_PERIODS_PER_MONTH = 2.17
MONTHS_PER_YEAR = 12

BREAKDOWN_COLUMNS = ['Category', 'Amount', 'Percentage']
TREND_COLUMNS = ['Month', 'Income', 'Expenses', 'Net']


def resolve_as_of(as_of: Optional[DateLike] = None) -> date:
    """Return the reference date for month-window checks."""
    if as_of is None:
        return date.today()
    if isinstance(as_of, datetime):
        return as_of.date()
    return as_of


def _same_month(value: DateLike, year: int, month: int) -> bool:
    return value.year == year and value.month == month


def monthly_equivalent(amount: float, frequency: Optional[str]) -> float:
    """Convert a periodic amount into its monthly equivalent.

    Args:
        amount: Amount paid or received once per ``frequency``
        frequency: One of ``weekly``, ``bi-weekly``, ``monthly`` or ``yearly``

    Returns:
        Monthly amount.  Unrecognized frequencies (including ``None``) are
        treated as already monthly and returned unchanged.

    Example:
        >>> monthly_equivalent(1000, 'weekly')
        4330.0
        >>> monthly_equivalent(1200, 'yearly')
        100.0
    """
    if frequency == 'weekly':
        return amount * WEEKS_PER_MONTH
    if frequency == 'bi-weekly':
        return amount * BIWEEKLY_PERIODS_PER_MONTH
    if frequency == 'monthly':
        return amount
    if frequency == 'yearly':
        return amount / MONTHS_PER_YEAR
    return amount


def total_monthly_income(incomes: Iterable[Income]) -> float:
    """Sum every income source as a monthly amount."""
    return sum(
        (monthly_equivalent(income.amount, income.frequency) for income in incomes),
        0.0,
    )


def _expense_total_for_month(expenses: Iterable[Expense], year: int, month: int) -> float:
    total = 0.0
    for expense in expenses:
        if _same_month(expense.date, year, month):
            # Landed in the window: count once at face value
            total += expense.amount
        elif expense.effective_frequency:
            total += monthly_equivalent(expense.amount, expense.effective_frequency)
    return total


def total_monthly_expenses(
    expenses: Iterable[Expense],
    as_of: Optional[DateLike] = None,
) -> float:
    """Total expenses for the month containing ``as_of``.

    Expenses dated in that month count at their raw amount.  Recurring
    expenses dated in any other month contribute their monthly equivalent.
    Past one-off expenses are excluded.

    Args:
        expenses: Expense records
        as_of: Reference date, defaults to today

    Returns:
        Monthly expense total
    """
    ref = resolve_as_of(as_of)
    return _expense_total_for_month(expenses, ref.year, ref.month)


def _counts_for_month(expense: Expense, ref: date) -> bool:
    return _same_month(expense.date, ref.year, ref.month) or bool(expense.effective_frequency)


def empty_category_totals() -> Dict[str, float]:
    """Category map with every known category at zero."""
    return {category: 0.0 for category in EXPENSE_CATEGORIES}


def category_spending(
    expenses: Iterable[Expense],
    as_of: Optional[DateLike] = None,
) -> Dict[str, float]:
    """Bucket the month's spending by category.

    An expense is included when it is dated in ``as_of``'s month or is
    recurring.  Recurring expenses always contribute their monthly
    equivalent, even when dated in the current month.

    Args:
        expenses: Expense records
        as_of: Reference date, defaults to today

    Returns:
        Dictionary with all eleven categories as keys

    Example:
        >>> spending = category_spending([], date(2024, 5, 1))
        >>> spending['housing']
        0.0
        >>> len(spending)
        11
    """
    ref = resolve_as_of(as_of)
    totals = empty_category_totals()
    for expense in expenses:
        if not _counts_for_month(expense, ref):
            continue
        frequency = expense.effective_frequency
        amount = monthly_equivalent(expense.amount, frequency) if frequency else expense.amount
        totals[expense.category] = totals.get(expense.category, 0.0) + amount
    return totals


def trend_months(months_back: int = TREND_MONTHS, as_of: Optional[DateLike] = None) -> pd.PeriodIndex:
    """Monthly periods ending at ``as_of``'s month, oldest first."""
    if months_back <= 0:
        return pd.PeriodIndex([], freq='M')
    current_month = pd.Period(pd.Timestamp(resolve_as_of(as_of)), freq='M')
    return pd.period_range(end=current_month, periods=months_back, freq='M')


def monthly_trend(
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
    months_back: int = TREND_MONTHS,
    as_of: Optional[DateLike] = None,
) -> List[TrendPoint]:
    """Build the rolling income vs. expenses series.

    Income is not historized: every month carries the current normalized
    income.  Expenses follow the same rule as :func:`total_monthly_expenses`
    evaluated against each month in turn.

    Args:
        incomes: Income records
        expenses: Expense records
        months_back: Length of the series
        as_of: Reference date for the last month, defaults to today

    Returns:
        List of ``TrendPoint`` ordered oldest to newest
    """
    income = total_monthly_income(incomes)
    return [
        TrendPoint(
            month=period.strftime('%b %Y'),
            income=income,
            expenses=_expense_total_for_month(expenses, period.year, period.month),
        )
        for period in trend_months(months_back, as_of)
    ]


def monthly_trend_dataframe(points: Sequence[TrendPoint]) -> pd.DataFrame:
    """Create DataFrame from a trend series.

    Returns:
        DataFrame with columns: Month, Income, Expenses, Net
    """
    if not points:
        return pd.DataFrame(columns=TREND_COLUMNS)
    df = pd.DataFrame(
        [{'Month': p.month, 'Income': p.income, 'Expenses': p.expenses} for p in points]
    )
    df['Net'] = df['Income'] - df['Expenses']
    return df[TREND_COLUMNS]


def category_breakdown(
    expenses: Iterable[Expense],
    as_of: Optional[DateLike] = None,
) -> pd.DataFrame:
    """Share of the month's spending per category.

    Uses the inclusion rule of :func:`category_spending` but the raw
    expense amounts, and lists only categories that have spending.

    Returns:
        DataFrame with columns: Category, Amount, Percentage
    """
    ref = resolve_as_of(as_of)
    rows = [
        {'Category': expense.category, 'Amount': expense.amount}
        for expense in expenses
        if _counts_for_month(expense, ref)
    ]
    if not rows:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS)

    grouped = pd.DataFrame(rows).groupby('Category', sort=False)['Amount'].sum().reset_index()
    total = grouped['Amount'].sum()
    grouped['Percentage'] = grouped['Amount'] / total * 100 if total > 0 else 0.0
    return grouped[BREAKDOWN_COLUMNS]


def savings_rate(total_income: float, net_income: float) -> float:
    """Net income as a percentage of income; 0 when there is no income."""
    return (net_income / total_income) * 100 if total_income > 0 else 0.0


def dashboard_summary(
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
    as_of: Optional[DateLike] = None,
    months_back: int = TREND_MONTHS,
) -> DashboardSummary:
    """Collect the headline numbers, trend and breakdown for one date."""
    ref = resolve_as_of(as_of)
    income = total_monthly_income(incomes)
    spent = total_monthly_expenses(expenses, ref)
    net = income - spent
    breakdown = category_breakdown(expenses, ref).rename(columns=str.lower)
    return DashboardSummary(
        total_income=income,
        total_expenses=spent,
        net_income=net,
        savings_rate=savings_rate(income, net),
        monthly_trend=monthly_trend(incomes, expenses, months_back, ref),
        category_breakdown=breakdown.to_dict('records'),
    )
