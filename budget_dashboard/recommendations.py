"""50/30/20 budget recommendations.

This module holds the declarative split and allocation table, the
on-track/over/under classifier and the budget analysis that ties the
monthly aggregators together.  The allocation table can be overridden
from a JSON rules file without touching the aggregation logic.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .calculations import (
    DateLike,
    category_spending,
    resolve_as_of,
    savings_rate,
    total_monthly_expenses,
    total_monthly_income,
)
from .formatting import format_currency, format_percentage
from .logger import get_logger
from .models import (
    EXPENSE_CATEGORIES,
    BudgetAnalysis,
    BudgetRecommendation,
    Expense,
    Income,
)

logger = get_logger(__name__)

STATUS_TOLERANCE = 0.10

NEEDS = 'needs'
WANTS = 'wants'
SAVINGS = 'savings'
GROUPS = (NEEDS, WANTS, SAVINGS)

RECOMMENDATION_COLUMNS = ['Category', 'Recommended', 'Actual', 'Percentage', 'Status']


@dataclass(frozen=True)
class BudgetSplit:
    """Share of income (in percent) assigned to each group."""

    needs: float = 50.0
    wants: float = 30.0
    savings: float = 20.0

    def group_amounts(self, total_income: float) -> Dict[str, float]:
        return {
            NEEDS: (total_income * self.needs) / 100,
            WANTS: (total_income * self.wants) / 100,
            SAVINGS: (total_income * self.savings) / 100,
        }


@dataclass(frozen=True)
class AllocationRule:
    """One recommendation row: a category's slice of its group."""

    category: str
    group: str
    weight: float
    display_percentage: float


DEFAULT_SPLIT = BudgetSplit()

DEFAULT_ALLOCATION_RULES: Tuple[AllocationRule, ...] = (
    AllocationRule('housing', NEEDS, 0.30, 15),
    AllocationRule('utilities', NEEDS, 0.20, 10),
    AllocationRule('food', NEEDS, 0.30, 15),
    AllocationRule('transportation', NEEDS, 0.20, 10),
    AllocationRule('entertainment', WANTS, 0.40, 12),
    AllocationRule('shopping', WANTS, 0.60, 18),
    AllocationRule('savings', SAVINGS, 1.00, 20),
)


def classify_status(actual: float, recommended: float) -> str:
    """Classify spending against a recommendation with a ±10% band.

    Args:
        actual: Amount actually spent
        recommended: Recommended amount

    Returns:
        ``'over'``, ``'under'`` or ``'on-track'``

    Example:
        >>> classify_status(2000, 750)
        'over'
        >>> classify_status(0, 0)
        'on-track'
    """
    tolerance = recommended * STATUS_TOLERANCE
    if actual > recommended + tolerance:
        return 'over'
    if actual < recommended - tolerance:
        return 'under'
    return 'on-track'


def build_recommendations(
    total_income: float,
    spending: Dict[str, float],
    *,
    split: BudgetSplit = DEFAULT_SPLIT,
    rules: Sequence[AllocationRule] = DEFAULT_ALLOCATION_RULES,
) -> Tuple[BudgetRecommendation, ...]:
    """Turn the allocation table into recommendation rows."""
    group_amounts = split.group_amounts(total_income)
    rows = []
    for rule in rules:
        recommended = group_amounts.get(rule.group, 0.0) * rule.weight
        actual = spending.get(rule.category, 0.0)
        rows.append(BudgetRecommendation(
            category=rule.category,
            recommended_amount=recommended,
            actual_amount=actual,
            percentage=rule.display_percentage,
            status=classify_status(actual, recommended),
        ))
    return tuple(rows)


def calculate_budget_analysis(
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
    as_of: Optional[DateLike] = None,
    *,
    split: BudgetSplit = DEFAULT_SPLIT,
    rules: Sequence[AllocationRule] = DEFAULT_ALLOCATION_RULES,
) -> BudgetAnalysis:
    """Derive the monthly summary and 50/30/20 recommendations.

    Args:
        incomes: Income records
        expenses: Expense records
        as_of: Reference date for the current month, defaults to today.
            Resolved once and shared by every aggregation.
        split: Needs/wants/savings percentages
        rules: Allocation table

    Returns:
        BudgetAnalysis with one recommendation per rule
    """
    ref = resolve_as_of(as_of)
    total_income = total_monthly_income(incomes)
    total_expenses = total_monthly_expenses(expenses, ref)
    net_income = total_income - total_expenses

    recommendations = build_recommendations(
        total_income,
        category_spending(expenses, ref),
        split=split,
        rules=rules,
    )

    return BudgetAnalysis(
        total_income=total_income,
        total_expenses=total_expenses,
        net_income=net_income,
        savings_rate=savings_rate(total_income, net_income),
        recommendations=recommendations,
        needs_percentage=split.needs,
        wants_percentage=split.wants,
        savings_percentage=split.savings,
    )


def _parse_rules(data: Dict[str, Any]) -> Tuple[BudgetSplit, Tuple[AllocationRule, ...]]:
    split_data = data.get('split') or {}
    split = BudgetSplit(
        needs=float(split_data.get('needs', DEFAULT_SPLIT.needs)),
        wants=float(split_data.get('wants', DEFAULT_SPLIT.wants)),
        savings=float(split_data.get('savings', DEFAULT_SPLIT.savings)),
    )

    entries = data.get('allocations')
    if entries is None:
        return split, DEFAULT_ALLOCATION_RULES
    if not isinstance(entries, list):
        raise ValueError("'allocations' must be a list")

    rules: List[AllocationRule] = []
    for entry in entries:
        category = entry['category']
        group = entry['group']
        if category not in EXPENSE_CATEGORIES:
            raise ValueError(f"Unknown category '{category}' in allocation rules")
        if group not in GROUPS:
            raise ValueError(f"Unknown group '{group}' in allocation rules")
        rules.append(AllocationRule(
            category=category,
            group=group,
            weight=float(entry['weight']),
            display_percentage=float(entry.get('percentage', 0)),
        ))
    return split, tuple(rules)


def load_budget_rules(
    path: Optional[Path] = None,
    *,
    strict: bool = False,
) -> Tuple[BudgetSplit, Tuple[AllocationRule, ...]]:
    """Load the split and allocation table from a JSON rules file.

    The file looks like::

        {"split": {"needs": 50, "wants": 30, "savings": 20},
         "allocations": [{"category": "housing", "group": "needs",
                          "weight": 0.3, "percentage": 15}, ...]}

    Either key may be omitted to keep its default.

    Args:
        path: Rules file, defaults to ``RULES_PATH`` from config
        strict: Raise ``ValueError`` on a malformed file instead of
            falling back to the defaults

    Returns:
        Tuple of (BudgetSplit, allocation rules)
    """
    if path is None:
        from .config import RULES_PATH

        path = RULES_PATH

    target = Path(path)
    if not target.exists():
        return DEFAULT_SPLIT, DEFAULT_ALLOCATION_RULES

    try:
        with target.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError('rules file must contain a JSON object')
        return _parse_rules(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        if strict:
            raise ValueError(f"Invalid budget rules in {target}: {e}") from e
        logger.warning("Ignoring invalid budget rules in %s: %s", target, e)
        return DEFAULT_SPLIT, DEFAULT_ALLOCATION_RULES


def recommendations_dataframe(analysis: BudgetAnalysis, *, formatted: bool = False) -> pd.DataFrame:
    """Create DataFrame of an analysis' recommendation rows.

    Args:
        analysis: Budget analysis
        formatted: If True, render amounts and percentages as display strings

    Returns:
        DataFrame with columns: Category, Recommended, Actual, Percentage, Status
    """
    if not analysis.recommendations:
        return pd.DataFrame(columns=RECOMMENDATION_COLUMNS)

    df = pd.DataFrame([
        {
            'Category': rec.category,
            'Recommended': rec.recommended_amount,
            'Actual': rec.actual_amount,
            'Percentage': rec.percentage,
            'Status': rec.status,
        }
        for rec in analysis.recommendations
    ])
    if formatted:
        df['Recommended'] = df['Recommended'].map(format_currency)
        df['Actual'] = df['Actual'].map(format_currency)
        df['Percentage'] = df['Percentage'].map(format_percentage)
    return df[RECOMMENDATION_COLUMNS]
