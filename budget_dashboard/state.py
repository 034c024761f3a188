"""Commands over the root application state.

Every command takes a ``FinancialData`` value and returns a new one with
the budget analysis recomputed; nothing is mutated in place.  This is
also where user input is validated before it reaches the engine.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional, Sequence

from .models import (
    EXPENSE_CATEGORIES,
    FREQUENCIES,
    BudgetAnalysis,
    Expense,
    FinancialData,
    Income,
)
from .recommendations import (
    DEFAULT_ALLOCATION_RULES,
    DEFAULT_SPLIT,
    AllocationRule,
    BudgetSplit,
    calculate_budget_analysis,
)

INCOME_FIELDS = {'source', 'amount', 'frequency'}
EXPENSE_FIELDS = {'description', 'amount', 'category', 'date', 'is_recurring', 'frequency'}


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def _validate_text(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label} cannot be empty")
    return value.strip()


def _validate_amount(value: Any) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Amount must be a number, got {value!r}") from e
    if not amount > 0:
        raise ValueError(f"Amount must be positive, got {value!r}")
    return amount


def _validate_frequency(value: Any) -> str:
    if value not in FREQUENCIES:
        raise ValueError(f"Unknown frequency {value!r}; expected one of {', '.join(FREQUENCIES)}")
    return value


def _validate_category(value: Any) -> str:
    if value not in EXPENSE_CATEGORIES:
        raise ValueError(f"Unknown category {value!r}")
    return value


def _validate_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as e:
            raise ValueError(f"Invalid date {value!r}; expected YYYY-MM-DD") from e
    raise ValueError(f"Invalid date {value!r}")


def _validate_flag(value: Any, label: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ('true', 'false'):
        return value.strip().lower() == 'true'
    raise ValueError(f"{label} must be true or false, got {value!r}")


def new_income(
    source: str,
    amount: float,
    frequency: str = 'monthly',
    *,
    now: Optional[datetime] = None,
) -> Income:
    """Create a validated income record.

    Raises:
        ValueError: If the source is empty, the amount is not positive or
            the frequency is unknown
    """
    stamp = now or datetime.now()
    return Income(
        id=new_id('income'),
        source=_validate_text(source, 'Income source'),
        amount=_validate_amount(amount),
        frequency=_validate_frequency(frequency),
        created_at=stamp,
        updated_at=stamp,
    )


def new_expense(
    description: str,
    amount: float,
    category: str,
    expense_date: Optional[date] = None,
    *,
    is_recurring: bool = False,
    frequency: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Expense:
    """Create a validated expense record.

    A non-recurring expense is stored without a frequency; a recurring one
    defaults to monthly.

    Raises:
        ValueError: If the description is empty, the amount is not
            positive, or the category or frequency is unknown
    """
    stamp = now or datetime.now()
    is_recurring = _validate_flag(is_recurring, 'is_recurring')
    if is_recurring:
        frequency = _validate_frequency(frequency or 'monthly')
    else:
        frequency = None
    return Expense(
        id=new_id('expense'),
        description=_validate_text(description, 'Expense description'),
        amount=_validate_amount(amount),
        category=_validate_category(category),
        date=_validate_date(expense_date) if expense_date is not None else stamp.date(),
        created_at=stamp,
        updated_at=stamp,
        is_recurring=is_recurring,
        frequency=frequency,
    )


def default_financial_data() -> FinancialData:
    """Empty state with the zeroed analysis."""
    return FinancialData(incomes=(), expenses=(), budget_analysis=BudgetAnalysis.empty())


def refresh_analysis(
    data: FinancialData,
    as_of: Optional[date] = None,
    *,
    split: BudgetSplit = DEFAULT_SPLIT,
    rules: Sequence[AllocationRule] = DEFAULT_ALLOCATION_RULES,
) -> FinancialData:
    """Recompute the analysis from the current incomes and expenses."""
    analysis = calculate_budget_analysis(
        data.incomes, data.expenses, as_of, split=split, rules=rules
    )
    return replace(data, budget_analysis=analysis)


def _check_fields(changes: dict, allowed: set) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")


def add_income(data: FinancialData, income: Income, as_of: Optional[date] = None) -> FinancialData:
    return refresh_analysis(replace(data, incomes=data.incomes + (income,)), as_of)


def update_income(
    data: FinancialData,
    income_id: str,
    *,
    as_of: Optional[date] = None,
    now: Optional[datetime] = None,
    **changes: Any,
) -> FinancialData:
    """Replace fields of one income and refresh its update timestamp.

    An unknown ``income_id`` leaves the incomes untouched.

    Raises:
        ValueError: If a change is invalid or names an unknown field
    """
    _check_fields(changes, INCOME_FIELDS)
    if 'source' in changes:
        changes['source'] = _validate_text(changes['source'], 'Income source')
    if 'amount' in changes:
        changes['amount'] = _validate_amount(changes['amount'])
    if 'frequency' in changes:
        changes['frequency'] = _validate_frequency(changes['frequency'])

    stamp = now or datetime.now()
    incomes = tuple(
        replace(income, **changes, updated_at=stamp) if income.id == income_id else income
        for income in data.incomes
    )
    return refresh_analysis(replace(data, incomes=incomes), as_of)


def delete_income(data: FinancialData, income_id: str, as_of: Optional[date] = None) -> FinancialData:
    incomes = tuple(income for income in data.incomes if income.id != income_id)
    return refresh_analysis(replace(data, incomes=incomes), as_of)


def add_expense(data: FinancialData, expense: Expense, as_of: Optional[date] = None) -> FinancialData:
    return refresh_analysis(replace(data, expenses=data.expenses + (expense,)), as_of)


def update_expense(
    data: FinancialData,
    expense_id: str,
    *,
    as_of: Optional[date] = None,
    now: Optional[datetime] = None,
    **changes: Any,
) -> FinancialData:
    """Replace fields of one expense and refresh its update timestamp.

    Turning ``is_recurring`` off clears the frequency and turning it on
    without one sets it to monthly.  An unknown ``expense_id`` leaves the
    expenses untouched.

    Raises:
        ValueError: If a change is invalid or names an unknown field
    """
    _check_fields(changes, EXPENSE_FIELDS)
    if 'description' in changes:
        changes['description'] = _validate_text(changes['description'], 'Expense description')
    if 'amount' in changes:
        changes['amount'] = _validate_amount(changes['amount'])
    if 'category' in changes:
        changes['category'] = _validate_category(changes['category'])
    if 'date' in changes:
        changes['date'] = _validate_date(changes['date'])
    if 'is_recurring' in changes:
        changes['is_recurring'] = _validate_flag(changes['is_recurring'], 'is_recurring')
    if changes.get('frequency') is not None:
        changes['frequency'] = _validate_frequency(changes['frequency'])

    stamp = now or datetime.now()
    expenses = []
    for expense in data.expenses:
        if expense.id == expense_id:
            expense = replace(expense, **changes, updated_at=stamp)
            if not expense.is_recurring and expense.frequency is not None:
                expense = replace(expense, frequency=None)
            elif expense.is_recurring and expense.frequency is None:
                expense = replace(expense, frequency='monthly')
        expenses.append(expense)
    return refresh_analysis(replace(data, expenses=tuple(expenses)), as_of)


def delete_expense(data: FinancialData, expense_id: str, as_of: Optional[date] = None) -> FinancialData:
    expenses = tuple(expense for expense in data.expenses if expense.id != expense_id)
    return refresh_analysis(replace(data, expenses=expenses), as_of)
