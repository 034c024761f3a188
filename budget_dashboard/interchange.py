"""CSV export and import of incomes and expenses."""

from __future__ import annotations

import io
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from .logger import get_logger
from .models import EXPENSE_CATEGORIES, Expense, FinancialData, Income
from .state import new_id

logger = get_logger(__name__)

CSV_COLUMNS = [
    'Type',
    'Description',
    'Amount',
    'Category',
    'Frequency',
    'IsRecurring',
    'Date',
    'CreatedAt',
]


def financial_data_to_frame(data: FinancialData) -> pd.DataFrame:
    """Flatten incomes and expenses into one interchange table."""
    rows: List[Dict[str, object]] = []
    for income in data.incomes:
        rows.append({
            'Type': 'Income',
            'Description': income.source,
            'Amount': income.amount,
            'Category': '',
            'Frequency': income.frequency,
            'IsRecurring': 'false',
            'Date': income.created_at.date().isoformat(),
            'CreatedAt': income.created_at.isoformat(),
        })
    for expense in data.expenses:
        rows.append({
            'Type': 'Expense',
            'Description': expense.description,
            'Amount': expense.amount,
            'Category': expense.category,
            'Frequency': expense.frequency or '',
            'IsRecurring': 'true' if expense.is_recurring else 'false',
            'Date': expense.date.isoformat(),
            'CreatedAt': expense.created_at.isoformat(),
        })
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def export_to_csv(data: FinancialData, path: Optional[Union[str, Path]] = None) -> str:
    """Render the state as CSV text, also writing it to ``path`` when given."""
    content = financial_data_to_frame(data).to_csv(index=False, lineterminator='\n')
    if path is not None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding='utf-8')
        logger.info(
            "Exported %d incomes and %d expenses to %s",
            len(data.incomes), len(data.expenses), target,
        )
    return content


def _parse_created(value: str, fallback: datetime) -> datetime:
    stamp = pd.to_datetime(value, errors='coerce')
    if pd.isna(stamp):
        return fallback
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert(None)
    return stamp.to_pydatetime()


def import_from_csv(
    content: str,
    *,
    now: Optional[datetime] = None,
) -> Tuple[List[Income], List[Expense]]:
    """Parse interchange CSV text into new income and expense records.

    Every record gets a fresh identifier.  Rows are skipped when the
    amount is missing, unparseable or not positive, when the Type is
    neither ``Income`` nor ``Expense``, or when an expense Date cannot be
    parsed.  A blank income frequency becomes ``monthly`` and an unknown
    expense category becomes ``other``.

    Args:
        content: CSV text with the ``CSV_COLUMNS`` header
        now: Timestamp used when CreatedAt is blank, defaults to now

    Returns:
        Tuple of (incomes, expenses)
    """
    stamp = now or datetime.now()
    if not content.strip():
        return [], []

    df = pd.read_csv(io.StringIO(content), dtype=str, keep_default_na=False)
    # "Is Recurring" and "Created At" headers name the same columns
    df.columns = df.columns.str.replace(' ', '', regex=False)
    missing = [col for col in CSV_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"CSV is missing column(s): {', '.join(missing)}")

    # Short rows leave NaN in the trailing columns
    df = df.fillna('')
    df['Amount'] = pd.to_numeric(df['Amount'], errors='coerce')

    incomes: List[Income] = []
    expenses: List[Expense] = []
    skipped = 0
    for row in df.itertuples(index=False):
        amount = row.Amount
        if pd.isna(amount) or amount <= 0:
            skipped += 1
            continue

        created = _parse_created(row.CreatedAt, stamp)
        kind = row.Type.strip()
        frequency = row.Frequency.strip()

        if kind == 'Income':
            incomes.append(Income(
                id=new_id('income'),
                source=row.Description,
                amount=float(amount),
                frequency=frequency or 'monthly',
                created_at=created,
                updated_at=created,
            ))
        elif kind == 'Expense':
            occurred = pd.to_datetime(row.Date, errors='coerce')
            if pd.isna(occurred):
                skipped += 1
                continue
            category = row.Category.strip()
            if category not in EXPENSE_CATEGORIES:
                logger.warning("Unknown category %r imported as 'other'", category)
                category = 'other'
            expenses.append(Expense(
                id=new_id('expense'),
                description=row.Description,
                amount=float(amount),
                category=category,
                date=occurred.date(),
                created_at=created,
                updated_at=created,
                is_recurring=row.IsRecurring.strip().lower() == 'true',
                frequency=frequency or None,
            ))
        else:
            skipped += 1

    if skipped:
        logger.warning("Skipped %d invalid CSV row(s)", skipped)
    logger.info("Imported %d incomes and %d expenses", len(incomes), len(expenses))
    return incomes, expenses


def import_csv_file(path: Union[str, Path], **kwargs) -> Tuple[List[Income], List[Expense]]:
    return import_from_csv(Path(path).read_text(encoding='utf-8'), **kwargs)
