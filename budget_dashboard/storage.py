"""Persistence helpers for the application state.

The whole state is serialized to JSON and kept in a key-value store under
one fixed key.  Saving and loading are best effort: failures are logged
and never raised, and loading falls back to the empty default state.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import pandas as pd

from .config import STORAGE_KEY, STORE_PATH
from .logger import get_logger
from .models import (
    BudgetAnalysis,
    BudgetRecommendation,
    Expense,
    FinancialData,
    Income,
)
from .state import default_financial_data, refresh_analysis

logger = get_logger(__name__)


class StorageBackend(Protocol):
    """Key-value store holding serialized blobs."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, blob: str) -> bool:
        ...


class JsonFileStore:
    """Key-value store backed by a single JSON file of ``key -> blob``."""

    def __init__(self, path: Optional[Path] = None):
        """Initialize the store.

        Args:
            path: Optional custom file.  Defaults to STORE_PATH from config.
        """
        self.path = Path(path) if path is not None else STORE_PATH

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self.path} does not contain a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        """Return the blob stored under ``key``, or None when absent.

        Raises:
            OSError: If the store file cannot be read
            ValueError: If the store file is not valid JSON
        """
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, blob: str) -> bool:
        """Store ``blob`` under ``key``; returns False if it could not be written."""
        try:
            try:
                entries = self._read_all()
            except ValueError:
                logger.warning("Overwriting unreadable store file %s", self.path)
                entries = {}
            entries[key] = blob
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
            with tmp_path.open('w', encoding='utf-8') as handle:
                json.dump(entries, handle, indent=2, sort_keys=True)
            tmp_path.replace(self.path)
            return True
        except OSError as e:
            logger.error("Failed to write store file %s: %s", self.path, e)
            return False


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string into a naive datetime."""
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid timestamp {value!r}")
    stamp = pd.Timestamp(value)
    if pd.isna(stamp):
        raise ValueError(f"Invalid timestamp {value!r}")
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert(None)
    return stamp.to_pydatetime()


def _parse_date(value: Any) -> date:
    return _parse_timestamp(value).date()


def income_to_dict(income: Income) -> Dict[str, Any]:
    return {
        'id': income.id,
        'source': income.source,
        'amount': income.amount,
        'frequency': income.frequency,
        'createdAt': income.created_at.isoformat(),
        'updatedAt': income.updated_at.isoformat(),
    }


def expense_to_dict(expense: Expense) -> Dict[str, Any]:
    return {
        'id': expense.id,
        'description': expense.description,
        'amount': expense.amount,
        'category': expense.category,
        'isRecurring': expense.is_recurring,
        'frequency': expense.frequency,
        'date': expense.date.isoformat(),
        'createdAt': expense.created_at.isoformat(),
        'updatedAt': expense.updated_at.isoformat(),
    }


def analysis_to_dict(analysis: BudgetAnalysis) -> Dict[str, Any]:
    return {
        'totalIncome': analysis.total_income,
        'totalExpenses': analysis.total_expenses,
        'netIncome': analysis.net_income,
        'savingsRate': analysis.savings_rate,
        'recommendations': [
            {
                'category': rec.category,
                'recommendedAmount': rec.recommended_amount,
                'actualAmount': rec.actual_amount,
                'percentage': rec.percentage,
                'status': rec.status,
            }
            for rec in analysis.recommendations
        ],
        'needsPercentage': analysis.needs_percentage,
        'wantsPercentage': analysis.wants_percentage,
        'savingsPercentage': analysis.savings_percentage,
    }


def income_from_dict(data: Dict[str, Any]) -> Income:
    return Income(
        id=str(data['id']),
        source=str(data['source']),
        amount=float(data['amount']),
        frequency=str(data['frequency']),
        created_at=_parse_timestamp(data['createdAt']),
        updated_at=_parse_timestamp(data['updatedAt']),
    )


def expense_from_dict(data: Dict[str, Any]) -> Expense:
    return Expense(
        id=str(data['id']),
        description=str(data['description']),
        amount=float(data['amount']),
        category=str(data['category']),
        date=_parse_date(data['date']),
        created_at=_parse_timestamp(data['createdAt']),
        updated_at=_parse_timestamp(data['updatedAt']),
        is_recurring=bool(data.get('isRecurring', False)),
        frequency=data.get('frequency') or None,
    )


def financial_data_to_dict(data: FinancialData) -> Dict[str, Any]:
    return {
        'incomes': [income_to_dict(income) for income in data.incomes],
        'expenses': [expense_to_dict(expense) for expense in data.expenses],
        'budgetAnalysis': analysis_to_dict(data.budget_analysis),
    }


def financial_data_from_dict(data: Dict[str, Any]) -> FinancialData:
    """Rebuild state from its serialized form.

    The stored analysis is ignored; callers recompute it.

    Raises:
        KeyError, TypeError, ValueError: If the payload is malformed
    """
    if not isinstance(data, dict):
        raise TypeError('serialized state must be a JSON object')
    return FinancialData(
        incomes=tuple(income_from_dict(item) for item in data.get('incomes') or []),
        expenses=tuple(expense_from_dict(item) for item in data.get('expenses') or []),
        budget_analysis=BudgetAnalysis.empty(),
    )


def serialize_financial_data(data: FinancialData) -> str:
    return json.dumps(financial_data_to_dict(data))


def deserialize_financial_data(blob: str) -> FinancialData:
    return financial_data_from_dict(json.loads(blob))


def save_financial_data(
    data: FinancialData,
    store: Optional[StorageBackend] = None,
    key: str = STORAGE_KEY,
) -> bool:
    """Persist the state; returns False (and logs) on failure."""
    backend = store if store is not None else JsonFileStore()
    try:
        blob = serialize_financial_data(data)
    except (TypeError, ValueError) as e:
        logger.error("Failed to serialize financial data: %s", e)
        return False
    saved = backend.set(key, blob)
    if saved:
        logger.debug(
            "Saved %d incomes and %d expenses under '%s'",
            len(data.incomes), len(data.expenses), key,
        )
    else:
        logger.error("Failed to save financial data under '%s'", key)
    return saved


def load_financial_data(
    store: Optional[StorageBackend] = None,
    key: str = STORAGE_KEY,
    as_of: Optional[date] = None,
) -> FinancialData:
    """Load the state and recompute its analysis.

    Absent or malformed data yields the empty default state.
    """
    backend = store if store is not None else JsonFileStore()
    try:
        blob = backend.get(key)
        if not blob:
            return default_financial_data()
        data = deserialize_financial_data(blob)
    except (OSError, KeyError, TypeError, ValueError) as e:
        logger.error("Failed to load financial data from '%s': %s", key, e)
        return default_financial_data()

    logger.debug("Loaded %d incomes and %d expenses", len(data.incomes), len(data.expenses))
    return refresh_analysis(data, as_of)
