"""Value types shared by the budget engine, storage and interchange layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Literal, Optional, Tuple

Frequency = Literal["weekly", "bi-weekly", "monthly", "yearly"]

ExpenseCategory = Literal[
    "housing",
    "utilities",
    "food",
    "transportation",
    "healthcare",
    "entertainment",
    "shopping",
    "education",
    "savings",
    "debt",
    "other",
]

BudgetStatus = Literal["over", "under", "on-track"]

FREQUENCIES: Tuple[str, ...] = ("weekly", "bi-weekly", "monthly", "yearly")

# Order matters: category maps and breakdowns are emitted in this order.
EXPENSE_CATEGORIES: Tuple[str, ...] = (
    "housing",
    "utilities",
    "food",
    "transportation",
    "healthcare",
    "entertainment",
    "shopping",
    "education",
    "savings",
    "debt",
    "other",
)

BUDGET_STATUSES: Tuple[str, ...] = ("over", "under", "on-track")


@dataclass(frozen=True)
class Income:
    id: str
    source: str
    amount: float
    frequency: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Expense:
    id: str
    description: str
    amount: float
    category: str
    date: date
    created_at: datetime
    updated_at: datetime
    is_recurring: bool = False
    frequency: Optional[str] = None

    @property
    def effective_frequency(self) -> Optional[str]:
        """Frequency only counts for recurring expenses."""
        if self.is_recurring and self.frequency:
            return self.frequency
        return None


@dataclass(frozen=True)
class BudgetRecommendation:
    category: str
    recommended_amount: float
    actual_amount: float
    percentage: float
    status: str


@dataclass(frozen=True)
class BudgetAnalysis:
    total_income: float
    total_expenses: float
    net_income: float
    savings_rate: float
    recommendations: Tuple[BudgetRecommendation, ...] = ()
    needs_percentage: float = 50.0
    wants_percentage: float = 30.0
    savings_percentage: float = 20.0

    @classmethod
    def empty(cls) -> "BudgetAnalysis":
        """Zeroed analysis used before anything has been computed."""
        return cls(
            total_income=0.0,
            total_expenses=0.0,
            net_income=0.0,
            savings_rate=0.0,
        )


@dataclass(frozen=True)
class FinancialData:
    """Root application state.

    ``budget_analysis`` is derived from ``incomes`` and ``expenses`` and is
    recomputed by :mod:`budget_dashboard.state` whenever either changes.
    """

    incomes: Tuple[Income, ...] = ()
    expenses: Tuple[Expense, ...] = ()
    budget_analysis: BudgetAnalysis = field(default_factory=BudgetAnalysis.empty)


@dataclass(frozen=True)
class TrendPoint:
    month: str
    income: float
    expenses: float


@dataclass(frozen=True)
class DashboardSummary:
    total_income: float
    total_expenses: float
    net_income: float
    savings_rate: float
    monthly_trend: List[TrendPoint]
    category_breakdown: List[Dict[str, object]]
