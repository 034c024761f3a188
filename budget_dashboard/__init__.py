"""Top‑level package for the Budget Dashboard.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``calculations`` – monthly income/expense aggregation and trends
* ``recommendations`` – the 50/30/20 budget analysis
* ``state`` – validated add/update/delete commands over the root state
* ``storage`` – load/save of the state in a local key-value store
* ``interchange`` – CSV export and import
* ``visualization`` – functions that generate Plotly figures

The ``budget-dashboard`` command (see ``cli``) works on the stored data
from the command line.
"""

from . import calculations  # noqa: F401  # re-exported for convenience
from . import recommendations  # noqa: F401  # re-exported for convenience
from . import state  # noqa: F401  # re-exported for convenience
from . import storage  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
from .calculations import (  # noqa: F401
    category_spending,
    monthly_equivalent,
    monthly_trend,
    total_monthly_expenses,
    total_monthly_income,
)
from .recommendations import calculate_budget_analysis, classify_status  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "calculations",
    "recommendations",
    "state",
    "storage",
    "visualization",
    "calculate_budget_analysis",
    "category_spending",
    "classify_status",
    "monthly_equivalent",
    "monthly_trend",
    "total_monthly_expenses",
    "total_monthly_income",
]
