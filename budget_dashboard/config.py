"""Configuration management for the budget dashboard.

This module centralizes all configuration values including paths,
the storage key, defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in budget_dashboard/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directory
DATA_DIR = Path(os.getenv("BUDGET_DASHBOARD_DATA_DIR", _PROJECT_ROOT / "data"))

# Key-value store file holding the serialized application state
STORE_PATH = Path(
    os.getenv("BUDGET_DASHBOARD_STORE_PATH", DATA_DIR / "local_storage.json")
).resolve()

# Optional override for the 50/30/20 split and category allocation table
RULES_PATH = Path(
    os.getenv("BUDGET_DASHBOARD_RULES_PATH", DATA_DIR / "budget_rules.json")
).resolve()

# Fixed key the whole application state is stored under
STORAGE_KEY = "heartlines-financial-data"

LOG_LEVEL = os.getenv("BUDGET_DASHBOARD_LOG_LEVEL", "INFO")

# Number of months shown in the income vs. expenses trend
TREND_MONTHS = 6


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, STORE_PATH.parent, RULES_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)
