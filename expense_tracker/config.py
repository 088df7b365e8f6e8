"""Configuration management for the expense tracker.

This module centralizes all configuration values including paths,
display defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in expense_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))
REPORTS_DIR = DATA_DIR / "reports"

# Database
DB_PATH = Path(
    os.getenv("EXPENSE_TRACKER_DB_PATH", DATA_DIR / "expenses.db")
).resolve()

# Single-user JSON blob used by the local backend
LOCAL_STORE_PATH = Path(
    os.getenv("EXPENSE_TRACKER_LOCAL_STORE", DATA_DIR / "local_store.json")
).resolve()

# Persistence backend: "sqlite" (multi-user) or "local" (single JSON file)
BACKEND = os.getenv("EXPENSE_TRACKER_BACKEND", "sqlite").strip().lower()
SUPPORTED_BACKENDS = ("sqlite", "local")

# Identity of the signed-in user; authentication itself happens upstream
USER_ID = os.getenv("EXPENSE_TRACKER_USER", "local-user")

# Display settings
CURRENCY_SYMBOL = os.getenv("EXPENSE_TRACKER_CURRENCY", "₹")
DATE_FORMAT = os.getenv("EXPENSE_TRACKER_DATE_FORMAT", "%d/%m/%Y")
TIMEZONE: Optional[str] = os.getenv("EXPENSE_TRACKER_TIMEZONE") or None

RECENT_EXPENSE_LIMIT = 10


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, REPORTS_DIR, DB_PATH.parent, LOCAL_STORE_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)
