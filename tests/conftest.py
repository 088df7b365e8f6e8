"""Shared fixtures for the expense tracker tests."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_tracker.db import SqliteBudgetStore, SqliteExpenseStore
from expense_tracker.local_store import LocalBudgetStore, LocalExpenseStore
from expense_tracker.models import Expense


def make_expense(expense_id, amount, category, when) -> Expense:
    if isinstance(when, str):
        when = datetime.fromisoformat(when)
    return Expense(id=expense_id, amount=amount, category=category, date=when)


@pytest.fixture
def sample_expenses():
    return [
        make_expense(1, 10.0, 'food', '2025-01-05T09:30:00'),
        make_expense(2, 20.0, 'travel', '2025-01-06T18:00:00'),
        make_expense(3, 5.25, 'food', '2025-01-06T08:15:00'),
        make_expense(4, 99.99, 'other', '2024-12-31T23:59:00'),
        make_expense(5, 12.5, 'Groceries', '2025-02-01T12:00:00'),
    ]


@pytest.fixture
def sqlite_stores(tmp_path):
    path = tmp_path / 'expenses.db'
    return SqliteExpenseStore('alice', path), SqliteBudgetStore('alice', path)


@pytest.fixture
def local_stores(tmp_path):
    path = tmp_path / 'local_store.json'
    return LocalExpenseStore(path), LocalBudgetStore(path)
