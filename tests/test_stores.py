from __future__ import annotations

import pytest

from expense_tracker import config
from expense_tracker.db import SqliteBudgetStore, SqliteExpenseStore
from expense_tracker.errors import ValidationError
from expense_tracker.local_store import LocalBudgetStore, LocalExpenseStore
from expense_tracker.stores import open_stores


def test_open_sqlite_stores(tmp_path) -> None:
    expenses, budgets = open_stores('SQLite', 'bob', tmp_path / 'x.db')
    assert isinstance(expenses, SqliteExpenseStore)
    assert isinstance(budgets, SqliteBudgetStore)
    assert expenses.user_id == budgets.user_id == 'bob'


def test_open_local_stores_from_config(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(config, 'BACKEND', 'local')
    monkeypatch.setattr(config, 'LOCAL_STORE_PATH', tmp_path / 'blob.json')
    expenses, budgets = open_stores()
    assert isinstance(expenses, LocalExpenseStore)
    assert isinstance(budgets, LocalBudgetStore)
    assert expenses.path == tmp_path / 'blob.json'


def test_unknown_backend_is_rejected() -> None:
    with pytest.raises(ValidationError):
        open_stores('postgres')
