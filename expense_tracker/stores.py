"""Store interfaces and the backend factory.

The session talks to these protocols only; which backend sits behind them
is decided by configuration.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, Tuple, Union

from . import config
from .errors import ValidationError
from .models import Expense, ExpenseId


class ExpenseStore(Protocol):
    def list(self) -> List[Expense]:
        ...

    def create(self, amount: float, category: str, date: datetime) -> Expense:
        ...

    def update(
        self,
        expense_id: ExpenseId,
        amount: Optional[float] = None,
        category: Optional[str] = None,
        date: Optional[datetime] = None,
    ) -> Expense:
        ...

    def delete(self, expense_id: ExpenseId) -> None:
        ...


class BudgetStore(Protocol):
    def get(self) -> Optional[float]:
        ...

    def upsert(self, amount: float) -> None:
        ...


def open_stores(
    backend: Optional[str] = None,
    user_id: Optional[str] = None,
    path: Optional[Union[str, Path]] = None,
) -> Tuple[ExpenseStore, BudgetStore]:
    """Build the expense and budget stores for ``backend``.

    Args:
        backend: ``"sqlite"`` or ``"local"``; defaults to ``config.BACKEND``
        user_id: owner of the rows (SQLite only); defaults to ``config.USER_ID``
        path: database file or JSON blob; defaults to the configured location
    """
    name = (backend or config.BACKEND).strip().lower()
    if name == 'sqlite':
        from .db import SqliteBudgetStore, SqliteExpenseStore

        return SqliteExpenseStore(user_id, path), SqliteBudgetStore(user_id, path)
    if name == 'local':
        from .local_store import LocalBudgetStore, LocalExpenseStore

        return LocalExpenseStore(path), LocalBudgetStore(path)
    raise ValidationError(
        f"Unknown backend {name!r}; expected one of {', '.join(config.SUPPORTED_BACKENDS)}"
    )
