"""SQLite persistence for expenses and budgets.

One database serves many users; every query is scoped to the store's
``user_id`` so a user only ever sees and changes their own rows.  Check
constraints on the tables are the last line of validation: a rejected write
surfaces as :class:`~expense_tracker.errors.StoreError`.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

from . import config
from .errors import StoreError
from .models import Expense, ExpenseId, to_local_datetime

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS expenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    amount REAL NOT NULL CHECK (amount > 0),
    category TEXT NOT NULL CHECK (length(trim(category)) > 0),
    date TEXT NOT NULL,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL UNIQUE,
    amount REAL NOT NULL DEFAULT 0 CHECK (amount >= 0),
    created_at TEXT,
    updated_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_expenses_user_date ON expenses (user_id, date DESC);
CREATE INDEX IF NOT EXISTS idx_expenses_category ON expenses (user_id, category);
"""

TABLES = ('expenses', 'budgets')
INDEXES = ('idx_expenses_user_date', 'idx_expenses_category')

PathLike = Union[str, Path]


def _resolve_path(db_path: Optional[PathLike]) -> Path:
    return Path(db_path) if db_path is not None else config.DB_PATH


@contextmanager
def connect(db_path: Optional[PathLike] = None) -> Iterator[sqlite3.Connection]:
    path = _resolve_path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """Re-raise database failures as :class:`StoreError` with a readable message."""
    try:
        yield
    except sqlite3.Error as exc:
        logger.error("Error %s: %s", action, exc)
        raise StoreError(f"Error {action}: {exc}") from exc


def init_db(db_path: Optional[PathLike] = None) -> Path:
    """Create tables and indexes if they do not exist yet.  Returns the database path."""
    path = _resolve_path(db_path)
    with _store_errors("initialising database"), connect(path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    logger.info("Database ready at %s", path)
    return path


def _to_iso(value: datetime) -> str:
    return value.replace(microsecond=0).isoformat()


def _now_iso() -> str:
    return _to_iso(datetime.now())


def _row_to_expense(row: sqlite3.Row) -> Expense:
    return Expense(
        id=row['id'],
        amount=float(row['amount']),
        category=row['category'],
        date=to_local_datetime(row['date']),
        user_id=row['user_id'],
        created_at=to_local_datetime(row['created_at']),
    )


class SqliteExpenseStore:
    """Expense rows belonging to one user."""

    def __init__(self, user_id: Optional[str] = None, db_path: Optional[PathLike] = None):
        self.user_id = user_id or config.USER_ID
        self.db_path = init_db(db_path)

    def list(self) -> List[Expense]:
        """All of the user's expenses, newest first."""
        sql = (
            "SELECT id, user_id, amount, category, date, created_at FROM expenses "
            "WHERE user_id = ? ORDER BY date DESC, id DESC"
        )
        with _store_errors("loading expenses"), connect(self.db_path) as conn:
            rows = conn.execute(sql, (self.user_id,)).fetchall()
        return [_row_to_expense(row) for row in rows]

    def get(self, expense_id: ExpenseId) -> Optional[Expense]:
        sql = (
            "SELECT id, user_id, amount, category, date, created_at FROM expenses "
            "WHERE id = ? AND user_id = ?"
        )
        with _store_errors("loading expense"), connect(self.db_path) as conn:
            row = conn.execute(sql, (expense_id, self.user_id)).fetchone()
        return _row_to_expense(row) if row else None

    def create(self, amount: float, category: str, date: datetime) -> Expense:
        now = _now_iso()
        sql = (
            "INSERT INTO expenses (user_id, amount, category, date, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?)"
        )
        with _store_errors("adding expense"), connect(self.db_path) as conn:
            cursor = conn.execute(sql, (self.user_id, amount, category, _to_iso(date), now, now))
            conn.commit()
            expense_id = cursor.lastrowid
        logger.info("Added expense %s for user %s", expense_id, self.user_id)
        return Expense(
            id=expense_id,
            amount=float(amount),
            category=category,
            date=date.replace(microsecond=0),
            user_id=self.user_id,
            created_at=to_local_datetime(now),
        )

    def update(
        self,
        expense_id: ExpenseId,
        amount: Optional[float] = None,
        category: Optional[str] = None,
        date: Optional[datetime] = None,
    ) -> Expense:
        """Replace any of amount, category and date.  Returns the stored record."""
        updates = []
        params: List[Any] = []

        if amount is not None:
            updates.append("amount = ?")
            params.append(amount)

        if category is not None:
            updates.append("category = ?")
            params.append(category)

        if date is not None:
            updates.append("date = ?")
            params.append(_to_iso(date))

        if updates:
            updates.append("updated_at = ?")
            params.append(_now_iso())
            params.extend([expense_id, self.user_id])
            sql = f"UPDATE expenses SET {', '.join(updates)} WHERE id = ? AND user_id = ?"
            with _store_errors("updating expense"), connect(self.db_path) as conn:
                cursor = conn.execute(sql, params)
                conn.commit()
                changed = cursor.rowcount
            if changed == 0:
                raise StoreError(f"Error updating expense: expense {expense_id} not found")
            logger.info("Updated expense %s for user %s", expense_id, self.user_id)

        stored = self.get(expense_id)
        if stored is None:
            raise StoreError(f"Error updating expense: expense {expense_id} not found")
        return stored

    def delete(self, expense_id: ExpenseId) -> None:
        with _store_errors("deleting expense"), connect(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM expenses WHERE id = ? AND user_id = ?", (expense_id, self.user_id)
            )
            conn.commit()
            deleted = cursor.rowcount
        if deleted == 0:
            raise StoreError(f"Error deleting expense: expense {expense_id} not found")
        logger.info("Deleted expense %s for user %s", expense_id, self.user_id)


class SqliteBudgetStore:
    """The single budget row belonging to one user."""

    def __init__(self, user_id: Optional[str] = None, db_path: Optional[PathLike] = None):
        self.user_id = user_id or config.USER_ID
        self.db_path = init_db(db_path)

    def get(self) -> Optional[float]:
        with _store_errors("loading budget"), connect(self.db_path) as conn:
            row = conn.execute("SELECT amount FROM budgets WHERE user_id = ?", (self.user_id,)).fetchone()
        return float(row['amount']) if row else None

    def upsert(self, amount: float) -> None:
        now = _now_iso()
        sql = (
            "INSERT INTO budgets (user_id, amount, created_at, updated_at) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(user_id) DO UPDATE SET amount = excluded.amount, updated_at = excluded.updated_at"
        )
        with _store_errors("setting budget"), connect(self.db_path) as conn:
            conn.execute(sql, (self.user_id, amount, now, now))
            conn.commit()
        logger.info("Budget for user %s set to %.2f", self.user_id, amount)


def describe_schema(db_path: Optional[PathLike] = None) -> dict:
    """Tables and indexes present in the database, for the setup script summary."""
    with _store_errors("reading schema"), connect(db_path) as conn:
        rows = conn.execute("SELECT type, name FROM sqlite_master WHERE name NOT LIKE 'sqlite_%'").fetchall()
    return {
        'tables': sorted(r['name'] for r in rows if r['type'] == 'table'),
        'indexes': sorted(r['name'] for r in rows if r['type'] == 'index'),
    }
