"""Single-user persistence in one JSON file.

The whole state (expense list plus budget) is read and rewritten as a
blob on every change, the way a browser keeps it in local storage.  Ids are
generated client-side.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from . import config
from .errors import StoreError
from .models import Expense, ExpenseId

logger = logging.getLogger(__name__)


def load_state(path: Optional[Path] = None) -> Dict[str, Any]:
    target = path or config.LOCAL_STORE_PATH
    if not target.exists():
        return {'expenses': [], 'budget': None}
    try:
        with target.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError) as exc:
        logger.error("Could not read %s: %s", target, exc)
        raise StoreError(f"Error loading saved data: {exc}") from exc
    if not isinstance(data, dict):
        raise StoreError(f"Error loading saved data: unexpected content in {target}")
    expenses = data.get('expenses') or []
    if not isinstance(expenses, list):
        expenses = []
    return {
        'expenses': expenses,
        'budget': data.get('budget'),
    }


def save_state(state: Dict[str, Any], path: Optional[Path] = None) -> None:
    target = path or config.LOCAL_STORE_PATH
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open('w', encoding='utf-8') as handle:
            json.dump(state, handle, indent=2, sort_keys=True, ensure_ascii=False)
    except OSError as exc:
        logger.error("Could not write %s: %s", target, exc)
        raise StoreError(f"Error saving data: {exc}") from exc


def _check_expense(amount: Optional[float], category: Optional[str]) -> None:
    # mirrors the CHECK constraints of the SQLite schema
    if amount is not None and not amount > 0:
        raise StoreError("Error saving expense: amount must be greater than zero")
    if category is not None and not category.strip():
        raise StoreError("Error saving expense: category must not be empty")


class LocalExpenseStore:
    """Expenses kept in the local JSON blob."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else config.LOCAL_STORE_PATH

    def _records(self) -> List[Dict[str, Any]]:
        return load_state(self.path)['expenses']

    def list(self) -> List[Expense]:
        """All saved expenses, newest first."""
        expenses = []
        for record in self._records():
            try:
                expenses.append(Expense.from_record(record))
            except (KeyError, TypeError, ValueError) as exc:
                raise StoreError(f"Error loading expenses: {exc}") from exc
        return sorted(expenses, key=lambda e: e.date, reverse=True)

    def create(self, amount: float, category: str, date: datetime) -> Expense:
        _check_expense(amount, category)
        state = load_state(self.path)
        expense = Expense(
            id=uuid.uuid4().hex,
            amount=float(amount),
            category=category,
            date=date,
            created_at=datetime.now(),
        )
        state['expenses'].insert(0, expense.to_record())
        save_state(state, self.path)
        logger.info("Added expense %s", expense.id)
        return expense

    def update(
        self,
        expense_id: ExpenseId,
        amount: Optional[float] = None,
        category: Optional[str] = None,
        date: Optional[datetime] = None,
    ) -> Expense:
        _check_expense(amount, category)
        state = load_state(self.path)
        for index, record in enumerate(state['expenses']):
            if str(record.get('id')) != str(expense_id):
                continue
            try:
                expense = Expense.from_record(record)
            except (KeyError, TypeError, ValueError) as exc:
                raise StoreError(f"Error updating expense: {exc}") from exc
            changes: Dict[str, Any] = {}
            if amount is not None:
                changes['amount'] = float(amount)
            if category is not None:
                changes['category'] = category
            if date is not None:
                changes['date'] = date
            expense = expense.with_changes(**changes)
            state['expenses'][index] = expense.to_record()
            save_state(state, self.path)
            logger.info("Updated expense %s", expense_id)
            return expense
        raise StoreError(f"Error updating expense: expense {expense_id} not found")

    def delete(self, expense_id: ExpenseId) -> None:
        state = load_state(self.path)
        remaining = [r for r in state['expenses'] if str(r.get('id')) != str(expense_id)]
        if len(remaining) == len(state['expenses']):
            raise StoreError(f"Error deleting expense: expense {expense_id} not found")
        state['expenses'] = remaining
        save_state(state, self.path)
        logger.info("Deleted expense %s", expense_id)


class LocalBudgetStore:
    """Budget value kept in the local JSON blob."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else config.LOCAL_STORE_PATH

    def get(self) -> Optional[float]:
        value = load_state(self.path).get('budget')
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Error loading budget: {exc}") from exc

    def upsert(self, amount: float) -> None:
        if amount < 0:
            raise StoreError("Error setting budget: amount must not be negative")
        state = load_state(self.path)
        state['budget'] = float(amount)
        save_state(state, self.path)
        logger.info("Budget set to %.2f", amount)
