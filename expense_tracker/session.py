"""Session state: the signed-in user's expenses, budget and edit target.

A session owns the in-memory collection the dashboard renders from.  Every
mutation is validated first, then sent to the store, and only applied
locally once the store has confirmed it; a rejected call leaves the session
exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Tuple

from . import config
from .aggregation import (
    CategoryTotals,
    category_totals,
    daily_totals,
    enumerate_months,
    filter_by_month,
    recent_expenses,
    remaining_budget,
)
from .categories import resolve_category
from .errors import ValidationError
from .models import (
    Command,
    DeleteCommand,
    EditCommand,
    Expense,
    ExpenseId,
    MonthFilter,
    YearMonth,
    to_local_datetime,
    validate_amount,
    validate_budget,
)
from .reports import ReportPayload, build_report, period_label_for
from .stores import BudgetStore, ExpenseStore

logger = logging.getLogger(__name__)


@dataclass
class DashboardSummary:
    """Everything the dashboard shows for the selected month."""

    period_label: str
    budget: float
    expenses: List[Expense]
    totals: CategoryTotals
    total_spent: float
    remaining: float
    daily: List[Tuple[str, float]]
    months: List[str]
    recent: List[Expense] = field(default_factory=list)

    @property
    def over_budget(self) -> bool:
        return self.remaining < 0


def _parse_date(value: Any) -> datetime:
    moment = to_local_datetime(value)
    if moment is None:
        raise ValidationError("Please enter a valid date.")
    return moment


def _same_id(left: ExpenseId, right: ExpenseId) -> bool:
    # ids coming back from the UI may be strings
    return str(left) == str(right)


def _newest_first(expenses: List[Expense]) -> List[Expense]:
    return sorted(expenses, key=lambda e: e.date, reverse=True)


class ExpenseSession:
    """Session-scoped state plus the mutation entry points."""

    def __init__(self, expense_store: ExpenseStore, budget_store: BudgetStore):
        self.expense_store = expense_store
        self.budget_store = budget_store
        self.expenses: List[Expense] = []
        self.budget: float = 0.0
        self.editing: Optional[Expense] = None
        self.selected_month: Optional[YearMonth] = None

    def load(self) -> None:
        """Fetch budget and expenses from the stores."""
        budget = self.budget_store.get()
        expenses = self.expense_store.list()
        self.budget = budget if budget is not None else 0.0
        self.expenses = _newest_first(expenses)
        logger.info("Loaded %d expenses", len(self.expenses))

    # -- lookup ---------------------------------------------------------

    def find(self, expense_id: ExpenseId) -> Optional[Expense]:
        for expense in self.expenses:
            if _same_id(expense.id, expense_id):
                return expense
        return None

    def _require(self, expense_id: ExpenseId) -> Expense:
        expense = self.find(expense_id)
        if expense is None:
            raise ValidationError(f"Expense {expense_id} not found.")
        return expense

    def _replace_local(self, confirmed: Expense) -> None:
        others = [e for e in self.expenses if not _same_id(e.id, confirmed.id)]
        self.expenses = _newest_first([confirmed] + others)

    # -- budget ---------------------------------------------------------

    def set_budget(self, amount: Any) -> float:
        value = validate_budget(amount)
        self.budget_store.upsert(value)
        self.budget = value
        return value

    # -- expenses -------------------------------------------------------

    def add_expense(
        self,
        amount: Any,
        category: Optional[str],
        date: Any = None,
        custom_text: Optional[str] = None,
    ) -> Expense:
        """Validate and create an expense; ``date`` defaults to now."""
        value = validate_amount(amount)
        stored_category = resolve_category(category, custom_text)
        moment = _parse_date(date) if date is not None else datetime.now()

        created = self.expense_store.create(value, stored_category, moment)
        # the record only enters the collection once the store confirmed it,
        # and a repeated confirmation for the same id replaces instead of duplicating
        self._replace_local(created)
        return created

    def start_edit(self, expense_id: ExpenseId) -> Expense:
        self.editing = self._require(expense_id)
        return self.editing

    def cancel_edit(self) -> None:
        self.editing = None

    def save_edit(
        self,
        amount: Any = None,
        category: Optional[str] = None,
        date: Any = None,
        custom_text: Optional[str] = None,
    ) -> Expense:
        """Apply changes to the expense selected with :meth:`start_edit`."""
        if self.editing is None:
            raise ValidationError("No expense selected for editing.")
        value = validate_amount(amount) if amount is not None else None
        stored_category = resolve_category(category, custom_text) if category is not None else None
        moment = _parse_date(date) if date is not None else None

        updated = self.expense_store.update(
            self.editing.id, amount=value, category=stored_category, date=moment
        )
        self._replace_local(updated)
        self.editing = None
        return updated

    def delete_expense(self, expense_id: ExpenseId) -> None:
        target = self._require(expense_id)
        self.expense_store.delete(target.id)
        self.expenses = [e for e in self.expenses if not _same_id(e.id, target.id)]
        if self.editing is not None and _same_id(self.editing.id, target.id):
            self.editing = None

    def dispatch(self, command: Command) -> Optional[Expense]:
        """Run an edit/delete command produced by the presentation layer."""
        if isinstance(command, EditCommand):
            return self.start_edit(command.expense_id)
        if isinstance(command, DeleteCommand):
            self.delete_expense(command.expense_id)
            return None
        raise TypeError(f"Unsupported command: {command!r}")

    # -- views ----------------------------------------------------------

    def select_month(self, year_month: MonthFilter) -> Optional[YearMonth]:
        self.selected_month = YearMonth.parse(year_month) if year_month else None
        return self.selected_month

    def filtered_expenses(self) -> List[Expense]:
        return filter_by_month(self.expenses, self.selected_month)

    def summary(self) -> DashboardSummary:
        expenses = self.filtered_expenses()
        totals = category_totals(expenses)
        return DashboardSummary(
            period_label=period_label_for(self.selected_month),
            budget=self.budget,
            expenses=expenses,
            totals=totals,
            total_spent=totals.total,
            remaining=remaining_budget(self.budget, totals.total),
            daily=daily_totals(expenses),
            months=enumerate_months(self.expenses),
            recent=recent_expenses(expenses, config.RECENT_EXPENSE_LIMIT),
        )

    def export(self, fmt: str = 'csv') -> ReportPayload:
        """Report for the selected month (or all time)."""
        return build_report(self.filtered_expenses(), period_label_for(self.selected_month), fmt)
