"""Tests for ExpenseSession: validation, store round trips and summaries."""

from __future__ import annotations

from datetime import datetime

import pytest

from expense_tracker.errors import EmptyReportError, StoreError, ValidationError
from expense_tracker.models import DeleteCommand, EditCommand, Expense
from expense_tracker.session import ExpenseSession


class FakeExpenseStore:
    """In-memory store that records calls and can be told to fail."""

    def __init__(self, expenses=None):
        self.rows = list(expenses or [])
        self.calls = []
        self.fail = False
        self.next_id = 100

    def _maybe_fail(self):
        if self.fail:
            raise StoreError("Error talking to the store: offline")

    def list(self):
        self.calls.append('list')
        self._maybe_fail()
        return list(self.rows)

    def create(self, amount, category, date):
        self.calls.append('create')
        self._maybe_fail()
        self.next_id += 1
        expense = Expense(id=self.next_id, amount=amount, category=category, date=date)
        self.rows.append(expense)
        return expense

    def update(self, expense_id, amount=None, category=None, date=None):
        self.calls.append('update')
        self._maybe_fail()
        for index, row in enumerate(self.rows):
            if row.id == expense_id:
                changes = {k: v for k, v in (('amount', amount), ('category', category), ('date', date)) if v is not None}
                self.rows[index] = row.with_changes(**changes)
                return self.rows[index]
        raise StoreError("Error updating expense: not found")

    def delete(self, expense_id):
        self.calls.append('delete')
        self._maybe_fail()
        self.rows = [row for row in self.rows if row.id != expense_id]


class FakeBudgetStore:
    def __init__(self, amount=None):
        self.amount = amount
        self.fail = False

    def get(self):
        return self.amount

    def upsert(self, amount):
        if self.fail:
            raise StoreError("Error setting budget: offline")
        self.amount = amount


@pytest.fixture
def fake_session(sample_expenses):
    session = ExpenseSession(FakeExpenseStore(sample_expenses), FakeBudgetStore(200.0))
    session.load()
    return session


def test_load_orders_newest_first(fake_session) -> None:
    assert [e.id for e in fake_session.expenses] == [5, 2, 3, 1, 4]
    assert fake_session.budget == 200.0


def test_load_without_budget_defaults_to_zero() -> None:
    session = ExpenseSession(FakeExpenseStore(), FakeBudgetStore())
    session.load()
    assert session.budget == 0.0
    assert session.expenses == []


def test_add_expense_validates_before_calling_store(fake_session) -> None:
    store = fake_session.expense_store
    for bad_amount in (0, -5, '', 'abc', None):
        with pytest.raises(ValidationError):
            fake_session.add_expense(bad_amount, 'food', datetime(2025, 1, 7))
    with pytest.raises(ValidationError):
        fake_session.add_expense(5, '', datetime(2025, 1, 7))
    with pytest.raises(ValidationError):
        fake_session.add_expense(5, 'food', 'not a date')
    assert 'create' not in store.calls
    assert len(fake_session.expenses) == 5


def test_add_expense_with_custom_category(fake_session) -> None:
    created = fake_session.add_expense('42.50', 'other', datetime(2025, 3, 1), custom_text='  Gym ')
    assert created.category == 'Gym'
    assert created.amount == 42.5
    assert fake_session.expenses[0] == created


def test_add_expense_store_failure_leaves_state_unchanged(fake_session) -> None:
    before = list(fake_session.expenses)
    fake_session.expense_store.fail = True
    with pytest.raises(StoreError):
        fake_session.add_expense(5, 'food', datetime(2025, 1, 7))
    assert fake_session.expenses == before


def test_repeated_confirmation_does_not_duplicate(fake_session) -> None:
    created = fake_session.add_expense(5, 'food', datetime(2025, 1, 7))
    fake_session._replace_local(created)
    assert [e.id for e in fake_session.expenses].count(created.id) == 1


def test_set_budget(fake_session) -> None:
    assert fake_session.set_budget('0') == 0.0
    assert fake_session.budget == 0.0
    with pytest.raises(ValidationError):
        fake_session.set_budget(-1)
    fake_session.budget_store.fail = True
    with pytest.raises(StoreError):
        fake_session.set_budget(500)
    assert fake_session.budget == 0.0


def test_edit_flow(fake_session) -> None:
    fake_session.dispatch(EditCommand(1))
    assert fake_session.editing.id == 1
    updated = fake_session.save_edit(amount=11, category='travel', date='2025-01-05T10:00:00')
    assert updated.amount == 11.0
    assert updated.category == 'travel'
    assert fake_session.editing is None
    assert fake_session.find(1) == updated


def test_failed_edit_keeps_editing_target(fake_session) -> None:
    fake_session.start_edit(2)
    original = fake_session.find(2)
    fake_session.expense_store.fail = True
    with pytest.raises(StoreError):
        fake_session.save_edit(amount=1)
    assert fake_session.editing == original
    assert fake_session.find(2) == original


def test_save_edit_without_target_raises(fake_session) -> None:
    with pytest.raises(ValidationError):
        fake_session.save_edit(amount=1)
    fake_session.start_edit(3)
    fake_session.cancel_edit()
    assert fake_session.editing is None


def test_delete_command_removes_expense(fake_session) -> None:
    fake_session.start_edit(4)
    fake_session.dispatch(DeleteCommand('4'))
    assert fake_session.find(4) is None
    assert fake_session.editing is None
    with pytest.raises(ValidationError):
        fake_session.delete_expense(4)


def test_failed_delete_keeps_expense(fake_session) -> None:
    fake_session.expense_store.fail = True
    with pytest.raises(StoreError):
        fake_session.delete_expense(1)
    assert fake_session.find(1) is not None


def test_unknown_command_is_rejected(fake_session) -> None:
    with pytest.raises(TypeError):
        fake_session.dispatch(object())


def test_summary_for_selected_month(fake_session) -> None:
    fake_session.select_month('2025-01')
    summary = fake_session.summary()
    assert summary.period_label == 'January 2025'
    assert summary.totals.food == pytest.approx(15.25)
    assert summary.totals.travel == pytest.approx(20.0)
    assert summary.total_spent == pytest.approx(35.25)
    assert summary.remaining == pytest.approx(164.75)
    assert not summary.over_budget
    assert [e.id for e in summary.recent] == [2, 3, 1]
    assert summary.months == ['2025-02', '2025-01', '2024-12']


def test_summary_all_time_and_over_budget(fake_session) -> None:
    fake_session.select_month('2025-01')
    fake_session.select_month(None)
    summary = fake_session.summary()
    assert summary.period_label == 'All Time'
    assert summary.total_spent == pytest.approx(147.74)
    assert summary.over_budget is False
    fake_session.set_budget(100)
    assert fake_session.summary().over_budget is True


def test_export_selected_month(fake_session) -> None:
    fake_session.select_month('2024-12')
    report = fake_session.export('csv')
    assert report.filename == 'expense_report_December_2024.csv'
    assert report.payload.splitlines()[1:] == ['31/12/2024,99.99,Other']


def test_export_empty_month_raises(fake_session) -> None:
    fake_session.select_month('2023-06')
    with pytest.raises(EmptyReportError):
        fake_session.export('xlsx')


def test_session_against_sqlite(sqlite_stores) -> None:
    session = ExpenseSession(*sqlite_stores)
    session.load()
    created = session.add_expense(25, 'food', datetime(2025, 4, 2, 12, 30))
    session.set_budget(300)

    reloaded = ExpenseSession(*sqlite_stores)
    reloaded.load()
    assert reloaded.budget == 300.0
    assert reloaded.expenses == [created]


def test_session_against_local_store(local_stores) -> None:
    session = ExpenseSession(*local_stores)
    session.load()
    created = session.add_expense(8, 'Coffee', datetime(2025, 4, 3, 8, 0))
    session.start_edit(created.id)
    session.save_edit(category='other', custom_text='')

    reloaded = ExpenseSession(*local_stores)
    reloaded.load()
    assert reloaded.expenses[0].category == 'other'
