"""Aggregation engine: totals and groupings over an expense collection.

All functions here are pure.  They recompute from the collection they are
given on every call and never round; rounding to two places is left to the
formatting helpers so repeated aggregation cannot compound rounding error.
Sums use :func:`math.fsum`, which is exact up to the final rounding and
therefore independent of the order expenses arrive in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .categories import PREDEFINED_TOKENS, PredefinedCategory, category_key, display_category
from .formatting import format_display_date
from .models import Expense, MonthFilter, YearMonth

FRAME_COLUMNS = ['id', 'Date', 'Amount', 'Category']


def expenses_to_frame(expenses: Iterable[Expense]) -> pd.DataFrame:
    """Build a DataFrame with one row per expense and a bucket-key column."""
    rows = [
        {'id': e.id, 'Date': e.date, 'Amount': float(e.amount), 'Category': category_key(e.category)}
        for e in expenses
    ]
    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    frame['Date'] = pd.to_datetime(frame['Date'])
    frame['Amount'] = pd.to_numeric(frame['Amount']).astype(float)
    return frame


def filter_by_month(expenses: Sequence[Expense], year_month: MonthFilter = None) -> List[Expense]:
    """Return the expenses dated within ``year_month``, or all of them when unset.

    Input order is preserved, so filtering an already filtered list by the
    same month returns an equal list.
    """
    if year_month is None:
        return list(expenses)
    month = YearMonth.parse(year_month)
    return [e for e in expenses if month.contains(e.date)]


@dataclass
class CategoryTotals:
    """Per-category sums.  ``food``/``travel``/``other`` are always present."""

    food: float = 0.0
    travel: float = 0.0
    other: float = 0.0
    total: float = 0.0
    custom: Dict[str, float] = field(default_factory=dict)

    def get(self, category: str) -> float:
        """Bucket for one category; a custom category named ``total`` is looked up like any other."""
        key = category_key(category)
        if key in PREDEFINED_TOKENS:
            return getattr(self, key)
        return self.custom.get(key, 0.0)

    def buckets(self) -> Dict[str, float]:
        """Every category bucket (predefined first, then custom), without ``total``."""
        merged = {token: getattr(self, token) for token in PREDEFINED_TOKENS}
        merged.update(self.custom)
        return merged

    def as_dict(self) -> Dict[str, Any]:
        """Bucket amounts under ``buckets`` and the grand total under ``total``."""
        return {'buckets': self.buckets(), 'total': self.total}


def category_totals(expenses: Iterable[Expense]) -> CategoryTotals:
    """Sum amounts per category.

    Predefined tokens match case-insensitively; every custom stored value
    gets its own bucket under its exact text.  ``total`` covers all
    expenses regardless of category.
    """
    frame = expenses_to_frame(expenses)
    if frame.empty:
        return CategoryTotals()

    grouped = frame.groupby('Category')['Amount'].agg(math.fsum)
    totals = CategoryTotals(total=math.fsum(frame['Amount']))
    for key, amount in grouped.items():
        if key in PREDEFINED_TOKENS:
            setattr(totals, key, float(amount))
        else:
            totals.custom[key] = float(amount)
    totals.custom = dict(sorted(totals.custom.items(), key=lambda item: item[0].lower()))
    return totals


def total_spent(expenses: Iterable[Expense]) -> float:
    return math.fsum(e.amount for e in expenses)


def daily_totals(expenses: Iterable[Expense]) -> List[Tuple[str, float]]:
    """Sum amounts per local calendar day, newest day first.

    Returns ``(display_date, amount)`` pairs with one entry per day.
    """
    frame = expenses_to_frame(expenses)
    if frame.empty:
        return []
    frame['Day'] = frame['Date'].dt.normalize()
    grouped = frame.groupby('Day')['Amount'].agg(math.fsum).sort_index(ascending=False)
    return [(format_display_date(day), float(amount)) for day, amount in grouped.items()]


def remaining_budget(budget: float, total_spent: float) -> float:
    """Budget left over; negative when the user is over budget."""
    return budget - total_spent


def enumerate_months(expenses: Iterable[Expense]) -> List[str]:
    """Distinct ``YYYY-MM`` keys present in ``expenses``, most recent first."""
    months = {e.year_month for e in expenses}
    return [month.key for month in sorted(months, reverse=True)]


def recent_expenses(expenses: Iterable[Expense], limit: int = 10) -> List[Expense]:
    """The ``limit`` most recent expenses, newest first."""
    ordered = sorted(expenses, key=lambda e: e.date, reverse=True)
    return ordered[:limit]


@dataclass
class BudgetStatus:
    budget_amount: float
    spent_this_month: float
    remaining_budget: float
    percent_used: float
    month: YearMonth


def budget_status(budget: float, expenses: Sequence[Expense], today: Optional[datetime] = None) -> BudgetStatus:
    """Compare the budget with spending in the month containing ``today``."""
    month = YearMonth.from_date(today or datetime.now())
    spent = total_spent(filter_by_month(expenses, month))
    percent = round(spent / budget * 100, 2) if budget > 0 else 0.0
    return BudgetStatus(
        budget_amount=budget,
        spent_this_month=spent,
        remaining_budget=remaining_budget(budget, spent),
        percent_used=percent,
        month=month,
    )


def monthly_summary(expenses: Iterable[Expense]) -> pd.DataFrame:
    """Transaction count, total and average per month and category.

    Rows are ordered by month (newest first), then category.
    """
    columns = ['Month', 'Category', 'Transactions', 'Total', 'Average']
    frame = expenses_to_frame(expenses)
    if frame.empty:
        return pd.DataFrame(columns=columns)
    frame['Month'] = frame['Date'].dt.strftime('%Y-%m')
    summary = (
        frame.groupby(['Month', 'Category'])
        .agg(Transactions=('Amount', 'size'), Total=('Amount', math.fsum), Average=('Amount', 'mean'))
        .reset_index()
    )
    summary = summary.sort_values(['Month', 'Category'], ascending=[False, True]).reset_index(drop=True)
    return summary[columns]


def weekly_totals(expenses: Iterable[Expense], year_month: MonthFilter) -> pd.DataFrame:
    """Transaction count and total per week (starting Monday) and category within one month."""
    columns = ['Week Start', 'Category', 'Transactions', 'Total']
    in_month = filter_by_month(list(expenses), YearMonth.parse(year_month))
    frame = expenses_to_frame(in_month)
    if frame.empty:
        return pd.DataFrame(columns=columns)
    day = frame['Date'].dt.normalize()
    frame['Week Start'] = (day - pd.to_timedelta(day.dt.weekday, unit='D')).dt.date
    weekly = (
        frame.groupby(['Week Start', 'Category'])
        .agg(Transactions=('Amount', 'size'), Total=('Amount', math.fsum))
        .reset_index()
    )
    weekly = weekly.sort_values(['Week Start', 'Category']).reset_index(drop=True)
    return weekly[columns]


def category_breakdown(totals: CategoryTotals) -> List[Tuple[str, float]]:
    """``(display name, amount)`` rows for the category list, custom buckets last."""
    rows = [(category.display(), getattr(totals, category.value)) for category in PredefinedCategory]
    rows.extend((display_category(name), amount) for name, amount in totals.custom.items())
    return rows
