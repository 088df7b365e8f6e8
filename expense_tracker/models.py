"""Core records shared by the stores, the aggregation engine and the UI.

Expenses carry naive datetimes in local wall-clock time.  Anything
timezone-aware is converted to the configured zone (or the host zone) on the
way in, so month filtering, day bucketing and display all agree on which
calendar day an expense belongs to.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Any, Dict, Optional, Tuple, Union
from zoneinfo import ZoneInfo

import pandas as pd

from . import config
from .errors import ValidationError

ExpenseId = Union[int, str]


def _local_zone():
    if config.TIMEZONE:
        return ZoneInfo(config.TIMEZONE)
    return None


def to_local_datetime(value: Any) -> Optional[datetime]:
    """Normalise a timestamp-like value to a naive local ``datetime``.

    Accepts ``datetime``, ``date`` (midnight), pandas ``Timestamp`` and ISO
    strings.  Returns ``None`` for empty or unparseable input.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return None
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(_local_zone()).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        return None
    return to_local_datetime(ts)


def parse_amount(value: Any) -> Optional[float]:
    """Convert user-entered amount text into a float, or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return None
        cleaned = cleaned.replace(config.CURRENCY_SYMBOL, "").replace(",", "").strip()
        value = cleaned
    parsed = pd.to_numeric([value], errors='coerce')
    number = parsed[0]
    if pd.isna(number):
        return None
    number = float(number)
    if not math.isfinite(number):
        return None
    return number


def validate_amount(value: Any) -> float:
    """Return ``value`` as a positive float or raise :class:`ValidationError`."""
    amount = parse_amount(value)
    if amount is None or amount <= 0:
        raise ValidationError("Please enter a valid amount.")
    return amount


def validate_budget(value: Any) -> float:
    """Return ``value`` as a non-negative float or raise :class:`ValidationError`."""
    amount = parse_amount(value)
    if amount is None or amount < 0:
        raise ValidationError("Please enter a valid budget amount.")
    return amount


@dataclass(frozen=True, order=True)
class YearMonth:
    """A calendar month used as a filter, e.g. ``YearMonth(2025, 3)``."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValidationError(f"Invalid month: {self.month}")

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    def contains(self, moment: datetime) -> bool:
        return moment.year == self.year and moment.month == self.month

    @classmethod
    def from_date(cls, moment: date) -> "YearMonth":
        return cls(moment.year, moment.month)

    @classmethod
    def parse(cls, value: Union["YearMonth", Tuple[int, int], str]) -> "YearMonth":
        """Build a month from a ``YearMonth``, ``(year, month)`` or ``"YYYY-MM"``."""
        if isinstance(value, YearMonth):
            return value
        if isinstance(value, tuple) and len(value) == 2:
            return cls(int(value[0]), int(value[1]))
        if isinstance(value, str):
            parts = value.strip().split('-')
            if len(parts) >= 2 and parts[0].isdigit() and parts[1].isdigit():
                return cls(int(parts[0]), int(parts[1]))
        raise ValidationError(f"Invalid month filter: {value!r}")

    def __str__(self) -> str:
        return self.key


MonthFilter = Optional[Union[YearMonth, Tuple[int, int], str]]


@dataclass
class Expense:
    """A single dated, categorised, positive monetary record."""

    id: ExpenseId
    amount: float
    category: str
    date: datetime
    user_id: Optional[str] = None
    created_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def year_month(self) -> YearMonth:
        return YearMonth.from_date(self.date)

    @property
    def day(self) -> date:
        return self.date.date()

    def with_changes(self, **changes: Any) -> "Expense":
        return replace(self, **changes)

    def to_record(self) -> Dict[str, Any]:
        """JSON-friendly representation used by the local store."""
        return {
            'id': self.id,
            'amount': self.amount,
            'category': self.category,
            'date': self.date.isoformat(),
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Expense":
        moment = to_local_datetime(record.get('date'))
        amount = parse_amount(record.get('amount'))
        if moment is None or amount is None:
            raise ValueError(f"Malformed expense record: {record!r}")
        return cls(
            id=record['id'],
            amount=amount,
            category=str(record.get('category') or 'other'),
            date=moment,
            user_id=record.get('user_id'),
            created_at=to_local_datetime(record.get('created_at')),
        )


@dataclass(frozen=True)
class EditCommand:
    """User asked to edit the expense with ``expense_id``."""

    expense_id: ExpenseId


@dataclass(frozen=True)
class DeleteCommand:
    """User asked to delete the expense with ``expense_id``."""

    expense_id: ExpenseId


Command = Union[EditCommand, DeleteCommand]
