"""Exceptions raised by the expense tracker.

Every error is terminal for the action that triggered it but never for the
running session: callers show the message and wait for the user to act again.
"""

from __future__ import annotations


class ExpenseTrackerError(Exception):
    """Base class for all expense tracker errors."""


class ValidationError(ExpenseTrackerError, ValueError):
    """User input was rejected before any store call was made."""


class StoreError(ExpenseTrackerError):
    """The persistence backend rejected a read or write."""


class EmptyReportError(ExpenseTrackerError):
    """An export was requested for a period without any expenses."""

    def __init__(self, period_label: str = ""):
        self.period_label = period_label
        suffix = f" for {period_label}" if period_label else ""
        super().__init__(f"No expenses to export{suffix}.")
