"""Formatting utilities for currency, dates and category display."""

from __future__ import annotations

from datetime import date
from typing import Optional, Union

from . import config
from .categories import display_category

__all__ = ['display_category', 'format_amount', 'format_currency', 'format_display_date']


def format_amount(amount: Union[float, int]) -> str:
    """Format an amount with exactly two decimals and no grouping.

    Example:
        >>> format_amount(42.5)
        '42.50'
    """
    return f"{amount:.2f}"


def format_currency(amount: Union[float, int], include_sign: bool = True, symbol: Optional[str] = None) -> str:
    """Format a currency amount for user-facing text.

    Negative amounts (over budget) keep the minus sign ahead of the glyph.

    Args:
        amount: The amount to format
        include_sign: Whether to include the currency glyph
        symbol: Glyph to use instead of the configured one

    Returns:
        Formatted currency string

    Example:
        >>> format_currency(1234.5)
        '₹1,234.50'
        >>> format_currency(-50)
        '-₹50.00'
        >>> format_currency(1234.56, include_sign=False)
        '1,234.56'
    """
    glyph = config.CURRENCY_SYMBOL if symbol is None else symbol
    formatted = f"{abs(amount):,.2f}"
    sign = '-' if amount < 0 and round(abs(amount), 2) != 0 else ''
    return f"{sign}{glyph}{formatted}" if include_sign else f"{sign}{formatted}"


def format_display_date(moment: date, fmt: Optional[str] = None) -> str:
    """Render the calendar date of ``moment`` with the configured date format."""
    return moment.strftime(fmt or config.DATE_FORMAT)
