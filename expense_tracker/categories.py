"""Expense categories: predefined tokens plus free-form custom text.

A category is either one of the predefined tokens (``food``, ``travel``,
``other``) or custom text the user typed after picking "other".  Stored
values keep the user's casing; capitalisation is applied only when rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .errors import ValidationError


class PredefinedCategory(str, Enum):
    FOOD = 'food'
    TRAVEL = 'travel'
    OTHER = 'other'

    def to_stored(self) -> str:
        return self.value

    def display(self) -> str:
        return capitalize(self.value)


PREDEFINED_TOKENS = tuple(c.value for c in PredefinedCategory)


@dataclass(frozen=True)
class CustomCategory:
    """Free-form category text, kept exactly as entered (minus surrounding spaces)."""

    text: str

    def to_stored(self) -> str:
        return self.text

    def display(self) -> str:
        return capitalize(self.text)


Category = Union[PredefinedCategory, CustomCategory]


class CategoryState(str, Enum):
    """Which input control the add/edit form shows for a category."""

    PREDEFINED = 'predefined'
    CUSTOM_OTHER = 'custom_other'
    EMPTY_OTHER = 'empty_other'


@dataclass(frozen=True)
class CategoryFormState:
    """Form values recovered from a stored category for editing."""

    state: CategoryState
    choice: str
    custom_text: str = ''


def capitalize(text: str) -> str:
    """Upper-case the first letter only; ``'eating out'`` -> ``'Eating out'``."""
    if not text:
        return text
    return text[0].upper() + text[1:]


def _match_predefined(text: Optional[str]) -> Optional[PredefinedCategory]:
    if text is None:
        return None
    lowered = text.strip().lower()
    for category in PredefinedCategory:
        if category.value == lowered:
            return category
    return None


def parse_category(stored: Optional[str]) -> Category:
    """Turn stored category text back into a :data:`Category`."""
    predefined = _match_predefined(stored)
    if predefined is not None:
        return predefined
    text = (stored or '').strip()
    if not text:
        return PredefinedCategory.OTHER
    return CustomCategory(text)


def category_key(stored: Optional[str]) -> str:
    """Bucket key used when aggregating: predefined tokens lower-cased, custom text verbatim."""
    return parse_category(stored).to_stored()


def display_category(stored: Optional[str]) -> str:
    return parse_category(stored).display()


def capture_category(choice: Optional[str], custom_text: Optional[str] = '') -> str:
    """Resolve form input into the value to store.

    ``choice`` is the selected predefined option; ``custom_text`` is only
    consulted when ``choice`` is ``other``.
    """
    selected = _match_predefined(choice)
    if selected is None:
        raise ValidationError("Please select a valid category.")
    if selected is not PredefinedCategory.OTHER:
        return selected.to_stored()

    text = (custom_text or '').strip()
    if not text:
        return PredefinedCategory.OTHER.to_stored()
    # typing "Food" into the custom box still lands in the food bucket
    typed = _match_predefined(text)
    if typed is not None:
        return typed.to_stored()
    return CustomCategory(text).to_stored()


def classify_category(stored: Optional[str]) -> CategoryFormState:
    """Classify a stored value so the edit form can be pre-populated."""
    category = parse_category(stored)
    if isinstance(category, CustomCategory):
        return CategoryFormState(CategoryState.CUSTOM_OTHER, PredefinedCategory.OTHER.value, category.text)
    if category is PredefinedCategory.OTHER:
        return CategoryFormState(CategoryState.EMPTY_OTHER, category.value)
    return CategoryFormState(CategoryState.PREDEFINED, category.value)


def resolve_category(category: Optional[str], custom_text: Optional[str] = None) -> str:
    """Like :func:`capture_category`, but also accepts free text passed directly as ``category``.

    With ``custom_text`` given, ``category`` must be one of the predefined
    options.  Without it, a non-predefined ``category`` is taken as custom text.
    """
    if custom_text is not None:
        return capture_category(category, custom_text)
    if category is None or not str(category).strip():
        raise ValidationError("Please select a valid category.")
    if _match_predefined(category) is not None:
        return capture_category(category)
    return capture_category(PredefinedCategory.OTHER.value, category)
