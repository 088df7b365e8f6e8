"""Unit tests for expense_tracker.categories."""

from __future__ import annotations

import pytest

from expense_tracker import categories as cat
from expense_tracker.errors import ValidationError


def test_capture_predefined_choice() -> None:
    assert cat.capture_category('food') == 'food'
    assert cat.capture_category('Travel', 'ignored') == 'travel'


def test_capture_custom_text_is_trimmed_and_kept_verbatim() -> None:
    assert cat.capture_category('other', '  eating OUT ') == 'eating OUT'


def test_capture_empty_other_stores_other() -> None:
    assert cat.capture_category('other', '') == 'other'
    assert cat.capture_category('other', '   ') == 'other'
    assert cat.capture_category('other', 'Other') == 'other'


def test_capture_custom_text_matching_predefined_uses_token() -> None:
    assert cat.capture_category('other', 'FOOD') == 'food'


@pytest.mark.parametrize('choice', [None, '', 'rent'])
def test_capture_rejects_missing_or_unknown_choice(choice) -> None:
    with pytest.raises(ValidationError):
        cat.capture_category(choice, 'x')


def test_classify_round_trips_form_state() -> None:
    assert cat.classify_category('travel') == cat.CategoryFormState(cat.CategoryState.PREDEFINED, 'travel')
    assert cat.classify_category('TRAVEL').state is cat.CategoryState.PREDEFINED
    assert cat.classify_category('other') == cat.CategoryFormState(cat.CategoryState.EMPTY_OTHER, 'other')
    custom = cat.classify_category('Gym')
    assert custom.state is cat.CategoryState.CUSTOM_OTHER
    assert custom.choice == 'other'
    assert custom.custom_text == 'Gym'


def test_parse_category_variants() -> None:
    assert cat.parse_category('Food') is cat.PredefinedCategory.FOOD
    assert cat.parse_category('books') == cat.CustomCategory('books')
    assert cat.parse_category('') is cat.PredefinedCategory.OTHER


def test_display_is_render_time_only() -> None:
    assert cat.display_category('books and mags') == 'Books and mags'
    assert cat.category_key('books and mags') == 'books and mags'
    assert cat.display_category('food') == 'Food'


def test_resolve_category_accepts_free_text() -> None:
    assert cat.resolve_category('Gym') == 'Gym'
    assert cat.resolve_category('food') == 'food'
    assert cat.resolve_category('other', 'Gym') == 'Gym'
    with pytest.raises(ValidationError):
        cat.resolve_category('  ')
