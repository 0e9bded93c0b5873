"""
Tests for budget overlap rules.
"""

from decimal import Decimal
from uuid import uuid4

from household_budget.domain.budget import Budget, BudgetPeriod
from household_budget.services.overlap import find_overlap, periods_overlap, same_scope

from fakes import utc


def make_budget(start, end, category_id=None, name="Groceries"):
    return Budget(
        name=name,
        amount=Decimal("500"),
        period=BudgetPeriod.MONTHLY,
        start_date=start,
        end_date=end,
        category_id=category_id,
    )


def test_same_scope():
    """Family-wide budgets share a scope; categories only with themselves."""
    category = uuid4()
    assert same_scope(None, None)
    assert same_scope(category, category)
    assert not same_scope(None, category)
    assert not same_scope(category, None)
    assert not same_scope(category, uuid4())


def test_touching_boundary_is_not_overlap():
    """A budget starting exactly when another ends is allowed."""
    existing = make_budget(utc(2024, 1, 1), utc(2024, 1, 31))
    assert not periods_overlap(existing, None, utc(2024, 1, 31), utc(2024, 2, 29))


def test_one_day_earlier_overlaps():
    existing = make_budget(utc(2024, 1, 1), utc(2024, 1, 31))
    assert periods_overlap(existing, None, utc(2024, 1, 30), utc(2024, 2, 29))


def test_contained_window_overlaps():
    existing = make_budget(utc(2024, 1, 1), utc(2024, 1, 31))
    assert periods_overlap(existing, None, utc(2024, 1, 10), utc(2024, 1, 20))


def test_family_wide_and_category_never_collide():
    """Identical windows in different scopes do not overlap."""
    family_wide = make_budget(utc(2024, 1, 1), utc(2024, 1, 31))
    category_budget = make_budget(utc(2024, 1, 1), utc(2024, 1, 31), category_id=uuid4())

    assert not periods_overlap(family_wide, uuid4(), utc(2024, 1, 1), utc(2024, 1, 31))
    assert not periods_overlap(category_budget, None, utc(2024, 1, 1), utc(2024, 1, 31))


def test_find_overlap_returns_first_collision_and_skips_excluded():
    first = make_budget(utc(2024, 1, 1), utc(2024, 1, 31), name="January")
    second = make_budget(utc(2024, 1, 15), utc(2024, 2, 15), name="Mid")

    assert find_overlap([first, second], None, utc(2024, 1, 20), utc(2024, 1, 25)) is first
    assert find_overlap(
        [first, second], None, utc(2024, 1, 20), utc(2024, 1, 25), exclude_id=first.id
    ) is second
    assert find_overlap([first], None, utc(2024, 3, 1), utc(2024, 3, 31)) is None
