"""
Overlap rules for budget windows.

Two budgets are in the same scope when both are family-wide or both point
at the same category. Same-scope windows overlap on an open interval, so a
budget starting exactly when another ends is allowed.
"""

from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from household_budget.domain.budget import Budget


def same_scope(existing_category_id: Optional[UUID], new_category_id: Optional[UUID]) -> bool:
    if existing_category_id is None and new_category_id is None:
        return True
    if existing_category_id is None or new_category_id is None:
        return False
    return existing_category_id == new_category_id


def periods_overlap(
    existing: Budget,
    category_id: Optional[UUID],
    start_date: datetime,
    end_date: datetime,
) -> bool:
    """True if the candidate window collides with an existing same-scope budget."""
    if not same_scope(existing.category_id, category_id):
        return False
    return end_date > existing.start_date and start_date < existing.end_date


def find_overlap(
    candidates: Iterable[Budget],
    category_id: Optional[UUID],
    start_date: datetime,
    end_date: datetime,
    exclude_id: Optional[UUID] = None,
) -> Optional[Budget]:
    """Return the first colliding budget, skipping ``exclude_id``."""
    for existing in candidates:
        if exclude_id is not None and existing.id == exclude_id:
            continue
        if periods_overlap(existing, category_id, start_date, end_date):
            return existing
    return None
