"""
Budget domain entity.

A budget is a spending ceiling over an inclusive date window, either
family-wide (no category) or scoped to a single category. The ``spent``
field is a cache derived from the transaction ledger and is always
eligible for recalculation.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from household_budget.utils.dates import utcnow

PERCENTAGE_BASE = 100


class BudgetPeriod(str, Enum):
    """Informational grouping of a budget window."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


@dataclass
class Budget:
    """Spending limit over a date window."""

    name: str
    amount: Decimal
    period: BudgetPeriod
    start_date: datetime
    end_date: datetime
    category_id: Optional[UUID] = None
    family_id: Optional[UUID] = None
    spent: Decimal = Decimal("0")
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_family_wide(self) -> bool:
        return self.category_id is None

    @property
    def remaining_amount(self) -> Decimal:
        return self.amount - self.spent

    @property
    def spent_percentage(self) -> float:
        if self.amount == 0:
            return 0.0
        return float(self.spent / self.amount * PERCENTAGE_BASE)

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.amount

    def is_active_on(self, moment: datetime) -> bool:
        """True if the budget is flagged active and moment lies in its window."""
        return self.is_active and self.start_date <= moment <= self.end_date

    def apply_spent_delta(self, delta: Decimal, now: Optional[datetime] = None) -> None:
        """Add delta to the cached spent amount."""
        self.spent += delta
        self.updated_at = now or utcnow()

    def __repr__(self) -> str:
        return (
            f"<Budget(id={self.id}, "
            f"name='{self.name}', "
            f"amount={self.amount}, "
            f"spent={self.spent})>"
        )
