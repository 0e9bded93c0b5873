"""
Budget model for the household budget system.

This module defines the SQLAlchemy model for budgets, the persisted form
of the ``household_budget.domain.budget.Budget`` entity.
"""

from decimal import Decimal
import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum, Index, Numeric, String, Uuid

from household_budget.domain.budget import Budget, BudgetPeriod
from household_budget.models.base import Base
from household_budget.utils.dates import ensure_utc


class BudgetModel(Base):
    """
    Budget row.

    ``category_id`` is NULL for family-wide budgets. ``spent`` is a cache of
    matching expense transactions and is rewritten on recalculation.
    """

    __tablename__ = "budgets"
    __table_args__ = (
        Index("ix_budgets_period_window", "start_date", "end_date"),
    )

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    spent = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    period = Column(Enum(BudgetPeriod, values_callable=lambda e: [m.value for m in e]), nullable=False)
    category_id = Column(Uuid, nullable=True, index=True)
    family_id = Column(Uuid, nullable=True, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        """String representation of the Budget model."""
        return (
            f"<BudgetModel(id={self.id}, "
            f"name='{self.name}', "
            f"amount={self.amount}, "
            f"spent={self.spent})>"
        )

    @classmethod
    def from_domain(cls, budget: Budget) -> "BudgetModel":
        row = cls(id=budget.id)
        row.apply(budget)
        return row

    def apply(self, budget: Budget) -> None:
        """Copy every mutable field of the entity onto this row."""
        self.name = budget.name
        self.amount = budget.amount
        self.spent = budget.spent
        self.period = budget.period
        self.category_id = budget.category_id
        self.family_id = budget.family_id
        self.start_date = budget.start_date
        self.end_date = budget.end_date
        self.is_active = budget.is_active
        self.created_at = budget.created_at
        self.updated_at = budget.updated_at

    def to_domain(self) -> Budget:
        return Budget(
            id=self.id,
            name=self.name,
            amount=Decimal(self.amount),
            spent=Decimal(self.spent if self.spent is not None else 0),
            period=BudgetPeriod(self.period),
            category_id=self.category_id,
            family_id=self.family_id,
            start_date=ensure_utc(self.start_date),
            end_date=ensure_utc(self.end_date),
            is_active=bool(self.is_active),
            created_at=ensure_utc(self.created_at),
            updated_at=ensure_utc(self.updated_at),
        )
