"""
Collaborator contracts consumed by the budget engine.

The engine depends only on these two protocols; ``household_budget.db.repositories``
provides SQLAlchemy implementations.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Protocol
from uuid import UUID

from household_budget.domain.budget import Budget
from household_budget.domain.transaction import TransactionType


class BudgetStore(Protocol):
    """Persistence for budgets."""

    async def create(self, budget: Budget) -> None:
        ...

    async def get_by_id(self, budget_id: UUID) -> Optional[Budget]:
        """Return the budget, or None if it does not exist."""
        ...

    async def get_all(self) -> List[Budget]:
        ...

    async def get_active_budgets(self) -> List[Budget]:
        """Budgets whose ``is_active`` flag is set, regardless of dates."""
        ...

    async def get_by_category(self, category_id: Optional[UUID]) -> List[Budget]:
        ...

    async def get_by_period(
        self,
        family_id: Optional[UUID],
        start_date: datetime,
        end_date: datetime,
    ) -> List[Budget]:
        """Active budgets whose window intersects [start_date, end_date], oldest first."""
        ...

    async def update(self, budget: Budget) -> None:
        ...

    async def delete(self, budget_id: UUID) -> None:
        ...


class LedgerAggregateQuery(Protocol):
    """Aggregate totals over the transaction ledger. Returns 0 when nothing matches."""

    async def total_by_category_and_date_range(
        self,
        category_id: UUID,
        start_date: datetime,
        end_date: datetime,
        transaction_type: TransactionType,
    ) -> Decimal:
        ...

    async def total_by_family_and_date_range(
        self,
        start_date: datetime,
        end_date: datetime,
        transaction_type: TransactionType,
        family_id: Optional[UUID] = None,
    ) -> Decimal:
        """Total over every category; restricted to one family when family_id is set."""
        ...

    async def total_by_category(
        self,
        category_id: UUID,
        transaction_type: TransactionType,
    ) -> Decimal:
        ...
