"""
SQLAlchemy implementations of the budget engine's collaborators.

``SQLBudgetStore`` persists budgets in the ``budgets`` table and
``SQLLedgerQuery`` aggregates the ``transactions`` table. Both work on an
``AsyncSession`` and commit per write.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from household_budget.core.logging import logger
from household_budget.domain.budget import Budget
from household_budget.domain.transaction import TransactionType
from household_budget.models.budget import BudgetModel
from household_budget.models.transaction import TransactionModel


class SQLBudgetStore:
    """Budget store backed by SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, budget: Budget) -> None:
        self.db.add(BudgetModel.from_domain(budget))
        await self.db.commit()

    async def get_by_id(self, budget_id: UUID) -> Optional[Budget]:
        row = await self.db.get(BudgetModel, budget_id)
        return row.to_domain() if row else None

    async def get_all(self) -> List[Budget]:
        return await self._fetch(select(BudgetModel).order_by(BudgetModel.created_at))

    async def get_active_budgets(self) -> List[Budget]:
        return await self._fetch(
            select(BudgetModel)
            .where(BudgetModel.is_active.is_(True))
            .order_by(BudgetModel.start_date)
        )

    async def get_by_category(self, category_id: Optional[UUID]) -> List[Budget]:
        if category_id is None:
            condition = BudgetModel.category_id.is_(None)
        else:
            condition = BudgetModel.category_id == category_id
        return await self._fetch(
            select(BudgetModel).where(condition).order_by(BudgetModel.start_date)
        )

    async def get_by_period(
        self,
        family_id: Optional[UUID],
        start_date: datetime,
        end_date: datetime,
    ) -> List[Budget]:
        conditions = [
            BudgetModel.is_active.is_(True),
            BudgetModel.start_date <= end_date,
            BudgetModel.end_date >= start_date,
        ]
        if family_id is not None:
            conditions.append(BudgetModel.family_id == family_id)
        return await self._fetch(
            select(BudgetModel).where(and_(*conditions)).order_by(BudgetModel.start_date)
        )

    async def update(self, budget: Budget) -> None:
        row = await self.db.get(BudgetModel, budget.id)
        if row is None:
            raise LookupError(f"budget with id {budget.id} not found")
        row.apply(budget)
        await self.db.commit()

    async def delete(self, budget_id: UUID) -> None:
        row = await self.db.get(BudgetModel, budget_id)
        if row is None:
            raise LookupError(f"budget with id {budget_id} not found")
        await self.db.delete(row)
        await self.db.commit()

    async def _fetch(self, query) -> List[Budget]:
        result = await self.db.execute(query)
        return [row.to_domain() for row in result.scalars().all()]


class SQLLedgerQuery:
    """
    Ledger aggregate query backed by the transactions table.

    Args:
        db: Database session
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def total_by_category_and_date_range(
        self,
        category_id: UUID,
        start_date: datetime,
        end_date: datetime,
        transaction_type: TransactionType,
    ) -> Decimal:
        return await self._total(
            TransactionModel.category_id == category_id,
            TransactionModel.transaction_type == transaction_type,
            TransactionModel.transaction_date >= start_date,
            TransactionModel.transaction_date <= end_date,
        )

    async def total_by_family_and_date_range(
        self,
        start_date: datetime,
        end_date: datetime,
        transaction_type: TransactionType,
        family_id: Optional[UUID] = None,
    ) -> Decimal:
        conditions = [
            TransactionModel.transaction_type == transaction_type,
            TransactionModel.transaction_date >= start_date,
            TransactionModel.transaction_date <= end_date,
        ]
        if family_id is not None:
            conditions.append(TransactionModel.family_id == family_id)
        return await self._total(*conditions)

    async def total_by_category(
        self,
        category_id: UUID,
        transaction_type: TransactionType,
    ) -> Decimal:
        return await self._total(
            TransactionModel.category_id == category_id,
            TransactionModel.transaction_type == transaction_type,
        )

    async def _total(self, *conditions) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(TransactionModel.amount), 0)).where(and_(*conditions))
        )
        total = result.scalar()
        logger.debug(f"Ledger total: {total}")
        return Decimal(str(total)) if total is not None else Decimal("0")
