"""
In-memory collaborators and helpers shared by the tests.
"""

import copy
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from household_budget.domain.budget import Budget
from household_budget.domain.transaction import TransactionType

FIXED_NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


class InMemoryBudgetStore:
    """Budget store keeping copies of budgets in a dict."""

    def __init__(self):
        self.budgets: Dict[UUID, Budget] = {}
        self.update_calls = 0
        self.fail_on: Optional[str] = None

    def _check(self, operation: str) -> None:
        if self.fail_on == operation:
            raise RuntimeError(f"store {operation} unavailable")

    async def create(self, budget: Budget) -> None:
        self._check("create")
        self.budgets[budget.id] = copy.deepcopy(budget)

    async def get_by_id(self, budget_id: UUID) -> Optional[Budget]:
        self._check("get_by_id")
        budget = self.budgets.get(budget_id)
        return copy.deepcopy(budget) if budget else None

    async def get_all(self) -> List[Budget]:
        self._check("get_all")
        return [copy.deepcopy(b) for b in self.budgets.values()]

    async def get_active_budgets(self) -> List[Budget]:
        return [copy.deepcopy(b) for b in self.budgets.values() if b.is_active]

    async def get_by_category(self, category_id: Optional[UUID]) -> List[Budget]:
        self._check("get_by_category")
        return [copy.deepcopy(b) for b in self.budgets.values() if b.category_id == category_id]

    async def get_by_period(self, family_id, start_date, end_date) -> List[Budget]:
        matches = [
            b for b in self.budgets.values()
            if b.is_active
            and b.start_date <= end_date
            and b.end_date >= start_date
            and (family_id is None or b.family_id == family_id)
        ]
        return [copy.deepcopy(b) for b in sorted(matches, key=lambda b: b.start_date)]

    async def update(self, budget: Budget) -> None:
        self._check("update")
        self.update_calls += 1
        self.budgets[budget.id] = copy.deepcopy(budget)

    async def delete(self, budget_id: UUID) -> None:
        self._check("delete")
        del self.budgets[budget_id]


class FakeLedger:
    """Ledger aggregate query over an in-memory list of transactions."""

    def __init__(self):
        self.entries = []
        self.error: Optional[BaseException] = None
        self.calls = 0

    def add(self, amount, date: datetime, category_id: Optional[UUID] = None,
            transaction_type: TransactionType = TransactionType.EXPENSE,
            family_id: Optional[UUID] = None) -> None:
        self.entries.append((category_id, transaction_type, Decimal(str(amount)), date, family_id))

    def _sum(self, predicate) -> Decimal:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return sum(
            (amount for c, t, amount, d, f in self.entries if predicate(c, t, d, f)), Decimal("0")
        )

    async def total_by_category_and_date_range(self, category_id, start_date, end_date, transaction_type):
        return self._sum(
            lambda c, t, d, f: c == category_id and t == transaction_type and start_date <= d <= end_date
        )

    async def total_by_family_and_date_range(self, start_date, end_date, transaction_type, family_id=None):
        return self._sum(
            lambda c, t, d, f: t == transaction_type
            and start_date <= d <= end_date
            and (family_id is None or f == family_id)
        )

    async def total_by_category(self, category_id, transaction_type):
        return self._sum(lambda c, t, d, f: c == category_id and t == transaction_type)

