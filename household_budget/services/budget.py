"""
Service layer for budget operations.

This module contains the budget engine: CRUD over the budget store plus the
business operations (limit checks, status, utilization, alerts). Every read
recalculates the cached ``spent`` amount from the ledger first; failures of
that recalculation are logged and the cached value is used instead.
"""

from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, List, Optional, TypeVar
from uuid import UUID

from household_budget.core.config import BudgetSettings, settings
from household_budget.core.exceptions import (
    BudgetAlreadyExceededError,
    BudgetAmountInvalidError,
    BudgetCalculationError,
    BudgetError,
    BudgetInsufficientFundsError,
    BudgetNotFoundError,
    BudgetOverlapError,
    BudgetPeriodInvalidError,
)
from household_budget.core.logging import logger
from household_budget.domain.budget import Budget
from household_budget.domain.transaction import TransactionType
from household_budget.schemas.budget import (
    BudgetAlert,
    BudgetCreate,
    BudgetFilter,
    BudgetStatus,
    BudgetUpdate,
    BudgetUtilization,
)
from household_budget.services import analytics
from household_budget.services.interfaces import BudgetStore, LedgerAggregateQuery
from household_budget.services.overlap import find_overlap
from household_budget.utils.dates import utcnow
from household_budget.utils.pagination import paginate

T = TypeVar("T")

SORT_KEYS = {
    "name": lambda b: b.name.lower(),
    "amount": lambda b: b.amount,
    "spent": lambda b: b.spent,
    "remaining": lambda b: b.remaining_amount,
    "created_at": lambda b: b.created_at,
    "updated_at": lambda b: b.updated_at,
    "start_date": lambda b: b.start_date,
    "end_date": lambda b: b.end_date,
}


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class BudgetService:
    """
    Budget engine.

    Args:
        store: Budget persistence
        ledger: Aggregate totals over the transaction ledger
        thresholds: Status band thresholds, defaults to the configured ones
        clock: Returns the current aware UTC datetime
    """

    def __init__(
        self,
        store: BudgetStore,
        ledger: LedgerAggregateQuery,
        thresholds: Optional[BudgetSettings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.ledger = ledger
        self.thresholds = thresholds or settings.budget
        self.clock = clock

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create_budget(self, budget_in: BudgetCreate) -> Budget:
        """
        Create a new budget.

        The budget starts with ``spent = 0`` and is then recalculated against
        transactions already in its window.

        Args:
            budget_in: Budget creation data

        Returns:
            Created budget

        Raises:
            BudgetAmountInvalidError: amount is not positive
            BudgetPeriodInvalidError: end date before start date
            BudgetOverlapError: a same-scope active budget overlaps the window
        """
        logger.info(f"Creating new budget '{budget_in.name}' (category: {budget_in.category_id})")

        if budget_in.amount <= 0:
            raise BudgetAmountInvalidError(f"got {budget_in.amount}")
        if budget_in.end_date < budget_in.start_date:
            raise BudgetPeriodInvalidError(
                f"{budget_in.end_date.isoformat()} is before {budget_in.start_date.isoformat()}"
            )

        await self.validate_budget_period(
            budget_in.category_id,
            budget_in.start_date,
            budget_in.end_date,
            family_id=budget_in.family_id,
        )

        now = self.clock()
        budget = Budget(
            name=budget_in.name,
            amount=budget_in.amount,
            spent=Decimal("0"),
            period=budget_in.period,
            category_id=budget_in.category_id,
            family_id=budget_in.family_id,
            start_date=budget_in.start_date,
            end_date=budget_in.end_date,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        await self._storage("create budget", self.store.create(budget))

        await self._resync_quietly(budget, "create_budget")

        logger.info(f"Created budget with ID: {budget.id}")
        return budget

    async def get_budget_by_id(self, budget_id: UUID) -> Budget:
        logger.debug(f"Getting budget by ID: {budget_id}")
        budget = await self._load(budget_id)
        await self._resync_quietly(budget, "get_budget_by_id")
        return budget

    async def get_all_budgets(self, budget_filter: BudgetFilter) -> List[Budget]:
        """
        Get budgets matching a filter.

        Status filters are evaluated on freshly recalculated spent amounts,
        and pagination is applied to the filtered result.

        Args:
            budget_filter: Filtering, sorting and pagination options

        Returns:
            Page of matching budgets (empty when the offset is past the end)
        """
        logger.debug(f"Getting budgets with filter: {budget_filter.model_dump(exclude_defaults=True)}")

        if budget_filter.active_on is not None:
            candidates = [
                b for b in await self._storage("get budgets", self.store.get_active_budgets())
                if b.is_active_on(budget_filter.active_on)
            ]
        elif budget_filter.category_id is not None:
            candidates = await self._storage(
                "get budgets", self.store.get_by_category(budget_filter.category_id)
            )
        else:
            candidates = await self._storage("get budgets", self.store.get_all())

        for budget in candidates:
            await self._resync_quietly(budget, "get_all_budgets")

        filtered = [b for b in candidates if self._matches_filter(b, budget_filter)]
        filtered.sort(
            key=SORT_KEYS[budget_filter.sort_by],
            reverse=budget_filter.sort_order == "desc",
        )
        return paginate(filtered, budget_filter.offset, budget_filter.limit)

    async def update_budget(self, budget_id: UUID, budget_in: BudgetUpdate) -> Budget:
        """
        Update a budget.

        The budget is recalculated before the patch is applied so the
        already-spent guard compares against fresh data.

        Args:
            budget_id: Budget ID
            budget_in: Fields to change

        Returns:
            Updated budget

        Raises:
            BudgetNotFoundError: budget does not exist
            BudgetAmountInvalidError: new amount is not positive
            BudgetAlreadyExceededError: new amount is below the spent amount
            BudgetPeriodInvalidError: resulting end date before start date
            BudgetOverlapError: changed window collides with another budget
        """
        logger.info(f"Updating budget with ID: {budget_id}")

        budget = await self._load(budget_id)
        await self._resync_quietly(budget, "update_budget")

        update_data = {k: v for k, v in budget_in.model_dump(exclude_unset=True).items() if v is not None}

        if "amount" in update_data:
            new_amount = update_data["amount"]
            if new_amount <= 0:
                raise BudgetAmountInvalidError(f"got {new_amount}")
            if new_amount < budget.spent:
                raise BudgetAlreadyExceededError(
                    f"new amount {new_amount:.2f} is less than spent {budget.spent:.2f}"
                )

        start_date = update_data.get("start_date", budget.start_date)
        end_date = update_data.get("end_date", budget.end_date)
        if end_date < start_date:
            raise BudgetPeriodInvalidError(
                f"{end_date.isoformat()} is before {start_date.isoformat()}"
            )

        if start_date != budget.start_date or end_date != budget.end_date:
            await self.validate_budget_period(
                budget.category_id,
                start_date,
                end_date,
                exclude_id=budget.id,
                family_id=budget.family_id,
            )

        for field, value in update_data.items():
            setattr(budget, field, value)
        budget.updated_at = self.clock()
        await self._storage("update budget", self.store.update(budget))

        logger.info(f"Updated budget ID: {budget.id}")
        return budget

    async def delete_budget(self, budget_id: UUID) -> None:
        logger.info(f"Deleting budget with ID: {budget_id}")
        await self._load(budget_id)
        await self._storage("delete budget", self.store.delete(budget_id))
        logger.info(f"Deleted budget ID: {budget_id}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_active_budgets(self, date: datetime) -> List[Budget]:
        """Budgets flagged active whose window contains ``date`` (inclusive)."""
        logger.debug(f"Getting budgets active on {date.isoformat()}")
        budgets = await self._storage("get active budgets", self.store.get_active_budgets())

        active = []
        for budget in budgets:
            if budget.is_active_on(date):
                await self._resync_quietly(budget, "get_active_budgets")
                active.append(budget)
        return active

    async def get_budgets_by_category(self, category_id: UUID) -> List[Budget]:
        logger.debug(f"Getting budgets for category {category_id}")
        budgets = await self._storage(
            "get budgets by category", self.store.get_by_category(category_id)
        )
        for budget in budgets:
            await self._resync_quietly(budget, "get_budgets_by_category")
        return budgets

    async def get_budget_status(self, budget_id: UUID) -> BudgetStatus:
        budget = await self._load(budget_id)
        await self._resync_quietly(budget, "get_budget_status")
        return analytics.calculate_status(budget, self.clock(), self.thresholds)

    async def calculate_budget_utilization(self, budget_id: UUID) -> BudgetUtilization:
        budget = await self._load(budget_id)
        await self._resync_quietly(budget, "calculate_budget_utilization")
        return analytics.calculate_utilization(budget, self.clock(), self.thresholds)

    async def get_budget_alerts(self, date: Optional[datetime] = None) -> List[BudgetAlert]:
        """
        Alerts for active budgets that reached the near-limit band or higher.

        Args:
            date: Reference date for "active", defaults to now

        Returns:
            Alerts ordered by utilization, highest first
        """
        now = self.clock()
        budgets = await self.get_active_budgets(date or now)
        alerts = [
            alert for alert in (
                analytics.build_alert(budget, now, self.thresholds) for budget in budgets
            )
            if alert is not None
        ]
        alerts.sort(key=lambda a: a.current, reverse=True)
        if alerts:
            logger.info(f"{len(alerts)} budget alert(s) raised")
        return alerts

    # ------------------------------------------------------------------
    # Business operations
    # ------------------------------------------------------------------

    async def check_budget_limits(self, category_id: UUID, amount: Decimal) -> None:
        """
        Check whether an expense would exceed any active budget of a category.

        A category without budgets has no limit. Budgets are checked in
        ascending start date order and the first breach is reported.

        Args:
            category_id: Category of the prospective expense
            amount: Expense amount

        Raises:
            BudgetInsufficientFundsError: the expense would exceed a budget
        """
        logger.debug(f"Checking budget limits for category {category_id}, amount {amount}")
        amount = _to_decimal(amount)
        now = self.clock()

        budgets = await self._storage(
            "get budgets by category", self.store.get_by_category(category_id)
        )
        active = sorted((b for b in budgets if b.is_active_on(now)), key=lambda b: b.start_date)

        for budget in active:
            await self._resync_quietly(budget, "check_budget_limits")
            if budget.spent + amount > budget.amount:
                logger.warning(
                    f"Expense of {amount} would exceed budget {budget.id} "
                    f"(limit {budget.amount}, spent {budget.spent})"
                )
                raise BudgetInsufficientFundsError(
                    f"budget '{budget.name}' limit {budget.amount:.2f}, "
                    f"current spent {budget.spent:.2f}, transaction amount {amount:.2f}"
                )

    async def update_budget_spent(self, budget_id: UUID, amount: Decimal) -> Budget:
        """
        Add a delta to a budget's spent amount without consulting the ledger.

        Used by the transaction subsystem when a matching expense is created,
        edited or deleted. The result can drift from the ledger until the
        next recalculation.

        Args:
            budget_id: Budget ID
            amount: Amount to add (negative to subtract)

        Returns:
            Updated budget
        """
        logger.debug(f"Updating spent amount for budget {budget_id} by {amount}")
        budget = await self._load(budget_id)
        budget.apply_spent_delta(_to_decimal(amount), self.clock())
        await self._storage("update budget spent", self.store.update(budget))
        return budget

    async def validate_budget_period(
        self,
        category_id: Optional[UUID],
        start_date: datetime,
        end_date: datetime,
        exclude_id: Optional[UUID] = None,
        family_id: Optional[UUID] = None,
    ) -> None:
        """
        Ensure no same-scope active budget overlaps [start_date, end_date].

        Raises:
            BudgetOverlapError: naming the first colliding budget
        """
        existing = await self._storage(
            "validate budget period",
            self.store.get_by_period(family_id, start_date, end_date),
        )
        collision = find_overlap(existing, category_id, start_date, end_date, exclude_id=exclude_id)
        if collision is not None:
            logger.warning(f"Budget period overlaps with budget {collision.id}")
            raise BudgetOverlapError(f"overlaps with budget '{collision.name}'")

    async def recalculate_budget_spent(self, budget_id: UUID) -> Budget:
        """
        Recalculate a budget's spent amount from the ledger.

        Unlike the implicit recalculation on reads, failures are raised.

        Raises:
            BudgetNotFoundError: budget does not exist
            BudgetCalculationError: ledger query or write failed
        """
        budget = await self._load(budget_id)
        try:
            await self._resync(budget)
        except BudgetError:
            raise
        except Exception as e:
            raise BudgetCalculationError(f"failed to recalculate spent amount: {e}") from e
        return budget

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, budget_id: UUID) -> Budget:
        budget = await self._storage("get budget", self.store.get_by_id(budget_id))
        if budget is None:
            logger.warning(f"Budget not found, ID: {budget_id}")
            raise BudgetNotFoundError(str(budget_id))
        return budget

    async def _storage(self, operation: str, call: Awaitable[T]) -> T:
        """Await a store call, wrapping failures with the operation name."""
        try:
            return await call
        except BudgetError:
            raise
        except Exception as e:
            logger.error(f"Failed to {operation}: {e}")
            raise BudgetCalculationError(f"failed to {operation}: {e}") from e

    async def _spent_from_ledger(self, budget: Budget) -> Decimal:
        if budget.category_id is not None:
            total = await self.ledger.total_by_category_and_date_range(
                budget.category_id, budget.start_date, budget.end_date, TransactionType.EXPENSE
            )
        else:
            total = await self.ledger.total_by_family_and_date_range(
                budget.start_date,
                budget.end_date,
                TransactionType.EXPENSE,
                family_id=budget.family_id,
            )
        return _to_decimal(total)

    async def _resync(self, budget: Budget) -> bool:
        """
        Bring ``budget.spent`` in line with the ledger.

        Returns:
            True if the spent amount changed and was written back
        """
        spent = await self._spent_from_ledger(budget)
        if spent == budget.spent:
            return False

        logger.debug(f"Budget {budget.id} spent changed: {budget.spent} -> {spent}")
        budget.spent = spent
        budget.updated_at = self.clock()
        await self.store.update(budget)
        return True

    async def _resync_quietly(self, budget: Budget, operation: str) -> None:
        """Recalculate, downgrading any failure to a warning."""
        try:
            await self._resync(budget)
        except Exception as e:
            logger.bind(
                operation=operation,
                budget_id=str(budget.id),
                error=str(e),
            ).warning(
                f"Budget spent recalculation failed during {operation} "
                f"for budget {budget.id}: {e}"
            )

    def _matches_filter(self, budget: Budget, budget_filter: BudgetFilter) -> bool:
        if budget_filter.category_id is not None and budget.category_id != budget_filter.category_id:
            return False
        if budget_filter.period is not None and budget.period != budget_filter.period:
            return False
        if budget_filter.is_active is not None and budget.is_active != budget_filter.is_active:
            return False

        if budget_filter.date_from is not None and budget.end_date < budget_filter.date_from:
            return False
        if budget_filter.date_to is not None and budget.start_date > budget_filter.date_to:
            return False

        if budget_filter.amount_from is not None and budget.amount < budget_filter.amount_from:
            return False
        if budget_filter.amount_to is not None and budget.amount > budget_filter.amount_to:
            return False

        utilization = analytics.utilization_percent(budget.spent, budget.amount)
        if (
            budget_filter.is_over_budget is not None
            and budget_filter.is_over_budget != (utilization >= self.thresholds.over_budget_threshold)
        ):
            return False
        if (
            budget_filter.is_near_limit is not None
            and budget_filter.is_near_limit != (utilization >= self.thresholds.near_limit_threshold)
        ):
            return False
        if (
            budget_filter.has_unspent_funds is not None
            and budget_filter.has_unspent_funds != (budget.amount > budget.spent)
        ):
            return False

        return True
