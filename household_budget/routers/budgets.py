"""
Budget API endpoints.
This module exposes the budget engine over HTTP.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from household_budget.core.config import settings
from household_budget.core.deps import get_budget_service
from household_budget.core.logging import logger
from household_budget.domain.budget import BudgetPeriod
from household_budget.schemas.budget import (
    Budget,
    BudgetAlert,
    BudgetCreate,
    BudgetFilter,
    BudgetLimitCheck,
    BudgetSpentDelta,
    BudgetStatus,
    BudgetUpdate,
    BudgetUtilization,
    SortField,
)
from household_budget.services.budget import BudgetService
from household_budget.utils.dates import ensure_utc, utcnow

router = APIRouter()


def get_budget_filter(
    category_id: Optional[UUID] = Query(None, description="Filter by category ID"),
    period: Optional[BudgetPeriod] = Query(None, description="Filter by period"),
    is_active: Optional[bool] = Query(None),
    active_on: Optional[datetime] = Query(None, description="Only budgets active on this date"),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    amount_from: Optional[Decimal] = Query(None),
    amount_to: Optional[Decimal] = Query(None),
    is_over_budget: Optional[bool] = Query(None),
    is_near_limit: Optional[bool] = Query(None),
    has_unspent_funds: Optional[bool] = Query(None),
    limit: int = Query(settings.budget.default_page_size, ge=1, le=settings.budget.max_page_size),
    offset: int = Query(0, ge=0),
    sort_by: SortField = Query("created_at"),
    sort_order: str = Query("desc"),
) -> BudgetFilter:
    """Build a BudgetFilter from query parameters."""
    try:
        return BudgetFilter(
            category_id=category_id,
            period=period,
            is_active=is_active,
            active_on=active_on,
            date_from=date_from,
            date_to=date_to,
            amount_from=amount_from,
            amount_to=amount_to,
            is_over_budget=is_over_budget,
            is_near_limit=is_near_limit,
            has_unspent_funds=has_unspent_funds,
            limit=limit,
            offset=offset,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        )


@router.post("/", response_model=Budget, status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget_in: BudgetCreate,
    service: BudgetService = Depends(get_budget_service),
) -> Budget:
    """
    Create a new budget.

    Args:
        budget_in: Budget creation data
        service: Budget engine

    Returns:
        Created budget
    """
    logger.info(f"Budget creation requested: {budget_in.name}")
    budget = await service.create_budget(budget_in)
    logger.info(f"Budget created successfully: {budget.id}")
    return Budget.model_validate(budget)


@router.get("/", response_model=List[Budget])
async def get_all_budgets(
    budget_filter: BudgetFilter = Depends(get_budget_filter),
    service: BudgetService = Depends(get_budget_service),
) -> List[Budget]:
    """Get budgets with filtering, sorting and pagination."""
    budgets = await service.get_all_budgets(budget_filter)
    logger.info(f"Retrieved {len(budgets)} budgets")
    return [Budget.model_validate(b) for b in budgets]


@router.get("/active", response_model=List[Budget])
async def get_active_budgets(
    date: Optional[datetime] = Query(None, description="Reference date, defaults to now"),
    service: BudgetService = Depends(get_budget_service),
) -> List[Budget]:
    """Get budgets active on a date."""
    budgets = await service.get_active_budgets(ensure_utc(date) or utcnow())
    return [Budget.model_validate(b) for b in budgets]


@router.get("/alerts", response_model=List[BudgetAlert])
async def get_budget_alerts(
    date: Optional[datetime] = Query(None, description="Reference date, defaults to now"),
    service: BudgetService = Depends(get_budget_service),
) -> List[BudgetAlert]:
    """Get alerts for active budgets near or over their limit."""
    return await service.get_budget_alerts(ensure_utc(date))


@router.post("/check-limits")
async def check_budget_limits(
    check: BudgetLimitCheck,
    service: BudgetService = Depends(get_budget_service),
) -> dict:
    """
    Check whether an expense fits the category's active budgets.

    Responds 409 when the expense would exceed a budget.
    """
    await service.check_budget_limits(check.category_id, check.amount)
    return {"allowed": True}


@router.get("/category/{category_id}", response_model=List[Budget])
async def get_budgets_by_category(
    category_id: UUID,
    service: BudgetService = Depends(get_budget_service),
) -> List[Budget]:
    budgets = await service.get_budgets_by_category(category_id)
    return [Budget.model_validate(b) for b in budgets]


@router.get("/{budget_id}", response_model=Budget)
async def get_budget(
    budget_id: UUID,
    service: BudgetService = Depends(get_budget_service),
) -> Budget:
    logger.info(f"Budget details requested for ID: {budget_id}")
    return Budget.model_validate(await service.get_budget_by_id(budget_id))


@router.put("/{budget_id}", response_model=Budget)
async def update_budget(
    budget_id: UUID,
    budget_in: BudgetUpdate,
    service: BudgetService = Depends(get_budget_service),
) -> Budget:
    """
    Update a budget.

    Args:
        budget_id: Budget ID
        budget_in: Budget update data
        service: Budget engine

    Returns:
        Updated budget
    """
    logger.info(f"Budget update requested for ID: {budget_id}")
    budget = await service.update_budget(budget_id, budget_in)
    logger.info(f"Budget updated successfully: {budget_id}")
    return Budget.model_validate(budget)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_id: UUID,
    service: BudgetService = Depends(get_budget_service),
) -> None:
    logger.info(f"Budget deletion requested for ID: {budget_id}")
    await service.delete_budget(budget_id)
    logger.info(f"Budget deleted successfully: {budget_id}")


@router.get("/{budget_id}/status", response_model=BudgetStatus)
async def get_budget_status(
    budget_id: UUID,
    service: BudgetService = Depends(get_budget_service),
) -> BudgetStatus:
    return await service.get_budget_status(budget_id)


@router.get("/{budget_id}/utilization", response_model=BudgetUtilization)
async def get_budget_utilization(
    budget_id: UUID,
    service: BudgetService = Depends(get_budget_service),
) -> BudgetUtilization:
    return await service.calculate_budget_utilization(budget_id)


@router.post("/{budget_id}/recalculate", response_model=Budget)
async def recalculate_budget_spent(
    budget_id: UUID,
    service: BudgetService = Depends(get_budget_service),
) -> Budget:
    """Resynchronize a budget's spent amount with the ledger."""
    return Budget.model_validate(await service.recalculate_budget_spent(budget_id))


@router.post("/{budget_id}/spent", response_model=Budget)
async def update_budget_spent(
    budget_id: UUID,
    delta: BudgetSpentDelta,
    service: BudgetService = Depends(get_budget_service),
) -> Budget:
    """Apply an incremental change to a budget's spent amount."""
    return Budget.model_validate(await service.update_budget_spent(budget_id, delta.amount))
