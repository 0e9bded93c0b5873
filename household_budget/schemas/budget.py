"""
Pydantic schemas for budgets.

This module defines the request, filter and analytics schemas used by the
budget engine and the budget API endpoints.
"""

from typing import List, Literal, Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from household_budget.domain.budget import BudgetPeriod
from household_budget.utils.dates import ensure_utc

SortField = Literal[
    "name", "amount", "spent", "remaining", "created_at", "updated_at", "start_date", "end_date"
]


class BudgetCreate(BaseModel):
    """Schema for creating a new budget."""

    name: str = Field(..., min_length=2, max_length=100)
    amount: Decimal
    period: BudgetPeriod
    category_id: Optional[UUID] = None
    family_id: Optional[UUID] = None
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def as_utc(cls, v):
        return ensure_utc(v)


class BudgetUpdate(BaseModel):
    """Schema for updating a budget. Only fields that are set are applied."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    amount: Optional[Decimal] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def as_utc(cls, v):
        return ensure_utc(v)


class BudgetFilter(BaseModel):
    """Filtering, sorting and pagination options for budget listings."""

    category_id: Optional[UUID] = None
    period: Optional[BudgetPeriod] = None
    is_active: Optional[bool] = None

    # Date filters
    active_on: Optional[datetime] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    # Amount filters
    amount_from: Optional[Decimal] = Field(None, ge=0)
    amount_to: Optional[Decimal] = Field(None, ge=0)

    # Status filters
    is_over_budget: Optional[bool] = None
    is_near_limit: Optional[bool] = None
    has_unspent_funds: Optional[bool] = None

    # Pagination
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)

    # Sorting
    sort_by: SortField = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"

    @field_validator("active_on", "date_from", "date_to")
    @classmethod
    def as_utc(cls, v):
        return ensure_utc(v)

    @model_validator(mode="after")
    def validate_ranges(self):
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("date_to must not be before date_from")
        if (
            self.amount_from is not None
            and self.amount_to is not None
            and self.amount_to < self.amount_from
        ):
            raise ValueError("amount_to must not be less than amount_from")
        return self


class BudgetLimitCheck(BaseModel):
    """Request body for checking a prospective expense against budget limits."""

    category_id: UUID
    amount: Decimal


class BudgetSpentDelta(BaseModel):
    """Incremental change to a budget's spent amount."""

    amount: Decimal


class Budget(BaseModel):
    """Schema for budget response data."""

    id: UUID
    name: str
    amount: Decimal
    spent: Decimal
    remaining_amount: Decimal
    period: BudgetPeriod
    category_id: Optional[UUID] = None
    family_id: Optional[UUID] = None
    start_date: datetime
    end_date: datetime
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BudgetStatus(BaseModel):
    """Detailed status of a single budget."""

    budget_id: UUID
    name: str
    total_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal
    utilization_percent: float
    days_total: int
    days_elapsed: int
    days_remaining: int
    is_over_budget: bool
    is_near_limit: bool
    is_critical_limit: bool
    daily_budget: Decimal
    daily_spent: Decimal
    projected_overrun: Decimal
    status: str


class BudgetUtilization(BaseModel):
    """Spending velocity, projection and recommendations for a budget."""

    budget_id: UUID
    period: str
    utilization_percent: float
    spending_velocity: Decimal
    projected_completion: Optional[datetime] = None
    recommendations: List[str] = []


class BudgetAlert(BaseModel):
    """A budget that has crossed one of the alert thresholds."""

    budget_id: UUID
    budget_name: str
    alert_type: str
    threshold: float
    current: float
    message: str
    severity: str
    created_at: datetime
