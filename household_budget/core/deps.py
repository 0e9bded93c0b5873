"""
Dependencies for FastAPI endpoints.

This module wires the budget engine to the SQLAlchemy adapters for the
current request's database session.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from household_budget.db.repositories import SQLBudgetStore, SQLLedgerQuery
from household_budget.db.session import get_db
from household_budget.services.budget import BudgetService


async def get_budget_service(db: AsyncSession = Depends(get_db)) -> BudgetService:
    """Budget engine bound to the request's session."""
    return BudgetService(SQLBudgetStore(db), SQLLedgerQuery(db))
