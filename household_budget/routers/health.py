"""
Health check endpoints.

``/`` reports the running service; ``/db`` confirms the database answers and
that the budget tables exist.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from household_budget.core.config import settings
from household_budget.core.logging import logger
from household_budget.db.session import get_db
from household_budget.models import BudgetModel, TransactionModel

router = APIRouter()


@router.get("/")
async def health_check() -> Dict[str, Any]:
    return {
        "status": "ok",
        "version": settings.api.version,
        "environment": settings.environment.value,
    }


@router.get("/db")
async def database_health_check(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """
    Database health check.

    Counts rows in the budgets and transactions tables, which fails when the
    database is unreachable or the schema has not been created.
    """
    try:
        budgets = (await db.execute(select(func.count()).select_from(BudgetModel))).scalar_one()
        transactions = (
            await db.execute(select(func.count()).select_from(TransactionModel))
        ).scalar_one()
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "error", "database": "unavailable", "error": str(e)}

    return {
        "status": "ok",
        "database": "connected",
        "budgets": budgets,
        "transactions": transactions,
    }
