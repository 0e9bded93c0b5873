"""
SQLAlchemy models.

Importing this package registers every table on ``Base.metadata``.
"""

from household_budget.models.base import Base
from household_budget.models.budget import BudgetModel
from household_budget.models.transaction import TransactionModel

__all__ = ["Base", "BudgetModel", "TransactionModel"]
