"""
Services package initialization.

This module imports all services to make them available from a single import point.
"""

from household_budget.services.budget import BudgetService
from household_budget.services.interfaces import BudgetStore, LedgerAggregateQuery

__all__ = ["BudgetService", "BudgetStore", "LedgerAggregateQuery"]
