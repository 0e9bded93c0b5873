"""
Transaction types understood by the ledger aggregate query.
"""
from enum import Enum


class TransactionType(str, Enum):
    """Enumeration of ledger transaction types."""

    INCOME = "income"
    EXPENSE = "expense"
