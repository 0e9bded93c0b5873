"""
Transaction model for the household budget system.

Only the columns the ledger aggregate query reads are modelled here;
transaction management itself lives outside this package.
"""

import uuid

from sqlalchemy import Column, DateTime, Enum, Index, Numeric, String, Uuid
from sqlalchemy.sql import func

from household_budget.domain.transaction import TransactionType
from household_budget.models.base import Base


class TransactionModel(Base):
    """Ledger row: a single income or expense."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_category_type_date", "category_id", "transaction_type", "transaction_date"),
    )

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    family_id = Column(Uuid, nullable=True, index=True)
    category_id = Column(Uuid, nullable=True)
    transaction_type = Column(
        Enum(TransactionType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    amount = Column(Numeric(15, 2), nullable=False)
    description = Column(String(255), nullable=True)
    transaction_date = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        """String representation of the Transaction model."""
        return (
            f"<TransactionModel(id={self.id}, "
            f"transaction_type='{self.transaction_type.value if self.transaction_type else 'N/A'}', "
            f"amount={self.amount})>"
        )
