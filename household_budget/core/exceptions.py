"""
Error taxonomy for the budget engine.

Every error raised by ``BudgetService`` is a ``BudgetError`` carrying a
``kind`` discriminator, so callers can branch on the kind or catch the
specific subclass. Caller-input errors also subclass ``ValueError``.
"""
from enum import Enum


class BudgetErrorKind(str, Enum):
    """Discriminator for budget errors."""

    NOT_FOUND = "not_found"
    AMOUNT_INVALID = "amount_invalid"
    PERIOD_INVALID = "period_invalid"
    OVERLAP_EXISTS = "overlap_exists"
    ALREADY_EXCEEDED = "already_exceeded"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    CALCULATION_FAILED = "calculation_failed"


class BudgetError(Exception):
    """Base budget engine error."""

    kind: BudgetErrorKind
    default_message = "budget error"

    def __init__(self, detail: str = ""):
        self.detail = detail
        message = f"{self.default_message}: {detail}" if detail else self.default_message
        super().__init__(message)


class BudgetNotFoundError(BudgetError, LookupError):
    kind = BudgetErrorKind.NOT_FOUND
    default_message = "budget not found"


class BudgetAmountInvalidError(BudgetError, ValueError):
    kind = BudgetErrorKind.AMOUNT_INVALID
    default_message = "budget amount must be greater than 0"


class BudgetPeriodInvalidError(BudgetError, ValueError):
    kind = BudgetErrorKind.PERIOD_INVALID
    default_message = "budget end date must not be before start date"


class BudgetOverlapError(BudgetError, ValueError):
    kind = BudgetErrorKind.OVERLAP_EXISTS
    default_message = "budget period overlaps with existing budget"


class BudgetAlreadyExceededError(BudgetError, ValueError):
    kind = BudgetErrorKind.ALREADY_EXCEEDED
    default_message = "cannot update budget: amount is less than already spent"


class BudgetInsufficientFundsError(BudgetError, ValueError):
    kind = BudgetErrorKind.INSUFFICIENT_FUNDS
    default_message = "insufficient budget funds"


class BudgetCalculationError(BudgetError):
    """Ledger or storage failure, wrapped with the failing operation."""

    kind = BudgetErrorKind.CALCULATION_FAILED
    default_message = "failed to calculate budget metrics"
