"""
Budget status classification, projection and recommendations.

Everything here is a pure function of a budget, the current time and the
configured thresholds; the engine calls it after recalculating ``spent``.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from household_budget.core.config import BudgetSettings
from household_budget.domain.budget import Budget, PERCENTAGE_BASE
from household_budget.schemas.budget import BudgetAlert, BudgetStatus, BudgetUtilization
from household_budget.utils.dates import days_until, whole_days

STATUS_HEALTHY = "healthy"
STATUS_NEAR_LIMIT = "near_limit"
STATUS_CRITICAL = "critical"
STATUS_OVER_BUDGET = "over_budget"

# Time-pressure rule: little time left but most of the budget unspent
LOW_TIME_DAYS = 7
LOW_UTILIZATION_PERCENT = 50.0

ZERO = Decimal("0")

RECOMMENDATIONS = {
    STATUS_OVER_BUDGET: [
        "Budget exceeded! Review and reduce spending immediately.",
        "Consider increasing budget amount if necessary.",
    ],
    STATUS_CRITICAL: [
        "Critical budget level reached. Monitor spending closely.",
        "Consider adjusting spending plans for remainder of period.",
    ],
    STATUS_NEAR_LIMIT: [
        "Approaching budget limit. Review upcoming expenses.",
        "Consider prioritizing essential expenses only.",
    ],
    STATUS_HEALTHY: [
        "Budget is healthy. Continue current spending patterns.",
    ],
}
LOW_TIME_RECOMMENDATION = (
    "Significant budget remaining with little time left. Consider planned expenses."
)

ALERT_SEVERITY = {
    STATUS_NEAR_LIMIT: "warning",
    STATUS_CRITICAL: "critical",
    STATUS_OVER_BUDGET: "critical",
}
ALERT_MESSAGES = {
    STATUS_NEAR_LIMIT: "Budget '{name}' is approaching its limit ({current:.1f}% used).",
    STATUS_CRITICAL: "Budget '{name}' has reached a critical level ({current:.1f}% used).",
    STATUS_OVER_BUDGET: "Budget '{name}' is over budget ({current:.1f}% used).",
}


def utilization_percent(spent: Decimal, amount: Decimal) -> float:
    if amount == 0:
        return 0.0
    return float(spent / amount * PERCENTAGE_BASE)


def determine_status(utilization: float, thresholds: BudgetSettings) -> str:
    """Label of the highest band the utilization has reached."""
    if utilization >= thresholds.over_budget_threshold:
        return STATUS_OVER_BUDGET
    if utilization >= thresholds.critical_threshold:
        return STATUS_CRITICAL
    if utilization >= thresholds.near_limit_threshold:
        return STATUS_NEAR_LIMIT
    return STATUS_HEALTHY


def band_threshold(status: str, thresholds: BudgetSettings) -> Optional[float]:
    return {
        STATUS_NEAR_LIMIT: thresholds.near_limit_threshold,
        STATUS_CRITICAL: thresholds.critical_threshold,
        STATUS_OVER_BUDGET: thresholds.over_budget_threshold,
    }.get(status)


def days_elapsed(budget: Budget, now: datetime) -> int:
    return whole_days(now - budget.start_date)


def spending_velocity(budget: Budget, now: datetime) -> Decimal:
    """Average spend per elapsed day; zero before the window has started."""
    elapsed = days_elapsed(budget, now)
    if elapsed <= 0:
        return ZERO
    return budget.spent / elapsed


def calculate_status(budget: Budget, now: datetime, thresholds: BudgetSettings) -> BudgetStatus:
    """
    Classify a budget and compute its day-based pacing metrics.

    Args:
        budget: Budget with an up-to-date spent amount
        now: Reference time
        thresholds: Band thresholds in percent

    Returns:
        BudgetStatus for the budget
    """
    utilization = utilization_percent(budget.spent, budget.amount)
    days_total = whole_days(budget.end_date - budget.start_date)
    elapsed = days_elapsed(budget, now)
    remaining_days = days_until(budget.end_date, now)

    daily_budget = budget.amount / days_total if days_total > 0 else ZERO
    daily_spent = budget.spent / elapsed if elapsed > 0 else ZERO

    projected_overrun = ZERO
    if daily_spent > 0 and remaining_days > 0:
        projected_total = budget.spent + daily_spent * remaining_days
        if projected_total > budget.amount:
            projected_overrun = projected_total - budget.amount

    return BudgetStatus(
        budget_id=budget.id,
        name=budget.name,
        total_amount=budget.amount,
        spent_amount=budget.spent,
        remaining_amount=budget.remaining_amount,
        utilization_percent=utilization,
        days_total=days_total,
        days_elapsed=elapsed,
        days_remaining=remaining_days,
        is_over_budget=utilization >= thresholds.over_budget_threshold,
        is_near_limit=utilization >= thresholds.near_limit_threshold,
        is_critical_limit=utilization >= thresholds.critical_threshold,
        daily_budget=daily_budget,
        daily_spent=daily_spent,
        projected_overrun=projected_overrun,
        status=determine_status(utilization, thresholds),
    )


def generate_recommendations(
    utilization: float,
    days_remaining: int,
    thresholds: BudgetSettings,
) -> List[str]:
    """Band advice plus the time-pressure note; the rules are additive."""
    recommendations = list(RECOMMENDATIONS[determine_status(utilization, thresholds)])
    if days_remaining <= LOW_TIME_DAYS and utilization < LOW_UTILIZATION_PERCENT:
        recommendations.append(LOW_TIME_RECOMMENDATION)
    return recommendations


def project_date(now: datetime, days: int) -> Optional[datetime]:
    """now plus whole days, or None when the result is past the calendar range."""
    try:
        return now + timedelta(days=days)
    except OverflowError:
        return None


def calculate_utilization(
    budget: Budget,
    now: datetime,
    thresholds: BudgetSettings,
) -> BudgetUtilization:
    """Velocity, projected exhaustion date and recommendations for a budget."""
    utilization = utilization_percent(budget.spent, budget.amount)
    velocity = spending_velocity(budget, now)

    projected_completion = None
    if velocity > 0:
        days_to_completion = (budget.amount - budget.spent) / velocity
        if days_to_completion > 0:
            projected_completion = project_date(now, int(days_to_completion))

    return BudgetUtilization(
        budget_id=budget.id,
        period=budget.period.value,
        utilization_percent=utilization,
        spending_velocity=velocity,
        projected_completion=projected_completion,
        recommendations=generate_recommendations(
            utilization, days_until(budget.end_date, now), thresholds
        ),
    )


def build_alert(budget: Budget, now: datetime, thresholds: BudgetSettings) -> Optional[BudgetAlert]:
    """Alert for a budget at or above the near-limit band, None if healthy."""
    utilization = utilization_percent(budget.spent, budget.amount)
    status = determine_status(utilization, thresholds)
    if status == STATUS_HEALTHY:
        return None
    return BudgetAlert(
        budget_id=budget.id,
        budget_name=budget.name,
        alert_type=status,
        threshold=band_threshold(status, thresholds),
        current=utilization,
        message=ALERT_MESSAGES[status].format(name=budget.name, current=utilization),
        severity=ALERT_SEVERITY[status],
        created_at=now,
    )
