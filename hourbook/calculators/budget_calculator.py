"""Derived budget view calculations.

This module is the single place that turns a project's stored totals into
remaining hours, percentage used and the green/yellow/red status band.
Every surface that shows budget status (dashboard cards, project lists,
CLI tables) goes through ``calculate_budget_view``.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

WARNING_PERCENTAGE = 80
CRITICAL_PERCENTAGE = 100


class BudgetStatus(str, Enum):
    """Budget status band."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


@dataclass(frozen=True)
class BudgetView:
    """Derived budget figures for a project.

    Attributes:
        total_hours: Admin-set budget (0 means unbudgeted)
        used_hours: Hours consumed so far
        remaining_hours: Budget left, never negative
        percentage_used: Whole-number percentage of the budget consumed
        status: Status band derived from percentage_used

    Example:
        >>> view = calculate_budget_view(total_hours=100, used_hours=85)
        >>> view.percentage_used, view.status.value
        (85, 'yellow')
    """

    total_hours: float
    used_hours: float
    remaining_hours: float
    percentage_used: int
    status: BudgetStatus


def calculate_budget_percentage(used_hours: float, total_hours: float) -> int:
    """Percentage of the budget consumed, rounded half up to a whole number.

    An unbudgeted project (total_hours == 0) always reports 0.

    Example:
        >>> calculate_budget_percentage(50, 0)
        0
        >>> calculate_budget_percentage(79.5, 100)
        80
    """
    if total_hours <= 0:
        return 0
    ratio = Decimal(str(used_hours)) / Decimal(str(total_hours)) * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def get_budget_status(percentage_used: int) -> BudgetStatus:
    """Classify a percentage into the green/yellow/red band.

    Example:
        >>> get_budget_status(79).value
        'green'
        >>> get_budget_status(80).value
        'yellow'
        >>> get_budget_status(100).value
        'red'
    """
    if percentage_used >= CRITICAL_PERCENTAGE:
        return BudgetStatus.RED
    if percentage_used >= WARNING_PERCENTAGE:
        return BudgetStatus.YELLOW
    return BudgetStatus.GREEN


def calculate_remaining_hours(total_hours: float, used_hours: float) -> float:
    """Budget left, clamped at zero."""
    return max(0.0, total_hours - used_hours)


def calculate_budget_view(total_hours: float, used_hours: float) -> BudgetView:
    """Compute the full derived budget view for a project.

    Args:
        total_hours: Budget in hours (0 means unbudgeted)
        used_hours: Hours consumed

    Returns:
        BudgetView with remaining hours, percentage and status band

    Example:
        >>> view = calculate_budget_view(total_hours=0, used_hours=50)
        >>> view.percentage_used, view.status.value, view.remaining_hours
        (0, 'green', 0.0)
    """
    percentage = calculate_budget_percentage(used_hours, total_hours)
    return BudgetView(
        total_hours=total_hours,
        used_hours=used_hours,
        remaining_hours=calculate_remaining_hours(total_hours, used_hours),
        percentage_used=percentage,
        status=get_budget_status(percentage),
    )
