"""Calculator modules for the timesheet system."""

from hourbook.calculators.budget_calculator import (
    BudgetStatus,
    BudgetView,
    calculate_budget_percentage,
    calculate_budget_view,
    calculate_remaining_hours,
    get_budget_status,
)
from hourbook.calculators.time_utils import (
    format_duration,
    from_minutes,
    is_within_backdate_limit,
    minutes_to_hours,
    normalize_duration,
    round_to_nearest_15,
    to_minutes,
    week_dates,
    week_start,
)

__all__ = [
    # budget_calculator
    "BudgetStatus",
    "BudgetView",
    "calculate_budget_percentage",
    "calculate_budget_view",
    "calculate_remaining_hours",
    "get_budget_status",
    # time_utils
    "format_duration",
    "from_minutes",
    "is_within_backdate_limit",
    "minutes_to_hours",
    "normalize_duration",
    "round_to_nearest_15",
    "to_minutes",
    "week_dates",
    "week_start",
]
