"""Time calculation utilities for the timesheet system.

This module provides low-level utilities for durations and business dates:
- Rounding minutes to the nearest quarter hour
- Converting between (hours, minutes) pairs, total minutes and decimal hours
- Checking the backdate window
- Computing Monday-start weeks

Dates handled here are timezone-naive business dates, never timestamps.
"""

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Tuple

QUARTER_HOUR = 15
MINUTES_PER_DAY = 24 * 60


def round_to_nearest_15(minutes: int) -> int:
    """Round minutes to the nearest multiple of 15, halves rounding up.

    Args:
        minutes: Non-negative number of minutes

    Returns:
        Minutes rounded to a quarter hour (may be 60)

    Example:
        >>> round_to_nearest_15(7)
        0
        >>> round_to_nearest_15(8)
        15
        >>> round_to_nearest_15(22)
        15
        >>> round_to_nearest_15(23)
        30
    """
    quarters = (Decimal(minutes) / Decimal(QUARTER_HOUR)).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return int(quarters) * QUARTER_HOUR


def normalize_duration(hours: int, minutes: int) -> Tuple[int, int]:
    """Round minutes to a quarter hour and carry a full hour into ``hours``.

    Args:
        hours: Whole hours (0-24)
        minutes: Minutes (0-59), unrounded

    Returns:
        (hours, minutes) with minutes in {0, 15, 30, 45}

    Raises:
        ValueError: If the resulting duration exceeds 24 hours

    Example:
        >>> normalize_duration(1, 53)
        (2, 0)
        >>> normalize_duration(0, 38)
        (0, 45)
    """
    rounded = round_to_nearest_15(minutes)
    if rounded == 60:
        hours, rounded = hours + 1, 0
    if to_minutes(hours, rounded) > MINUTES_PER_DAY:
        raise ValueError(
            f"Duration {hours}h {rounded}m exceeds the 24 hour maximum for one entry"
        )
    return hours, rounded


def to_minutes(hours: int, minutes: int) -> int:
    """Convert hours and minutes to total minutes.

    Example:
        >>> to_minutes(2, 30)
        150
    """
    return hours * 60 + minutes


def from_minutes(total_minutes: int) -> Tuple[int, int]:
    """Split total minutes into (hours, minutes).

    Example:
        >>> from_minutes(135)
        (2, 15)
    """
    return total_minutes // 60, total_minutes % 60


def minutes_to_hours(total_minutes: float) -> float:
    """Express minutes as decimal hours without any rounding.

    Example:
        >>> minutes_to_hours(90)
        1.5
    """
    return total_minutes / 60


def format_duration(hours: int, minutes: int, style: str = "short") -> str:
    """Format a duration for display.

    Args:
        hours: Whole hours
        minutes: Minutes
        style: 'short' ("2h 30m") or 'decimal' ("2.5h", one decimal place)

    Returns:
        Display string

    Example:
        >>> format_duration(2, 30)
        '2h 30m'
        >>> format_duration(0, 45)
        '45m'
        >>> format_duration(2, 30, style="decimal")
        '2.5h'
    """
    if style == "decimal":
        return f"{hours + minutes / 60:.1f}h"
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


def is_within_backdate_limit(date: dt.date, limit_days: int, today: dt.date) -> bool:
    """Check that ``today - limit_days <= date``.

    Future dates are allowed; there is no forward limit.

    Args:
        date: Business date of the entry
        limit_days: Maximum number of days in the past
        today: Current business date

    Returns:
        True if the date is inside the window

    Example:
        >>> today = dt.date(2024, 3, 15)
        >>> is_within_backdate_limit(dt.date(2024, 3, 8), 7, today)
        True
        >>> is_within_backdate_limit(dt.date(2024, 3, 7), 7, today)
        False
    """
    return date >= today - dt.timedelta(days=limit_days)


def week_start(date: dt.date) -> dt.date:
    """Return the Monday of the week containing ``date``."""
    return date - dt.timedelta(days=date.weekday())


def week_dates(date: dt.date) -> List[dt.date]:
    """Return the seven dates (Monday to Sunday) of the week containing ``date``."""
    start = week_start(date)
    return [start + dt.timedelta(days=offset) for offset in range(7)]
