"""Personal dashboard figures: today's progress, the week so far and the
user's active projects with their budget view."""

import datetime as dt
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from hourbook.calculators.time_utils import week_dates, week_start
from hourbook.models.entry import TimeEntry
from hourbook.models.project import ProjectWithBudget

logger = logging.getLogger(__name__)

WORKING_DAYS_PER_WEEK = 5


@dataclass
class DayProgress:
    date: dt.date
    entries: List[TimeEntry]
    total_minutes: int
    target_minutes: int
    is_complete: bool
    is_leave: bool


@dataclass
class WeekProgress:
    """The current week from Monday up to today.

    ``daily_breakdown`` maps every day from Monday to today to its minutes,
    zero for days without entries.
    """

    start_date: dt.date
    total_minutes: int
    target_minutes: int
    daily_breakdown: Dict[dt.date, int] = field(default_factory=dict)


@dataclass
class Dashboard:
    today: DayProgress
    week: WeekProgress
    projects: List[ProjectWithBudget]
    target_hours_per_day: float


class DashboardAggregator:
    """Builds a Dashboard from one user's entries for the current week."""

    def build(
        self,
        today: dt.date,
        entries: Iterable[TimeEntry],
        workday_hours: float,
        is_leave: bool,
        projects: List[ProjectWithBudget],
    ) -> Dashboard:
        """Build the dashboard.

        Args:
            today: Business date of the dashboard
            entries: The user's entries; deleted ones and days outside
                Monday..today are ignored
            workday_hours: Daily target in hours
            is_leave: Whether today is marked as leave
            projects: Active assigned projects with budget view

        Returns:
            Dashboard
        """
        monday = week_start(today)
        target_minutes = int(round(workday_hours * 60))

        daily: Dict[dt.date, int] = defaultdict(int)
        today_entries: List[TimeEntry] = []
        for entry in entries:
            if entry.is_deleted or not monday <= entry.date <= today:
                continue
            daily[entry.date] += entry.total_minutes
            if entry.date == today:
                today_entries.append(entry)

        breakdown = {day: daily.get(day, 0) for day in week_dates(today) if day <= today}
        today_minutes = breakdown[today]

        return Dashboard(
            today=DayProgress(
                date=today,
                entries=today_entries,
                total_minutes=today_minutes,
                target_minutes=target_minutes,
                is_complete=today_minutes >= target_minutes,
                is_leave=is_leave,
            ),
            week=WeekProgress(
                start_date=monday,
                total_minutes=sum(breakdown.values()),
                target_minutes=target_minutes * WORKING_DAYS_PER_WEEK,
                daily_breakdown=breakdown,
            ),
            projects=projects,
            target_hours_per_day=workday_hours,
        )
