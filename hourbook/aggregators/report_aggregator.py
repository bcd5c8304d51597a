"""Report aggregation over timesheet entries.

This module recomputes totals, billable/internal splits and per-project and
per-user breakdowns from the entry rows themselves. It never reads the
stored ``used_hours`` counters, which makes it the independent cross-check
for budget accounting.
"""

import csv
import datetime as dt
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd

from hourbook.calculators.time_utils import minutes_to_hours
from hourbook.models.entry import TimeEntry
from hourbook.models.identity import User
from hourbook.models.project import Category, Project

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "Date",
    "User",
    "Project/Category",
    "Hours",
    "Minutes",
    "Total Hours",
    "Notes",
]


@dataclass
class ReportFilters:
    """Date range and optional filters of a report.

    A filter left as None does not restrict the entry set.
    """

    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    user_id: Optional[str] = None
    project_id: Optional[str] = None
    category_id: Optional[str] = None

    def matches(self, entry: TimeEntry) -> bool:
        if self.start_date is not None and entry.date < self.start_date:
            return False
        if self.end_date is not None and entry.date > self.end_date:
            return False
        if self.user_id is not None and entry.user_id != self.user_id:
            return False
        if self.project_id is not None and entry.project_id != self.project_id:
            return False
        if self.category_id is not None and entry.category_id != self.category_id:
            return False
        return True


@dataclass
class ProjectTotal:
    """Minutes logged against one project.

    In the project breakdown ``users`` holds the per-user sub-totals,
    largest first. Project sub-totals nested under a ``UserTotal`` leave
    it empty.
    """

    project_id: str
    project_name: str
    minutes: int
    users: List["UserTotal"] = field(default_factory=list)

    @property
    def hours(self) -> float:
        return minutes_to_hours(self.minutes)


@dataclass
class UserTotal:
    """Minutes logged by one user, with per-project sub-totals.

    Attributes:
        user_id: User identifier
        user_name: Display name (name, else email)
        minutes: All minutes, billable and internal
        projects: Project sub-totals, largest first
    """

    user_id: str
    user_name: str
    minutes: int
    projects: List[ProjectTotal] = field(default_factory=list)

    @property
    def hours(self) -> float:
        return minutes_to_hours(self.minutes)


@dataclass
class ReportSummary:
    total_minutes: int
    billable_minutes: int
    internal_minutes: int
    project_breakdown: List[ProjectTotal]
    user_breakdown: List[UserTotal]

    @property
    def total_hours(self) -> float:
        return minutes_to_hours(self.total_minutes)

    @property
    def billable_hours(self) -> float:
        return minutes_to_hours(self.billable_minutes)

    @property
    def internal_hours(self) -> float:
        return minutes_to_hours(self.internal_minutes)


@dataclass
class Report:
    """An aggregated report with the entries it was built from.

    Attributes:
        filters: Filters the report was built with
        summary: Totals and breakdowns
        entries: Matching non-deleted entries, in input order
        user_names: Display name per user id
        target_names: Display name per project or category id

    Example:
        >>> report = ReportAggregator().aggregate(entries, users, projects, categories)
        >>> report.summary.total_hours
        7.5
        >>> csv_text = report.to_csv()
    """

    filters: ReportFilters
    summary: ReportSummary
    entries: List[TimeEntry]
    user_names: Dict[str, str] = field(default_factory=dict)
    target_names: Dict[str, str] = field(default_factory=dict)

    def target_name(self, entry: TimeEntry) -> str:
        target_id = entry.project_id or entry.category_id
        return self.target_names.get(target_id, "") if target_id else ""

    def to_dataframe(self) -> pd.DataFrame:
        """Render the entries as a DataFrame with the export columns."""
        rows = [
            {
                "Date": entry.date.isoformat(),
                "User": self.user_names.get(entry.user_id, ""),
                "Project/Category": self.target_name(entry),
                "Hours": entry.hours,
                "Minutes": entry.minutes,
                "Total Hours": _two_places(entry.total_minutes),
                "Notes": entry.notes or "",
            }
            for entry in self.entries
        ]
        return pd.DataFrame(rows, columns=CSV_COLUMNS)

    def to_csv(self) -> str:
        """Render the delimited export.

        Text columns are quoted with embedded quotes doubled. Numbers are
        left bare, Total Hours with two decimals.
        """
        return self.to_dataframe().to_csv(
            index=False,
            quoting=csv.QUOTE_NONNUMERIC,
            lineterminator="\n",
        )


def _two_places(total_minutes: int) -> Decimal:
    # Decimal rather than a formatted string keeps the csv writer from quoting it
    return (Decimal(total_minutes) / 60).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ReportAggregator:
    """Recomputes report figures from entry rows.

    The aggregator:
    1. Drops soft-deleted entries and entries outside the filters
    2. Splits minutes into billable (project) and internal (category only)
    3. Groups minutes by project and by user, with per-user project sub-totals
    4. Sorts every breakdown by hours, largest first

    Ties between equal totals keep no particular order.
    """

    def aggregate(
        self,
        entries: Iterable[TimeEntry],
        users: Optional[Mapping[str, User]] = None,
        projects: Optional[Mapping[str, Project]] = None,
        categories: Optional[Mapping[str, Category]] = None,
        filters: Optional[ReportFilters] = None,
    ) -> Report:
        """Build a report.

        Args:
            entries: Candidate entries (deleted ones are ignored)
            users: Users by id, for display names
            projects: Projects by id, for display names
            categories: Categories by id, for display names
            filters: Optional date range and id filters

        Returns:
            Report with summary, breakdowns and matching entries
        """
        users = users or {}
        projects = projects or {}
        categories = categories or {}
        filters = filters or ReportFilters()

        matching = [e for e in entries if not e.is_deleted and filters.matches(e)]
        logger.info(f"Aggregating report over {len(matching)} entries")

        total_minutes = 0
        billable_minutes = 0
        project_minutes: Dict[str, int] = defaultdict(int)
        user_minutes: Dict[str, int] = defaultdict(int)
        user_project_minutes: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))

        for entry in matching:
            minutes = entry.total_minutes
            total_minutes += minutes
            user_minutes[entry.user_id] += minutes
            if entry.project_id:
                billable_minutes += minutes
                project_minutes[entry.project_id] += minutes
                user_project_minutes[entry.user_id][entry.project_id] += minutes

        def project_name(project_id: str) -> str:
            project = projects.get(project_id)
            return project.name if project else "Unknown"

        def user_name(user_id: str) -> str:
            user = users.get(user_id)
            return user.display_name if user else "Unknown"

        project_users: Dict[str, List[UserTotal]] = defaultdict(list)
        for uid, per_project in user_project_minutes.items():
            for pid, sub in per_project.items():
                project_users[pid].append(UserTotal(uid, user_name(uid), sub))

        project_breakdown = sorted(
            (
                ProjectTotal(
                    project_id=pid,
                    project_name=project_name(pid),
                    minutes=minutes,
                    users=sorted(project_users[pid], key=lambda total: total.minutes, reverse=True),
                )
                for pid, minutes in project_minutes.items()
            ),
            key=lambda total: total.minutes,
            reverse=True,
        )
        user_breakdown = sorted(
            (
                UserTotal(
                    user_id=uid,
                    user_name=user_name(uid),
                    minutes=minutes,
                    projects=sorted(
                        (
                            ProjectTotal(pid, project_name(pid), sub)
                            for pid, sub in user_project_minutes[uid].items()
                        ),
                        key=lambda total: total.minutes,
                        reverse=True,
                    ),
                )
                for uid, minutes in user_minutes.items()
            ),
            key=lambda total: total.minutes,
            reverse=True,
        )

        summary = ReportSummary(
            total_minutes=total_minutes,
            billable_minutes=billable_minutes,
            internal_minutes=total_minutes - billable_minutes,
            project_breakdown=project_breakdown,
            user_breakdown=user_breakdown,
        )

        target_names = {pid: p.name for pid, p in projects.items()}
        target_names.update({cid: c.name for cid, c in categories.items()})

        return Report(
            filters=filters,
            summary=summary,
            entries=matching,
            user_names={uid: u.display_name for uid, u in users.items()},
            target_names=target_names,
        )

    def project_minutes(self, entries: Iterable[TimeEntry]) -> Dict[str, int]:
        """Unfiltered minutes per project over non-deleted entries."""
        totals: Dict[str, int] = defaultdict(int)
        for entry in entries:
            if not entry.is_deleted and entry.project_id:
                totals[entry.project_id] += entry.total_minutes
        return dict(totals)
