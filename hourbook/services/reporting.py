"""
Reports, admin statistics, the personal dashboard and counter reconciliation.

All of them read entries back from storage and recompute figures through the
aggregators; none of them writes anything.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from hourbook.aggregators.dashboard_aggregator import Dashboard, DashboardAggregator
from hourbook.aggregators.report_aggregator import (
    ProjectTotal,
    Report,
    ReportAggregator,
    ReportFilters,
    UserTotal,
)
from hourbook.calculators.time_utils import week_start
from hourbook.errors import AuthorizationError, ValidationError
from hourbook.models.identity import Actor
from hourbook.models.leave import LeaveType
from hourbook.services.project_service import sort_favorites_first, with_budget
from hourbook.services.settings_service import SettingsService
from hourbook.storage.database import Database
from hourbook.utils.logging_utils import log_function_call

logger = logging.getLogger(__name__)

RECONCILIATION_TOLERANCE_HOURS = 1e-6


@dataclass
class UserOnLeave:
    user_id: str
    user_name: str
    leave_type: LeaveType


@dataclass
class AdminStats:
    """All-time hours in both directions plus who is away today.

    Attributes:
        date: Business date the leave list refers to
        project_breakdown: Projects, largest first, each with its users
        user_breakdown: Users, largest first, each with its projects
        users_on_leave: Users with a leave marker on ``date``
    """

    date: dt.date
    project_breakdown: List[ProjectTotal]
    user_breakdown: List[UserTotal]
    users_on_leave: List[UserOnLeave]


class ReportService:
    """Builds admin reports and per-user dashboards."""

    def __init__(
        self,
        database: Database,
        settings_service: SettingsService,
        aggregator: Optional[ReportAggregator] = None,
        dashboard_aggregator: Optional[DashboardAggregator] = None,
        clock: Callable[[], dt.date] = dt.date.today,
    ):
        self.database = database
        self.settings_service = settings_service
        self.aggregator = aggregator or ReportAggregator()
        self.dashboard_aggregator = dashboard_aggregator or DashboardAggregator()
        self.clock = clock

    @log_function_call(include_args=True, level="INFO")
    def generate_report(
        self,
        actor: Actor,
        start_date: dt.date,
        end_date: dt.date,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> Report:
        """Aggregate entries in ``[start_date, end_date]``.

        Raises:
            AuthorizationError: If the actor is not an admin
            ValidationError: If the range is inverted
        """
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can generate reports")
        if start_date > end_date:
            raise ValidationError("start_date must not be after end_date")

        filters = ReportFilters(
            start_date=start_date,
            end_date=end_date,
            user_id=user_id,
            project_id=project_id,
            category_id=category_id,
        )
        with self.database.transaction() as repo:
            entries = repo.list_entries(
                start_date=start_date,
                end_date=end_date,
                user_id=user_id,
                project_id=project_id,
                category_id=category_id,
            )
            users = repo.get_users_by_ids(e.user_id for e in entries)
            projects = repo.get_projects_by_ids(e.project_id for e in entries if e.project_id)
            categories = repo.get_categories_by_ids(
                e.category_id for e in entries if e.category_id
            )

        report = self.aggregator.aggregate(entries, users, projects, categories, filters)
        logger.info(
            f"Report {start_date}..{end_date}: {len(report.entries)} entries, "
            f"{report.summary.total_hours:.2f}h"
        )
        return report

    @log_function_call
    def admin_stats(self, actor: Actor, today: Optional[dt.date] = None) -> AdminStats:
        """Breakdowns over every non-deleted entry and today's leave list.

        Raises:
            AuthorizationError: If the actor is not an admin
        """
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can view statistics")
        today = today or self.clock()

        with self.database.transaction() as repo:
            entries = repo.list_entries()
            leave_days = repo.list_leave_days(start_date=today, end_date=today)
            users = repo.get_users_by_ids(
                [e.user_id for e in entries] + [day.user_id for day in leave_days]
            )
            projects = repo.get_projects_by_ids(e.project_id for e in entries if e.project_id)

        summary = self.aggregator.aggregate(entries, users, projects).summary
        on_leave = [
            UserOnLeave(
                user_id=day.user_id,
                user_name=users[day.user_id].display_name if day.user_id in users else "Unknown",
                leave_type=day.type,
            )
            for day in leave_days
        ]
        logger.info(f"Admin stats for {today}: {len(on_leave)} user(s) on leave")
        return AdminStats(
            date=today,
            project_breakdown=summary.project_breakdown,
            user_breakdown=summary.user_breakdown,
            users_on_leave=on_leave,
        )

    def dashboard(self, actor: Actor, today: Optional[dt.date] = None) -> Dashboard:
        """Today's and this week's progress plus the actor's active projects."""
        today = today or self.clock()
        workday_hours = self.settings_service.get_settings().workday_hours

        with self.database.transaction() as repo:
            entries = repo.list_entries(
                start_date=week_start(today), end_date=today, user_id=actor.user_id
            )
            is_leave = repo.get_leave_day(actor.user_id, today) is not None
            projects = repo.list_projects(assigned_to=actor.user_id)
            favorite_ids = {f.project_id for f in repo.list_favorites(actor.user_id)}

        return self.dashboard_aggregator.build(
            today=today,
            entries=entries,
            workday_hours=workday_hours,
            is_leave=is_leave,
            projects=sort_favorites_first([with_budget(p, favorite_ids) for p in projects]),
        )


@dataclass
class Discrepancy:
    """A project whose stored counter disagrees with its entries."""

    project_id: str
    project_name: str
    stored_hours: float
    computed_hours: float

    @property
    def difference(self) -> float:
        return self.stored_hours - self.computed_hours


class ReconciliationService:
    """Compares every project's ``used_hours`` with a recomputation.

    Read-only: discrepancies are reported and logged, never corrected.
    """

    def __init__(self, database: Database, aggregator: Optional[ReportAggregator] = None):
        self.database = database
        self.aggregator = aggregator or ReportAggregator()

    @log_function_call
    def reconcile(self, actor: Actor) -> List[Discrepancy]:
        """Return the projects whose counter is off by more than the tolerance.

        Raises:
            AuthorizationError: If the actor is not an admin
        """
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can reconcile budgets")

        with self.database.transaction() as repo:
            projects = repo.list_projects(include_archived=True)
            computed = self.aggregator.project_minutes(repo.list_entries())

        discrepancies = []
        for project in projects:
            computed_hours = computed.get(project.id, 0) / 60
            if abs(project.used_hours - computed_hours) > RECONCILIATION_TOLERANCE_HOURS:
                discrepancy = Discrepancy(
                    project_id=project.id,
                    project_name=project.name,
                    stored_hours=project.used_hours,
                    computed_hours=computed_hours,
                )
                logger.warning(
                    f"Counter mismatch on {project.name} ({project.id}): stored "
                    f"{project.used_hours:.4f}h, entries sum to {computed_hours:.4f}h"
                )
                discrepancies.append(discrepancy)

        logger.info(
            f"Reconciled {len(projects)} projects, {len(discrepancies)} discrepancies"
        )
        return discrepancies
