"""Aggregation modules for reports and dashboards."""

from hourbook.aggregators.dashboard_aggregator import (
    Dashboard,
    DashboardAggregator,
    DayProgress,
    WeekProgress,
)
from hourbook.aggregators.report_aggregator import (
    CSV_COLUMNS,
    ProjectTotal,
    Report,
    ReportAggregator,
    ReportFilters,
    ReportSummary,
    UserTotal,
)

__all__ = [
    "CSV_COLUMNS",
    "Dashboard",
    "DashboardAggregator",
    "DayProgress",
    "ProjectTotal",
    "Report",
    "ReportAggregator",
    "ReportFilters",
    "ReportSummary",
    "UserTotal",
    "WeekProgress",
]
