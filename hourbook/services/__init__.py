"""Service layer: every operation authorizes, validates, then writes."""

from hourbook.services.audit import (
    AuditService,
    AuditSink,
    DatabaseAuditSink,
    NullAuditSink,
    format_audit_action,
)
from hourbook.services.budget_accounting import (
    BudgetAccountant,
    BudgetDelta,
    compute_budget_deltas,
)
from hourbook.services.leave_service import LeaveService
from hourbook.services.project_service import CategoryService, ProjectService
from hourbook.services.rate_limiter import (
    CounterStore,
    FixedWindowRateLimiter,
    InMemoryCounterStore,
)
from hourbook.services.reporting import Discrepancy, ReconciliationService, ReportService
from hourbook.services.settings_service import SettingsService
from hourbook.services.timesheet_service import TimesheetService
from hourbook.services.user_service import UserService

__all__ = [
    "AuditService",
    "AuditSink",
    "BudgetAccountant",
    "BudgetDelta",
    "CategoryService",
    "CounterStore",
    "DatabaseAuditSink",
    "Discrepancy",
    "FixedWindowRateLimiter",
    "InMemoryCounterStore",
    "LeaveService",
    "NullAuditSink",
    "ProjectService",
    "ReconciliationService",
    "ReportService",
    "SettingsService",
    "TimesheetService",
    "UserService",
    "compute_budget_deltas",
    "format_audit_action",
]
