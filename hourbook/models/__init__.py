"""Data models for the timesheet system.

This package contains Pydantic models for all business entities:
- BaseDataModel: Base class with common configuration
- TimeEntry: Individual timesheet entry (plus create/update inputs)
- Project, Category: Budgeted projects and internal buckets
- Assignment, FavoriteProject: Per user project grants and pins
- LeaveDay: Day-granularity leave markers
- Actor, User: Identity as supplied by the identity provider
- AuditRecord, AuditLog: Audit trail
"""

from hourbook.models.assignment import Assignment, AssignmentCreate, FavoriteProject
from hourbook.models.audit import AuditAction, AuditEntityType, AuditLog, AuditRecord
from hourbook.models.base import BaseDataModel
from hourbook.models.entry import EntryCreate, EntryUpdate, TimeEntry
from hourbook.models.identity import Actor, Role, User, UserUpdate
from hourbook.models.leave import LeaveDay, LeaveDayCreate, LeaveType
from hourbook.models.project import (
    Category,
    CategoryCreate,
    Project,
    ProjectCreate,
    ProjectStatus,
    ProjectUpdate,
    ProjectWithBudget,
)

__all__ = [
    "Actor",
    "Assignment",
    "AssignmentCreate",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "AuditRecord",
    "BaseDataModel",
    "Category",
    "CategoryCreate",
    "EntryCreate",
    "EntryUpdate",
    "FavoriteProject",
    "LeaveDay",
    "LeaveDayCreate",
    "LeaveType",
    "Project",
    "ProjectCreate",
    "ProjectStatus",
    "ProjectUpdate",
    "ProjectWithBudget",
    "Role",
    "TimeEntry",
    "User",
    "UserUpdate",
]
