"""Audit log models."""

import datetime as dt
from enum import Enum
from typing import Any, Optional

from hourbook.models.base import BaseDataModel


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ARCHIVE = "ARCHIVE"
    RESTORE = "RESTORE"
    ASSIGN = "ASSIGN"
    UNASSIGN = "UNASSIGN"
    BUDGET_CHANGE = "BUDGET_CHANGE"
    ROLE_CHANGE = "ROLE_CHANGE"


class AuditEntityType(str, Enum):
    PROJECT = "Project"
    TIMESHEET = "Timesheet"
    ASSIGNMENT = "Assignment"
    USER = "User"
    CATEGORY = "Category"
    SETTINGS = "Settings"


class AuditRecord(BaseDataModel):
    """A fire-and-forget audit event handed to an audit sink."""

    actor_id: str
    action: AuditAction
    entity_type: AuditEntityType
    entity_id: str
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None


class AuditLog(BaseDataModel):
    """A persisted audit event."""

    id: str
    user_id: str
    action: str
    entity_type: str
    entity_id: str
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    created_at: Optional[dt.datetime] = None
