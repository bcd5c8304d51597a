"""
Audit trail.

Audit writes are a side channel: they happen after the primary mutation has
committed, in their own transaction, and a failure is logged and swallowed.
"""

import logging
from typing import List, Optional, Protocol

from hourbook.errors import AuthorizationError
from hourbook.models.audit import AuditAction, AuditEntityType, AuditLog, AuditRecord
from hourbook.models.identity import Actor
from hourbook.storage.database import Database
from hourbook.utils.logging_utils import sanitize_sensitive_data

logger = logging.getLogger(__name__)

_ACTION_PHRASES = {
    "CREATE": "created",
    "UPDATE": "updated",
    "DELETE": "deleted",
    "ARCHIVE": "archived",
    "RESTORE": "restored",
    "ASSIGN": "assigned user to",
    "UNASSIGN": "removed user from",
    "BUDGET_CHANGE": "changed budget for",
    "ROLE_CHANGE": "changed role of",
}


class AuditSink(Protocol):
    def record(self, record: AuditRecord) -> None:
        ...


class NullAuditSink:
    """Sink that drops every record."""

    def record(self, record: AuditRecord) -> None:
        return None


class DatabaseAuditSink:
    """Writes audit records to the ``audit_logs`` table.

    Never raises: storage failures are logged with the full traceback.
    """

    def __init__(self, database: Database):
        self.database = database

    def record(self, record: AuditRecord) -> None:
        try:
            with self.database.transaction() as repo:
                repo.add_audit_log(record)
        except Exception:
            logger.error(
                f"Failed to write audit log {record.action.value} "
                f"{record.entity_type.value} {record.entity_id}",
                exc_info=True,
            )


def audit(
    sink: AuditSink,
    actor: Actor,
    action: AuditAction,
    entity_type: AuditEntityType,
    entity_id: str,
    old_value=None,
    new_value=None,
) -> None:
    """Hand a record to ``sink``; any sink failure is logged and swallowed.

    Sensitive keys in dict payloads are redacted before the record is built.
    """
    record = AuditRecord(
        actor_id=actor.user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        old_value=sanitize_sensitive_data(old_value),
        new_value=sanitize_sensitive_data(new_value),
    )
    try:
        sink.record(record)
    except Exception:
        logger.error(f"Audit sink rejected {action.value} on {entity_id}", exc_info=True)


def format_audit_action(action: str, entity_type: str) -> str:
    """Human readable description of an audit event.

    Example:
        >>> format_audit_action("BUDGET_CHANGE", "Project")
        'changed budget for project'
    """
    return f"{_ACTION_PHRASES.get(action, action)} {entity_type.lower()}"


class AuditService:
    """Read access to the audit trail (admin only)."""

    def __init__(self, database: Database):
        self.database = database

    def list_audit_logs(
        self,
        actor: Actor,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[AuditLog]:
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can view the audit log")
        with self.database.transaction() as repo:
            return repo.list_audit_logs(
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=user_id,
                limit=limit,
                offset=offset,
            )
