"""
Timesheet entry lifecycle.

Creates, edits, soft-deletes, restores and copies entries. Every mutation
validates and authorizes first, then writes the entry row and applies the
budget delta through ``BudgetAccountant`` inside a single transaction.
"""

import datetime as dt
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from hourbook.errors import AuthorizationError, NotFoundError, ValidationError
from hourbook.models.audit import AuditAction, AuditEntityType
from hourbook.models.entry import EntryCreate, EntryUpdate, TimeEntry
from hourbook.models.identity import Actor
from hourbook.services.audit import AuditSink, NullAuditSink, audit
from hourbook.services.budget_accounting import BudgetAccountant
from hourbook.services.rate_limiter import FixedWindowRateLimiter
from hourbook.services.settings_service import SettingsService
from hourbook.storage.database import Database
from hourbook.storage.repository import TimesheetRepository
from hourbook.utils.logging_utils import LogContext
from hourbook.validators.entry_validators import EntryRuleValidators, parse_input

logger = logging.getLogger(__name__)

_SNAPSHOT_FIELDS = {"user_id", "project_id", "category_id", "date", "hours", "minutes", "notes"}


def _snapshot(entry: TimeEntry) -> Dict[str, Any]:
    return entry.model_dump(mode="json", include=_SNAPSHOT_FIELDS)


class TimesheetService:
    """Entry mutations and queries.

    Attributes:
        database: Storage collaborator
        settings_service: Source of the backdate limit
        rate_limiter: Optional throttle for entry creation
        audit_sink: Fire-and-forget audit channel
        accountant: Applies project budget deltas
        clock: Returns today's business date

    Example:
        >>> service = TimesheetService(database, settings_service)
        >>> entry = service.create_entry(
        ...     actor,
        ...     {"project_id": "p1", "date": "2024-03-04", "hours": 2, "minutes": 20},
        ... )
        >>> entry.minutes
        15
    """

    def __init__(
        self,
        database: Database,
        settings_service: SettingsService,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        audit_sink: Optional[AuditSink] = None,
        accountant: Optional[BudgetAccountant] = None,
        clock: Callable[[], dt.date] = dt.date.today,
    ):
        self.database = database
        self.settings_service = settings_service
        self.rate_limiter = rate_limiter
        self.audit_sink = audit_sink or NullAuditSink()
        self.accountant = accountant or BudgetAccountant()
        self.clock = clock

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _backdate_limit(self) -> int:
        return self.settings_service.get_settings().backdate_limit_days

    def _check_backdate(self, date: dt.date, limit_days: int) -> None:
        try:
            EntryRuleValidators.validate_backdate(date, limit_days, self.clock())
        except ValidationError:
            logger.warning(f"Rejected {date}: outside the {limit_days} day backdate window")
            raise

    @staticmethod
    def _require_owner_or_admin(actor: Actor, owner_id: str) -> None:
        if owner_id != actor.user_id and not actor.is_admin:
            logger.warning(f"{actor.user_id} tried to manage entries of {owner_id}")
            raise AuthorizationError("You can only manage your own timesheet entries")

    @staticmethod
    def _require_project(
        repo: TimesheetRepository, actor: Actor, owner_id: str, project_id: str
    ) -> None:
        """The project must exist, and non-admins must be assigned to it."""
        if repo.get_project(project_id) is None:
            raise NotFoundError("Project not found")
        if not actor.is_admin and repo.get_assignment(owner_id, project_id) is None:
            logger.warning(f"{owner_id} is not assigned to project {project_id}")
            raise AuthorizationError("You are not assigned to this project")

    @staticmethod
    def _require_category(repo: TimesheetRepository, category_id: str) -> None:
        if repo.get_category(category_id) is None:
            raise NotFoundError("Category not found")

    def _get_owned_entry(
        self,
        repo: TimesheetRepository,
        actor: Actor,
        entry_id: str,
        include_deleted: bool = False,
    ) -> TimeEntry:
        entry = repo.get_entry(entry_id, include_deleted=include_deleted)
        if entry is None:
            raise NotFoundError("Entry not found")
        self._require_owner_or_admin(actor, entry.user_id)
        return entry

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_entry(
        self,
        actor: Actor,
        data: Union[EntryCreate, Mapping[str, Any]],
        owner_id: Optional[str] = None,
    ) -> TimeEntry:
        """Log a new entry.

        Args:
            actor: Caller
            data: Entry input (project or category, date, hours, minutes, notes)
            owner_id: Owner of the entry; defaults to the actor. Only admins
                may log time for someone else.

        Returns:
            The persisted entry with minutes rounded to a quarter hour

        Raises:
            RateLimitError: If the actor creates entries too quickly
            ValidationError: On malformed input or a date outside the window
            AuthorizationError: If the actor may not log this time
            NotFoundError: If the project or category does not exist
        """
        owner_id = owner_id or actor.user_id
        self._require_owner_or_admin(actor, owner_id)
        if self.rate_limiter is not None:
            self.rate_limiter.check(actor.user_id)

        payload = parse_input(EntryCreate, data)
        hours, minutes = EntryRuleValidators.normalize_duration(payload.hours, payload.minutes)
        self._check_backdate(payload.date, self._backdate_limit())

        with LogContext(actor_id=actor.user_id):
            with self.database.transaction() as repo:
                if owner_id != actor.user_id and repo.get_user(owner_id) is None:
                    raise NotFoundError("User not found")
                if payload.project_id:
                    self._require_project(repo, actor, owner_id, payload.project_id)
                else:
                    self._require_category(repo, payload.category_id)

                entry = repo.add_entry(
                    user_id=owner_id,
                    project_id=payload.project_id,
                    category_id=payload.category_id,
                    date=payload.date,
                    hours=hours,
                    minutes=minutes,
                    notes=payload.notes,
                )
                self.accountant.record_created(repo, entry)

            logger.info(
                f"Created entry {entry.id} for {owner_id}: "
                f"{entry.hours}h {entry.minutes}m on {entry.date}"
            )

        audit(
            self.audit_sink,
            actor,
            AuditAction.CREATE,
            AuditEntityType.TIMESHEET,
            entry.id,
            new_value=_snapshot(entry),
        )
        return entry

    def update_entry(
        self,
        actor: Actor,
        entry_id: str,
        data: Union[EntryUpdate, Mapping[str, Any]],
    ) -> TimeEntry:
        """Apply a partial update to an entry.

        Setting a project clears the category and vice versa. A date change
        is checked against the backdate window. The budget delta covers a
        duration change, a project change, or both.

        Raises:
            NotFoundError: If the entry is absent or deleted, or a new target
                does not exist
            AuthorizationError: If the actor neither owns the entry nor is an
                admin, or is not assigned to a new project
            ValidationError: On malformed input or a date outside the window
        """
        payload = parse_input(EntryUpdate, data)
        fields = payload.model_fields_set
        limit_days = self._backdate_limit()

        with LogContext(actor_id=actor.user_id, entry_id=entry_id):
            with self.database.transaction() as repo:
                existing = self._get_owned_entry(repo, actor, entry_id)
                changes: Dict[str, Any] = {}

                if "date" in fields and payload.date != existing.date:
                    self._check_backdate(payload.date, limit_days)
                    changes["date"] = payload.date

                if "hours" in fields or "minutes" in fields:
                    hours, minutes = EntryRuleValidators.normalize_duration(
                        payload.hours if "hours" in fields else existing.hours,
                        payload.minutes if "minutes" in fields else existing.minutes,
                    )
                    changes["hours"] = hours
                    changes["minutes"] = minutes

                changes.update(self._target_changes(repo, actor, existing, payload, fields))

                if "notes" in fields:
                    changes["notes"] = payload.notes

                changes = {
                    key: value for key, value in changes.items() if getattr(existing, key) != value
                }
                if not changes:
                    return existing

                updated = repo.update_entry(entry_id, **changes)
                self.accountant.record_updated(repo, existing, updated)

            logger.info(f"Updated entry {entry_id}: {', '.join(sorted(changes))}")

        audit(
            self.audit_sink,
            actor,
            AuditAction.UPDATE,
            AuditEntityType.TIMESHEET,
            entry_id,
            old_value=_snapshot(existing),
            new_value=_snapshot(updated),
        )
        return updated

    def _target_changes(
        self,
        repo: TimesheetRepository,
        actor: Actor,
        existing: TimeEntry,
        payload: EntryUpdate,
        fields: set,
    ) -> Dict[str, Any]:
        project_given = "project_id" in fields
        category_given = "category_id" in fields
        if not project_given and not category_given:
            return {}

        if project_given and category_given and payload.project_id and payload.category_id:
            raise ValidationError("An entry targets a project or a category, not both")

        changes: Dict[str, Any] = {}
        if project_given:
            if payload.project_id and payload.project_id != existing.project_id:
                self._require_project(repo, actor, existing.user_id, payload.project_id)
            changes["project_id"] = payload.project_id
            if payload.project_id and not category_given:
                changes["category_id"] = None
        if category_given:
            if payload.category_id and payload.category_id != existing.category_id:
                self._require_category(repo, payload.category_id)
            changes["category_id"] = payload.category_id
            if payload.category_id and not project_given:
                changes["project_id"] = None
        return changes

    def delete_entry(self, actor: Actor, entry_id: str) -> TimeEntry:
        """Soft-delete an entry and release its hours from the project budget.

        Raises:
            NotFoundError: If the entry is absent or already deleted
            AuthorizationError: If the actor neither owns it nor is an admin
        """
        with LogContext(actor_id=actor.user_id, entry_id=entry_id):
            with self.database.transaction() as repo:
                existing = self._get_owned_entry(repo, actor, entry_id)
                deleted = repo.update_entry(entry_id, is_deleted=True)
                self.accountant.record_deleted(repo, existing)
            logger.info(f"Deleted entry {entry_id}")

        audit(
            self.audit_sink,
            actor,
            AuditAction.DELETE,
            AuditEntityType.TIMESHEET,
            entry_id,
            old_value=_snapshot(existing),
        )
        return deleted

    def restore_entry(self, actor: Actor, entry_id: str) -> TimeEntry:
        """Undo a soft delete and charge the hours back to the project.

        The entry must still fall inside the backdate window and its project
        must still exist.

        Raises:
            NotFoundError: If no deleted entry has this id, or its project
                is gone
            AuthorizationError: If the actor neither owns it nor is an admin
            ValidationError: If the entry date is outside the window
        """
        limit_days = self._backdate_limit()
        with LogContext(actor_id=actor.user_id, entry_id=entry_id):
            with self.database.transaction() as repo:
                existing = self._get_owned_entry(repo, actor, entry_id, include_deleted=True)
                if not existing.is_deleted:
                    raise NotFoundError("Deleted entry not found")
                self._check_backdate(existing.date, limit_days)
                if existing.project_id and repo.get_project(existing.project_id) is None:
                    raise NotFoundError("Project not found")
                restored = repo.update_entry(entry_id, is_deleted=False)
                self.accountant.record_restored(repo, restored)
            logger.info(f"Restored entry {entry_id}")

        audit(
            self.audit_sink,
            actor,
            AuditAction.RESTORE,
            AuditEntityType.TIMESHEET,
            entry_id,
            new_value=_snapshot(restored),
        )
        return restored

    def copy_entries(
        self,
        actor: Actor,
        source_date: dt.date,
        target_date: dt.date,
        owner_id: Optional[str] = None,
    ) -> List[TimeEntry]:
        """Duplicate a user's entries from one day onto another.

        Copies carry project/category and duration but never notes. Each
        copy is a fresh create with its own budget delta. Nothing is created
        if any check fails.

        Raises:
            NotFoundError: If the source day has no entries
            ValidationError: If the target day already has entries or is
                outside the backdate window
            AuthorizationError: If the actor may not log this time
        """
        owner_id = owner_id or actor.user_id
        self._require_owner_or_admin(actor, owner_id)
        if source_date == target_date:
            raise ValidationError("Source and target dates must differ")
        self._check_backdate(target_date, self._backdate_limit())

        with LogContext(actor_id=actor.user_id):
            with self.database.transaction() as repo:
                source = repo.list_entries(
                    start_date=source_date, end_date=source_date, user_id=owner_id
                )
                if not source:
                    raise NotFoundError(f"No entries found for {source_date.isoformat()}")

                if repo.list_entries(start_date=target_date, end_date=target_date, user_id=owner_id):
                    raise ValidationError(
                        f"{target_date.isoformat()} already has entries. Delete them first to copy."
                    )

                copies: List[TimeEntry] = []
                for source_entry in reversed(source):
                    if source_entry.project_id:
                        self._require_project(repo, actor, owner_id, source_entry.project_id)
                    copy = repo.add_entry(
                        user_id=owner_id,
                        project_id=source_entry.project_id,
                        category_id=source_entry.category_id,
                        date=target_date,
                        hours=source_entry.hours,
                        minutes=source_entry.minutes,
                        notes=None,
                    )
                    self.accountant.record_created(repo, copy)
                    copies.append(copy)

            logger.info(
                f"Copied {len(copies)} entries for {owner_id} "
                f"from {source_date} to {target_date}"
            )

        for copy in copies:
            audit(
                self.audit_sink,
                actor,
                AuditAction.CREATE,
                AuditEntityType.TIMESHEET,
                copy.id,
                new_value=_snapshot(copy),
            )
        return copies

    def copy_yesterday(self, actor: Actor) -> List[TimeEntry]:
        """Copy the actor's entries from yesterday onto today."""
        today = self.clock()
        return self.copy_entries(actor, today - dt.timedelta(days=1), today)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_entry(self, actor: Actor, entry_id: str) -> TimeEntry:
        with self.database.transaction() as repo:
            return self._get_owned_entry(repo, actor, entry_id)

    def list_entries(
        self,
        actor: Actor,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> List[TimeEntry]:
        """List non-deleted entries, newest first.

        Non-admins only ever see their own entries; admins see everyone's
        unless ``user_id`` narrows the list.
        """
        if not actor.is_admin:
            user_id = actor.user_id
        with self.database.transaction() as repo:
            return repo.list_entries(
                start_date=start_date,
                end_date=end_date,
                user_id=user_id,
                project_id=project_id,
            )
