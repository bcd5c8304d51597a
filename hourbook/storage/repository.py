"""Data-access layer for the timesheet system.

``TimesheetRepository`` wraps one SQLAlchemy session (one transaction) and
exposes the queries and writes the services need, returning pydantic domain
models. Unique-key violations are translated into ``ConflictError`` here so
that no storage-specific exception leaks out.
"""

import datetime as dt
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hourbook.errors import ConflictError, NotFoundError
from hourbook.models.assignment import Assignment, FavoriteProject
from hourbook.models.audit import AuditLog, AuditRecord
from hourbook.models.entry import TimeEntry
from hourbook.models.identity import User
from hourbook.models.leave import LeaveDay
from hourbook.models.project import Category, Project, ProjectStatus
from hourbook.storage.tables import (
    AssignmentRow,
    AuditLogRow,
    CategoryRow,
    EntryRow,
    FavoriteProjectRow,
    LeaveDayRow,
    ProjectRow,
    SettingRow,
    UserRow,
)

logger = logging.getLogger(__name__)


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


class TimesheetRepository:
    """Repository bound to a single session.

    Attributes:
        session: The SQLAlchemy session of the surrounding transaction
    """

    def __init__(self, session: Session):
        self.session = session

    def _insert(self, row: Any, conflict_message: str) -> Any:
        self.session.add(row)
        try:
            self.session.flush()
        except IntegrityError as e:
            logger.warning(f"Unique constraint violated: {conflict_message}")
            raise ConflictError(conflict_message) from e
        return row

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        row = self.session.get(UserRow, user_id)
        return User.model_validate(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        row = self.session.scalars(
            select(UserRow).where(UserRow.email == email.lower())
        ).first()
        return User.model_validate(row) if row else None

    def add_user(
        self, email: str, name: Optional[str], role: str, user_id: Optional[str] = None
    ) -> User:
        row = UserRow(email=email.lower(), name=name, role=_enum_value(role))
        if user_id:
            row.id = user_id
        return User.model_validate(self._insert(row, "User already exists"))

    def update_user(self, user_id: str, **fields: Any) -> User:
        row = self.session.get(UserRow, user_id)
        if row is None:
            raise NotFoundError("User not found")
        for key, value in fields.items():
            setattr(row, key, _enum_value(value))
        self.session.flush()
        return User.model_validate(row)

    def list_users(self) -> List[User]:
        rows = self.session.scalars(
            select(UserRow).order_by(UserRow.is_active.desc(), UserRow.name.asc())
        )
        return [User.model_validate(row) for row in rows]

    def get_users_by_ids(self, user_ids: Iterable[str]) -> Dict[str, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        rows = self.session.scalars(select(UserRow).where(UserRow.id.in_(ids)))
        return {row.id: User.model_validate(row) for row in rows}

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def get_project(self, project_id: str, include_deleted: bool = False) -> Optional[Project]:
        row = self.session.get(ProjectRow, project_id)
        if row is None or (row.is_deleted and not include_deleted):
            return None
        return Project.model_validate(row)

    def add_project(self, name: str, color: str, total_hours: float) -> Project:
        row = ProjectRow(name=name, color=color, total_hours=total_hours, used_hours=0.0)
        return Project.model_validate(self._insert(row, "Project already exists"))

    def update_project(self, project_id: str, **fields: Any) -> Project:
        """Update admin-editable project fields.

        Raises:
            NotFoundError: If the project is absent or soft-deleted
            ValueError: If asked to write ``used_hours``
        """
        if "used_hours" in fields:
            raise ValueError("used_hours is maintained through increment_used_hours only")
        row = self.session.get(ProjectRow, project_id)
        if row is None or row.is_deleted:
            raise NotFoundError("Project not found")
        for key, value in fields.items():
            setattr(row, key, _enum_value(value))
        self.session.flush()
        return Project.model_validate(row)

    def list_projects(
        self,
        include_archived: bool = False,
        assigned_to: Optional[str] = None,
        include_deleted: bool = False,
    ) -> List[Project]:
        """List projects ordered by name.

        Args:
            include_archived: Include ARCHIVED projects
            assigned_to: Only projects the given user is assigned to
            include_deleted: Include soft-deleted projects
        """
        stmt = select(ProjectRow)
        if not include_deleted:
            stmt = stmt.where(ProjectRow.is_deleted.is_(False))
        if not include_archived:
            stmt = stmt.where(ProjectRow.status == ProjectStatus.ACTIVE.value)
        if assigned_to is not None:
            stmt = stmt.join(AssignmentRow, AssignmentRow.project_id == ProjectRow.id).where(
                AssignmentRow.user_id == assigned_to
            )
        stmt = stmt.order_by(ProjectRow.name.asc())
        return [Project.model_validate(row) for row in self.session.scalars(stmt)]

    def get_projects_by_ids(self, project_ids: Iterable[str]) -> Dict[str, Project]:
        ids = set(project_ids)
        if not ids:
            return {}
        rows = self.session.scalars(select(ProjectRow).where(ProjectRow.id.in_(ids)))
        return {row.id: Project.model_validate(row) for row in rows}

    def increment_used_hours(self, project_id: str, delta_hours: float) -> None:
        """Atomically add ``delta_hours`` (may be negative) to a project's counter.

        Issued as a single ``UPDATE ... SET used_hours = used_hours + :delta``
        so concurrent writers never lose an update.

        Raises:
            NotFoundError: If no project row has this id
        """
        stmt = (
            update(ProjectRow)
            .where(ProjectRow.id == project_id)
            .values(used_hours=ProjectRow.used_hours + delta_hours)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError("Project not found")

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def get_category(self, category_id: str) -> Optional[Category]:
        row = self.session.get(CategoryRow, category_id)
        return Category.model_validate(row) if row else None

    def add_category(self, name: str, color: str) -> Category:
        row = CategoryRow(name=name, color=color)
        return Category.model_validate(
            self._insert(row, f"Category '{name}' already exists")
        )

    def list_categories(self) -> List[Category]:
        rows = self.session.scalars(select(CategoryRow).order_by(CategoryRow.name.asc()))
        return [Category.model_validate(row) for row in rows]

    def get_categories_by_ids(self, category_ids: Iterable[str]) -> Dict[str, Category]:
        ids = set(category_ids)
        if not ids:
            return {}
        rows = self.session.scalars(select(CategoryRow).where(CategoryRow.id.in_(ids)))
        return {row.id: Category.model_validate(row) for row in rows}

    # ------------------------------------------------------------------
    # Timesheet entries
    # ------------------------------------------------------------------

    def get_entry(self, entry_id: str, include_deleted: bool = False) -> Optional[TimeEntry]:
        row = self.session.get(EntryRow, entry_id)
        if row is None or (row.is_deleted and not include_deleted):
            return None
        return TimeEntry.model_validate(row)

    def add_entry(
        self,
        user_id: str,
        date: dt.date,
        hours: int,
        minutes: int,
        project_id: Optional[str] = None,
        category_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> TimeEntry:
        row = EntryRow(
            user_id=user_id,
            project_id=project_id,
            category_id=category_id,
            date=date,
            hours=hours,
            minutes=minutes,
            notes=notes,
            is_deleted=False,
        )
        return TimeEntry.model_validate(self._insert(row, "Entry already exists"))

    def update_entry(self, entry_id: str, **fields: Any) -> TimeEntry:
        row = self.session.get(EntryRow, entry_id)
        if row is None:
            raise NotFoundError("Entry not found")
        for key, value in fields.items():
            setattr(row, key, value)
        self.session.flush()
        return TimeEntry.model_validate(row)

    def list_entries(
        self,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        category_id: Optional[str] = None,
        include_deleted: bool = False,
    ) -> List[TimeEntry]:
        """List entries, newest date first, then newest created first.

        Soft-deleted entries are excluded unless ``include_deleted`` is set.
        """
        stmt = select(EntryRow)
        if not include_deleted:
            stmt = stmt.where(EntryRow.is_deleted.is_(False))
        if start_date is not None:
            stmt = stmt.where(EntryRow.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(EntryRow.date <= end_date)
        if user_id is not None:
            stmt = stmt.where(EntryRow.user_id == user_id)
        if project_id is not None:
            stmt = stmt.where(EntryRow.project_id == project_id)
        if category_id is not None:
            stmt = stmt.where(EntryRow.category_id == category_id)
        stmt = stmt.order_by(EntryRow.date.desc(), EntryRow.created_at.desc())
        return [TimeEntry.model_validate(row) for row in self.session.scalars(stmt)]

    # ------------------------------------------------------------------
    # Assignments and favorites
    # ------------------------------------------------------------------

    def get_assignment(self, user_id: str, project_id: str) -> Optional[Assignment]:
        row = self.session.scalars(
            select(AssignmentRow).where(
                AssignmentRow.user_id == user_id, AssignmentRow.project_id == project_id
            )
        ).first()
        return Assignment.model_validate(row) if row else None

    def add_assignment(self, user_id: str, project_id: str) -> Assignment:
        row = AssignmentRow(user_id=user_id, project_id=project_id)
        return Assignment.model_validate(
            self._insert(row, "User is already assigned to this project")
        )

    def delete_assignment(self, user_id: str, project_id: str) -> int:
        result = self.session.execute(
            delete(AssignmentRow).where(
                AssignmentRow.user_id == user_id, AssignmentRow.project_id == project_id
            )
        )
        return result.rowcount

    def list_assignments(
        self, project_id: Optional[str] = None, user_id: Optional[str] = None
    ) -> List[Assignment]:
        stmt = select(AssignmentRow)
        if project_id is not None:
            stmt = stmt.where(AssignmentRow.project_id == project_id)
        if user_id is not None:
            stmt = stmt.where(AssignmentRow.user_id == user_id)
        return [Assignment.model_validate(row) for row in self.session.scalars(stmt)]

    def add_favorite(self, user_id: str, project_id: str) -> FavoriteProject:
        row = FavoriteProjectRow(user_id=user_id, project_id=project_id)
        return FavoriteProject.model_validate(
            self._insert(row, "Project is already in favorites")
        )

    def delete_favorite(self, user_id: str, project_id: str) -> int:
        result = self.session.execute(
            delete(FavoriteProjectRow).where(
                FavoriteProjectRow.user_id == user_id,
                FavoriteProjectRow.project_id == project_id,
            )
        )
        return result.rowcount

    def list_favorites(self, user_id: str) -> List[FavoriteProject]:
        rows = self.session.scalars(
            select(FavoriteProjectRow).where(FavoriteProjectRow.user_id == user_id)
        )
        return [FavoriteProject.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Leave
    # ------------------------------------------------------------------

    def get_leave_day(self, user_id: str, date: dt.date) -> Optional[LeaveDay]:
        row = self.session.scalars(
            select(LeaveDayRow).where(LeaveDayRow.user_id == user_id, LeaveDayRow.date == date)
        ).first()
        return LeaveDay.model_validate(row) if row else None

    def add_leave_day(self, user_id: str, date: dt.date, leave_type: str) -> LeaveDay:
        row = LeaveDayRow(user_id=user_id, date=date, type=_enum_value(leave_type))
        return LeaveDay.model_validate(
            self._insert(row, "This day is already marked as leave")
        )

    def delete_leave_day(self, user_id: str, date: dt.date) -> int:
        result = self.session.execute(
            delete(LeaveDayRow).where(LeaveDayRow.user_id == user_id, LeaveDayRow.date == date)
        )
        return result.rowcount

    def list_leave_days(
        self,
        user_id: Optional[str] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
    ) -> List[LeaveDay]:
        stmt = select(LeaveDayRow)
        if user_id is not None:
            stmt = stmt.where(LeaveDayRow.user_id == user_id)
        if start_date is not None:
            stmt = stmt.where(LeaveDayRow.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(LeaveDayRow.date <= end_date)
        stmt = stmt.order_by(LeaveDayRow.date.desc())
        return [LeaveDay.model_validate(row) for row in self.session.scalars(stmt)]

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_setting_values(self) -> Dict[str, str]:
        return {row.key: row.value for row in self.session.scalars(select(SettingRow))}

    def upsert_setting(self, key: str, value: str) -> None:
        row = self.session.get(SettingRow, key)
        if row is None:
            self.session.add(SettingRow(key=key, value=value))
        else:
            row.value = value
        self.session.flush()

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    def add_audit_log(self, record: AuditRecord) -> AuditLog:
        payload = record.model_dump(mode="json")
        row = AuditLogRow(
            user_id=record.actor_id,
            action=payload["action"],
            entity_type=payload["entity_type"],
            entity_id=record.entity_id,
            old_value=payload["old_value"],
            new_value=payload["new_value"],
        )
        self.session.add(row)
        self.session.flush()
        return AuditLog.model_validate(row)

    def list_audit_logs(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[AuditLog]:
        stmt = select(AuditLogRow)
        if entity_type is not None:
            stmt = stmt.where(AuditLogRow.entity_type == entity_type)
        if entity_id is not None:
            stmt = stmt.where(AuditLogRow.entity_id == entity_id)
        if user_id is not None:
            stmt = stmt.where(AuditLogRow.user_id == user_id)
        stmt = stmt.order_by(AuditLogRow.created_at.desc()).limit(limit).offset(offset)
        return [AuditLog.model_validate(row) for row in self.session.scalars(stmt)]
