"""
Project, category, assignment and favorite management.

Projects carry the admin-set budget; their ``used_hours`` counter is only
ever moved by budget accounting. Listing decorates each project with the
derived budget view so every surface shows the same banding.
"""

import logging
import random
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

from hourbook.calculators.budget_calculator import calculate_budget_view
from hourbook.errors import AuthorizationError, NotFoundError
from hourbook.models.assignment import Assignment, AssignmentCreate, FavoriteProject
from hourbook.models.audit import AuditAction, AuditEntityType
from hourbook.models.identity import Actor
from hourbook.models.project import (
    Category,
    CategoryCreate,
    Project,
    ProjectCreate,
    ProjectStatus,
    ProjectUpdate,
    ProjectWithBudget,
)
from hourbook.services.audit import AuditSink, NullAuditSink, audit
from hourbook.storage.database import Database
from hourbook.validators.entry_validators import parse_input

logger = logging.getLogger(__name__)

PROJECT_COLORS = [
    "#6366f1",
    "#8b5cf6",
    "#ec4899",
    "#f43f5e",
    "#f97316",
    "#eab308",
    "#22c55e",
    "#14b8a6",
    "#06b6d4",
    "#3b82f6",
]

DEFAULT_CATEGORY_COLOR = "#64748b"


def random_project_color() -> str:
    return random.choice(PROJECT_COLORS)


def _require_admin(actor: Actor, message: str) -> None:
    if not actor.is_admin:
        raise AuthorizationError(message)


def with_budget(
    project: Project,
    favorite_ids: Optional[Set[str]] = None,
    assigned_user_ids: Optional[Iterable[str]] = None,
) -> ProjectWithBudget:
    """Decorate a project with its derived budget figures.

    Args:
        project: Stored project
        favorite_ids: Project ids the viewer has favorited
        assigned_user_ids: Users assigned to the project

    Returns:
        ProjectWithBudget
    """
    view = calculate_budget_view(project.total_hours, project.used_hours)
    return ProjectWithBudget(
        id=project.id,
        name=project.name,
        color=project.color,
        status=project.status,
        total_hours=project.total_hours,
        used_hours=project.used_hours,
        remaining_hours=view.remaining_hours,
        percentage_used=view.percentage_used,
        budget_status=view.status.value,
        is_favorite=project.id in (favorite_ids or set()),
        assigned_user_ids=sorted(assigned_user_ids or []),
    )


def sort_favorites_first(projects: List[ProjectWithBudget]) -> List[ProjectWithBudget]:
    return sorted(projects, key=lambda p: (not p.is_favorite, p.name.lower()))


class ProjectService:
    """Admin project management plus per-user assignments and favorites."""

    def __init__(self, database: Database, audit_sink: Optional[AuditSink] = None):
        self.database = database
        self.audit_sink = audit_sink or NullAuditSink()

    def create_project(
        self, actor: Actor, data: Union[ProjectCreate, Mapping[str, Any]]
    ) -> Project:
        """Create a project with a budget (0 means unbudgeted).

        Raises:
            AuthorizationError: If the actor is not an admin
            ValidationError: On a bad name, colour or negative budget
        """
        _require_admin(actor, "Only administrators can create projects")
        payload = parse_input(ProjectCreate, data)
        with self.database.transaction() as repo:
            project = repo.add_project(
                name=payload.name,
                color=payload.color or random_project_color(),
                total_hours=payload.total_hours,
            )
        logger.info(f"Created project {project.id} ({project.name}) with {project.total_hours}h")
        audit(
            self.audit_sink,
            actor,
            AuditAction.CREATE,
            AuditEntityType.PROJECT,
            project.id,
            new_value={"name": project.name, "total_hours": project.total_hours},
        )
        return project

    def update_project(
        self,
        actor: Actor,
        project_id: str,
        data: Union[ProjectUpdate, Mapping[str, Any]],
    ) -> Project:
        """Edit name, colour, budget or status.

        Budget changes are audited as BUDGET_CHANGE, status changes as
        ARCHIVE or RESTORE.

        Raises:
            AuthorizationError: If the actor is not an admin
            ValidationError: On invalid input, including any attempt to set
                ``used_hours``
            NotFoundError: If the project is absent or deleted
        """
        _require_admin(actor, "Only administrators can update projects")
        payload = parse_input(ProjectUpdate, data)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        with self.database.transaction() as repo:
            existing = repo.get_project(project_id)
            if existing is None:
                raise NotFoundError("Project not found")
            updated = repo.update_project(project_id, **changes) if changes else existing

        if updated.total_hours != existing.total_hours:
            logger.info(
                f"Budget for {project_id} changed {existing.total_hours}h -> {updated.total_hours}h"
            )
            audit(
                self.audit_sink,
                actor,
                AuditAction.BUDGET_CHANGE,
                AuditEntityType.PROJECT,
                project_id,
                old_value={"total_hours": existing.total_hours},
                new_value={"total_hours": updated.total_hours},
            )
        if updated.status != existing.status:
            action = (
                AuditAction.ARCHIVE
                if updated.status == ProjectStatus.ARCHIVED
                else AuditAction.RESTORE
            )
            audit(
                self.audit_sink,
                actor,
                action,
                AuditEntityType.PROJECT,
                project_id,
                old_value={"status": existing.status.value},
                new_value={"status": updated.status.value},
            )
        return updated

    def delete_project(self, actor: Actor, project_id: str) -> None:
        """Soft-delete a project. Its entries and counter are left untouched."""
        _require_admin(actor, "Only administrators can delete projects")
        with self.database.transaction() as repo:
            existing = repo.get_project(project_id)
            if existing is None:
                raise NotFoundError("Project not found")
            repo.update_project(project_id, is_deleted=True)
        logger.info(f"Deleted project {project_id}")
        audit(
            self.audit_sink,
            actor,
            AuditAction.DELETE,
            AuditEntityType.PROJECT,
            project_id,
            old_value={"name": existing.name},
        )

    def get_project(self, actor: Actor, project_id: str) -> ProjectWithBudget:
        """Fetch one project with its budget view.

        Raises:
            NotFoundError: If the project is absent or deleted
            AuthorizationError: If a non-admin is not assigned to it
        """
        with self.database.transaction() as repo:
            project = repo.get_project(project_id)
            if project is None:
                raise NotFoundError("Project not found")
            assignments = repo.list_assignments(project_id=project_id)
            assigned = [a.user_id for a in assignments]
            if not actor.is_admin and actor.user_id not in assigned:
                raise AuthorizationError("You are not assigned to this project")
            favorite_ids = {f.project_id for f in repo.list_favorites(actor.user_id)}
        return with_budget(project, favorite_ids, assigned)

    def list_projects(
        self, actor: Actor, include_archived: bool = False
    ) -> List[ProjectWithBudget]:
        """List the projects visible to the actor, favorites first.

        Admins see every non-deleted project (ACTIVE only unless
        ``include_archived``); users see the ACTIVE projects they are
        assigned to.
        """
        with self.database.transaction() as repo:
            if actor.is_admin:
                projects = repo.list_projects(include_archived=include_archived)
            else:
                projects = repo.list_projects(assigned_to=actor.user_id)
            assigned: Dict[str, List[str]] = {}
            for assignment in repo.list_assignments():
                assigned.setdefault(assignment.project_id, []).append(assignment.user_id)
            favorite_ids = {f.project_id for f in repo.list_favorites(actor.user_id)}

        return sort_favorites_first(
            [with_budget(p, favorite_ids, assigned.get(p.id)) for p in projects]
        )

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def assign_user(
        self, actor: Actor, data: Union[AssignmentCreate, Mapping[str, Any]]
    ) -> Assignment:
        """Allow a user to log time against a project.

        Raises:
            ConflictError: If the user is already assigned
            NotFoundError: If the user or project does not exist
        """
        _require_admin(actor, "Only administrators can manage assignments")
        payload = parse_input(AssignmentCreate, data)
        with self.database.transaction() as repo:
            if repo.get_user(payload.user_id) is None:
                raise NotFoundError("User not found")
            if repo.get_project(payload.project_id) is None:
                raise NotFoundError("Project not found")
            assignment = repo.add_assignment(payload.user_id, payload.project_id)
        logger.info(f"Assigned {payload.user_id} to {payload.project_id}")
        audit(
            self.audit_sink,
            actor,
            AuditAction.ASSIGN,
            AuditEntityType.ASSIGNMENT,
            assignment.id,
            new_value={"user_id": payload.user_id, "project_id": payload.project_id},
        )
        return assignment

    def unassign_user(self, actor: Actor, user_id: str, project_id: str) -> None:
        """Remove an assignment. Existing entries stay where they are.

        Raises:
            NotFoundError: If no such assignment exists
        """
        _require_admin(actor, "Only administrators can manage assignments")
        with self.database.transaction() as repo:
            assignment = repo.get_assignment(user_id, project_id)
            if assignment is None:
                raise NotFoundError("Assignment not found")
            repo.delete_assignment(user_id, project_id)
        logger.info(f"Unassigned {user_id} from {project_id}")
        audit(
            self.audit_sink,
            actor,
            AuditAction.UNASSIGN,
            AuditEntityType.ASSIGNMENT,
            assignment.id,
            old_value={"user_id": user_id, "project_id": project_id},
        )

    def list_assignments(
        self, actor: Actor, project_id: Optional[str] = None
    ) -> List[Assignment]:
        _require_admin(actor, "Only administrators can view assignments")
        with self.database.transaction() as repo:
            return repo.list_assignments(project_id=project_id)

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    def add_favorite(self, actor: Actor, project_id: str) -> FavoriteProject:
        """Pin a project for the actor.

        Raises:
            NotFoundError: If the project does not exist
            ConflictError: If it is already a favorite
        """
        with self.database.transaction() as repo:
            if repo.get_project(project_id) is None:
                raise NotFoundError("Project not found")
            return repo.add_favorite(actor.user_id, project_id)

    def remove_favorite(self, actor: Actor, project_id: str) -> None:
        with self.database.transaction() as repo:
            if not repo.delete_favorite(actor.user_id, project_id):
                raise NotFoundError("Favorite not found")

    def list_favorites(self, actor: Actor) -> List[str]:
        """Project ids the actor has favorited."""
        with self.database.transaction() as repo:
            return [f.project_id for f in repo.list_favorites(actor.user_id)]


class CategoryService:
    """Internal, non-billable time buckets."""

    def __init__(self, database: Database, audit_sink: Optional[AuditSink] = None):
        self.database = database
        self.audit_sink = audit_sink or NullAuditSink()

    def list_categories(self) -> List[Category]:
        with self.database.transaction() as repo:
            return repo.list_categories()

    def create_category(
        self, actor: Actor, data: Union[CategoryCreate, Mapping[str, Any]]
    ) -> Category:
        """Create a category.

        Raises:
            AuthorizationError: If the actor is not an admin
            ConflictError: If the name is taken
        """
        _require_admin(actor, "Only administrators can create categories")
        payload = parse_input(CategoryCreate, data)
        with self.database.transaction() as repo:
            category = repo.add_category(
                name=payload.name, color=payload.color or DEFAULT_CATEGORY_COLOR
            )
        logger.info(f"Created category {category.name}")
        audit(
            self.audit_sink,
            actor,
            AuditAction.CREATE,
            AuditEntityType.CATEGORY,
            category.id,
            new_value={"name": category.name},
        )
        return category
