"""
User registration and administration.

Authentication itself happens in an external identity provider; this
service records the users it vouches for and lets admins manage roles.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from hourbook.config.settings import HourbookConfig
from hourbook.errors import AuthorizationError, NotFoundError, ValidationError
from hourbook.models.audit import AuditAction, AuditEntityType
from hourbook.models.identity import Actor, Role, User, UserUpdate
from hourbook.services.audit import AuditSink, NullAuditSink, audit
from hourbook.services.settings_service import SettingsService
from hourbook.storage.database import Database
from hourbook.validators.entry_validators import parse_input

logger = logging.getLogger(__name__)


class UserService:
    """Registers users from the identity provider and manages their roles."""

    def __init__(
        self,
        database: Database,
        config: HourbookConfig,
        settings_service: SettingsService,
        audit_sink: Optional[AuditSink] = None,
    ):
        self.database = database
        self.config = config
        self.settings_service = settings_service
        self.audit_sink = audit_sink or NullAuditSink()

    def register_user(self, email: str, name: Optional[str] = None) -> User:
        """Record a user after a successful sign-in.

        Existing users are returned as stored (their name is refreshed when
        one is given). New users become ADMIN when their email is listed in
        ``ADMIN_EMAILS`` and USER otherwise.

        Raises:
            ValidationError: If the email is malformed
            AuthorizationError: If the email's domain is not allowed or the
                account has been deactivated
        """
        email = (email or "").strip().lower()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise ValidationError(f"Invalid email address: {email!r}")

        allowed = self.settings_service.get_settings().allowed_domains
        domain = email.rsplit("@", 1)[1]
        if allowed and domain not in allowed:
            logger.warning(f"Rejected sign-in from disallowed domain {domain}")
            raise AuthorizationError(f"Sign-in is restricted to: {', '.join(allowed)}")

        with self.database.transaction() as repo:
            user = repo.get_user_by_email(email)
            if user is None:
                role = Role.ADMIN if email in self.config.get_admin_emails() else Role.USER
                user = repo.add_user(email=email, name=name, role=role)
                logger.info(f"Registered {email} as {role.value}")
            elif not user.is_active:
                logger.warning(f"Rejected sign-in from deactivated account {user.id}")
                raise AuthorizationError("This account has been deactivated")
            elif name and name != user.name:
                user = repo.update_user(user.id, name=name)
        return user

    def list_users(self, actor: Actor) -> List[User]:
        """All users, active first, then by name."""
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can list users")
        with self.database.transaction() as repo:
            return repo.list_users()

    def update_user(
        self,
        actor: Actor,
        user_id: str,
        data: Union[UserUpdate, Mapping[str, Any]],
    ) -> User:
        """Change a user's role or active flag.

        Raises:
            AuthorizationError: If the actor is not an admin
            ValidationError: If an admin tries to demote themself
            NotFoundError: If the user does not exist
        """
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can update users")
        payload = parse_input(UserUpdate, data)
        if user_id == actor.user_id and payload.role == Role.USER:
            raise ValidationError("Cannot demote yourself")

        changes = payload.model_dump(exclude_none=True)
        with self.database.transaction() as repo:
            existing = repo.get_user(user_id)
            if existing is None:
                raise NotFoundError("User not found")
            updated = repo.update_user(user_id, **changes) if changes else existing

        if updated.role != existing.role:
            logger.info(f"Role of {user_id} changed {existing.role.value} -> {updated.role.value}")
            audit(
                self.audit_sink,
                actor,
                AuditAction.ROLE_CHANGE,
                AuditEntityType.USER,
                user_id,
                old_value={"role": existing.role.value},
                new_value={"role": updated.role.value},
            )
        return updated
