"""
System settings stored in the database.

Values are kept as string key/value rows and parsed into ``SystemSettings``
in one place. Defaults come from ``HourbookConfig``.
"""

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from hourbook.config.settings import HourbookConfig, SystemSettings
from hourbook.errors import AuthorizationError, ValidationError, from_pydantic
from hourbook.models.audit import AuditAction, AuditEntityType
from hourbook.models.identity import Actor
from hourbook.services.audit import AuditSink, NullAuditSink, audit
from hourbook.storage.database import Database

logger = logging.getLogger(__name__)


class SettingsService:
    """Reads and updates typed system settings."""

    def __init__(
        self,
        database: Database,
        config: HourbookConfig,
        audit_sink: Optional[AuditSink] = None,
    ):
        self.database = database
        self.config = config
        self.audit_sink = audit_sink or NullAuditSink()

    def get_settings(self) -> SystemSettings:
        """Current settings for internal use (no authorization)."""
        with self.database.transaction() as repo:
            values = repo.get_setting_values()
        return SystemSettings.from_key_values(
            values, defaults=self.config.default_system_settings()
        )

    def read_settings(self, actor: Actor) -> SystemSettings:
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can view settings")
        return self.get_settings()

    def update_settings(self, actor: Actor, updates: Mapping[str, Any]) -> SystemSettings:
        """Validate and persist a partial settings update.

        Raises:
            AuthorizationError: If the actor is not an admin
            ValidationError: If a key is unknown or a value does not parse
        """
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can change settings")

        current = self.get_settings()
        raw = {
            key: ",".join(value) if isinstance(value, (list, tuple)) else str(value)
            for key, value in updates.items()
        }
        try:
            updated = SystemSettings.from_key_values(raw, defaults=current)
        except PydanticValidationError as e:
            raise from_pydantic(e) from e
        except ValueError as e:
            raise ValidationError(str(e)) from e

        stored = updated.to_key_values()
        with self.database.transaction() as repo:
            for key in raw:
                repo.upsert_setting(key, stored[key])

        logger.info(f"Settings updated: {', '.join(sorted(raw))}")
        audit(
            self.audit_sink,
            actor,
            AuditAction.UPDATE,
            AuditEntityType.SETTINGS,
            "system",
            old_value={key: current.to_key_values()[key] for key in raw},
            new_value={key: stored[key] for key in raw},
        )
        return updated
