"""Shared wiring for CLI commands."""

from typing import Optional

from hourbook.config.settings import HourbookConfig, get_config
from hourbook.models.identity import Actor, Role
from hourbook.storage.database import Database

SYSTEM_ACTOR = Actor(user_id="system", role=Role.ADMIN)


def open_database(config: Optional[HourbookConfig] = None) -> Database:
    """Database for the configured ``DATABASE_URL``."""
    config = config or get_config()
    return Database(config.database_url)
