"""
Configuration management for the timesheet system.

Two layers live here:

- ``HourbookConfig``: process configuration read from the environment and
  an optional ``.env`` file.
- ``SystemSettings``: admin-editable settings persisted as string key/value
  rows. They are parsed and validated once, at load time, into typed fields.
"""

import re
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hourbook.models.base import BaseDataModel

TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class HourbookConfig(BaseSettings):
    """Configuration settings for the timesheet system."""

    # Storage
    database_url: str = Field(default="sqlite:///hourbook.db", alias="DATABASE_URL")

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Logging output
    log_format: str = Field(default="standard", alias="LOG_FORMAT")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_sql: bool = Field(default=False, alias="LOG_SQL")

    # Timesheet policy defaults (overridable through SystemSettings)
    backdate_limit_days: int = Field(default=7, ge=0, alias="BACKDATE_LIMIT_DAYS")
    workday_hours: float = Field(default=7.5, gt=0, le=24, alias="WORKDAY_HOURS")
    reminder_time: str = Field(default="17:00", alias="REMINDER_TIME")
    session_timeout_hours: int = Field(default=8, ge=1, alias="SESSION_TIMEOUT_HOURS")

    # Entry creation throttle
    rate_limit_max_requests: int = Field(default=10, ge=1, alias="RATE_LIMIT_MAX_REQUESTS")
    rate_limit_window_seconds: float = Field(
        default=60.0, gt=0, alias="RATE_LIMIT_WINDOW_SECONDS"
    )

    # Identity
    admin_emails: str = Field(default="", alias="ADMIN_EMAILS")
    allowed_domains: str = Field(default="", alias="ALLOWED_DOMAINS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is standard or json."""
        if v.lower() not in ("standard", "json"):
            raise ValueError(f"Log format must be 'standard' or 'json', got {v!r}")
        return v.lower()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator("reminder_time")
    @classmethod
    def validate_reminder_time(cls, v):
        """Ensure reminder time is HH:MM."""
        if not TIME_OF_DAY_PATTERN.match(v):
            raise ValueError(f"Reminder time must be HH:MM, got {v!r}")
        return v

    def get_admin_emails(self) -> List[str]:
        """Emails that are granted the ADMIN role on first registration."""
        return _split_list(self.admin_emails)

    def default_system_settings(self) -> "SystemSettings":
        """SystemSettings populated from this configuration."""
        return SystemSettings(
            workday_hours=self.workday_hours,
            reminder_time=self.reminder_time,
            backdate_limit_days=self.backdate_limit_days,
            session_timeout_hours=self.session_timeout_hours,
            allowed_domains=_split_list(self.allowed_domains),
        )


def _split_list(value: str) -> List[str]:
    return [part.strip().lower() for part in value.split(",") if part.strip()]


class SystemSettings(BaseDataModel):
    """Typed, admin-editable system settings.

    Persisted as string key/value pairs; ``from_key_values`` is the only
    place those strings are parsed.

    Example:
        >>> settings = SystemSettings.from_key_values(
        ...     {"workday_hours": "8", "allowed_domains": "acme.com, acme.org"},
        ...     defaults=SystemSettings(),
        ... )
        >>> settings.workday_hours, settings.allowed_domains
        (8.0, ['acme.com', 'acme.org'])
    """

    workday_hours: float = Field(7.5, gt=0, le=24)
    reminder_time: str = "17:00"
    backdate_limit_days: int = Field(7, ge=0)
    session_timeout_hours: int = Field(8, ge=1)
    allowed_domains: List[str] = Field(default_factory=list)

    @field_validator("reminder_time")
    @classmethod
    def validate_reminder_time(cls, v: str) -> str:
        if not TIME_OF_DAY_PATTERN.match(v):
            raise ValueError(f"reminder_time must be HH:MM, got {v!r}")
        return v

    @field_validator("allowed_domains", mode="before")
    @classmethod
    def split_domains(cls, v):
        if isinstance(v, str):
            return _split_list(v)
        return v

    @classmethod
    def keys(cls) -> List[str]:
        return list(cls.model_fields)

    @classmethod
    def from_key_values(
        cls, values: Mapping[str, str], defaults: Optional["SystemSettings"] = None
    ) -> "SystemSettings":
        """Parse stored string values over a set of defaults.

        Args:
            values: Raw key/value rows
            defaults: Settings used for missing keys

        Returns:
            Validated SystemSettings

        Raises:
            ValueError: If a key is unknown
            pydantic.ValidationError: If a value cannot be parsed
        """
        unknown = sorted(set(values) - set(cls.model_fields))
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(unknown)}")
        base = (defaults or cls()).model_dump()
        base.update(values)
        return cls.model_validate(base)

    def to_key_values(self) -> Dict[str, str]:
        """Serialize to the string key/value form used for storage."""
        data = self.model_dump()
        data["allowed_domains"] = ",".join(self.allowed_domains)
        return {key: str(value) for key, value in data.items()}


def load_config(env_file: Optional[str] = None) -> HourbookConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return HourbookConfig()


# Global configuration instance
_config: Optional[HourbookConfig] = None


def get_config() -> HourbookConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> HourbookConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
