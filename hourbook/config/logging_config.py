"""Logging setup for hourbook processes.

One handler is installed on the root logger, writing to stderr or to
``LOG_FILE``. Every record passes through ``ContextFilter``, so a line
logged while a service works on an entry names the acting user and the
entry.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from hourbook.config.settings import HourbookConfig
from hourbook.utils.logging_utils import ContextFilter

# Set through LogContext by the timesheet service
CONTEXT_FIELDS = ("actor_id", "entry_id")

STANDARD_FORMAT = "%(asctime)s %(levelname)-8s %(name)s%(context)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

SQL_LOGGER = "sqlalchemy.engine"


def _context_suffix(record: logging.LogRecord) -> str:
    parts = [
        f"{name}={getattr(record, name)}"
        for name in CONTEXT_FIELDS
        if getattr(record, name, None) is not None
    ]
    return f" [{' '.join(parts)}]" if parts else ""


class StandardFormatter(logging.Formatter):
    """Plain text lines, with the actor and entry in brackets when set.

    Example:
        2024-03-06 17:02:11 INFO     hourbook.services.timesheet_service [actor_id=u1 entry_id=e42]: Updated entry
    """

    def __init__(self):
        super().__init__(fmt=STANDARD_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        record.context = _context_suffix(record)
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    ``actor_id`` and ``entry_id`` are top-level keys when in scope;
    exceptions are rendered under ``exception``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


@dataclass
class LoggingConfig:
    """Where and how hourbook logs.

    Attributes:
        level: Root level name
        json_output: Emit JSON lines instead of plain text
        log_file: Append to this file instead of writing to stderr
        log_sql: Show SQLAlchemy statements at INFO
    """

    level: str = "INFO"
    json_output: bool = False
    log_file: Optional[str] = None
    log_sql: bool = False

    def __post_init__(self):
        self.level = self.level.upper()
        if self.level not in LEVELS:
            raise ValueError(f"Invalid log level: {self.level}. Must be one of {', '.join(LEVELS)}")

    @classmethod
    def from_config(cls, config: HourbookConfig) -> "LoggingConfig":
        """Read ``LOG_LEVEL``, ``LOG_FORMAT``, ``LOG_FILE`` and ``LOG_SQL``."""
        return cls(
            level=config.log_level,
            json_output=config.log_format == "json",
            log_file=config.log_file,
            log_sql=config.log_sql,
        )


def configure_logging(config: LoggingConfig) -> logging.Handler:
    """Replace the root logger's handlers with one built from ``config``.

    Args:
        config: LoggingConfig instance

    Returns:
        The installed handler
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    if config.log_file:
        handler = logging.FileHandler(config.log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if config.json_output else StandardFormatter())
    handler.addFilter(ContextFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(config.level)
    logging.getLogger(SQL_LOGGER).setLevel(logging.INFO if config.log_sql else logging.WARNING)
    return handler
