"""Relational storage for the timesheet system."""

from hourbook.storage.database import Database, build_engine
from hourbook.storage.repository import TimesheetRepository
from hourbook.storage.tables import Base

__all__ = ["Base", "Database", "TimesheetRepository", "build_engine"]
