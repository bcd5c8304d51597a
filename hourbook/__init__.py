"""Hourbook - timesheet and project budget tracking."""

__version__ = "1.0.0"
