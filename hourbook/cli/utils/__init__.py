"""CLI utility functions."""

from hourbook.cli.utils.formatters import (
    format_budget_status,
    format_error,
    format_hours,
    format_info,
    format_success,
    format_table,
    format_warning,
)

__all__ = [
    "format_budget_status",
    "format_error",
    "format_hours",
    "format_info",
    "format_success",
    "format_table",
    "format_warning",
]
