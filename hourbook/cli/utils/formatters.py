"""Output formatting utilities for CLI."""

from typing import List

import click

from hourbook.calculators.budget_calculator import BudgetStatus
from hourbook.calculators.time_utils import format_duration, from_minutes

_STATUS_COLORS = {
    BudgetStatus.GREEN.value: "green",
    BudgetStatus.YELLOW.value: "yellow",
    BudgetStatus.RED.value: "red",
}


def format_success(message: str) -> str:
    """Format a success message with green color.

    Args:
        message: The success message to format

    Returns:
        Formatted success message with color
    """
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message with red color."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message with yellow color."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    return click.style(f"ℹ {message}", fg="blue")


def format_budget_status(status: str) -> str:
    """Colour a budget band (green, yellow or red) with its own colour.

    Args:
        status: Budget band value

    Returns:
        The band, styled
    """
    return click.style(status, fg=_STATUS_COLORS.get(status, "white"), bold=True)


def format_hours(hours: float) -> str:
    """Display hours with one decimal place."""
    return f"{hours:.1f}h"


def format_minutes(total_minutes: int) -> str:
    """Display logged minutes as hours and minutes, e.g. ``2h 30m``."""
    return format_duration(*from_minutes(total_minutes))


def format_table(headers: List[str], rows: List[List[str]], max_width: int = 80) -> str:
    """Format data as a table.

    Cell widths are measured on the unstyled text so coloured cells line
    up with plain ones.

    Args:
        headers: List of column headers
        rows: List of data rows (each row is a list of cell values)
        max_width: Maximum width for each column (default: 80)

    Returns:
        Formatted table as a string
    """
    if not headers:
        return ""

    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            if i < len(col_widths):
                col_widths[i] = max(col_widths[i], len(click.unstyle(str(cell))))

    col_widths = [min(w, max_width) for w in col_widths]

    separator = "+" + "+".join("-" * (w + 2) for w in col_widths) + "+"

    def render(cells: List[str]) -> str:
        rendered = []
        for i, cell in enumerate(cells[: len(col_widths)]):
            text = str(cell)
            visible = click.unstyle(text)
            if len(visible) > col_widths[i]:
                text = visible[: col_widths[i]]
                visible = text
            rendered.append(f" {text}{' ' * (col_widths[i] - len(visible))} ")
        return "|" + "|".join(rendered) + "|"

    table_lines = [separator, render(headers), separator]
    if rows:
        table_lines.extend(render(row) for row in rows)
        table_lines.append(separator)

    return "\n".join(table_lines)
