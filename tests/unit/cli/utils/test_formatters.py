"""Tests for CLI output formatting utilities."""

import click

from hourbook.cli.utils.formatters import (
    format_budget_status,
    format_error,
    format_hours,
    format_info,
    format_minutes,
    format_success,
    format_table,
    format_warning,
)


class TestMessageFormatters:
    """Test message formatting functions."""

    def test_success(self):
        result = format_success("Done")
        assert "Done" in result
        assert "✓" in result

    def test_error(self):
        assert "✗ Failed" in click.unstyle(format_error("Failed"))

    def test_warning(self):
        assert "⚠ Careful" in click.unstyle(format_warning("Careful"))

    def test_info(self):
        assert "ℹ Note" in click.unstyle(format_info("Note"))


class TestBudgetFormatting:
    """Test budget-specific formatters."""

    def test_budget_status_colours(self):
        assert format_budget_status("green") == click.style("green", fg="green", bold=True)
        assert format_budget_status("red") == click.style("red", fg="red", bold=True)
        assert click.unstyle(format_budget_status("yellow")) == "yellow"

    def test_format_hours(self):
        assert format_hours(1) == "1.0h"
        assert format_hours(2.25) == "2.2h"
        assert format_hours(0) == "0.0h"


    def test_format_minutes(self):
        assert format_minutes(150) == "2h 30m"
        assert format_minutes(45) == "45m"
        assert format_minutes(720) == "12h"


class TestFormatTable:
    """Test format_table function."""

    def test_basic_table(self):
        result = format_table(["Project", "Hours"], [["Website", "5.0h"], ["Mobile App", "4.0h"]])
        lines = result.split("\n")

        assert lines[0] == lines[2] == lines[-1]
        assert "| Project    | Hours |" in lines
        assert "| Mobile App | 4.0h  |" in lines

    def test_styled_cells_align(self):
        result = format_table(["Band"], [[format_budget_status("red")], ["yellow"]])
        widths = {len(click.unstyle(line)) for line in result.split("\n")}
        assert len(widths) == 1

    def test_empty_rows(self):
        result = format_table(["A", "B"], [])
        assert len(result.split("\n")) == 3

    def test_no_headers(self):
        assert format_table([], [["x"]]) == ""

    def test_truncates_long_cells(self):
        result = format_table(["Notes"], [["x" * 100]], max_width=10)
        assert "x" * 11 not in result
