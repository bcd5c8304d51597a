"""Project budgets command."""

import click

from hourbook.cli.context import SYSTEM_ACTOR, open_database
from hourbook.cli.error_handlers import with_error_handling
from hourbook.cli.utils.formatters import (
    format_budget_status,
    format_hours,
    format_info,
    format_success,
    format_table,
)
from hourbook.services.project_service import ProjectService


@click.command(name="budgets")
@click.option("--include-archived", is_flag=True, help="Include archived projects")
@click.option("--debug", is_flag=True, help="Show full stack traces on error")
def list_budgets(include_archived: bool, debug: bool):
    """Show every project's budget, usage and status band.

    Example:
        hourbook budgets
        hourbook budgets --include-archived
    """
    with with_error_handling(debug):
        database = open_database()
        try:
            projects = ProjectService(database).list_projects(
                SYSTEM_ACTOR, include_archived=include_archived
            )
        finally:
            database.dispose()

        if not projects:
            click.echo(format_info("No projects found."))
            return

        headers = ["Project", "Status", "Budget", "Used", "Remaining", "Used %", "Band"]
        rows = [
            [
                project.name,
                project.status.value,
                format_hours(project.total_hours) if project.total_hours else "-",
                format_hours(project.used_hours),
                format_hours(project.remaining_hours),
                f"{project.percentage_used}%",
                format_budget_status(project.budget_status),
            ]
            for project in projects
        ]

        click.echo()
        click.echo(format_table(headers, rows))
        click.echo()
        click.echo(format_success(f"Found {len(projects)} project(s)"))
