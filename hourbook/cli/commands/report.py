"""Generate report command."""

import datetime as dt
from pathlib import Path
from typing import Optional

import click

from hourbook.aggregators.report_aggregator import Report
from hourbook.cli.context import SYSTEM_ACTOR, open_database
from hourbook.cli.error_handlers import with_error_handling
from hourbook.cli.utils.formatters import (
    format_info,
    format_minutes,
    format_success,
    format_table,
)
from hourbook.config.settings import get_config
from hourbook.errors import ValidationError
from hourbook.services.reporting import ReportService
from hourbook.services.settings_service import SettingsService


def parse_date_input(date_str: str) -> dt.date:
    """Parse a YYYY-MM-DD date.

    Raises:
        ValidationError: If the format is invalid
    """
    try:
        return dt.datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")


def _print_report(report: Report) -> None:
    summary = report.summary
    click.echo()
    click.echo(
        format_table(
            ["Total", "Billable", "Internal", "Entries"],
            [
                [
                    format_minutes(summary.total_minutes),
                    format_minutes(summary.billable_minutes),
                    format_minutes(summary.internal_minutes),
                    str(len(report.entries)),
                ]
            ],
        )
    )

    if summary.project_breakdown:
        click.echo()
        click.echo(
            format_table(
                ["Project", "Hours"],
                [[p.project_name, format_minutes(p.minutes)] for p in summary.project_breakdown],
            )
        )

    if summary.user_breakdown:
        click.echo()
        rows = []
        for user in summary.user_breakdown:
            rows.append([user.user_name, "", format_minutes(user.minutes)])
            for project in user.projects:
                rows.append(["", project.project_name, format_minutes(project.minutes)])
        click.echo(format_table(["User", "Project", "Hours"], rows))


@click.command(name="report")
@click.option("--start-date", required=True, type=str, help="Start date (YYYY-MM-DD)")
@click.option("--end-date", required=True, type=str, help="End date (YYYY-MM-DD)")
@click.option("--user", "user_id", type=str, default=None, help="Filter by user id")
@click.option("--project", "project_id", type=str, default=None, help="Filter by project id")
@click.option(
    "--category", "category_id", type=str, default=None, help="Filter by category id"
)
@click.option(
    "--csv",
    "csv_path",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Also write the entries as CSV to this path",
)
@click.option("--debug", is_flag=True, help="Show full stack traces on error")
def generate_report(
    start_date: str,
    end_date: str,
    user_id: Optional[str],
    project_id: Optional[str],
    category_id: Optional[str],
    csv_path: Optional[str],
    debug: bool,
):
    """Report hours logged in a date range.

    Prints totals, the billable/internal split and the per-project and
    per-user breakdowns, recomputed from the entries.

    Example:
        hourbook report --start-date 2024-03-01 --end-date 2024-03-31
        hourbook report --start-date 2024-03-01 --end-date 2024-03-31 --csv march.csv
    """
    with with_error_handling(debug):
        start = parse_date_input(start_date)
        end = parse_date_input(end_date)

        click.echo(format_info(f"Generating report for {start} to {end}..."))
        config = get_config()
        database = open_database(config)
        try:
            service = ReportService(database, SettingsService(database, config))
            report = service.generate_report(
                SYSTEM_ACTOR,
                start,
                end,
                user_id=user_id,
                project_id=project_id,
                category_id=category_id,
            )
        finally:
            database.dispose()

        _print_report(report)

        if csv_path:
            Path(csv_path).write_text(report.to_csv(), encoding="utf-8")
            click.echo(format_success(f"CSV written to {csv_path}"))

        click.echo()
        click.echo(format_success(f"Report complete: {len(report.entries)} entries"))
