"""Reconcile budget counters command."""

import click

from hourbook.cli.context import SYSTEM_ACTOR, open_database
from hourbook.cli.error_handlers import with_error_handling
from hourbook.cli.utils.formatters import (
    format_info,
    format_success,
    format_table,
    format_warning,
)
from hourbook.services.reporting import ReconciliationService


@click.command(name="reconcile")
@click.option("--debug", is_flag=True, help="Show full stack traces on error")
@click.pass_context
def reconcile(ctx: click.Context, debug: bool):
    """Check every project's used hours against its entries.

    Nothing is corrected. Exits with status 1 when a mismatch is found.

    Example:
        hourbook reconcile
    """
    with with_error_handling(debug):
        click.echo(format_info("Recomputing project hours from entries..."))
        database = open_database()
        try:
            discrepancies = ReconciliationService(database).reconcile(SYSTEM_ACTOR)
        finally:
            database.dispose()

        if not discrepancies:
            click.echo(format_success("All project counters match their entries"))
            return

        rows = [
            [
                d.project_name,
                f"{d.stored_hours:.4f}",
                f"{d.computed_hours:.4f}",
                f"{d.difference:+.4f}",
            ]
            for d in discrepancies
        ]
        click.echo()
        click.echo(format_table(["Project", "Stored", "Computed", "Difference"], rows))
        click.echo()
        click.echo(format_warning(f"{len(discrepancies)} project(s) out of balance"))
        ctx.exit(1)
