"""Initialize database command."""

import click

from hourbook.cli.context import open_database
from hourbook.cli.error_handlers import with_error_handling
from hourbook.cli.utils.formatters import format_info, format_success


@click.command(name="init-db")
@click.option("--debug", is_flag=True, help="Show full stack traces on error")
def init_db(debug: bool):
    """Create any missing tables in the configured database.

    Example:
        hourbook init-db
    """
    with with_error_handling(debug):
        database = open_database()
        click.echo(format_info("Creating tables..."))
        try:
            database.create_all()
        finally:
            database.dispose()
        click.echo(format_success("Database ready"))
