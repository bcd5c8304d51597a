"""Hourbook CLI.

This module provides a command-line interface for administering the
timesheet database: creating the schema, generating reports, reviewing
project budgets and reconciling budget counters.
"""

import click

from hourbook import __version__
from hourbook.cli.commands.budgets import list_budgets
from hourbook.cli.commands.init_db import init_db
from hourbook.cli.commands.reconcile import reconcile
from hourbook.cli.commands.report import generate_report
from hourbook.config import get_config
from hourbook.config.logging_config import LoggingConfig, configure_logging


@click.group(help="Hourbook CLI - Timesheets, project budgets and reports")
@click.version_option(version=__version__)
def cli():
    """Hourbook CLI main entry point."""
    pass


# Register commands
cli.add_command(init_db)
cli.add_command(generate_report)
cli.add_command(list_budgets)
cli.add_command(reconcile)


def main():
    """Main entry point for the CLI."""
    configure_logging(LoggingConfig.from_config(get_config()))
    cli()


if __name__ == "__main__":
    main()
