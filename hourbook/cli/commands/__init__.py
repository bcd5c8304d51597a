"""CLI commands."""

from hourbook.cli.commands.budgets import list_budgets
from hourbook.cli.commands.init_db import init_db
from hourbook.cli.commands.reconcile import reconcile
from hourbook.cli.commands.report import generate_report

__all__ = ["generate_report", "init_db", "list_budgets", "reconcile"]
