"""Tests for the CLI commands against a file-backed database."""

import datetime as dt

import pandas as pd
import pytest
from click.testing import CliRunner

import hourbook.config.settings
from hourbook.cli import cli
from hourbook.cli.commands.report import parse_date_input
from hourbook.errors import ValidationError
from hourbook.models.identity import Role
from hourbook.services.budget_accounting import BudgetAccountant
from hourbook.storage.database import Database


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def db_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'hourbook.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setattr(hourbook.config.settings, "_config", None)
    return url


@pytest.fixture
def populated(db_url):
    """Two projects with entries written through budget accounting."""
    database = Database(db_url)
    database.create_all()
    accountant = BudgetAccountant()
    with database.transaction() as repo:
        repo.add_user("jo@example.com", "Jo User", Role.USER, user_id="user-1")
        website = repo.add_project("Website", "#6366f1", 10.0)
        mobile = repo.add_project("Mobile App", "#22c55e", 0.0)
        category = repo.add_category("Admin", "#64748b")
        for project_id, category_id, hours in [
            (website.id, None, 9),
            (mobile.id, None, 2),
            (None, category.id, 1),
        ]:
            entry = repo.add_entry(
                "user-1",
                dt.date(2024, 3, 4),
                hours,
                0,
                project_id=project_id,
                category_id=category_id,
                notes='Said "hi"' if project_id == website.id else None,
            )
            accountant.record_created(repo, entry)
    yield database
    database.dispose()


class TestInitDb:
    """Test the init-db command."""

    def test_creates_tables(self, runner, db_url):
        result = runner.invoke(cli, ["init-db"])

        assert result.exit_code == 0
        assert "Database ready" in result.output

        database = Database(db_url)
        with database.transaction() as repo:
            assert repo.list_categories() == []
        database.dispose()


class TestReportCommand:
    """Test the report command."""

    def test_prints_totals(self, runner, populated):
        result = runner.invoke(
            cli, ["report", "--start-date", "2024-03-01", "--end-date", "2024-03-31"]
        )

        assert result.exit_code == 0
        assert "| 12h " in result.output
        assert "| 11h " in result.output
        assert "Website" in result.output
        assert "Jo User" in result.output
        assert "Report complete: 3 entries" in result.output

    def test_writes_csv(self, runner, populated, tmp_path):
        csv_path = tmp_path / "march.csv"
        result = runner.invoke(
            cli,
            [
                "report",
                "--start-date",
                "2024-03-01",
                "--end-date",
                "2024-03-31",
                "--csv",
                str(csv_path),
            ],
        )

        assert result.exit_code == 0
        frame = pd.read_csv(csv_path)
        assert len(frame) == 3
        assert 'Said "hi"' in frame["Notes"].fillna("").tolist()

    def test_bad_date_exits_with_validation_code(self, runner, populated):
        result = runner.invoke(
            cli, ["report", "--start-date", "03/01/2024", "--end-date", "2024-03-31"]
        )

        assert result.exit_code == 3
        assert "Invalid date format" in result.output

    def test_inverted_range(self, runner, populated):
        result = runner.invoke(
            cli, ["report", "--start-date", "2024-03-31", "--end-date", "2024-03-01"]
        )

        assert result.exit_code == 3
        assert "start_date must not be after end_date" in result.output

    def test_missing_option(self, runner):
        result = runner.invoke(cli, ["report", "--start-date", "2024-03-01"])
        assert result.exit_code == 2


class TestBudgetsCommand:
    """Test the budgets command."""

    def test_lists_projects(self, runner, populated):
        result = runner.invoke(cli, ["budgets"])

        assert result.exit_code == 0
        assert "Website" in result.output
        assert "90%" in result.output
        assert "yellow" in result.output
        assert "Found 2 project(s)" in result.output

    def test_no_projects(self, runner, db_url):
        runner.invoke(cli, ["init-db"])
        result = runner.invoke(cli, ["budgets"])

        assert result.exit_code == 0
        assert "No projects found." in result.output


class TestReconcileCommand:
    """Test the reconcile command."""

    def test_clean(self, runner, populated):
        result = runner.invoke(cli, ["reconcile"])

        assert result.exit_code == 0
        assert "All project counters match their entries" in result.output

    def test_mismatch_exits_one(self, runner, populated):
        with populated.transaction() as repo:
            website = [p for p in repo.list_projects() if p.name == "Website"][0]
            repo.increment_used_hours(website.id, 0.25)

        result = runner.invoke(cli, ["reconcile"])

        assert result.exit_code == 1
        assert "Website" in result.output
        assert "+0.2500" in result.output
        assert "1 project(s) out of balance" in result.output


class TestParseDateInput:
    """Test parse_date_input function."""

    def test_valid(self):
        assert parse_date_input("2024-03-04") == dt.date(2024, 3, 4)

    @pytest.mark.parametrize("value", ["2024-13-01", "04.03.2024", ""])
    def test_invalid(self, value):
        with pytest.raises(ValidationError, match="Expected YYYY-MM-DD"):
            parse_date_input(value)
