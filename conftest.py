"""
Global pytest configuration and fixtures.
"""
import datetime as dt
import os
from types import SimpleNamespace
from typing import Dict

import pytest

from hourbook.config import HourbookConfig
from hourbook.models.identity import Actor, Role
from hourbook.services.audit import DatabaseAuditSink
from hourbook.services.project_service import CategoryService, ProjectService
from hourbook.services.rate_limiter import FixedWindowRateLimiter, InMemoryCounterStore
from hourbook.services.reporting import ReconciliationService, ReportService
from hourbook.services.settings_service import SettingsService
from hourbook.services.timesheet_service import TimesheetService
from hourbook.storage.database import Database

# A Wednesday, so the week so far is Monday 4th to Wednesday 6th
TODAY = dt.date(2024, 3, 6)


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'DATABASE_URL': 'sqlite:///:memory:',
        'ENVIRONMENT': 'testing',
        'DEBUG': 'true',
        'LOG_LEVEL': 'DEBUG',
        'BACKDATE_LIMIT_DAYS': '7',
        'ADMIN_EMAILS': 'boss@example.com',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)

    # Clear the global config to force reload with test values
    import hourbook.config.settings
    hourbook.config.settings._config = None

    yield test_env_vars

    hourbook.config.settings._config = None


@pytest.fixture
def today() -> dt.date:
    return TODAY


@pytest.fixture
def hourbook_config() -> HourbookConfig:
    """Configuration independent of the caller's environment."""
    return HourbookConfig(
        _env_file=None,
        database_url='sqlite:///:memory:',
        environment='testing',
        backdate_limit_days=7,
        workday_hours=7.5,
        admin_emails='boss@example.com',
        allowed_domains='',
    )


@pytest.fixture
def database():
    """Fresh in-memory database with all tables."""
    db = Database('sqlite:///:memory:')
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def admin_actor() -> Actor:
    return Actor(user_id='admin-1', role=Role.ADMIN)


@pytest.fixture
def user_actor() -> Actor:
    return Actor(user_id='user-1', role=Role.USER)


@pytest.fixture
def other_actor() -> Actor:
    return Actor(user_id='user-2', role=Role.USER)


@pytest.fixture
def seeded(database):
    """Users, two projects, a category and one assignment.

    ``user-1`` is assigned to project A only; ``user-2`` to nothing.
    """
    with database.transaction() as repo:
        repo.add_user('boss@example.com', 'Ada Admin', Role.ADMIN, user_id='admin-1')
        repo.add_user('jo@example.com', 'Jo User', Role.USER, user_id='user-1')
        repo.add_user('sam@example.com', None, Role.USER, user_id='user-2')
        project_a = repo.add_project('Website', '#6366f1', 100.0)
        project_b = repo.add_project('Mobile App', '#22c55e', 10.0)
        category = repo.add_category('Admin', '#64748b')
        repo.add_assignment('user-1', project_a.id)
    return SimpleNamespace(
        project_a=project_a.id,
        project_b=project_b.id,
        category=category.id,
    )


@pytest.fixture
def settings_service(database, hourbook_config) -> SettingsService:
    return SettingsService(database, hourbook_config)


@pytest.fixture
def timesheet_service(database, settings_service, today) -> TimesheetService:
    return TimesheetService(
        database,
        settings_service,
        audit_sink=DatabaseAuditSink(database),
        clock=lambda: today,
    )


@pytest.fixture
def rate_limited_service(database, settings_service, today) -> TimesheetService:
    limiter = FixedWindowRateLimiter(
        InMemoryCounterStore(clock=lambda: 0.0), max_requests=2, window_seconds=60
    )
    return TimesheetService(
        database, settings_service, rate_limiter=limiter, clock=lambda: today
    )


@pytest.fixture
def project_service(database) -> ProjectService:
    return ProjectService(database, audit_sink=DatabaseAuditSink(database))


@pytest.fixture
def category_service(database) -> CategoryService:
    return CategoryService(database)


@pytest.fixture
def report_service(database, settings_service, today) -> ReportService:
    return ReportService(database, settings_service, clock=lambda: today)


@pytest.fixture
def reconciliation_service(database) -> ReconciliationService:
    return ReconciliationService(database)


def used_hours(database: Database, project_id: str) -> float:
    """Stored counter of a project, read in its own transaction."""
    with database.transaction() as repo:
        return repo.get_project(project_id, include_deleted=True).used_hours


@pytest.fixture
def read_used_hours(database):
    return lambda project_id: used_hours(database, project_id)


@pytest.fixture(autouse=True)
def cleanup_test_files():
    """Clean up any test files created during testing."""
    yield

    # Remove test coverage files in case they're created
    test_files = ['coverage.xml', '.coverage']
    for file in test_files:
        if os.path.exists(file):
            os.remove(file)


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
