"""Unit tests for stored system settings."""

import pytest

from hourbook.errors import AuthorizationError, ValidationError
from hourbook.services.audit import DatabaseAuditSink
from hourbook.services.settings_service import SettingsService


@pytest.fixture
def audited_settings(database, hourbook_config):
    return SettingsService(database, hourbook_config, audit_sink=DatabaseAuditSink(database))


class TestSettingsService:
    """Test reading and updating settings."""

    def test_defaults_from_config(self, settings_service, admin_actor):
        settings = settings_service.read_settings(admin_actor)
        assert settings.workday_hours == 7.5
        assert settings.backdate_limit_days == 7
        assert settings.allowed_domains == []

    def test_read_requires_admin(self, settings_service, user_actor):
        with pytest.raises(AuthorizationError):
            settings_service.read_settings(user_actor)

    def test_update_persists(self, settings_service, admin_actor, database):
        updated = settings_service.update_settings(
            admin_actor, {"workday_hours": 8, "allowed_domains": ["acme.com", "acme.org"]}
        )
        assert updated.workday_hours == 8.0

        with database.transaction() as repo:
            stored = repo.get_setting_values()
        assert stored == {"workday_hours": "8.0", "allowed_domains": "acme.com,acme.org"}
        assert settings_service.get_settings().allowed_domains == ["acme.com", "acme.org"]

    def test_partial_update_keeps_other_values(self, settings_service, admin_actor):
        settings_service.update_settings(admin_actor, {"workday_hours": 6})
        settings_service.update_settings(admin_actor, {"backdate_limit_days": 14})

        settings = settings_service.get_settings()
        assert settings.workday_hours == 6.0
        assert settings.backdate_limit_days == 14

    def test_unknown_key(self, settings_service, admin_actor):
        with pytest.raises(ValidationError, match="Unknown setting"):
            settings_service.update_settings(admin_actor, {"theme": "dark"})

    def test_bad_value(self, settings_service, admin_actor):
        with pytest.raises(ValidationError):
            settings_service.update_settings(admin_actor, {"reminder_time": "5pm"})

    def test_update_requires_admin(self, settings_service, user_actor):
        with pytest.raises(AuthorizationError):
            settings_service.update_settings(user_actor, {"workday_hours": 8})

    def test_update_is_audited(self, audited_settings, admin_actor, database):
        audited_settings.update_settings(admin_actor, {"session_timeout_hours": 12})

        with database.transaction() as repo:
            logs = repo.list_audit_logs(entity_type="Settings")
        assert len(logs) == 1
        assert logs[0].old_value == {"session_timeout_hours": "8"}
        assert logs[0].new_value == {"session_timeout_hours": "12"}
