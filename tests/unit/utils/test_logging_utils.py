"""Tests for structured logging utilities."""

import logging

import pytest

from hourbook.utils.logging_utils import (
    ContextFilter,
    LogContext,
    get_log_context,
    log_function_call,
    sanitize_sensitive_data,
)


class TestLogContext:
    """Test LogContext context manager."""

    def test_fields_visible_inside_block(self):
        with LogContext(actor_id="user-1"):
            assert get_log_context()["actor_id"] == "user-1"
        assert "actor_id" not in get_log_context()

    def test_nested_context_restores_outer_fields(self):
        with LogContext(actor_id="user-1"):
            with LogContext(entry_id="e42"):
                context = get_log_context()
                assert context == {"actor_id": "user-1", "entry_id": "e42"}
            assert get_log_context() == {"actor_id": "user-1"}

    def test_filter_copies_fields_onto_record(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
        with LogContext(project_id="p1"):
            assert ContextFilter().filter(record) is True
        assert record.project_id == "p1"


class TestSanitizeSensitiveData:
    """Test sanitize_sensitive_data function."""

    def test_redacts_sensitive_keys(self):
        data = {"email": "jo@example.com", "password": "hunter2", "api_key": "k"}
        sanitized = sanitize_sensitive_data(data)

        assert sanitized["email"] == "jo@example.com"
        assert sanitized["password"] == "***REDACTED***"
        assert sanitized["api_key"] == "***REDACTED***"

    def test_nested_dicts(self):
        data = {"settings": {"database_url": "postgresql://u:p@db/x", "workday_hours": 8}}
        sanitized = sanitize_sensitive_data(data)

        assert sanitized["settings"]["database_url"] == "***REDACTED***"
        assert sanitized["settings"]["workday_hours"] == 8

    def test_settings_keys_are_not_redacted(self):
        data = {"session_timeout_hours": 24, "backdate_limit_days": 7}
        assert sanitize_sensitive_data(data) == data

    def test_none_stays_none(self):
        assert sanitize_sensitive_data({"token": None}) == {"token": None}

    def test_does_not_modify_input(self):
        data = {"secret": "x"}
        sanitize_sensitive_data(data)
        assert data == {"secret": "x"}

    def test_non_dict_passthrough(self):
        assert sanitize_sensitive_data(None) is None


class TestLogFunctionCall:
    """Test log_function_call decorator."""

    def test_bare_decorator_logs_entry_and_exit(self, caplog):
        @log_function_call
        def add(a, b):
            return a + b

        with caplog.at_level(logging.DEBUG):
            assert add(1, 2) == 3

        messages = [r.getMessage() for r in caplog.records]
        assert "Entering add" in messages
        assert "Exiting add" in messages

    def test_include_args(self, caplog):
        @log_function_call(include_args=True, level="INFO")
        def greet(name, punctuation="!"):
            return f"hi {name}{punctuation}"

        with caplog.at_level(logging.INFO):
            greet("jo", punctuation="?")

        assert any("with args: 'jo', punctuation='?'" in r.getMessage() for r in caplog.records)

    def test_exception_logged_and_reraised(self, caplog):
        @log_function_call
        def fail():
            raise RuntimeError("boom")

        with caplog.at_level(logging.DEBUG):
            with pytest.raises(RuntimeError, match="boom"):
                fail()

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors
        assert "RuntimeError: boom" in errors[0].getMessage()

    def test_preserves_metadata(self):
        @log_function_call
        def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."
