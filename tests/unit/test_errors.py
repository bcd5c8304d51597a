"""Unit tests for the error taxonomy."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from hourbook.errors import (
    AuthorizationError,
    ConflictError,
    HourbookError,
    NotFoundError,
    RateLimitError,
    ValidationError,
    from_pydantic,
    internal_error_response,
)
from hourbook.models.entry import EntryCreate


class TestErrorTaxonomy:
    """Test structured failures."""

    @pytest.mark.parametrize(
        "error_class, code",
        [
            (ValidationError, "validation_error"),
            (AuthorizationError, "forbidden"),
            (NotFoundError, "not_found"),
            (ConflictError, "conflict"),
            (RateLimitError, "rate_limited"),
        ],
    )
    def test_codes(self, error_class, code):
        error = error_class("Something happened")
        assert isinstance(error, HourbookError)
        assert error.to_dict() == {"success": False, "error": "Something happened", "code": code}

    def test_internal_error_has_no_detail(self):
        payload = internal_error_response()
        assert payload["error"] == "Internal server error"
        assert payload["success"] is False


class TestFromPydantic:
    """Test translation of pydantic errors."""

    def test_model_level_message(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            EntryCreate(date="2024-03-04", hours=1)
        error = from_pydantic(exc_info.value)
        assert isinstance(error, ValidationError)
        assert error.message == "Either project or category must be specified"

    def test_field_message_is_prefixed_with_location(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            EntryCreate(project_id="p1", date="not-a-date", hours=1)
        error = from_pydantic(exc_info.value)
        assert error.message.startswith("date: ")
