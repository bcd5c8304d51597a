"""Unit tests for the timesheet entry models."""

import datetime as dt

import pytest
from pydantic import ValidationError

from hourbook.models.entry import EntryCreate, EntryUpdate, TimeEntry


class TestTimeEntry:
    """Test the persisted entry model."""

    def _entry(self, **overrides):
        data = {
            "id": "e1",
            "user_id": "u1",
            "project_id": "p1",
            "date": dt.date(2024, 3, 4),
            "hours": 2,
            "minutes": 30,
        }
        data.update(overrides)
        return TimeEntry(**data)

    def test_total_minutes_and_hours(self):
        entry = self._entry()
        assert entry.total_minutes == 150
        assert entry.duration_hours == 2.5

    def test_billable_when_on_project(self):
        assert self._entry().is_billable
        assert not self._entry(project_id=None, category_id="c1").is_billable

    def test_minutes_must_be_quarter_hours(self):
        with pytest.raises(ValidationError, match="multiple of 15"):
            self._entry(minutes=20)

    def test_hours_range(self):
        with pytest.raises(ValidationError):
            self._entry(hours=25)

    def test_from_iso_date_string(self):
        entry = self._entry(date="2024-03-04")
        assert entry.date == dt.date(2024, 3, 4)


class TestEntryCreate:
    """Test entry creation input."""

    def test_valid_project_entry(self):
        payload = EntryCreate(project_id="p1", date="2024-03-04", hours=1, minutes=20)
        assert payload.minutes == 20  # rounding happens in the service
        assert payload.category_id is None

    def test_minutes_default_to_zero(self):
        payload = EntryCreate(category_id="c1", date="2024-03-04", hours=1)
        assert payload.minutes == 0

    def test_requires_a_target(self):
        with pytest.raises(ValidationError, match="Either project or category must be specified"):
            EntryCreate(date="2024-03-04", hours=1)

    def test_blank_target_counts_as_missing(self):
        with pytest.raises(ValidationError, match="Either project or category"):
            EntryCreate(project_id="  ", date="2024-03-04", hours=1)

    def test_rejects_both_targets(self):
        with pytest.raises(ValidationError, match="not both"):
            EntryCreate(project_id="p1", category_id="c1", date="2024-03-04", hours=1)

    def test_minutes_out_of_range(self):
        with pytest.raises(ValidationError):
            EntryCreate(project_id="p1", date="2024-03-04", hours=1, minutes=60)

    def test_notes_length_limit(self):
        EntryCreate(project_id="p1", date="2024-03-04", hours=1, notes="x" * 500)
        with pytest.raises(ValidationError):
            EntryCreate(project_id="p1", date="2024-03-04", hours=1, notes="x" * 501)

    def test_bad_date(self):
        with pytest.raises(ValidationError):
            EntryCreate(project_id="p1", date="2024-02-30", hours=1)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            EntryCreate(project_id="p1", date="2024-03-04", hours=1, used_hours=5)


class TestEntryUpdate:
    """Test partial update input."""

    def test_only_given_fields_are_set(self):
        payload = EntryUpdate(hours=3)
        assert payload.model_fields_set == {"hours"}

    def test_explicit_none_clears_target(self):
        payload = EntryUpdate(category_id=None)
        assert "category_id" in payload.model_fields_set
        assert payload.category_id is None

    def test_blank_strings_clear(self):
        payload = EntryUpdate(project_id="", category_id="  ", notes="")
        assert payload.model_fields_set == {"project_id", "category_id", "notes"}
        assert (payload.project_id, payload.category_id, payload.notes) == (None, None, None)

    @pytest.mark.parametrize("field", ["date", "hours", "minutes"])
    def test_required_fields_cannot_be_null(self, field):
        with pytest.raises(ValidationError, match="cannot be null"):
            EntryUpdate(**{field: None})
