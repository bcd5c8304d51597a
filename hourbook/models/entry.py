"""Timesheet entry models.

This module defines the TimeEntry model, one logged block of time for a
user on a business date against either a project (billable) or a category
(internal), together with the input models used to create and update it.
"""

import datetime as dt
from typing import Optional

from pydantic import Field, field_validator, model_validator

from hourbook.models.base import BaseDataModel

MAX_DAILY_MINUTES = 24 * 60
MAX_NOTES_LENGTH = 500


class TimeEntry(BaseDataModel):
    """A persisted timesheet entry.

    Attributes:
        id: Unique entry identifier
        user_id: Owner of the entry
        project_id: Project the time counts against (billable)
        category_id: Internal category (never affects a project budget)
        date: Business date, timezone naive
        hours: Whole hours (0-24)
        minutes: Minutes, always a multiple of 15 (0-45)
        notes: Optional free text
        is_deleted: Soft-delete flag
        created_at: Audit timestamp

    Example:
        >>> entry = TimeEntry(
        ...     id="e1", user_id="u1", project_id="p1",
        ...     date=dt.date(2024, 3, 4), hours=2, minutes=30,
        ... )
        >>> entry.total_minutes
        150
    """

    id: str
    user_id: str
    project_id: Optional[str] = None
    category_id: Optional[str] = None
    date: dt.date
    hours: int = Field(..., ge=0, le=24)
    minutes: int = Field(..., ge=0, le=59)
    notes: Optional[str] = None
    is_deleted: bool = False
    created_at: Optional[dt.datetime] = None

    @field_validator("minutes")
    @classmethod
    def validate_quarter_hour(cls, v: int) -> int:
        """Stored minutes are always rounded to a quarter hour."""
        if v % 15 != 0:
            raise ValueError(f"minutes must be a multiple of 15, got {v}")
        return v

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes

    @property
    def duration_hours(self) -> float:
        return self.total_minutes / 60

    @property
    def is_billable(self) -> bool:
        return self.project_id is not None


class EntryCreate(BaseDataModel):
    """Input for creating an entry.

    Exactly one of ``project_id`` and ``category_id`` must be given. Minutes
    are accepted unrounded here; rounding happens once in the service.
    """

    project_id: Optional[str] = None
    category_id: Optional[str] = None
    date: dt.date
    hours: int = Field(..., ge=0, le=24)
    minutes: int = Field(0, ge=0, le=59)
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)

    @field_validator("project_id", "category_id", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_target(self) -> "EntryCreate":
        """Validate that the entry targets exactly one project or category.

        Raises:
            ValueError: If neither or both targets are given
        """
        if not self.project_id and not self.category_id:
            raise ValueError("Either project or category must be specified")
        if self.project_id and self.category_id:
            raise ValueError("An entry targets a project or a category, not both")
        return self


class EntryUpdate(BaseDataModel):
    """Partial update of an entry.

    Only fields explicitly set by the caller are applied (see
    ``model_fields_set``); an explicit ``None`` clears a target.
    """

    project_id: Optional[str] = None
    category_id: Optional[str] = None
    date: Optional[dt.date] = None
    hours: Optional[int] = Field(None, ge=0, le=24)
    minutes: Optional[int] = Field(None, ge=0, le=59)
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)

    @field_validator("project_id", "category_id", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        # A blank string still counts as given, so it clears the field
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("date", "hours", "minutes")
    @classmethod
    def not_null_when_given(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v
