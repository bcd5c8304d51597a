"""Project and category data models.

This module defines the Project model with its admin-set budget and the
incrementally maintained ``used_hours`` counter, the input models used to
create and edit projects, and the internal Category buckets.
"""

import datetime as dt
import re
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from hourbook.models.base import BaseDataModel

COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


class ProjectStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class Project(BaseDataModel):
    """Represents a budgeted project.

    Attributes:
        id: Unique project identifier
        name: Display name
        color: Display colour (#RRGGBB)
        status: ACTIVE or ARCHIVED
        total_hours: Budget in hours, 0 means unbudgeted
        used_hours: Running sum of the durations of its non-deleted entries
        is_deleted: Soft-delete flag

    Example:
        >>> project = Project(id="p1", name="Website", color="#6366f1",
        ...                   total_hours=100, used_hours=12.5)
        >>> project.status
        <ProjectStatus.ACTIVE: 'ACTIVE'>
    """

    id: str
    name: str = Field(..., min_length=1, max_length=100)
    color: str
    status: ProjectStatus = ProjectStatus.ACTIVE
    total_hours: float = Field(0.0, ge=0)
    used_hours: float = 0.0
    is_deleted: bool = False
    created_at: Optional[dt.datetime] = None


class _NamedInput(BaseDataModel):
    """Shared validation for admin input carrying a name and a colour."""

    @field_validator("name", check_fields=False)
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        """Validate that the name is not whitespace only.

        Raises:
            ValueError: If the name is blank
        """
        if v is None:
            return v
        if not v.strip():
            raise ValueError("name cannot be empty or whitespace")
        return v.strip()

    @field_validator("color", check_fields=False)
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        """Validate the #RRGGBB colour format.

        Raises:
            ValueError: If the colour is not a six digit hex code
        """
        if v is not None and not COLOR_PATTERN.match(v):
            raise ValueError(f"color must be a hex colour like #6366f1, got {v!r}")
        return v


class ProjectCreate(_NamedInput):
    """Input for creating a project."""

    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = None
    total_hours: float = Field(0.0, ge=0)


class ProjectUpdate(_NamedInput):
    """Admin-editable project fields. ``used_hours`` is not one of them."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None
    total_hours: Optional[float] = Field(None, ge=0)
    status: Optional[ProjectStatus] = None


class ProjectWithBudget(BaseDataModel):
    """A project decorated with its derived budget figures."""

    id: str
    name: str
    color: str
    status: ProjectStatus
    total_hours: float
    used_hours: float
    remaining_hours: float
    percentage_used: int
    budget_status: str
    is_favorite: bool = False
    assigned_user_ids: List[str] = Field(default_factory=list)


class Category(BaseDataModel):
    """A non-billable internal bucket such as "Admin" or "Training"."""

    id: str
    name: str = Field(..., min_length=1, max_length=100)
    color: str = "#64748b"


class CategoryCreate(_NamedInput):
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = None
