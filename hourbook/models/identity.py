"""User and actor models.

Authentication happens in an external identity provider; this system only
receives the authenticated user id and role, represented by ``Actor``.
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import Field

from hourbook.models.base import BaseDataModel


class Role(str, Enum):
    """Roles handed out by the identity provider."""

    ADMIN = "ADMIN"
    USER = "USER"


class Actor(BaseDataModel):
    """The authenticated caller of a service operation.

    Example:
        >>> Actor(user_id="u1", role=Role.ADMIN).is_admin
        True
    """

    user_id: str = Field(..., min_length=1)
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class User(BaseDataModel):
    """A registered user of the timesheet system."""

    id: str
    email: str
    name: Optional[str] = None
    role: Role = Role.USER
    is_active: bool = True
    created_at: Optional[dt.datetime] = None

    @property
    def display_name(self) -> str:
        """Name shown in reports, falling back to the email address."""
        return self.name or self.email or "Unknown"


class UserUpdate(BaseDataModel):
    """Admin-editable user fields."""

    role: Optional[Role] = None
    is_active: Optional[bool] = None
