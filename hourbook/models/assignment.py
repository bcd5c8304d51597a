"""Assignment and favorite models.

An Assignment permits a user to log non-admin time against a project; a
FavoriteProject pins a project to the top of a user's project list. Both
are unique per (user, project).
"""

import datetime as dt
from typing import Optional

from pydantic import Field

from hourbook.models.base import BaseDataModel


class Assignment(BaseDataModel):
    id: str
    user_id: str
    project_id: str
    created_at: Optional[dt.datetime] = None


class AssignmentCreate(BaseDataModel):
    user_id: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1)


class FavoriteProject(BaseDataModel):
    id: str
    user_id: str
    project_id: str
    created_at: Optional[dt.datetime] = None
