"""Leave calendar models.

Leave is tracked at day granularity, one marker per (user, date). It is
independent of hours accounting.
"""

import datetime as dt
from enum import Enum
from typing import Optional

from hourbook.models.base import BaseDataModel


class LeaveType(str, Enum):
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    HOLIDAY = "HOLIDAY"
    OTHER = "OTHER"


class LeaveDay(BaseDataModel):
    """A day marked as leave for a user.

    Example:
        >>> day = LeaveDay(id="l1", user_id="u1", date=dt.date(2024, 5, 1),
        ...                type=LeaveType.HOLIDAY)
        >>> day.type.value
        'HOLIDAY'
    """

    id: str
    user_id: str
    date: dt.date
    type: LeaveType = LeaveType.OTHER
    created_at: Optional[dt.datetime] = None


class LeaveDayCreate(BaseDataModel):
    date: dt.date
    type: LeaveType = LeaveType.OTHER
