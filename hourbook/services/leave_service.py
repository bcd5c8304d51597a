"""Leave calendar: day-granularity leave markers per user."""

import datetime as dt
import logging
from typing import List, Optional

from hourbook.errors import NotFoundError, ValidationError
from hourbook.models.identity import Actor
from hourbook.models.leave import LeaveDay, LeaveDayCreate, LeaveType
from hourbook.storage.database import Database
from hourbook.validators.entry_validators import parse_input

logger = logging.getLogger(__name__)


class LeaveService:
    """Marks and lists leave days. Independent of hours accounting."""

    def __init__(self, database: Database):
        self.database = database

    def mark_leave(
        self, actor: Actor, date: dt.date, leave_type: LeaveType = LeaveType.OTHER
    ) -> LeaveDay:
        """Mark one of the actor's days as leave.

        Raises:
            ConflictError: If the day is already marked
        """
        payload = parse_input(LeaveDayCreate, {"date": date, "type": leave_type})
        with self.database.transaction() as repo:
            leave_day = repo.add_leave_day(actor.user_id, payload.date, payload.type)
        logger.info(f"Marked {payload.date} as {payload.type.value} leave for {actor.user_id}")
        return leave_day

    def unmark_leave(self, actor: Actor, date: dt.date) -> None:
        """Remove the actor's leave marker for ``date``.

        Raises:
            NotFoundError: If the day is not marked
        """
        with self.database.transaction() as repo:
            if not repo.delete_leave_day(actor.user_id, date):
                raise NotFoundError("No leave day found for this date")
        logger.info(f"Removed leave on {date} for {actor.user_id}")

    def list_leave(
        self,
        actor: Actor,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
        user_id: Optional[str] = None,
    ) -> List[LeaveDay]:
        """Leave days, newest first.

        Non-admins only see their own; admins see everyone's unless
        ``user_id`` narrows the list.
        """
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        if not actor.is_admin:
            user_id = actor.user_id
        with self.database.transaction() as repo:
            return repo.list_leave_days(user_id=user_id, start_date=start_date, end_date=end_date)

    def is_on_leave(self, user_id: str, date: dt.date) -> bool:
        with self.database.transaction() as repo:
            return repo.get_leave_day(user_id, date) is not None
