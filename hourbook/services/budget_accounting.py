"""Budget accounting for project used-hours counters.

Every entry lifecycle transition (create, update, soft delete, restore,
copy) passes its before/after states through ``BudgetAccountant.apply``.
The accountant derives the signed deltas and applies them through the
repository's atomic increment, so ``project.used_hours`` always equals the
summed duration of the project's non-deleted entries without rescanning the
entry table.

An entry "counts" against a project when it is not deleted and has a
project id. Comparing what counted before with what counts after yields
every rule of the accounting table:

==================================  =======================================
Transition                          Delta
==================================  =======================================
create on P                         +new on P
create on a category                none
update, same project                +(new - old) on P
update, P1 -> P2                    -old on P1, then +new on P2
soft delete                         -old on P
restore                             +old on P
==================================  =======================================
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from hourbook.models.entry import TimeEntry
from hourbook.storage.repository import TimesheetRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetDelta:
    """A signed change to one project's used-hours counter.

    Attributes:
        project_id: Project whose counter changes
        minutes: Signed change in minutes

    Example:
        >>> BudgetDelta(project_id="p1", minutes=-90).hours
        -1.5
    """

    project_id: str
    minutes: int

    @property
    def hours(self) -> float:
        return self.minutes / 60


def _counted(entry: Optional[TimeEntry]) -> Optional[Tuple[str, int]]:
    """Return (project_id, minutes) if the entry counts against a project."""
    if entry is None or entry.is_deleted or entry.project_id is None:
        return None
    return entry.project_id, entry.total_minutes


def compute_budget_deltas(
    before: Optional[TimeEntry], after: Optional[TimeEntry]
) -> List[BudgetDelta]:
    """Compute the counter changes implied by an entry transition.

    Args:
        before: Entry state before the mutation (None for a create)
        after: Entry state after the mutation (None is treated like deleted)

    Returns:
        Deltas in application order. A project change yields the decrement
        of the old project first, then the increment of the new one; zero
        deltas are omitted.
    """
    old = _counted(before)
    new = _counted(after)

    if old is not None and new is not None and old[0] == new[0]:
        difference = new[1] - old[1]
        return [BudgetDelta(old[0], difference)] if difference else []

    deltas: List[BudgetDelta] = []
    if old is not None and old[1]:
        deltas.append(BudgetDelta(old[0], -old[1]))
    if new is not None and new[1]:
        deltas.append(BudgetDelta(new[0], new[1]))
    return deltas


class BudgetAccountant:
    """Applies budget deltas for entry transitions.

    Must be called inside the same ``Database.transaction()`` that writes
    the entry row so the row and the counter commit atomically.

    Example:
        >>> accountant = BudgetAccountant()
        >>> with db.transaction() as repo:
        ...     entry = repo.add_entry(...)
        ...     accountant.record_created(repo, entry)
    """

    def apply(
        self,
        repo: TimesheetRepository,
        before: Optional[TimeEntry],
        after: Optional[TimeEntry],
    ) -> List[BudgetDelta]:
        """Apply the deltas for a ``before`` -> ``after`` transition.

        Returns:
            The deltas that were applied
        """
        deltas = compute_budget_deltas(before, after)
        for delta in deltas:
            repo.increment_used_hours(delta.project_id, delta.hours)
            logger.info(
                f"Applied budget delta {delta.hours:+.2f}h to project {delta.project_id}"
            )
        return deltas

    def record_created(self, repo: TimesheetRepository, entry: TimeEntry) -> List[BudgetDelta]:
        return self.apply(repo, None, entry)

    def record_updated(
        self, repo: TimesheetRepository, before: TimeEntry, after: TimeEntry
    ) -> List[BudgetDelta]:
        return self.apply(repo, before, after)

    def record_deleted(self, repo: TimesheetRepository, entry: TimeEntry) -> List[BudgetDelta]:
        return self.apply(repo, entry, None)

    def record_restored(self, repo: TimesheetRepository, entry: TimeEntry) -> List[BudgetDelta]:
        return self.apply(repo, None, entry)
