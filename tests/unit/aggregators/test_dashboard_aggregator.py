"""Unit tests for the personal dashboard."""

import datetime as dt

from hourbook.aggregators.dashboard_aggregator import WORKING_DAYS_PER_WEEK, DashboardAggregator
from hourbook.models.entry import TimeEntry

WEDNESDAY = dt.date(2024, 3, 6)


def make_entry(entry_id, date, hours, minutes=0, is_deleted=False):
    return TimeEntry(
        id=entry_id,
        user_id="u1",
        project_id="p1",
        date=date,
        hours=hours,
        minutes=minutes,
        is_deleted=is_deleted,
    )


class TestDashboardAggregator:
    """Test today and week progress."""

    def test_today_and_week(self):
        entries = [
            make_entry("e1", WEDNESDAY, 4, 30),
            make_entry("e2", WEDNESDAY, 3, 0),
            make_entry("e3", dt.date(2024, 3, 4), 6, 0),
            make_entry("e4", dt.date(2024, 3, 5), 2, 0, is_deleted=True),
            make_entry("e5", dt.date(2024, 3, 1), 8, 0),
        ]
        dashboard = DashboardAggregator().build(WEDNESDAY, entries, 7.5, False, [])

        assert dashboard.today.total_minutes == 450
        assert dashboard.today.target_minutes == 450
        assert dashboard.today.is_complete
        assert [e.id for e in dashboard.today.entries] == ["e1", "e2"]

        assert dashboard.week.start_date == dt.date(2024, 3, 4)
        assert dashboard.week.total_minutes == 810
        assert dashboard.week.target_minutes == 450 * WORKING_DAYS_PER_WEEK
        assert dashboard.week.daily_breakdown == {
            dt.date(2024, 3, 4): 360,
            dt.date(2024, 3, 5): 0,
            dt.date(2024, 3, 6): 450,
        }

    def test_incomplete_day_on_leave(self):
        dashboard = DashboardAggregator().build(WEDNESDAY, [], 8, True, [])

        assert not dashboard.today.is_complete
        assert dashboard.today.is_leave
        assert dashboard.target_hours_per_day == 8

    def test_monday_has_single_day_breakdown(self):
        monday = dt.date(2024, 3, 4)
        dashboard = DashboardAggregator().build(monday, [], 7.5, False, [])
        assert list(dashboard.week.daily_breakdown) == [monday]
