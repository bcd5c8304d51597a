"""Unit tests for reports, dashboards and reconciliation."""

import datetime as dt

import pytest

from hourbook.errors import AuthorizationError, ValidationError
from hourbook.models.leave import LeaveType
from hourbook.services.leave_service import LeaveService

MONDAY = dt.date(2024, 3, 4)
TODAY = dt.date(2024, 3, 6)


@pytest.fixture
def logged(timesheet_service, user_actor, admin_actor, seeded):
    """A small week of entries across both projects and the category."""
    create = timesheet_service.create_entry
    create(user_actor, {"project_id": seeded.project_a, "date": "2024-03-04", "hours": 3})
    create(user_actor, {"category_id": seeded.category, "date": "2024-03-05", "hours": 1, "minutes": 30})
    create(user_actor, {"project_id": seeded.project_a, "date": "2024-03-06", "hours": 2})
    create(admin_actor, {"project_id": seeded.project_b, "date": "2024-03-06", "hours": 4})
    return seeded


class TestGenerateReport:
    """Test admin reports."""

    def test_totals(self, report_service, admin_actor, logged):
        report = report_service.generate_report(admin_actor, MONDAY, TODAY)

        assert report.summary.total_hours == pytest.approx(10.5)
        assert report.summary.billable_hours == pytest.approx(9.0)
        assert report.summary.internal_hours == pytest.approx(1.5)
        assert [p.project_name for p in report.summary.project_breakdown] == [
            "Website",
            "Mobile App",
        ]
        assert report.user_names["user-1"] == "Jo User"

    def test_filters(self, report_service, admin_actor, logged):
        by_user = report_service.generate_report(admin_actor, MONDAY, TODAY, user_id="admin-1")
        assert by_user.summary.total_hours == pytest.approx(4.0)

        by_project = report_service.generate_report(
            admin_actor, MONDAY, TODAY, project_id=logged.project_a
        )
        assert by_project.summary.total_hours == pytest.approx(5.0)

        by_category = report_service.generate_report(
            admin_actor, MONDAY, TODAY, category_id=logged.category
        )
        assert by_category.summary.billable_hours == 0

        single_day = report_service.generate_report(admin_actor, TODAY, TODAY)
        assert len(single_day.entries) == 2

    def test_admin_only(self, report_service, user_actor):
        with pytest.raises(AuthorizationError):
            report_service.generate_report(user_actor, MONDAY, TODAY)

    def test_inverted_range(self, report_service, admin_actor):
        with pytest.raises(ValidationError, match="start_date must not be after end_date"):
            report_service.generate_report(admin_actor, TODAY, MONDAY)

    def test_report_matches_counters(self, report_service, admin_actor, logged, read_used_hours):
        report = report_service.generate_report(admin_actor, MONDAY, TODAY)
        for total in report.summary.project_breakdown:
            assert read_used_hours(total.project_id) == pytest.approx(total.hours)


class TestAdminStats:
    """Test the admin statistics view."""

    def test_project_to_user_breakdown(self, report_service, admin_actor, logged):
        stats = report_service.admin_stats(admin_actor)

        assert stats.date == TODAY
        assert [(p.project_name, p.hours) for p in stats.project_breakdown] == [
            ("Website", 5.0),
            ("Mobile App", 4.0),
        ]
        website, mobile = stats.project_breakdown
        assert [(u.user_name, u.hours) for u in website.users] == [("Jo User", 5.0)]
        assert [(u.user_name, u.hours) for u in mobile.users] == [("Ada Admin", 4.0)]

    def test_user_to_project_breakdown(self, report_service, admin_actor, logged):
        stats = report_service.admin_stats(admin_actor)

        jo, ada = stats.user_breakdown
        assert (jo.user_id, jo.hours) == ("user-1", 6.5)
        assert [p.project_name for p in jo.projects] == ["Website"]
        assert (ada.user_id, ada.hours) == ("admin-1", 4.0)

    def test_users_on_leave_today(
        self, report_service, admin_actor, user_actor, other_actor, logged, database
    ):
        leave = LeaveService(database)
        leave.mark_leave(other_actor, TODAY, LeaveType.SICK)
        leave.mark_leave(user_actor, MONDAY, LeaveType.ANNUAL)

        stats = report_service.admin_stats(admin_actor)

        assert [(u.user_id, u.user_name, u.leave_type) for u in stats.users_on_leave] == [
            ("user-2", "sam@example.com", LeaveType.SICK)
        ]
        assert report_service.admin_stats(admin_actor, today=MONDAY).users_on_leave[0].user_id == "user-1"

    def test_deleted_entries_excluded(
        self, report_service, timesheet_service, admin_actor, user_actor, logged
    ):
        monday_entry = timesheet_service.list_entries(
            user_actor, start_date=MONDAY, end_date=MONDAY
        )[0]
        timesheet_service.delete_entry(user_actor, monday_entry.id)

        stats = report_service.admin_stats(admin_actor)
        assert stats.project_breakdown[0].project_name == "Mobile App"
        assert stats.project_breakdown[1].users[0].hours == 2.0

    def test_empty(self, report_service, admin_actor, seeded):
        stats = report_service.admin_stats(admin_actor)
        assert stats.project_breakdown == []
        assert stats.user_breakdown == []
        assert stats.users_on_leave == []

    def test_admin_only(self, report_service, user_actor):
        with pytest.raises(AuthorizationError):
            report_service.admin_stats(user_actor)


class TestDashboard:
    """Test the personal dashboard."""

    def test_dashboard(self, report_service, user_actor, logged, database):
        LeaveService(database).mark_leave(user_actor, TODAY)
        dashboard = report_service.dashboard(user_actor)

        assert dashboard.today.date == TODAY
        assert dashboard.today.total_minutes == 120
        assert dashboard.today.is_leave
        assert dashboard.target_hours_per_day == 7.5
        assert dashboard.week.total_minutes == 390
        assert [p.name for p in dashboard.projects] == ["Website"]
        assert dashboard.projects[0].used_hours == pytest.approx(5.0)


class TestReconciliation:
    """Test counter reconciliation."""

    def test_clean_after_mutations(
        self, reconciliation_service, timesheet_service, admin_actor, user_actor, logged
    ):
        entries = timesheet_service.list_entries(user_actor)
        timesheet_service.delete_entry(user_actor, entries[0].id)
        timesheet_service.update_entry(admin_actor, entries[-1].id, {"project_id": logged.project_b})

        assert reconciliation_service.reconcile(admin_actor) == []

    def test_detects_tampered_counter(
        self, reconciliation_service, database, admin_actor, logged, caplog
    ):
        with database.transaction() as repo:
            repo.increment_used_hours(logged.project_b, 0.5)

        discrepancies = reconciliation_service.reconcile(admin_actor)

        assert len(discrepancies) == 1
        discrepancy = discrepancies[0]
        assert discrepancy.project_name == "Mobile App"
        assert discrepancy.stored_hours == pytest.approx(4.5)
        assert discrepancy.computed_hours == pytest.approx(4.0)
        assert discrepancy.difference == pytest.approx(0.5)
        assert "Counter mismatch on Mobile App" in caplog.text

    def test_archived_projects_included(
        self, reconciliation_service, project_service, database, admin_actor, logged
    ):
        project_service.update_project(admin_actor, logged.project_b, {"status": "ARCHIVED"})
        with database.transaction() as repo:
            repo.increment_used_hours(logged.project_b, 1.0)

        assert [d.project_id for d in reconciliation_service.reconcile(admin_actor)] == [
            logged.project_b
        ]

    def test_admin_only(self, reconciliation_service, user_actor):
        with pytest.raises(AuthorizationError):
            reconciliation_service.reconcile(user_actor)
