"""Tests for the role-scoped dashboard queries."""

import pytest

import catalog
import dashboard
from assignments import assign
from auth import ActingIdentity
from errors import Forbidden, NotAuthenticated, NotFound, ProfileMissing
from intake import submit_chat_inquiry, submit_job_application
from models import DeveloperStatus
from schemas import ChatInquiryForm, JobApplicationForm


class TestSubmissionsAndApplications:
    """Test who sees leads and applications."""

    def test_submissions_newest_first(self, db, admin, make_submission):
        first = make_submission(name="First")
        second = make_submission(name="Second")
        assert [s.id for s in dashboard.list_project_submissions(db, admin)] == [second.id, first.id]

    def test_developers_see_all_submissions(self, db, make_developer, make_submission):
        make_submission()
        make_submission()
        _, developer_actor = make_developer()
        assert len(dashboard.list_project_submissions(db, developer_actor)) == 2

    def test_anonymous_cannot_list_submissions(self, db):
        with pytest.raises(NotAuthenticated):
            dashboard.list_project_submissions(db, ActingIdentity.anonymous())

    def test_job_applications_admin_only(self, db, admin, make_developer):
        submit_job_application(db, catalog.get_job("1"), JobApplicationForm(name="A", email="a@example.com"))
        submit_job_application(db, catalog.get_job("3"), JobApplicationForm(name="B", email="b@example.com"))

        applications = dashboard.list_job_applications(db, admin)
        assert [a.name for a in applications] == ["B", "A"]

        _, developer_actor = make_developer()
        with pytest.raises(Forbidden):
            dashboard.list_job_applications(db, developer_actor)


class TestAssignmentViews:
    """Test assignment listings."""

    def test_developer_sees_own_assignments_newest_first(self, db, admin, make_developer, make_submission):
        developer, owner = make_developer(DeveloperStatus.APPROVED, is_available=True)
        older = make_submission(name="Older")
        newer = make_submission(name="Newer", project_type="maintenance")
        assign(db, admin, developer.id, older.id)
        assign(db, admin, developer.id, newer.id)

        rows = dashboard.list_assignments_for_developer(db, owner, developer.id)

        assert [r.project_submission.name for r in rows] == ["Newer", "Older"]
        assert rows[0].project_submission.project_type == "maintenance"
        assert rows[0].developer_name == developer.name

    def test_other_developer_forbidden(self, db, make_developer):
        developer, _ = make_developer()
        _, stranger = make_developer()
        with pytest.raises(Forbidden):
            dashboard.list_assignments_for_developer(db, stranger, developer.id)

    def test_admin_sees_any_developer(self, db, admin, make_developer):
        developer, _ = make_developer()
        assert dashboard.list_assignments_for_developer(db, admin, developer.id) == []

    def test_unknown_developer(self, db, admin):
        with pytest.raises(NotFound):
            dashboard.list_assignments_for_developer(db, admin, "missing")

    def test_all_assignments_joined(self, db, admin, make_developer, make_submission):
        alice, _ = make_developer(DeveloperStatus.APPROVED, is_available=True, name="Alice")
        bob, bob_actor = make_developer(DeveloperStatus.APPROVED, is_available=True, name="Bob")
        submission = make_submission(name="Shop")
        assign(db, admin, alice.id, submission.id)
        assign(db, admin, bob.id, submission.id)

        rows = dashboard.list_all_assignments(db, admin)
        assert {r.developer_name for r in rows} == {"Alice", "Bob"}
        assert {r.project_submission.name for r in rows} == {"Shop"}

        with pytest.raises(Forbidden):
            dashboard.list_all_assignments(db, bob_actor)


class TestDeveloperViews:
    """Test developer listing, own profile and stats."""

    def test_own_profile(self, db, make_developer):
        developer, owner = make_developer()
        assert dashboard.get_own_profile(db, owner).id == developer.id

    def test_missing_profile_points_to_onboarding(self, db, make_user):
        actor = make_user("new@example.com")
        with pytest.raises(ProfileMissing) as exc:
            dashboard.get_own_profile(db, actor)
        assert exc.value.redirect == "/developer/onboarding"

    def test_stats(self, db, admin, make_developer):
        make_developer()
        make_developer(DeveloperStatus.APPROVED, is_available=True)
        make_developer(DeveloperStatus.APPROVED, is_available=False)
        make_developer(DeveloperStatus.REJECTED)

        stats = dashboard.developer_stats(db, admin)
        assert (stats.total, stats.pending, stats.approved, stats.available) == (4, 1, 2, 1)

    def test_list_developers_admin_only(self, db, admin, make_developer):
        _, developer_actor = make_developer()
        make_developer()
        assert len(dashboard.list_developers(db, admin)) == 2
        with pytest.raises(Forbidden):
            dashboard.list_developers(db, developer_actor)


class TestChatInquiries:
    """Test the admin inbox for live-chat messages."""

    def test_mark_read(self, db, admin):
        inquiry_id = submit_chat_inquiry(
            db, ChatInquiryForm(name="Lee", email="lee@example.com", message="Hi"),
        )
        assert [i.is_read for i in dashboard.list_chat_inquiries(db, admin)] == [False]
        assert dashboard.mark_inquiry_read(db, admin, inquiry_id).is_read is True

    def test_unknown_inquiry(self, db, admin):
        with pytest.raises(NotFound):
            dashboard.mark_inquiry_read(db, admin, "missing")
