"""Tests for intake submissions and developer onboarding."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

import catalog
import storage
from auth import ActingIdentity, has_role
from errors import (
    NotAuthenticated, ProfileAlreadyExists, SubmitFailed, ValidationFailed,
)
from intake import (
    parse_budget_range, submit_chat_inquiry, submit_developer_onboarding,
    submit_job_application, submit_project_intake,
)
from models import (
    AppRole, ChatInquiry, Developer, DeveloperSkill, JobApplication,
    ProjectSubmission,
)
from schemas import (
    ChatInquiryForm, DeveloperOnboardingForm, JobApplicationForm,
    ProjectIntakeForm, ScreenshotRef, SkillEntry,
)


class TestBudgetRange:
    """Test budget token parsing."""

    @pytest.mark.parametrize("token,expected", [
        ("1000-3000", (1000, 3000)),
        ("5000-10000", (5000, 10000)),
        ("10000-25000", (10000, 25000)),
        ("25000+", (25000, None)),
        ("$3,000 - $5,000", (3000, 5000)),
        ("7500", (7500, 7500)),
        ("", (None, None)),
    ])
    def test_parse(self, token, expected):
        assert parse_budget_range(token) == expected


class TestProjectIntake:
    """Test project intake submission."""

    def test_shopify_store_scenario(self, db):
        state = ProjectIntakeForm(
            project_type="shopify_store",
            features=["Payment Integration"],
            budget="5000-10000",
            timeline="1-2months",
            name="Jane Doe",
            email="jane@x.com",
        )
        submission_id = submit_project_intake(db, state)

        rows = db.query(ProjectSubmission).all()
        assert len(rows) == 1
        row = rows[0]
        assert row.id == submission_id
        assert row.budget_min == 5000
        assert row.budget_max == 10000
        assert row.features == ["Payment Integration"]
        assert row.project_type == "shopify_store"

    def test_open_ended_budget_and_trimming(self, db):
        state = ProjectIntakeForm(
            project_type="new_website",
            custom_requirements="  Multi-language support  ",
            budget="25000+",
            timeline="flexible",
            name="  Jane Doe ",
            email=" jane@x.com ",
            phone="   ",
            company=" Acme ",
        )
        row = db.get(ProjectSubmission, submit_project_intake(db, state))
        assert row.budget_min == 25000
        assert row.budget_max is None
        assert row.features == []
        assert row.custom_requirements == "Multi-language support"
        assert row.name == "Jane Doe"
        assert row.email == "jane@x.com"
        assert row.phone is None
        assert row.company == "Acme"

    def test_incomplete_form_is_rejected(self, db):
        with pytest.raises(ValidationFailed):
            submit_project_intake(db, ProjectIntakeForm(project_type="maintenance"))
        assert db.query(ProjectSubmission).count() == 0

    def test_features_trimmed_and_blanks_dropped(self, db):
        state = ProjectIntakeForm(
            project_type="redesign", features=["  ", " Blog/CMS "],
            budget="3000-5000", timeline="asap", name="Jane", email="jane@x.com",
        )
        row = db.get(ProjectSubmission, submit_project_intake(db, state))
        assert row.features == ["Blog/CMS"]

    def test_blank_features_do_not_count(self, db):
        state = ProjectIntakeForm(
            project_type="redesign", features=[" ", ""],
            budget="3000-5000", timeline="asap", name="Jane", email="jane@x.com",
        )
        with pytest.raises(ValidationFailed) as exc:
            submit_project_intake(db, state)
        assert exc.value.step == 2
        assert db.query(ProjectSubmission).count() == 0

    def test_database_error_becomes_submit_failed(self):
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("down"))
        state = ProjectIntakeForm(
            project_type="maintenance", features=["SEO Optimization"],
            budget="1000-3000", timeline="asap", name="Jane", email="jane@x.com",
        )
        with pytest.raises(SubmitFailed):
            submit_project_intake(db, state)
        db.rollback.assert_called_once()


class TestJobApplication:
    """Test job application submission."""

    def test_tagged_with_job_title_and_type(self, db):
        job = catalog.get_job("2")
        state = JobApplicationForm(
            name="Sam", email="sam@example.com", cover_letter="  Hello  ", portfolio_url="",
        )
        row = db.get(JobApplication, submit_job_application(db, job, state))
        assert row.job_title == "Backend Developer"
        assert row.job_type == "backend"
        assert row.cover_letter == "Hello"
        assert row.portfolio_url is None
        assert row.resume_url is None

    def test_name_and_email_required(self, db):
        job = catalog.get_job("1")
        with pytest.raises(ValidationFailed) as exc:
            submit_job_application(db, job, JobApplicationForm(name="Sam"))
        assert exc.value.message == "Please fill in required fields"


class TestChatInquiry:
    """Test live-chat inquiries."""

    def test_stores_trimmed_inquiry(self, db):
        state = ChatInquiryForm(name=" Lee ", email="lee@example.com", message=" Hi there ")
        row = db.get(ChatInquiry, submit_chat_inquiry(db, state))
        assert row.name == "Lee"
        assert row.message == "Hi there"
        assert row.is_read is False

    @pytest.mark.parametrize("field", ["name", "email", "message"])
    def test_blank_field_never_reaches_database(self, field):
        data = {"name": "Lee", "email": "lee@example.com", "message": "Hi"}
        data[field] = "   "
        db = MagicMock()
        with pytest.raises(ValidationFailed):
            submit_chat_inquiry(db, ChatInquiryForm(**data))
        assert db.method_calls == []


def onboarding_form(actor, store, **overrides):
    stored = storage.upload_screenshot(store, actor.user_id, "dashboard.png", b"png")
    data = dict(
        name="Ada Lovelace",
        role="Backend Developer",
        experience_years=5,
        location="London",
        skills=[SkillEntry(name="Python", years=5), SkillEntry(name="PostgreSQL", years=3)],
        weekly_hours=30,
        preferred_project_types=["Web Apps"],
        screenshots=[ScreenshotRef(url=stored.url, name=stored.name)],
    )
    data.update(overrides)
    return DeveloperOnboardingForm(**data)


class TestDeveloperOnboarding:
    """Test developer onboarding."""

    def test_creates_profile_role_skills_and_screenshots(self, db, make_user, blob_store):
        actor = make_user("ada@example.com")
        profile_id = submit_developer_onboarding(db, actor, onboarding_form(actor, blob_store), blob_store)

        developer = db.get(Developer, profile_id)
        assert developer.user_id == actor.user_id
        assert developer.email == "ada@example.com"
        assert developer.location == "London"
        assert {s.skill_name for s in developer.skills} == {"Python", "PostgreSQL"}
        assert [s.file_name for s in developer.screenshots] == ["dashboard.png"]
        assert has_role(db, actor.user_id, AppRole.DEVELOPER)

    def test_status_and_availability_are_forced(self, db, make_user, blob_store):
        actor = make_user("ada@example.com")
        state = DeveloperOnboardingForm.model_validate({
            **onboarding_form(actor, blob_store).model_dump(),
            "status": "approved",
            "is_available": True,
        })
        developer = db.get(Developer, submit_developer_onboarding(db, actor, state, blob_store))
        assert developer.status == "pending"
        assert developer.is_available is False

    def test_second_onboarding_fails(self, db, make_user, blob_store):
        actor = make_user("ada@example.com")
        submit_developer_onboarding(db, actor, onboarding_form(actor, blob_store), blob_store)
        with pytest.raises(ProfileAlreadyExists):
            submit_developer_onboarding(db, actor, onboarding_form(actor, blob_store), blob_store)
        assert db.query(Developer).count() == 1

    def test_resumes_interrupted_onboarding(self, db, make_user, blob_store):
        actor = make_user("ada@example.com")
        # A profile left behind without its role grant or skills
        partial = Developer(
            user_id=actor.user_id, name="Ada", email=actor.email,
            role="Backend Developer", experience_years=5,
        )
        db.add(partial)
        db.commit()

        profile_id = submit_developer_onboarding(db, actor, onboarding_form(actor, blob_store), blob_store)

        assert profile_id == partial.id
        assert has_role(db, actor.user_id, AppRole.DEVELOPER)
        assert db.query(DeveloperSkill).filter_by(developer_id=partial.id).count() == 2
        assert db.query(Developer).count() == 1

    def test_duplicate_skills_collapsed(self, db, make_user, blob_store):
        actor = make_user("ada@example.com")
        state = onboarding_form(actor, blob_store, skills=[
            SkillEntry(name="Go", years=1), SkillEntry(name="Go", years=2),
        ])
        developer = db.get(Developer, submit_developer_onboarding(db, actor, state, blob_store))
        assert [s.skill_name for s in developer.skills] == ["Go"]

    @pytest.mark.parametrize("url", [
        "http://testserver/uploads/developer-portfolio/other-user/1.png",
        "https://elsewhere.example/x/uploads/developer-portfolio/{uid}/a.png",
        "http://testserver/uploads/developer-portfolio/{uid}/never-uploaded.png",
        "http://testserver/uploads/developer-portfolio/{uid}/../other-user/1.png",
    ])
    def test_rejects_screenshots_not_stored_by_caller(self, db, make_user, blob_store, url):
        actor = make_user("ada@example.com")
        blob_store.upload_blob("developer-portfolio", "other-user/1.png", b"png")
        state = onboarding_form(actor, blob_store, screenshots=[
            ScreenshotRef(url=url.format(uid=actor.user_id), name="x.png"),
        ])
        with pytest.raises(ValidationFailed) as exc:
            submit_developer_onboarding(db, actor, state, blob_store)
        assert exc.value.step == 3
        assert db.query(Developer).count() == 0

    def test_requires_signed_in_identity(self, db, blob_store):
        anonymous = ActingIdentity.anonymous()
        with pytest.raises(NotAuthenticated):
            submit_developer_onboarding(db, anonymous, DeveloperOnboardingForm(), blob_store)

    def test_incomplete_form_rejected(self, db, make_user, blob_store):
        actor = make_user("ada@example.com")
        with pytest.raises(ValidationFailed) as exc:
            submit_developer_onboarding(db, actor, onboarding_form(actor, blob_store, skills=[]), blob_store)
        assert exc.value.step == 2
