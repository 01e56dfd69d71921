"""
Intake submissions.

Turns completed form state into rows: project requests, job applications,
live-chat inquiries and developer onboarding. Text is trimmed and empty
optional fields are stored as NULL.
"""

import re
import sys
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from auth import ActingIdentity, grant_role, has_role, require_authenticated
from catalog import JobOpening
from errors import ProfileAlreadyExists, SubmitFailed, ValidationFailed
from models import (
    AppRole, ChatInquiry, Developer, DeveloperScreenshot, DeveloperSkill,
    DeveloperStatus, JobApplication, ProjectSubmission, new_id,
)
from schemas import (
    ChatInquiryForm, DeveloperOnboardingForm, JobApplicationForm,
    ProjectIntakeForm, ScreenshotRef, SkillEntry,
)
from storage import SCREENSHOT_BUCKET, BlobStore, get_blob_store
from stepper import filled_items, validate_workflow

_NON_DIGITS = re.compile(r"\D")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _to_int(text: str) -> Optional[int]:
    digits = _NON_DIGITS.sub("", text or "")
    return int(digits) if digits else None


def parse_budget_range(token: str) -> Tuple[Optional[int], Optional[int]]:
    """'5000-10000' -> (5000, 10000); '25000+' -> (25000, None); '3000' -> (3000, 3000)."""
    parts = (token or "").split("-")
    budget_min = _to_int(parts[0])
    if len(parts) > 1 and _to_int(parts[1]) is not None:
        return budget_min, _to_int(parts[1])
    if "+" in parts[0]:
        return budget_min, None
    return budget_min, budget_min


def _commit(db: Session, row, what: str) -> str:
    db.add(row)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        print(f"⚠️ Failed to store {what}: {e}", file=sys.stderr, flush=True)
        raise SubmitFailed() from e
    return row.id


def submit_project_intake(db: Session, state: ProjectIntakeForm) -> str:
    validate_workflow("project-intake", state)
    budget_min, budget_max = parse_budget_range(state.budget)

    submission = ProjectSubmission(
        project_type=state.project_type,
        features=filled_items(state.features),
        custom_requirements=_clean(state.custom_requirements),
        budget_min=budget_min,
        budget_max=budget_max,
        timeline=_clean(state.timeline),
        name=state.name.strip(),
        email=state.email.strip(),
        phone=_clean(state.phone),
        company=_clean(state.company),
    )
    return _commit(db, submission, "project submission")


def submit_job_application(db: Session, job: JobOpening, state: JobApplicationForm) -> str:
    validate_workflow("job-application", state, "Please fill in required fields")

    application = JobApplication(
        job_title=job.title,
        job_type=job.type.value,
        name=state.name.strip(),
        email=state.email.strip(),
        phone=_clean(state.phone),
        portfolio_url=_clean(state.portfolio_url),
        cover_letter=_clean(state.cover_letter),
        resume_url=_clean(state.resume_url),
    )
    return _commit(db, application, "job application")


def submit_chat_inquiry(db: Session, state: ChatInquiryForm) -> str:
    validate_workflow("chat-inquiry", state, "Please fill in all fields")

    inquiry = ChatInquiry(
        name=state.name.strip(),
        email=state.email.strip(),
        message=state.message.strip(),
    )
    return _commit(db, inquiry, "chat inquiry")


# -------- Developer onboarding --------

def _unique_skills(skills: List[SkillEntry]) -> List[SkillEntry]:
    seen = set()
    result = []
    for skill in skills:
        name = skill.name.strip()
        if name and name not in seen:
            seen.add(name)
            result.append(SkillEntry(name=name, years=skill.years))
    return result


def _own_screenshots(store: BlobStore, actor: ActingIdentity,
                     screenshots: List[ScreenshotRef]) -> List[ScreenshotRef]:
    """Only blobs the caller already stored in their own portfolio folder are accepted."""
    for shot in screenshots:
        path = store.path_for_url(SCREENSHOT_BUCKET, shot.url)
        if (path is None
                or not path.startswith(f"{actor.user_id}/")
                or not store.exists(SCREENSHOT_BUCKET, path)):
            raise ValidationFailed(f"Screenshot {shot.name} was not uploaded by you", step=3)
    return screenshots


def _stage_details(db: Session, developer_id: str, skills, screenshots) -> None:
    for skill in skills:
        db.add(DeveloperSkill(
            developer_id=developer_id,
            skill_name=skill.name,
            years_experience=skill.years,
        ))
    for shot in screenshots:
        db.add(DeveloperScreenshot(
            developer_id=developer_id,
            file_url=shot.url,
            file_name=shot.name,
        ))


def submit_developer_onboarding(db: Session, actor: ActingIdentity,
                                state: DeveloperOnboardingForm,
                                store: Optional[BlobStore] = None) -> str:
    """Create the caller's developer profile with its role grant, skills and screenshots.

    Everything is written in one transaction. The new profile always starts as
    pending and unavailable, whatever the form carries. If a profile from an
    earlier, interrupted onboarding exists without its developer role grant,
    the missing pieces are added and that profile's id is returned.
    """
    require_authenticated(actor)
    validate_workflow("developer-onboarding", state)
    skills = _unique_skills(state.skills)
    screenshots = _own_screenshots(store or get_blob_store(), actor, state.screenshots)

    existing = db.query(Developer).filter(Developer.user_id == actor.user_id).first()
    if existing is not None:
        if has_role(db, actor.user_id, AppRole.DEVELOPER):
            raise ProfileAlreadyExists()
        grant_role(db, actor.user_id, AppRole.DEVELOPER)
        _stage_details(
            db, existing.id,
            skills if not existing.skills else [],
            screenshots if not existing.screenshots else [],
        )
        profile_id = existing.id
    else:
        profile_id = new_id()
        db.add(Developer(
            id=profile_id,
            user_id=actor.user_id,
            name=state.name.strip(),
            email=actor.email or "",
            role=state.role.strip(),
            experience_years=state.experience_years,
            location=_clean(state.location),
            github_url=_clean(state.github_url),
            portfolio_url=_clean(state.portfolio_url),
            weekly_hours=state.weekly_hours,
            preferred_project_types=filled_items(state.preferred_project_types),
            status=DeveloperStatus.PENDING.value,
            is_available=False,
        ))
        grant_role(db, actor.user_id, AppRole.DEVELOPER)
        _stage_details(db, profile_id, skills, screenshots)

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ProfileAlreadyExists() from e
    except SQLAlchemyError as e:
        db.rollback()
        print(f"⚠️ Developer onboarding failed for {actor.user_id}: {e}", file=sys.stderr, flush=True)
        raise SubmitFailed("Failed to create profile. Please try again.") from e
    return profile_id
