"""Role-scoped read views for the admin and developer dashboards."""

from typing import List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from auth import ActingIdentity, require_authenticated, require_role
from errors import Forbidden, NotFound, ProfileMissing, UpdateFailed
from models import (
    AppRole, ChatInquiry, Developer, DeveloperStatus, JobApplication,
    ProjectAssignment, ProjectSubmission,
)
from schemas import AssignmentResponse, DeveloperStats, SubmissionSummary


def list_project_submissions(db: Session, actor: ActingIdentity) -> List[ProjectSubmission]:
    # Developers see the whole lead pool, not only what they are assigned to
    require_role(actor, AppRole.ADMIN, AppRole.DEVELOPER)
    return (
        db.query(ProjectSubmission)
        .order_by(ProjectSubmission.created_at.desc())
        .all()
    )


def list_job_applications(db: Session, actor: ActingIdentity) -> List[JobApplication]:
    require_role(actor, AppRole.ADMIN)
    return (
        db.query(JobApplication)
        .order_by(JobApplication.created_at.desc())
        .all()
    )


def assignment_response(assignment: ProjectAssignment) -> AssignmentResponse:
    submission = assignment.project_submission
    return AssignmentResponse(
        id=assignment.id,
        developer_id=assignment.developer_id,
        project_submission_id=assignment.project_submission_id,
        status=assignment.status,
        notes=assignment.notes,
        assigned_at=assignment.assigned_at,
        developer_name=assignment.developer.name if assignment.developer else None,
        project_submission=SubmissionSummary.model_validate(submission) if submission else None,
    )


def _assignments_query(db: Session):
    return (
        db.query(ProjectAssignment)
        .options(
            joinedload(ProjectAssignment.developer),
            joinedload(ProjectAssignment.project_submission),
        )
        .order_by(ProjectAssignment.assigned_at.desc())
    )


def list_assignments_for_developer(db: Session, actor: ActingIdentity,
                                   developer_id: str) -> List[AssignmentResponse]:
    require_role(actor, AppRole.ADMIN, AppRole.DEVELOPER)
    developer = db.get(Developer, developer_id)
    if developer is None:
        raise NotFound("Developer not found")
    if not actor.is_admin and developer.user_id != actor.user_id:
        raise Forbidden()

    rows = _assignments_query(db).filter(ProjectAssignment.developer_id == developer_id).all()
    return [assignment_response(a) for a in rows]


def list_all_assignments(db: Session, actor: ActingIdentity) -> List[AssignmentResponse]:
    require_role(actor, AppRole.ADMIN)
    return [assignment_response(a) for a in _assignments_query(db).all()]


def list_developers(db: Session, actor: ActingIdentity) -> List[Developer]:
    require_role(actor, AppRole.ADMIN)
    return db.query(Developer).order_by(Developer.created_at.desc()).all()


def get_own_profile(db: Session, actor: ActingIdentity) -> Developer:
    require_authenticated(actor)
    developer = db.query(Developer).filter(Developer.user_id == actor.user_id).first()
    if developer is None:
        raise ProfileMissing()
    return developer


def developer_stats(db: Session, actor: ActingIdentity) -> DeveloperStats:
    require_role(actor, AppRole.ADMIN)
    counts = dict(
        db.query(Developer.status, func.count(Developer.id))
        .group_by(Developer.status)
        .all()
    )
    available = (
        db.query(func.count(Developer.id))
        .filter(
            Developer.status == DeveloperStatus.APPROVED.value,
            Developer.is_available.is_(True),
        )
        .scalar()
    )
    return DeveloperStats(
        total=sum(counts.values()),
        pending=counts.get(DeveloperStatus.PENDING.value, 0),
        approved=counts.get(DeveloperStatus.APPROVED.value, 0),
        available=available or 0,
    )


def list_chat_inquiries(db: Session, actor: ActingIdentity) -> List[ChatInquiry]:
    require_role(actor, AppRole.ADMIN)
    return db.query(ChatInquiry).order_by(ChatInquiry.created_at.desc()).all()


def mark_inquiry_read(db: Session, actor: ActingIdentity, inquiry_id: str,
                      is_read: bool = True) -> ChatInquiry:
    require_role(actor, AppRole.ADMIN)
    inquiry = db.get(ChatInquiry, inquiry_id)
    if inquiry is None:
        raise NotFound("Inquiry not found")
    inquiry.is_read = is_read
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise UpdateFailed() from e
    return inquiry
