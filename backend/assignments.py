"""Developer review and developer-to-project assignment (admin side)."""

import sys
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from auth import ActingIdentity, require_role
from errors import (
    AssignFailed, DeveloperNotAssignable, DuplicateAssignment, Forbidden,
    InvalidTransition, NotFound, UpdateFailed,
)
from models import (
    AppRole, AssignmentStatus, Developer, DeveloperStatus, ProjectAssignment,
    ProjectSubmission,
)

# Forward-only; completed is terminal
ASSIGNMENT_TRANSITIONS = {
    AssignmentStatus.ASSIGNED: {AssignmentStatus.IN_PROGRESS, AssignmentStatus.COMPLETED},
    AssignmentStatus.IN_PROGRESS: {AssignmentStatus.COMPLETED},
    AssignmentStatus.COMPLETED: set(),
}


def _get_developer(db: Session, developer_id: str) -> Developer:
    developer = db.get(Developer, developer_id)
    if developer is None:
        raise NotFound("Developer not found")
    return developer


def _save(db: Session, error_cls, what: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        print(f"⚠️ Failed to {what}: {e}", file=sys.stderr, flush=True)
        raise error_cls() from e


def _pair_exists(db: Session, developer_id: str, project_submission_id: str) -> bool:
    return db.query(ProjectAssignment).filter(
        ProjectAssignment.developer_id == developer_id,
        ProjectAssignment.project_submission_id == project_submission_id
    ).first() is not None


def is_assignable(developer: Developer) -> bool:
    return developer.status == DeveloperStatus.APPROVED.value and bool(developer.is_available)


def list_assignable_developers(db: Session, actor: ActingIdentity) -> List[Developer]:
    require_role(actor, AppRole.ADMIN)
    return (
        db.query(Developer)
        .filter(
            Developer.status == DeveloperStatus.APPROVED.value,
            Developer.is_available.is_(True),
        )
        .order_by(Developer.name)
        .all()
    )


def assign(db: Session, actor: ActingIdentity, developer_id: str,
           project_submission_id: str, notes: Optional[str] = None) -> str:
    """Assign an approved, available developer to a project submission.

    The developer is re-read here rather than trusting the list the admin
    picked from, since availability may have changed in between.
    """
    require_role(actor, AppRole.ADMIN)

    developer = db.get(Developer, developer_id)
    if developer is None:
        raise NotFound("Developer not found")
    db.refresh(developer)
    if not is_assignable(developer):
        raise DeveloperNotAssignable()
    if db.get(ProjectSubmission, project_submission_id) is None:
        raise NotFound("Project submission not found")

    if _pair_exists(db, developer_id, project_submission_id):
        raise DuplicateAssignment()

    assignment = ProjectAssignment(
        developer_id=developer_id,
        project_submission_id=project_submission_id,
        status=AssignmentStatus.ASSIGNED.value,
        notes=(notes or "").strip() or None,
    )
    db.add(assignment)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        # The pair may have been inserted concurrently
        if _pair_exists(db, developer_id, project_submission_id):
            raise DuplicateAssignment() from e
        print(f"⚠️ Failed to assign developer {developer_id}: {e}", file=sys.stderr, flush=True)
        raise AssignFailed() from e
    except SQLAlchemyError as e:
        db.rollback()
        print(f"⚠️ Failed to assign developer {developer_id}: {e}", file=sys.stderr, flush=True)
        raise AssignFailed() from e
    return assignment.id


def set_developer_status(db: Session, actor: ActingIdentity, developer_id: str,
                         status: DeveloperStatus) -> Developer:
    require_role(actor, AppRole.ADMIN)
    status = DeveloperStatus(status)
    if status == DeveloperStatus.PENDING:
        raise InvalidTransition("A developer can only be approved or rejected")

    developer = _get_developer(db, developer_id)
    if developer.status == status.value:
        return developer
    if developer.status != DeveloperStatus.PENDING.value:
        raise InvalidTransition(f"Developer has already been {developer.status}")

    developer.status = status.value
    _save(db, UpdateFailed, f"update status of developer {developer_id}")
    return developer


def set_developer_availability(db: Session, actor: ActingIdentity, developer_id: str,
                               available: bool) -> Developer:
    """Toggle availability; existing assignments are left as they are."""
    require_role(actor, AppRole.ADMIN)
    developer = _get_developer(db, developer_id)
    developer.is_available = bool(available)
    _save(db, UpdateFailed, f"update availability of developer {developer_id}")
    return developer


def set_assignment_status(db: Session, actor: ActingIdentity, assignment_id: str,
                          status: AssignmentStatus) -> ProjectAssignment:
    require_role(actor, AppRole.ADMIN, AppRole.DEVELOPER)
    assignment = db.get(ProjectAssignment, assignment_id)
    if assignment is None:
        raise NotFound("Assignment not found")
    if not actor.is_admin and assignment.developer.user_id != actor.user_id:
        raise Forbidden()

    current = AssignmentStatus(assignment.status)
    target = AssignmentStatus(status)
    if target == current:
        return assignment
    if target not in ASSIGNMENT_TRANSITIONS[current]:
        raise InvalidTransition(f"Cannot move an assignment from {current.value} to {target.value}")

    assignment.status = target.value
    _save(db, UpdateFailed, f"update assignment {assignment_id}")
    return assignment
