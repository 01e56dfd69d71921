"""
Request / response models.

Form models mirror what the browser accumulates while the user clicks through
a stepper: every field has an "empty" default so a half-filled form still
parses, and the step predicates in stepper.py decide what is complete.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from catalog import JobOpening
from models import AssignmentStatus, DeveloperStatus, JobType


# -------- Form state --------

class ProjectIntakeForm(BaseModel):
    project_type: str = ""
    features: List[str] = Field(default_factory=list)
    custom_requirements: str = ""
    budget: str = ""
    timeline: str = ""
    name: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""


class SkillEntry(BaseModel):
    name: str
    years: int = Field(default=1, ge=0)


class ScreenshotRef(BaseModel):
    url: str
    name: str


class DeveloperOnboardingForm(BaseModel):
    name: str = ""
    role: str = ""
    experience_years: Optional[int] = Field(default=None, ge=0)
    location: str = ""
    skills: List[SkillEntry] = Field(default_factory=list)
    github_url: str = ""
    portfolio_url: str = ""
    weekly_hours: Optional[int] = Field(default=40, ge=0)
    preferred_project_types: List[str] = Field(default_factory=list)
    screenshots: List[ScreenshotRef] = Field(default_factory=list)

    class Config:
        # Unknown keys (e.g. a client-sent "status") are accepted and ignored
        extra = "allow"


class JobApplicationForm(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    portfolio_url: str = ""
    cover_letter: str = ""
    resume_url: str = ""


class ChatInquiryForm(BaseModel):
    name: str = ""
    email: str = ""
    message: str = ""


class StepCheckResponse(BaseModel):
    workflow: str
    step: int
    step_count: int
    title: str
    can_advance: bool


# -------- Auth --------

class Credentials(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    authenticated: bool
    user_id: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    redirect: str


# -------- Rows --------

class CreatedResponse(BaseModel):
    id: str


class ProjectSubmissionResponse(BaseModel):
    id: str
    project_type: str
    features: List[str]
    custom_requirements: Optional[str]
    budget_min: Optional[int]
    budget_max: Optional[int]
    timeline: Optional[str]
    name: str
    email: str
    phone: Optional[str]
    company: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class JobApplicationResponse(BaseModel):
    id: str
    job_title: str
    job_type: str
    name: str
    email: str
    phone: Optional[str]
    portfolio_url: Optional[str]
    cover_letter: Optional[str]
    resume_url: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class ChatInquiryResponse(BaseModel):
    id: str
    name: str
    email: str
    message: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class SkillResponse(BaseModel):
    skill_name: str
    years_experience: Optional[int]

    class Config:
        from_attributes = True


class ScreenshotResponse(BaseModel):
    file_url: str
    file_name: str

    class Config:
        from_attributes = True


class DeveloperResponse(BaseModel):
    id: str
    user_id: str
    name: str
    email: str
    role: str
    experience_years: int
    location: Optional[str]
    github_url: Optional[str]
    portfolio_url: Optional[str]
    weekly_hours: Optional[int]
    preferred_project_types: List[str]
    status: DeveloperStatus
    is_available: bool
    created_at: datetime
    skills: List[SkillResponse] = Field(default_factory=list)
    screenshots: List[ScreenshotResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


class DeveloperStats(BaseModel):
    total: int
    pending: int
    approved: int
    available: int


class SubmissionSummary(BaseModel):
    id: str
    name: str
    project_type: str
    timeline: Optional[str]

    class Config:
        from_attributes = True


class AssignmentResponse(BaseModel):
    id: str
    developer_id: str
    project_submission_id: str
    status: AssignmentStatus
    notes: Optional[str]
    assigned_at: datetime
    developer_name: Optional[str] = None
    project_submission: Optional[SubmissionSummary] = None


# -------- Admin actions --------

class DeveloperStatusUpdate(BaseModel):
    status: DeveloperStatus


class AvailabilityUpdate(BaseModel):
    is_available: bool


class AssignRequest(BaseModel):
    developer_id: str
    project_submission_id: str
    notes: Optional[str] = None


class AssignmentStatusUpdate(BaseModel):
    status: AssignmentStatus


class UploadResult(BaseModel):
    name: str
    url: Optional[str] = None
    error: Optional[str] = None


class UploadBatchResponse(BaseModel):
    uploaded: List[UploadResult]
    failed: List[UploadResult]


class JobOpeningsResponse(BaseModel):
    jobs: List[JobOpening]
    job_type: Optional[JobType] = None
