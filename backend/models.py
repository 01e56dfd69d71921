import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from database import Base


def new_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class ProjectType(str, enum.Enum):
    NEW_WEBSITE = "new_website"
    SHOPIFY_STORE = "shopify_store"
    WEBSITE_REDESIGN = "website_redesign"
    MAINTENANCE = "maintenance"


class JobType(str, enum.Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    FULLSTACK = "fullstack"


class DeveloperStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AppRole(str, enum.Enum):
    ADMIN = "admin"
    DEVELOPER = "developer"


class AssignmentStatus(str, enum.Enum):
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    roles = relationship("UserRole", back_populates="user", lazy="selectin")


class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_role"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False)  # admin, developer
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="roles")


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    revoked_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Developer(Base):
    __tablename__ = "developers"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    role = Column(String, nullable=False)  # professional role label, e.g. "Frontend Developer"
    experience_years = Column(Integer, nullable=False, default=0)
    location = Column(String, nullable=True)
    github_url = Column(String, nullable=True)
    portfolio_url = Column(String, nullable=True)
    weekly_hours = Column(Integer, nullable=True)
    preferred_project_types = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default=DeveloperStatus.PENDING.value)
    is_available = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    skills = relationship(
        "DeveloperSkill", back_populates="developer",
        cascade="all, delete-orphan", lazy="selectin",
    )
    screenshots = relationship(
        "DeveloperScreenshot", back_populates="developer",
        cascade="all, delete-orphan", lazy="selectin",
    )
    assignments = relationship("ProjectAssignment", back_populates="developer")


class DeveloperSkill(Base):
    __tablename__ = "developer_skills"

    id = Column(String(36), primary_key=True, default=new_id)
    developer_id = Column(String(36), ForeignKey("developers.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_name = Column(String, nullable=False)
    years_experience = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    developer = relationship("Developer", back_populates="skills")


class DeveloperScreenshot(Base):
    __tablename__ = "developer_screenshots"

    id = Column(String(36), primary_key=True, default=new_id)
    developer_id = Column(String(36), ForeignKey("developers.id", ondelete="CASCADE"), nullable=False, index=True)
    file_url = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    developer = relationship("Developer", back_populates="screenshots")


class ProjectSubmission(Base):
    __tablename__ = "project_submissions"

    id = Column(String(36), primary_key=True, default=new_id)
    project_type = Column(String(32), nullable=False)
    features = Column(JSON, nullable=False, default=list)
    custom_requirements = Column(Text, nullable=True)
    budget_min = Column(Integer, nullable=True)
    budget_max = Column(Integer, nullable=True)
    timeline = Column(String, nullable=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    company = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    assignments = relationship("ProjectAssignment", back_populates="project_submission")


class JobApplication(Base):
    __tablename__ = "job_applications"

    id = Column(String(36), primary_key=True, default=new_id)
    job_title = Column(String, nullable=False)
    job_type = Column(String(20), nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    portfolio_url = Column(String, nullable=True)
    cover_letter = Column(Text, nullable=True)
    resume_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class ChatInquiry(Base):
    __tablename__ = "chat_inquiries"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class ProjectAssignment(Base):
    __tablename__ = "project_assignments"
    __table_args__ = (
        UniqueConstraint("developer_id", "project_submission_id", name="uq_developer_submission"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    developer_id = Column(String(36), ForeignKey("developers.id", ondelete="CASCADE"), nullable=False, index=True)
    project_submission_id = Column(
        String(36), ForeignKey("project_submissions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(String(20), nullable=False, default=AssignmentStatus.ASSIGNED.value)
    notes = Column(Text, nullable=True)
    assigned_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    developer = relationship("Developer", back_populates="assignments")
    project_submission = relationship("ProjectSubmission", back_populates="assignments")
