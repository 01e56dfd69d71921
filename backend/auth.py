"""Identities, sessions and roles.

A session is a signed bearer token. Every service call receives the caller
as an explicit ActingIdentity and checks the role itself.
"""

import os
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from dotenv import load_dotenv
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from errors import AuthFailed, Forbidden, NotAuthenticated, ValidationFailed
from models import AppRole, Developer, RevokedToken, User, UserRole
from stepper import is_valid_email

load_dotenv()

# JWT Configuration
SECRET_KEY = os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class ActingIdentity:
    user_id: Optional[str]
    email: Optional[str]
    role: Optional[AppRole] = None
    token_id: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "ActingIdentity":
        return cls(user_id=None, email=None)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return self.role == AppRole.ADMIN

    @property
    def is_developer(self) -> bool:
        return self.role == AppRole.DEVELOPER


def require_authenticated(actor: ActingIdentity) -> ActingIdentity:
    if not actor.is_authenticated:
        raise NotAuthenticated()
    return actor


def require_role(actor: ActingIdentity, *roles: AppRole) -> ActingIdentity:
    require_authenticated(actor)
    if actor.role not in roles:
        raise Forbidden()
    return actor


def resolve_role(user: User) -> Optional[AppRole]:
    """Admin wins over developer when an identity holds both grants."""
    granted = {r.role for r in user.roles}
    if AppRole.ADMIN.value in granted:
        return AppRole.ADMIN
    if AppRole.DEVELOPER.value in granted:
        return AppRole.DEVELOPER
    return None


def has_role(db: Session, user_id: str, role: AppRole) -> bool:
    return db.query(UserRole).filter(
        UserRole.user_id == user_id,
        UserRole.role == role.value
    ).first() is not None


def grant_role(db: Session, user_id: str, role: AppRole) -> None:
    """Stage a role grant in the current transaction; no-op if already granted."""
    if not has_role(db, user_id, role):
        db.add(UserRole(user_id=user_id, role=role.value))


def landing_path(actor: ActingIdentity, has_profile: bool = False) -> str:
    if not actor.is_authenticated:
        return "/auth"
    if actor.is_admin:
        return "/admin"
    if has_profile:
        return "/developer/dashboard"
    return "/developer/onboarding"


# -------- Tokens --------

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def _issue_session(user: User) -> str:
    return create_access_token(
        {"sub": user.id, "email": user.email},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def current_session(db: Session, token: Optional[str]) -> Optional[ActingIdentity]:
    """Decode a bearer token into the acting identity; None if absent or invalid."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None

    user_id = payload.get("sub")
    jti = payload.get("jti")
    if user_id is None or jti is None:
        return None
    if db.get(RevokedToken, jti) is not None:
        return None

    user = db.get(User, user_id)
    if user is None:
        return None
    return ActingIdentity(user_id=user.id, email=user.email, role=resolve_role(user), token_id=jti)


# -------- Sign up / in / out --------

def _check_credentials(email: str, password: str) -> str:
    email = (email or "").strip().lower()
    if not is_valid_email(email):
        raise ValidationFailed("Invalid email address")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return email


def create_user(db: Session, email: str, password: str) -> User:
    email = _check_credentials(email, password)
    if db.query(User).filter(User.email == email).first():
        raise ValidationFailed("This email is already registered")

    user = User(email=email, password_hash=generate_password_hash(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationFailed("This email is already registered")
    db.refresh(user)
    return user


def sign_up(db: Session, email: str, password: str) -> str:
    return _issue_session(create_user(db, email, password))


def sign_in(db: Session, email: str, password: str) -> str:
    email = (email or "").strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if user is None or not check_password_hash(user.password_hash, password or ""):
        raise AuthFailed()
    return _issue_session(user)


def sign_out(db: Session, actor: ActingIdentity) -> None:
    if actor.token_id is None:
        return
    if db.get(RevokedToken, actor.token_id) is None:
        db.add(RevokedToken(jti=actor.token_id))
        db.commit()


def has_developer_profile(db: Session, actor: ActingIdentity) -> bool:
    if not actor.is_authenticated:
        return False
    return db.query(Developer).filter(Developer.user_id == actor.user_id).first() is not None


def init_admin_user(db: Session, email: Optional[str], password: Optional[str]) -> Optional[User]:
    """Pre-provision the admin identity from configuration."""
    if not email or not password:
        return None
    email = email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = create_user(db, email, password)
        print(f"✅ Admin user created: {email}", flush=True)
    if not has_role(db, user.id, AppRole.ADMIN):
        grant_role(db, user.id, AppRole.ADMIN)
        db.commit()
    return user
