"""Shared fixtures: an in-memory database, a temp blob store and an API client."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import auth
import main
import storage
from auth import ActingIdentity
from database import Base, get_db
from models import AppRole, Developer, DeveloperStatus, ProjectSubmission


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def blob_store(tmp_path):
    return storage.BlobStore(root=str(tmp_path / "uploads"), public_base_url="http://testserver")


@pytest.fixture
def client(session_factory, blob_store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main.app.dependency_overrides[get_db] = override_get_db
    main.app.dependency_overrides[main.get_blob_store] = lambda: blob_store
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def admin(db):
    user = auth.init_admin_user(db, "admin@agency.io", "admin-pass")
    return ActingIdentity(user_id=user.id, email=user.email, role=AppRole.ADMIN)


@pytest.fixture
def make_user(db):
    def _make(email, password="secret123", role=None):
        user = auth.create_user(db, email, password)
        if role is not None:
            auth.grant_role(db, user.id, role)
            db.commit()
        return ActingIdentity(user_id=user.id, email=user.email, role=role)
    return _make


@pytest.fixture
def make_developer(db, make_user):
    """Insert a developer profile directly, bypassing onboarding."""
    counter = {"n": 0}

    def _make(status=DeveloperStatus.PENDING, is_available=False, name=None):
        counter["n"] += 1
        n = counter["n"]
        actor = make_user(f"dev{n}@agency.io", role=AppRole.DEVELOPER)
        developer = Developer(
            user_id=actor.user_id,
            name=name or f"Developer {n}",
            email=actor.email,
            role="Frontend Developer",
            experience_years=3,
            weekly_hours=40,
            status=status.value,
            is_available=is_available,
        )
        db.add(developer)
        db.commit()
        return developer, actor
    return _make


@pytest.fixture
def make_submission(db):
    counter = {"n": 0}

    def _make(name=None, project_type="new_website"):
        counter["n"] += 1
        submission = ProjectSubmission(
            project_type=project_type,
            features=["SEO Optimization"],
            budget_min=1000,
            budget_max=3000,
            timeline="flexible",
            name=name or f"Client {counter['n']}",
            email=f"client{counter['n']}@example.com",
        )
        db.add(submission)
        db.commit()
        return submission
    return _make
