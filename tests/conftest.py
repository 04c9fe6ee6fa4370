"""
Shared fixtures for the SkillSync test suite.

Every test gets a fresh in-memory SQLite database, a mock LLM provider and
fake mail / HR clients wired into the app through dependency overrides.
"""

import os

os.environ["TESTING"] = "true"
os.environ.setdefault("SKILLSYNC_SECRET_KEY", "test-secret-key-for-testing-only")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LLM_PROVIDER"] = "mock"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from skillsync.auth import create_access_token
from skillsync.database import get_db
from skillsync.db_models import Base, DBSkill, DBUser, DBUserSkill, default_access_rights
from skillsync.dependencies import get_hr_client, get_llm, get_mail_client
from skillsync.exceptions import LLMError, MailDeliveryError
from skillsync.llm_providers import LLMProvider, MockLLMProvider
from skillsync.main import app


class FailingLLMProvider(LLMProvider):
    """Provider whose every call fails, to exercise fallbacks."""

    def __init__(self):
        self.calls = []

    async def chat_completion(self, messages, temperature=0.7):
        self.calls.append(messages)
        raise LLMError("provider unavailable")


class FakeMailClient:
    """Records sends; addresses in `fail_for` raise MailDeliveryError."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    async def send(self, to, subject, text):
        if to in self.fail_for:
            raise MailDeliveryError(to, "mailbox unavailable")
        self.sent.append({"to": to, "subject": subject, "text": text})


class FakeHRClient:
    """Returns canned employee records, or raises `error` when set."""

    def __init__(self, employees=None, error=None):
        self.employees = employees or []
        self.error = error
        self.calls = 0

    async def fetch_employees(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.employees


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def mock_llm():
    return MockLLMProvider()


@pytest.fixture
def failing_llm():
    return FailingLLMProvider()


@pytest.fixture
def mail_client():
    return FakeMailClient()


@pytest.fixture
def hr_client():
    return FakeHRClient()


@pytest.fixture
def client(session_factory, mock_llm, mail_client, hr_client):
    """Test client bound to the per-test database and fakes."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm] = lambda: mock_llm
    app.dependency_overrides[get_mail_client] = lambda: mail_client
    app.dependency_overrides[get_hr_client] = lambda: hr_client

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def use_llm():
    """Swap the LLM the app sees, e.g. use_llm(FailingLLMProvider())."""
    def swap(provider):
        app.dependency_overrides[get_llm] = lambda: provider
        return provider
    return swap


@pytest.fixture
def create_user(db_session):
    """Factory inserting a user directly (no password hashing)."""
    counter = {"n": 0}

    def factory(name=None, department="Engineering", position="Engineer", email=None, **rights):
        counter["n"] += 1
        n = counter["n"]
        access_rights = default_access_rights()
        access_rights.update(rights)
        user = DBUser(
            name=name or f"User {n}",
            email=email or f"user{n}@acme-corp.com",
            department=department,
            position=position,
            profile_data={},
            access_rights=access_rights,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return factory


@pytest.fixture
def give_skill(db_session):
    """Factory attaching a skill (created on demand) to a user at a level."""
    def factory(user, skill_name, level, category="Programming", updated_at=None):
        skill = db_session.query(DBSkill).filter(DBSkill.name == skill_name).first()
        if skill is None:
            skill = DBSkill(name=skill_name, category=category)
            db_session.add(skill)
            db_session.flush()
        user_skill = DBUserSkill(user_id=user.id, skill_id=skill.id, level=level)
        if updated_at is not None:
            user_skill.updated_at = updated_at
        db_session.add(user_skill)
        db_session.commit()
        return skill

    return factory


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user without going through login."""
    def headers(user):
        token = create_access_token(data={"sub": user.id})
        return {"Authorization": f"Bearer {token}"}
    return headers
