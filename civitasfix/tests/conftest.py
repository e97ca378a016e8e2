import os
import tempfile

# Must be set before civitasfix.config is imported
os.environ["DB_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="civitasfix-uploads-")
os.environ["EMAIL_NOTIFICATIONS_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from civitasfix import notifier
from civitasfix.app import app
from civitasfix.config import settings
from civitasfix.db import Base, get_db
from civitasfix.models import Role, User
from civitasfix.routers.auth import issue_token
from civitasfix.security import get_password_hash

fake = Faker()

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "secret1"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(role: Role = Role.STUDENT, email: str = None, password: str = DEFAULT_PASSWORD, **kwargs) -> User:
        user = User(
            email=email or f"{fake.unique.user_name()}@campus.ac.id",
            full_name=kwargs.pop("full_name", fake.name()),
            hashed_password=get_password_hash(password),
            role=role,
            is_verified=kwargs.pop("is_verified", True),
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def student(make_user):
    return make_user(Role.STUDENT)


@pytest.fixture
def other_student(make_user):
    return make_user(Role.STUDENT)


@pytest.fixture
def lecturer(make_user):
    return make_user(Role.LECTURER)


@pytest.fixture
def other_lecturer(make_user):
    return make_user(Role.LECTURER)


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture
def create_report(client):
    def _create(user: User, **fields) -> dict:
        data = {
            "title": "Broken chair",
            "description": "Leg cracked",
            "location": "Room 201",
        }
        data.update(fields)
        r = client.post("/reports", data=data, headers=auth_headers(user))
        assert r.status_code == 201, r.text
        return r.json()["report"]

    return _create


@pytest.fixture
def sent_emails(monkeypatch):
    """Turn email on and capture what would have been queued."""
    sent = []
    monkeypatch.setattr(settings, "EMAIL_NOTIFICATIONS_ENABLED", True)
    monkeypatch.setattr(
        notifier,
        "_enqueue_email",
        lambda to, subject, body, report_id: sent.append(
            {"to": to, "subject": subject, "body": body, "report_id": report_id}
        ),
    )
    return sent
