from datetime import timedelta

from civitasfix.models import Notification, Role, User
from civitasfix.security import create_access_token

from .conftest import DEFAULT_PASSWORD, auth_headers


def _register(client, email="a@x.com", password="secret1", **extra):
    payload = {"email": email, "password": password, "full_name": "Ana Student"}
    payload.update(extra)
    return client.post("/auth/register", json=payload)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"


def test_register_defaults_to_verified_student(client, db):
    r = _register(client)
    assert r.status_code == 201
    data = r.json()
    assert data["success"] is True
    assert data["token"]
    assert data["user"]["role"] == "STUDENT"
    assert data["user"]["is_verified"] is True

    user = db.query(User).filter(User.email == "a@x.com").one()
    welcome = db.query(Notification).filter(Notification.user_id == user.id).all()
    assert [n.title for n in welcome] == ["Welcome!"]


def test_register_lecturer_keeps_lecturer_number_only(client):
    r = _register(
        client,
        email="lect@x.com",
        role="LECTURER",
        lecturer_number="0012345678",
        student_number="should-be-dropped",
    )
    assert r.status_code == 201
    user = r.json()["user"]
    assert user["role"] == "LECTURER"
    assert user["lecturer_number"] == "0012345678"
    assert user["student_number"] is None


def test_register_rejects_admin_role(client):
    r = _register(client, role="ADMIN")
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_register_duplicate_email(client):
    assert _register(client).status_code == 201
    r = _register(client)
    assert r.status_code == 400
    assert "already registered" in r.json()["message"]


def test_register_short_password_is_validation_error(client):
    r = _register(client, password="123")
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"


def test_login_and_me(client):
    _register(client)
    r = client.post("/auth/login", json={"email": "a@x.com", "password": "secret1"})
    assert r.status_code == 200
    token = r.json()["token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "a@x.com"


def test_login_wrong_password(client, student):
    r = client.post("/auth/login", json={"email": student.email, "password": "nope-nope"})
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_me_without_token(client):
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.json()["code"] == "AUTH_FAILED"


def test_me_with_non_bearer_header(client):
    r = client.get("/auth/me", headers={"Authorization": "Basic abc"})
    assert r.status_code == 401


def test_me_with_garbage_token(client):
    r = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["code"] == "INVALID_TOKEN"


def test_me_with_expired_token(client, student):
    token = create_access_token({"sub": str(student.id)}, expires_delta=timedelta(minutes=-5))
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["code"] == "TOKEN_EXPIRED"


def test_token_for_deleted_user(client, db, make_user):
    user = make_user(Role.STUDENT)
    headers = auth_headers(user)
    db.query(Notification).filter(Notification.user_id == user.id).delete()
    db.delete(user)
    db.commit()

    r = client.get("/auth/me", headers=headers)
    assert r.status_code == 401


def test_unverified_user_is_forbidden(client, make_user):
    user = make_user(Role.STUDENT, is_verified=False)
    r = client.get("/auth/me", headers=auth_headers(user))
    assert r.status_code == 403


def test_default_password_fixture_logs_in(client, lecturer):
    r = client.post("/auth/login", json={"email": lecturer.email, "password": DEFAULT_PASSWORD})
    assert r.status_code == 200
    assert r.json()["user"]["role"] == "LECTURER"
