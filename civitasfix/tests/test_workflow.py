import pytest
from sqlalchemy.exc import OperationalError

from civitasfix import notifier, workflow
from civitasfix.config import settings
from civitasfix.deps import authorize
from civitasfix.exceptions import AuthorizationError, ValidationError
from civitasfix.models import Notification, ReportCategory, ReportPriority, ReportStatus, Role
from civitasfix.seed_admin import seed_admin
from civitasfix.security import verify_password
from civitasfix.utils.uploads import make_filename, public_image_url

from .conftest import auth_headers


# ---------- transitions ----------

def test_terminal_states_allow_nothing():
    assert workflow.allowed_transitions(ReportStatus.COMPLETED) == set()
    assert workflow.allowed_transitions(ReportStatus.REJECTED) == set()


def test_reject_only_before_work_starts():
    assert ReportStatus.REJECTED in workflow.allowed_transitions(ReportStatus.PENDING)
    assert ReportStatus.REJECTED in workflow.allowed_transitions(ReportStatus.CONFIRMED)
    assert ReportStatus.REJECTED not in workflow.allowed_transitions(ReportStatus.IN_PROGRESS)


def test_open_states_can_move_forward():
    allowed = workflow.allowed_transitions(ReportStatus.PENDING)
    assert {ReportStatus.CONFIRMED, ReportStatus.IN_PROGRESS, ReportStatus.COMPLETED} <= allowed


def test_check_transition_message_for_locked_report():
    with pytest.raises(ValidationError) as exc:
        workflow.check_transition(ReportStatus.COMPLETED, ReportStatus.PENDING)
    assert "completed" in exc.value.message


# ---------- input parsing ----------

def test_parse_enum_is_case_insensitive():
    assert workflow.parse_enum(ReportStatus, " in_progress ", "status") is ReportStatus.IN_PROGRESS


def test_parse_enum_lists_allowed_values():
    with pytest.raises(ValidationError) as exc:
        workflow.parse_enum(ReportStatus, "BOGUS", "status")
    assert "PENDING" in exc.value.message
    assert exc.value.details == {"field": "status"}
    assert exc.value.status_code == 400


def test_parse_enum_default_and_required():
    assert workflow.parse_enum(ReportPriority, "", "priority", default=ReportPriority.MEDIUM) is ReportPriority.MEDIUM
    with pytest.raises(ValidationError):
        workflow.parse_enum(ReportStatus, None, "status")


def test_clean_report_fields_strips_and_defaults():
    fields = workflow.clean_report_fields("  Chair ", "Broken", "Room 1")
    assert fields == {
        "title": "Chair",
        "description": "Broken",
        "location": "Room 1",
        "category": ReportCategory.OTHER,
        "priority": ReportPriority.MEDIUM,
    }


# ---------- roles ----------

def test_authorize():
    authorize(Role.ADMIN, [Role.LECTURER, Role.ADMIN])
    authorize("STUDENT", [Role.STUDENT])
    with pytest.raises(AuthorizationError):
        authorize(Role.STUDENT, [Role.LECTURER, Role.ADMIN])


# ---------- side effects ----------

def test_run_side_effect_reports_failure():
    def boom():
        raise RuntimeError("smtp down")

    result = notifier.run_side_effect("email", boom)
    assert result.ok is False
    assert result.error == "smtp down"
    assert notifier.run_side_effect("noop", lambda: None).ok is True


def test_notify_failure_does_not_raise(db, student, monkeypatch):
    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(db, "commit", failing_commit)
    result = notifier.notify(db, student.id, "Hi", "Hello")
    assert result.ok is False
    assert result.name == "notification"


def test_notify_many_with_no_recipients_is_skipped(db):
    result = notifier.notify_many(db, [], "Hi", "Hello")
    assert result.ok and result.skipped


def test_send_email_skipped_when_disabled(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_NOTIFICATIONS_ENABLED", False)
    calls = []
    monkeypatch.setattr(notifier, "_enqueue_email", lambda *a: calls.append(a))
    result = notifier.send_email("a@campus.ac.id", "Subject", "Body")
    assert result.skipped
    assert calls == []


def test_send_email_failure_is_isolated(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_NOTIFICATIONS_ENABLED", True)

    def unreachable(*args):
        raise ConnectionError("redis unavailable")

    monkeypatch.setattr(notifier, "_enqueue_email", unreachable)
    result = notifier.send_email("a@campus.ac.id", "Subject", "Body", report_id=1)
    assert result.ok is False
    assert "redis" in result.error


def test_status_change_survives_notification_failure(client, db, student, lecturer, create_report, monkeypatch):
    report = create_report(student)

    def broken(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("locked"))

    monkeypatch.setattr(notifier, "_write_notifications", broken)
    r = client.patch(
        f"/reports/{report['id']}/status",
        json={"status": "CONFIRMED"},
        headers=auth_headers(lecturer),
    )
    assert r.status_code == 200
    assert r.json()["report"]["status"] == "CONFIRMED"
    assert db.query(Notification).filter(Notification.title == "Report confirmed").count() == 0


def test_status_change_survives_email_failure(client, student, lecturer, create_report, monkeypatch):
    report = create_report(student)
    monkeypatch.setattr(settings, "EMAIL_NOTIFICATIONS_ENABLED", True)

    def unreachable(*args):
        raise ConnectionError("redis unavailable")

    monkeypatch.setattr(notifier, "_enqueue_email", unreachable)
    r = client.patch(
        f"/reports/{report['id']}/status",
        json={"status": "CONFIRMED"},
        headers=auth_headers(lecturer),
    )
    assert r.status_code == 200


# ---------- uploads ----------

def test_upload_filename_format():
    name = make_filename("Photo.JPG")
    stamp, rest = name.split("-")
    assert stamp.isdigit()
    assert rest.endswith(".jpg")
    assert len(rest) == len("123456789.jpg")


def test_public_image_url_uses_forward_slashes():
    assert public_image_url("data\\uploads\\1-000000001.png") == "/uploads/1-000000001.png"


# ---------- admin seeding ----------

def test_seed_admin_is_idempotent(db):
    first = seed_admin(db, "root@campus.ac.id", "Admin123!")
    second = seed_admin(db, "root@campus.ac.id", "other")
    assert first.id == second.id
    assert first.role == Role.ADMIN
    assert verify_password("Admin123!", second.hashed_password)
