"""
Notification side-channel.

Workflow operations call into this module *after* their own commit. Nothing
here is allowed to fail the caller: every write or enqueue goes through
``run_side_effect`` and comes back as a ``SideEffectResult``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import settings
from .models import Notification, NotificationType, STAFF_ROLES, User
from .rq_connection import email_queue

logger = logging.getLogger(__name__)

EMAIL_JOB = "civitasfix.workers.email_worker.send_notification_email"


@dataclass
class SideEffectResult:
    name: str
    ok: bool
    skipped: bool = False
    error: Optional[str] = None


def run_side_effect(name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> SideEffectResult:
    try:
        fn(*args, **kwargs)
    except Exception as exc:  # noqa: BLE001 - logged and reported, never raised
        logger.exception("Side effect %r failed", name)
        return SideEffectResult(name=name, ok=False, error=str(exc))
    return SideEffectResult(name=name, ok=True)


def report_link(report_id: int) -> str:
    return f"/reports/{report_id}"


def _write_notifications(db: Session, rows: list[Notification]) -> None:
    try:
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def notify(
    db: Session,
    user_id: int,
    title: str,
    message: str,
    type: NotificationType = NotificationType.INFO,
    report_id: Optional[int] = None,
    link: Optional[str] = None,
) -> SideEffectResult:
    if link is None and report_id is not None:
        link = report_link(report_id)
    row = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        report_id=report_id,
        link=link,
    )
    return run_side_effect("notification", _write_notifications, db, [row])


def notify_many(
    db: Session,
    user_ids: Iterable[int],
    title: str,
    message: str,
    type: NotificationType = NotificationType.INFO,
    report_id: Optional[int] = None,
) -> SideEffectResult:
    link = report_link(report_id) if report_id is not None else None
    rows = [
        Notification(user_id=uid, title=title, message=message, type=type, report_id=report_id, link=link)
        for uid in user_ids
    ]
    if not rows:
        return SideEffectResult(name="notification", ok=True, skipped=True)
    return run_side_effect("notification", _write_notifications, db, rows)


def notify_staff(
    db: Session,
    title: str,
    message: str,
    type: NotificationType = NotificationType.INFO,
    report_id: Optional[int] = None,
) -> SideEffectResult:
    """Notify every LECTURER and ADMIN account."""
    try:
        staff_ids = [uid for (uid,) in db.query(User.id).filter(User.role.in_(STAFF_ROLES)).all()]
    except SQLAlchemyError as exc:
        logger.exception("Could not load staff recipients")
        return SideEffectResult(name="notification", ok=False, error=str(exc))
    return notify_many(db, staff_ids, title, message, type=type, report_id=report_id)


def _enqueue_email(to_email: str, subject: str, body: str, report_id: Optional[int]) -> None:
    email_queue.enqueue(EMAIL_JOB, to_email, subject, body, report_id)


def send_email(to_email: str, subject: str, body: str, report_id: Optional[int] = None) -> SideEffectResult:
    if not settings.EMAIL_NOTIFICATIONS_ENABLED:
        logger.debug("Email notifications disabled, skipping %r for %s", subject, to_email)
        return SideEffectResult(name="email", ok=True, skipped=True)
    result = run_side_effect("email", _enqueue_email, to_email, subject, body, report_id)
    if result.ok:
        logger.info("Queued email %r for %s", subject, to_email)
    return result
