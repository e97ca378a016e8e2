"""
Report workflow.

    PENDING → CONFIRMED → IN_PROGRESS → COMPLETED
        └──────────┴──→ REJECTED

Every function validates its input before touching the session, so a
rejected call leaves the report exactly as it was. Status-dependent repair
changes are committed together with the report; notifications and emails
are written afterwards through :mod:`civitasfix.notifier` and cannot undo
the primary change.
"""
from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple, Type, TypeVar

from sqlalchemy.orm import Query, Session, joinedload, selectinload

from . import notifier
from .exceptions import AuthorizationError, NotFoundError, ValidationError
from .models import (
    NotificationType,
    Repair,
    RepairStatus,
    Report,
    ReportCategory,
    ReportPriority,
    ReportStatus,
    Role,
    User,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

TERMINAL_STATUSES = {ReportStatus.COMPLETED, ReportStatus.REJECTED}
REJECTABLE_FROM = {ReportStatus.PENDING, ReportStatus.CONFIRMED}

STATUS_LABELS: Dict[ReportStatus, str] = {
    ReportStatus.PENDING: "pending review",
    ReportStatus.CONFIRMED: "confirmed",
    ReportStatus.IN_PROGRESS: "in progress",
    ReportStatus.COMPLETED: "completed",
    ReportStatus.REJECTED: "rejected",
}

# (title, message template, notification type) sent to the report owner
STATUS_NOTIFICATIONS: Dict[ReportStatus, Tuple[str, str, NotificationType]] = {
    ReportStatus.PENDING: (
        "Report status updated",
        'Your report "{title}" is pending review again.',
        NotificationType.INFO,
    ),
    ReportStatus.CONFIRMED: (
        "Report confirmed",
        'Your report "{title}" has been confirmed by a lecturer and will be handled soon.',
        NotificationType.SUCCESS,
    ),
    ReportStatus.IN_PROGRESS: (
        "Repair in progress",
        'Repair work for your report "{title}" is now in progress.',
        NotificationType.INFO,
    ),
    ReportStatus.COMPLETED: (
        "Repair completed",
        'Your report "{title}" has been repaired and is now completed.',
        NotificationType.SUCCESS,
    ),
    ReportStatus.REJECTED: (
        "Report rejected",
        'Your report "{title}" was reviewed and rejected.',
        NotificationType.WARNING,
    ),
}

EMAIL_STATUSES = {ReportStatus.CONFIRMED, ReportStatus.COMPLETED}


# ---------- input helpers ----------

def parse_enum(enum_cls: Type[E], value, field: str, default: Optional[E] = None) -> E:
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is not None:
            return default
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}'. Must be one of: {allowed}", field=field)


def _required_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


def clean_report_fields(
    title: Optional[str],
    description: Optional[str],
    location: Optional[str],
    category=None,
    priority=None,
) -> dict:
    return {
        "title": _required_text(title, "title"),
        "description": _required_text(description, "description"),
        "location": _required_text(location, "location"),
        "category": parse_enum(ReportCategory, category, "category", default=ReportCategory.OTHER),
        "priority": parse_enum(ReportPriority, priority, "priority", default=ReportPriority.MEDIUM),
    }


def allowed_transitions(current: ReportStatus) -> Set[ReportStatus]:
    if current in TERMINAL_STATUSES:
        return set()
    allowed = {s for s in ReportStatus if s not in TERMINAL_STATUSES} | {ReportStatus.COMPLETED}
    if current in REJECTABLE_FROM:
        allowed.add(ReportStatus.REJECTED)
    return allowed


def check_transition(current: ReportStatus, target: ReportStatus) -> None:
    if target not in allowed_transitions(current):
        if current in TERMINAL_STATUSES:
            raise ValidationError(f"Report is already {STATUS_LABELS[current]} and can no longer change status")
        raise ValidationError(
            f"Cannot move report from {current.value} to {target.value}",
            field="status",
        )


# ---------- visibility ----------

def scope_to_viewer(query: Query, viewer: User) -> Query:
    """Students only ever see their own reports."""
    if viewer.role == Role.STUDENT:
        query = query.filter(Report.user_id == viewer.id)
    return query


def _report_query(db: Session) -> Query:
    return db.query(Report).options(
        joinedload(Report.user),
        selectinload(Report.repairs).joinedload(Repair.lecturer),
    )


def list_reports(db: Session, viewer: User) -> List[Report]:
    return (
        scope_to_viewer(_report_query(db), viewer)
        .order_by(Report.created_at.desc(), Report.id.desc())
        .all()
    )


def latest_reports(db: Session, viewer: User, limit: int = 10) -> List[Report]:
    return (
        scope_to_viewer(_report_query(db), viewer)
        .order_by(Report.created_at.desc(), Report.id.desc())
        .limit(limit)
        .all()
    )


def get_report(db: Session, report_id: int, viewer: User) -> Report:
    report = _report_query(db).filter(Report.id == report_id).first()
    if report is None:
        raise NotFoundError("Report", report_id)
    if viewer.role == Role.STUDENT and report.user_id != viewer.id:
        raise AuthorizationError("You can only view your own reports")
    return report


# ---------- mutations ----------

def create_report(
    db: Session,
    owner: User,
    title: Optional[str],
    description: Optional[str],
    location: Optional[str],
    category=None,
    priority=None,
    image_url: Optional[str] = None,
) -> Report:
    fields = clean_report_fields(title, description, location, category, priority)

    report = Report(**fields, image_url=image_url, user_id=owner.id, status=ReportStatus.PENDING)
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info("Report %s created by user %s", report.id, owner.id)

    notifier.notify(
        db,
        owner.id,
        "Report submitted",
        f'Your report "{fields["title"]}" was submitted and is waiting for confirmation.',
        type=NotificationType.SUCCESS,
        report_id=report.id,
    )
    notifier.notify_staff(
        db,
        "New report",
        f'{owner.full_name} reported "{fields["title"]}" at {fields["location"]}.',
        report_id=report.id,
    )
    return report


def _latest_repair(report: Report) -> Optional[Repair]:
    return report.repairs[0] if report.repairs else None


def _complete_repair(repair: Repair) -> None:
    now = datetime.utcnow()
    repair.status = RepairStatus.COMPLETED
    repair.completed_at = now
    repair.repair_date = now


def _notify_owner(db: Session, report: Report, status: ReportStatus) -> None:
    title, template, kind = STATUS_NOTIFICATIONS[status]
    message = template.format(title=report.title)
    notifier.notify(db, report.user_id, title, message, type=kind, report_id=report.id)
    if status in EMAIL_STATUSES and report.user is not None:
        notifier.send_email(report.user.email, title, message, report_id=report.id)


def transition_status(
    db: Session,
    report_id: int,
    new_status,
    actor: User,
    notes: Optional[str] = None,
    estimated_cost: Optional[float] = None,
) -> Report:
    target = parse_enum(ReportStatus, new_status, "status")

    report = db.query(Report).filter(Report.id == report_id).first()
    if report is None:
        raise NotFoundError("Report", report_id)
    check_transition(report.status, target)
    if estimated_cost is not None and estimated_cost < 0:
        raise ValidationError("estimated_cost cannot be negative", field="estimated_cost")

    previous = report.status
    repair = _latest_repair(report)
    if target == ReportStatus.CONFIRMED and repair is None:
        repair = Repair(
            report_id=report.id,
            lecturer_id=actor.id,
            notes=notes,
            estimated_cost=estimated_cost,
            status=RepairStatus.CONFIRMED,
        )
        db.add(repair)
    elif target == ReportStatus.CONFIRMED:
        repair.status = RepairStatus.CONFIRMED
        if notes is not None:
            repair.notes = notes
        if estimated_cost is not None:
            repair.estimated_cost = estimated_cost
    elif target == ReportStatus.IN_PROGRESS and repair is not None:
        repair.status = RepairStatus.IN_PROGRESS
    elif target == ReportStatus.COMPLETED and repair is not None:
        _complete_repair(repair)

    report.status = target
    db.commit()
    db.refresh(report)
    logger.info(
        "Report %s moved %s -> %s by user %s",
        report.id, previous.value, target.value, actor.id,
    )

    _notify_owner(db, report, target)
    return report


def update_repair(
    db: Session,
    report_id: int,
    actor: User,
    status,
    notes: Optional[str] = None,
    actual_cost: Optional[float] = None,
) -> Repair:
    target = parse_enum(RepairStatus, status, "status")
    if actual_cost is not None and actual_cost < 0:
        raise ValidationError("actual_cost cannot be negative", field="actual_cost")

    repair = (
        db.query(Repair)
        .filter(Repair.report_id == report_id, Repair.lecturer_id == actor.id)
        .order_by(Repair.created_at.desc())
        .first()
    )
    if repair is None:
        raise NotFoundError("Repair")

    report = repair.report
    if report.status in TERMINAL_STATUSES:
        # Repeating the completion of a finished repair changes nothing
        if repair.status == RepairStatus.COMPLETED and target == RepairStatus.COMPLETED:
            return repair
        raise ValidationError(f"Report is already {STATUS_LABELS[report.status]}")

    repair.status = target
    if notes is not None:
        repair.notes = notes
    if actual_cost is not None:
        repair.actual_cost = actual_cost
    if target == RepairStatus.COMPLETED:
        _complete_repair(repair)
        report.status = ReportStatus.COMPLETED

    db.commit()
    db.refresh(repair)
    logger.info("Repair %s for report %s set to %s by user %s", repair.id, report_id, target.value, actor.id)

    if target in (RepairStatus.IN_PROGRESS, RepairStatus.COMPLETED):
        _notify_owner(db, repair.report, ReportStatus(target.value))
    return repair
