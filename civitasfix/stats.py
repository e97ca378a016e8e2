from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .models import Report, ReportCategory, ReportStatus, User
from .workflow import scope_to_viewer

ACTIVE_STATUSES = (ReportStatus.CONFIRMED, ReportStatus.IN_PROGRESS)


def _count(db: Session, viewer: User, *criteria) -> int:
    q = scope_to_viewer(db.query(func.count(Report.id)), viewer)
    if criteria:
        q = q.filter(*criteria)
    return q.scalar() or 0


def counts_by_status(db: Session, viewer: User) -> Dict[str, int]:
    rows = (
        scope_to_viewer(db.query(Report.status, func.count(Report.id)), viewer)
        .group_by(Report.status)
        .all()
    )
    found = {status: count for status, count in rows}
    return {s.value: int(found.get(s, 0)) for s in ReportStatus}


def counts_by_category(db: Session, viewer: User) -> Dict[str, int]:
    rows = (
        scope_to_viewer(db.query(Report.category, func.count(Report.id)), viewer)
        .group_by(Report.category)
        .all()
    )
    found = {category: count for category, count in rows}
    return {c.value: int(found.get(c, 0)) for c in ReportCategory}


def daily_created(db: Session, viewer: User, days: int = 7, today: Optional[date] = None) -> List[Dict]:
    """Reports created per day over the last ``days`` days, oldest first."""
    today = today or datetime.utcnow().date()
    start = today - timedelta(days=days - 1)
    buckets: "OrderedDict[str, int]" = OrderedDict(
        ((start + timedelta(days=i)).isoformat(), 0) for i in range(days)
    )
    rows = (
        scope_to_viewer(db.query(Report.created_at), viewer)
        .filter(Report.created_at >= datetime.combine(start, datetime.min.time()))
        .all()
    )
    for (created_at,) in rows:
        key = created_at.date().isoformat()
        if key in buckets:
            buckets[key] += 1
    return [{"date": day, "count": count} for day, count in buckets.items()]


def summary(db: Session, viewer: User) -> Dict[str, int]:
    by_status = counts_by_status(db, viewer)
    now = datetime.utcnow()
    return {
        "total": sum(by_status.values()),
        "pending": by_status[ReportStatus.PENDING.value],
        "confirmed": by_status[ReportStatus.CONFIRMED.value],
        "in_progress": by_status[ReportStatus.IN_PROGRESS.value],
        "completed": by_status[ReportStatus.COMPLETED.value],
        "rejected": by_status[ReportStatus.REJECTED.value],
        "weekly": _count(db, viewer, Report.created_at >= now - timedelta(days=7)),
        "monthly": _count(db, viewer, Report.created_at >= now - timedelta(days=30)),
    }


def breakdown(db: Session, viewer: User) -> Dict:
    by_status = counts_by_status(db, viewer)
    return {
        "by_status": by_status,
        "by_category": counts_by_category(db, viewer),
        "daily": daily_created(db, viewer),
        "totals": {
            "all": sum(by_status.values()),
            "pending": by_status[ReportStatus.PENDING.value],
            "completed": by_status[ReportStatus.COMPLETED.value],
        },
    }


def profile_statistics(db: Session, user: User) -> Dict[str, int]:
    by_status = counts_by_status(db, user)
    return {
        "total_reports": sum(by_status.values()),
        "active_reports": sum(by_status[s.value] for s in ACTIVE_STATUSES),
        "completed_reports": by_status[ReportStatus.COMPLETED.value],
        "pending_reports": by_status[ReportStatus.PENDING.value],
    }
