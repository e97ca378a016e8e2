# civitasfix/routers/reports.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from .. import workflow
from ..db import get_db
from ..deps import get_current_user, require_roles
from ..models import Role, User
from ..schemas.report import RepairOut, RepairUpdateIn, ReportOut, StatusUpdateIn
from ..utils.uploads import discard_report_image, save_report_image

router = APIRouter(prefix="/reports", tags=["Reports"])


# -------------------------------------------------------------
# Listing: students get their own reports, staff get everything
# -------------------------------------------------------------
@router.get("")
def list_reports(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    reports = workflow.list_reports(db, current_user)
    return {
        "success": True,
        "reports": [ReportOut.model_validate(r) for r in reports],
        "count": len(reports),
    }


@router.get("/dashboard/latest")
def latest_reports(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    reports = workflow.latest_reports(db, current_user)
    return {"success": True, "reports": [ReportOut.model_validate(r) for r in reports]}


# -------------------------------------------------------------
# Student files a report (multipart, optional image)
# -------------------------------------------------------------
@router.post("", status_code=201)
def create_report(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    priority: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.STUDENT)),
):
    # Validate text fields before anything is written to disk
    fields = workflow.clean_report_fields(title, description, location, category, priority)
    image_url = save_report_image(image)

    try:
        report = workflow.create_report(db, current_user, image_url=image_url, **fields)
    except Exception:
        discard_report_image(image_url)
        raise
    report = workflow.get_report(db, report.id, current_user)
    return {
        "success": True,
        "message": "Report created",
        "report": ReportOut.model_validate(report),
    }


# -------------------------------------------------------------
# Detail: students only their own
# -------------------------------------------------------------
@router.get("/{report_id}")
def get_report(
    report_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    report = workflow.get_report(db, report_id, current_user)
    return {"success": True, "report": ReportOut.model_validate(report)}


# -------------------------------------------------------------
# Staff move the report through its lifecycle
# -------------------------------------------------------------
@router.patch("/{report_id}/status")
def update_report_status(
    report_id: int,
    payload: StatusUpdateIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.LECTURER, Role.ADMIN)),
):
    workflow.transition_status(
        db,
        report_id,
        payload.status,
        current_user,
        notes=payload.notes,
        estimated_cost=payload.estimated_cost,
    )
    report = workflow.get_report(db, report_id, current_user)
    return {
        "success": True,
        "message": "Report status updated",
        "report": ReportOut.model_validate(report),
    }


# -------------------------------------------------------------
# Assigned lecturer updates the repair record
# -------------------------------------------------------------
@router.patch("/{report_id}/repair")
def update_repair(
    report_id: int,
    payload: RepairUpdateIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.LECTURER)),
):
    repair = workflow.update_repair(
        db,
        report_id,
        current_user,
        payload.status,
        notes=payload.notes,
        actual_cost=payload.actual_cost,
    )
    return {
        "success": True,
        "message": "Repair updated",
        "repair": RepairOut.model_validate(repair),
    }
