# civitasfix/schemas/report.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from ..models.report import RepairStatus, ReportCategory, ReportPriority, ReportStatus
from .auth import UserBrief


class RepairOut(BaseModel):
    id: int
    report_id: int
    lecturer_id: int
    lecturer: Optional[UserBrief] = None
    notes: Optional[str] = None
    estimated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
    status: RepairStatus
    repair_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    model_config = {"from_attributes": True}


class ReportOut(BaseModel):
    id: int
    title: str
    description: str
    location: str
    category: ReportCategory
    priority: ReportPriority
    status: ReportStatus
    image_url: Optional[str] = None
    user_id: int
    user: Optional[UserBrief] = None
    repairs: List[RepairOut] = []
    created_at: datetime
    updated_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class StatusUpdateIn(BaseModel):
    # Left as a plain string: the workflow rejects unknown values itself
    status: str
    notes: Optional[str] = None
    estimated_cost: Optional[float] = None


class RepairUpdateIn(BaseModel):
    status: str
    notes: Optional[str] = None
    actual_cost: Optional[float] = None
