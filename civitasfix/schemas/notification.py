# civitasfix/schemas/notification.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..models.notification import NotificationType
from ..models.report import ReportStatus


class ReportRef(BaseModel):
    id: int
    title: str
    status: ReportStatus
    model_config = {"from_attributes": True}


class NotificationOut(BaseModel):
    id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    link: Optional[str] = None
    report_id: Optional[int] = None
    report: Optional[ReportRef] = None
    is_read: bool
    created_at: datetime
    model_config = {"from_attributes": True}
