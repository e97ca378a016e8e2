# civitasfix/schemas/user.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ProfileUpdateIn(BaseModel):
    full_name: str
    student_number: Optional[str] = None
    lecturer_number: Optional[str] = None


class PasswordChangeIn(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class ProfileStatistics(BaseModel):
    total_reports: int = 0
    active_reports: int = 0
    completed_reports: int = 0
    pending_reports: int = 0
