# civitasfix/schemas/auth.py
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from ..models.user import Role


class UserCreate(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role = Role.STUDENT
    student_number: Optional[str] = None
    lecturer_number: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserBrief(BaseModel):
    id: int
    full_name: str
    email: str
    model_config = {"from_attributes": True}


class UserOut(BaseModel):
    id: int
    email: str
    full_name: str
    role: Role
    student_number: Optional[str] = None
    lecturer_number: Optional[str] = None
    is_verified: bool
    created_at: datetime
    model_config = {
        "from_attributes": True,
    }


class TokenPayload(BaseModel):
    sub: int
    role: Optional[Role] = None
    exp: int
