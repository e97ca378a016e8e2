# civitasfix/routers/users.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_user, require_roles
from ..exceptions import NotFoundError, ValidationError
from ..models import Role, User
from ..schemas.auth import UserOut
from ..schemas.user import PasswordChangeIn, ProfileStatistics, ProfileUpdateIn
from ..security import get_password_hash, verify_password
from ..stats import profile_statistics

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)

MIN_STUDENT_NUMBER_LENGTH = 8
MIN_LECTURER_NUMBER_LENGTH = 10


# ---------- Helpers ----------
def _clean_identifier(value, min_length: int, label: str):
    if value is None or not value.strip():
        return None
    value = value.strip()
    if len(value) < min_length:
        raise ValidationError(f"{label} must be at least {min_length} characters")
    return value


# ---------- Routes ----------
@router.get("/me")
def me(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {
        "success": True,
        "user": UserOut.model_validate(current_user),
        "statistics": ProfileStatistics(**profile_statistics(db, current_user)),
    }


@router.patch("/me")
def update_me(
    payload: ProfileUpdateIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not payload.full_name or not payload.full_name.strip():
        raise ValidationError("Name is required", field="full_name")
    nim = nidn = None
    if current_user.role == Role.STUDENT:
        nim = _clean_identifier(payload.student_number, MIN_STUDENT_NUMBER_LENGTH, "Student number")
    elif current_user.role == Role.LECTURER:
        nidn = _clean_identifier(payload.lecturer_number, MIN_LECTURER_NUMBER_LENGTH, "Lecturer number")

    current_user.full_name = payload.full_name.strip()
    if nim:
        current_user.student_number = nim
    if nidn:
        current_user.lecturer_number = nidn

    db.commit()
    db.refresh(current_user)
    return {
        "success": True,
        "message": "Profile updated",
        "user": UserOut.model_validate(current_user),
    }


@router.post("/me/password")
def change_password(
    payload: PasswordChangeIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, current_user.hashed_password):
        raise ValidationError("Current password is incorrect", field="current_password")
    if verify_password(payload.new_password, current_user.hashed_password):
        raise ValidationError("New password must differ from the current one", field="new_password")

    current_user.hashed_password = get_password_hash(payload.new_password)
    db.commit()
    logger.info("User %s changed password", current_user.id)
    return {"success": True, "message": "Password changed"}


@router.get("/lecturers")
def list_lecturers(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    lecturers = (
        db.query(User)
        .filter(User.role == Role.LECTURER, User.is_verified.is_(True))
        .order_by(User.full_name.asc())
        .all()
    )
    return {
        "success": True,
        "lecturers": [UserOut.model_validate(u) for u in lecturers],
        "count": len(lecturers),
    }


@router.get(
    "/{user_id}",
    dependencies=[Depends(require_roles(Role.LECTURER, Role.ADMIN))],
)
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id)
    return {"success": True, "user": UserOut.model_validate(user)}
