# civitasfix/routers/auth.py
from __future__ import annotations
from datetime import timedelta
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import notifier
from ..config import settings
from ..db import get_db
from ..deps import get_current_user
from ..exceptions import AuthenticationError, ConflictError, ValidationError
from ..models import NotificationType, Role, User
from ..schemas.auth import UserCreate, UserLogin, UserOut
from ..security import create_access_token, get_password_hash, verify_password

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

# Public signup may only create these roles; ADMIN accounts come from seed_admin
SELF_SERVICE_ROLES = {Role.STUDENT, Role.LECTURER}


def issue_token(user: User) -> str:
    return create_access_token(
        {"sub": str(user.id), "role": user.role.value},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    if payload.role not in SELF_SERVICE_ROLES:
        raise ValidationError("Role must be STUDENT or LECTURER", field="role")
    email = payload.email.lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise ConflictError("Email already registered", field="email")

    user = User(
        full_name=payload.full_name.strip(),
        email=email,
        hashed_password=get_password_hash(payload.password),
        role=payload.role,
        student_number=payload.student_number if payload.role == Role.STUDENT else None,
        lecturer_number=payload.lecturer_number if payload.role == Role.LECTURER else None,
        is_verified=True,   # no email verification step
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.role.value)

    notifier.notify(
        db,
        user.id,
        "Welcome!",
        "Your account has been created. Welcome to CivitasFix!",
        type=NotificationType.SUCCESS,
    )

    return {
        "success": True,
        "message": "Registration successful. Your account is active.",
        "token": issue_token(user),
        "token_type": "bearer",
        "user": UserOut.model_validate(user),
    }


@router.post("/login")
def login(payload: UserLogin, db: Session = Depends(get_db)):
    user: Optional[User] = db.query(User).filter(User.email == payload.email.lower()).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        logger.warning("Failed login for %s", payload.email)
        raise AuthenticationError("Incorrect email or password")
    return {
        "success": True,
        "message": "Login successful",
        "token": issue_token(user),
        "token_type": "bearer",
        "user": UserOut.model_validate(user),
    }


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return {"success": True, "user": UserOut.model_validate(current_user)}
