"""Create the first ADMIN account: ``python -m civitasfix.seed_admin``."""
from __future__ import annotations

import logging
import os

from sqlalchemy.orm import Session

from civitasfix.db import SessionLocal, init_db
from civitasfix.logging_config import setup_logging
from civitasfix.models import Role, User
from civitasfix.security import get_password_hash

logger = logging.getLogger("civitasfix.seed_admin")


def seed_admin(db: Session, email: str, password: str, full_name: str = "System Administrator") -> User:
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        logger.info("Admin already exists: %s", email)
        return existing
    admin = User(
        email=email,
        hashed_password=get_password_hash(password),
        role=Role.ADMIN,
        full_name=full_name,
        is_verified=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Admin user created: %s", email)
    return admin


def main() -> None:
    setup_logging()
    init_db()
    admin_email = os.getenv("ADMIN_EMAIL", "admin@civitasfix.local")
    admin_password = os.getenv("ADMIN_PASSWORD", "Admin123!")

    db: Session = SessionLocal()
    try:
        seed_admin(db, admin_email.lower(), admin_password)
    finally:
        db.close()


if __name__ == "__main__":
    main()
