# civitasfix/models/report.py
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from ..db import Base


class ReportCategory(str, enum.Enum):
    FURNITURE = "FURNITURE"
    ELECTRONIC = "ELECTRONIC"
    BUILDING = "BUILDING"
    SANITARY = "SANITARY"
    OTHER = "OTHER"


class ReportPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ReportStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class RepairStatus(str, enum.Enum):
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


# ---------- Damage reports ----------

class Report(Base):
    """
    A damage ticket filed by a student.

    PENDING → CONFIRMED → IN_PROGRESS → COMPLETED, or REJECTED from
    PENDING/CONFIRMED. ``user_id`` is set once at creation.
    """

    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String, nullable=False)

    category = Column(
        SQLEnum(ReportCategory, name="report_category"),
        nullable=False,
        default=ReportCategory.OTHER,
    )
    priority = Column(
        SQLEnum(ReportPriority, name="report_priority"),
        nullable=False,
        default=ReportPriority.MEDIUM,
    )
    status = Column(
        SQLEnum(ReportStatus, name="report_status"),
        nullable=False,
        default=ReportStatus.PENDING,
        index=True,
    )
    image_url = Column(String, nullable=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="reports")
    repairs = relationship(
        "Repair",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="Repair.created_at.desc()",
    )
    notifications = relationship("Notification", back_populates="report")


# ---------- Repairs ----------

class Repair(Base):
    """
    Lecturer-owned remediation record, created when a report is confirmed.
    """

    __tablename__ = "repairs"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(Integer, ForeignKey("reports.id"), nullable=False, index=True)
    lecturer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    notes = Column(Text, nullable=True)
    estimated_cost = Column(Float, nullable=True)
    actual_cost = Column(Float, nullable=True)
    status = Column(
        SQLEnum(RepairStatus, name="repair_status"),
        nullable=False,
        default=RepairStatus.CONFIRMED,
    )

    repair_date = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    report = relationship("Report", back_populates="repairs")
    lecturer = relationship("User")
