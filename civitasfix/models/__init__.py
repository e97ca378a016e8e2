# civitasfix/models/__init__.py

from .user import Role, STAFF_ROLES, User
from .report import (
    Repair,
    RepairStatus,
    Report,
    ReportCategory,
    ReportPriority,
    ReportStatus,
)
from .notification import Notification, NotificationType

__all__ = [
    "Role",
    "STAFF_ROLES",
    "User",
    "Report",
    "ReportCategory",
    "ReportPriority",
    "ReportStatus",
    "Repair",
    "RepairStatus",
    "Notification",
    "NotificationType",
]
