"""SQLAlchemy enum definitions and shared status values."""

import enum

from sqlalchemy import Enum as SQLEnum


# =====================================================
# Python Enum Classes
# =====================================================


class RunWindow(str, enum.Enum):
    """Half of the day a reminder pass is responsible for."""

    morning = "morning"
    evening = "evening"


class JobStatus(str, enum.Enum):
    """Per-event outcome reported in a scheduler job summary."""

    success = "success"
    failed = "failed"
    skipped = "skipped"


class NotificationStatus(str, enum.Enum):
    sent = "sent"
    failed = "failed"


class NotificationReferenceType(str, enum.Enum):
    event = "event"
    pool = "pool"


# =====================================================
# SQLAlchemy Enum Types
# These reference PostgreSQL types created by migrations (create_type=False)
# =====================================================

notification_reference_type_enum = SQLEnum(
    NotificationReferenceType,
    name="notification_reference_type",
    create_type=False,
    native_enum=True,
)
