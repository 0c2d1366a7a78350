"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

from .enums import notification_reference_type_enum

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. USERS
# =====================================================
users = Table(
    "users",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("email", Text),
    Column("mobile_number", Text, nullable=False),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    UniqueConstraint("mobile_number", name="uq_users_mobile_number"),
    Index("idx_users_email", "email"),
)


# =====================================================
# 2. TRAINERS
# =====================================================
trainers = Table(
    "trainers",
    metadata,
    Column("trainer_id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("email", Text),
    Column("mobile_number", Text, nullable=False),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
)


# =====================================================
# 3. EVENTS
# =====================================================
events = Table(
    "events",
    metadata,
    Column("event_id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False),
    Column("description", Text),
    # Local calendar day of the event (see core.config.get_event_timezone)
    Column("event_date", TIMESTAMP(timezone=True), nullable=False),
    Column("event_time", Text),  # free text, e.g. "10:00 AM - 2:00 PM"
    Column("location", Text),
    Column("max_capacity", Integer, server_default="100"),
    Column("pool_capacity", Integer),  # NULL = DEFAULT_POOL_CAPACITY
    Column("registration_deadline", TIMESTAMP(timezone=True)),
    Column("pools_assigned", Boolean, nullable=False, server_default="false"),
    Column("reminder2_sent", Boolean, nullable=False, server_default="false"),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_events_event_date", "event_date"),
)


# =====================================================
# 4. EVENT_TRAINERS
# =====================================================
event_trainers = Table(
    "event_trainers",
    metadata,
    Column("event_trainer_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "event_id",
        Integer,
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "trainer_id",
        Integer,
        ForeignKey("trainers.trainer_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    UniqueConstraint("event_id", "trainer_id", name="uq_event_trainers_event_trainer"),
)


# =====================================================
# 5. REGISTRATIONS
# =====================================================
registrations = Table(
    "registrations",
    metadata,
    Column("registration_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Integer,
        ForeignKey("users.user_id", ondelete="RESTRICT"),
        nullable=False,
    ),
    Column(
        "event_id",
        Integer,
        ForeignKey("events.event_id", ondelete="RESTRICT"),
        nullable=False,
    ),
    Column("payment_id", Text),  # set once payment is captured
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    UniqueConstraint("user_id", "event_id", name="uq_registrations_user_event"),
    Index("idx_registrations_event_id", "event_id"),
)


# =====================================================
# 6. POOLS
# =====================================================
pools = Table(
    "pools",
    metadata,
    Column("pool_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "event_id",
        Integer,
        ForeignKey("events.event_id", ondelete="RESTRICT"),
        nullable=False,
    ),
    Column("pool_name", Text, nullable=False),
    Column("capacity", Integer, nullable=False),
    Column("is_active", Boolean, nullable=False, server_default="true"),
    Column("meet_link", Text),  # shared meeting URL
    Column(
        "trainer_id",
        Integer,
        ForeignKey("trainers.trainer_id", ondelete="SET NULL"),
    ),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    # A second assignment run for the same event collides here
    UniqueConstraint("event_id", "pool_name", name="uq_pools_event_pool_name"),
    Index("idx_pools_event_id", "event_id"),
)


# =====================================================
# 7. POOL_ATTENDEES
# =====================================================
pool_attendees = Table(
    "pool_attendees",
    metadata,
    Column("pool_attendee_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "pool_id",
        Integer,
        ForeignKey("pools.pool_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "user_id",
        Integer,
        ForeignKey("users.user_id", ondelete="RESTRICT"),
        nullable=False,
    ),
    Column("notified", Boolean, nullable=False, server_default="false"),
    Column("meet_link", Text),  # individual join URL
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    UniqueConstraint("pool_id", "user_id", name="uq_pool_attendees_pool_user"),
)


# =====================================================
# 8. NOTIFICATION_LOG
# =====================================================
notification_log = Table(
    "notification_log",
    metadata,
    Column("log_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Integer,
        ForeignKey("users.user_id", ondelete="SET NULL"),
    ),
    Column(
        "trainer_id",
        Integer,
        ForeignKey("trainers.trainer_id", ondelete="SET NULL"),
    ),
    Column("recipient", Text, nullable=False),  # WhatsApp number
    Column(
        "message_type", Text, nullable=False
    ),  # e.g., "meeting_ready_user", "same_day_reminder_user"
    Column("channel", Text, nullable=False),  # "whatsapp"
    Column("status", Text, nullable=False),  # "sent", "failed"
    Column("provider_message_id", Text),
    Column("error_message", Text),  # Why it failed (if applicable)
    Column("sent_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("reference_type", notification_reference_type_enum),
    Column("reference_id", Integer),
    Index("idx_notification_log_sent_at", "sent_at"),
    Index(
        "idx_notification_log_reference",
        "message_type",
        "reference_type",
        "reference_id",
    ),
)
