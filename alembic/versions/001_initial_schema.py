"""Initial schema: events, registrations, pools and notification log.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.TIMESTAMP(timezone=True),
        server_default=sa.text("now()"),
        nullable=True,
    )


def upgrade() -> None:
    # Create the enum type
    reference_type_enum = postgresql.ENUM(
        "event", "pool", name="notification_reference_type", create_type=False
    )
    reference_type_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("mobile_number", sa.Text(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_users")),
        sa.UniqueConstraint("mobile_number", name="uq_users_mobile_number"),
    )
    op.create_index("idx_users_email", "users", ["email"], unique=False)

    op.create_table(
        "trainers",
        sa.Column("trainer_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("mobile_number", sa.Text(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("trainer_id", name=op.f("pk_trainers")),
    )

    op.create_table(
        "events",
        sa.Column("event_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_date", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("event_time", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("max_capacity", sa.Integer(), server_default="100", nullable=True),
        sa.Column("pool_capacity", sa.Integer(), nullable=True),
        sa.Column(
            "registration_deadline", postgresql.TIMESTAMP(timezone=True), nullable=True
        ),
        sa.Column("pools_assigned", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("reminder2_sent", sa.Boolean(), server_default="false", nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("event_id", name=op.f("pk_events")),
    )
    op.create_index("idx_events_event_date", "events", ["event_date"], unique=False)

    op.create_table(
        "event_trainers",
        sa.Column("event_trainer_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("trainer_id", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["event_id"],
            ["events.event_id"],
            name=op.f("fk_event_trainers_event_id_events"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["trainer_id"],
            ["trainers.trainer_id"],
            name=op.f("fk_event_trainers_trainer_id_trainers"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("event_trainer_id", name=op.f("pk_event_trainers")),
        sa.UniqueConstraint(
            "event_id", "trainer_id", name="uq_event_trainers_event_trainer"
        ),
    )

    op.create_table(
        "registrations",
        sa.Column("registration_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("payment_id", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.user_id"],
            name=op.f("fk_registrations_user_id_users"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["event_id"],
            ["events.event_id"],
            name=op.f("fk_registrations_event_id_events"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("registration_id", name=op.f("pk_registrations")),
        sa.UniqueConstraint("user_id", "event_id", name="uq_registrations_user_event"),
    )
    op.create_index(
        "idx_registrations_event_id", "registrations", ["event_id"], unique=False
    )

    op.create_table(
        "pools",
        sa.Column("pool_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("pool_name", sa.Text(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("meet_link", sa.Text(), nullable=True),
        sa.Column("trainer_id", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["event_id"],
            ["events.event_id"],
            name=op.f("fk_pools_event_id_events"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["trainer_id"],
            ["trainers.trainer_id"],
            name=op.f("fk_pools_trainer_id_trainers"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("pool_id", name=op.f("pk_pools")),
        sa.UniqueConstraint("event_id", "pool_name", name="uq_pools_event_pool_name"),
    )
    op.create_index("idx_pools_event_id", "pools", ["event_id"], unique=False)

    op.create_table(
        "pool_attendees",
        sa.Column("pool_attendee_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("pool_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("notified", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("meet_link", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["pool_id"],
            ["pools.pool_id"],
            name=op.f("fk_pool_attendees_pool_id_pools"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.user_id"],
            name=op.f("fk_pool_attendees_user_id_users"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("pool_attendee_id", name=op.f("pk_pool_attendees")),
        sa.UniqueConstraint("pool_id", "user_id", name="uq_pool_attendees_pool_user"),
    )

    op.create_table(
        "notification_log",
        sa.Column("log_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("trainer_id", sa.Integer(), nullable=True),
        sa.Column("recipient", sa.Text(), nullable=False),
        sa.Column("message_type", sa.Text(), nullable=False),
        sa.Column("channel", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("provider_message_id", sa.Text(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        _timestamp("sent_at"),
        sa.Column("reference_type", reference_type_enum, nullable=True),
        sa.Column("reference_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.user_id"],
            name=op.f("fk_notification_log_user_id_users"),
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["trainer_id"],
            ["trainers.trainer_id"],
            name=op.f("fk_notification_log_trainer_id_trainers"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("log_id", name=op.f("pk_notification_log")),
    )
    op.create_index(
        "idx_notification_log_sent_at", "notification_log", ["sent_at"], unique=False
    )
    op.create_index(
        "idx_notification_log_reference",
        "notification_log",
        ["message_type", "reference_type", "reference_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("idx_notification_log_reference", table_name="notification_log")
    op.drop_index("idx_notification_log_sent_at", table_name="notification_log")
    op.drop_table("notification_log")
    op.drop_table("pool_attendees")
    op.drop_index("idx_pools_event_id", table_name="pools")
    op.drop_table("pools")
    op.drop_index("idx_registrations_event_id", table_name="registrations")
    op.drop_table("registrations")
    op.drop_table("event_trainers")
    op.drop_index("idx_events_event_date", table_name="events")
    op.drop_table("events")
    op.drop_table("trainers")
    op.drop_index("idx_users_email", table_name="users")
    op.drop_table("users")

    # Drop the enum type
    sa.Enum(name="notification_reference_type").drop(op.get_bind(), checkfirst=True)
