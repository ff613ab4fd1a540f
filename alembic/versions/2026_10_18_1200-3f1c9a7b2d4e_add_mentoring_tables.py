"""add mentoring tables

Revision ID: 3f1c9a7b2d4e
Create Date: 2026-10-18 12:00:41.512634
"""

from alembic import op

import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f1c9a7b2d4e"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "mentoring_availability_slots",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("mentor_id", sa.String(length=36), nullable=False),
        sa.Column("weekday", sa.SmallInteger(), nullable=False),
        sa.Column("start", sa.Time(), nullable=False),
        sa.Column("end", sa.Time(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id"),
        mysql_collate="utf8mb4_bin",
    )
    op.create_index(
        op.f("ix_mentoring_availability_slots_mentor_id"), "mentoring_availability_slots", ["mentor_id"], unique=False
    )
    op.create_table(
        "mentoring_connection_requests",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("requester_id", sa.String(length=36), nullable=False),
        sa.Column("mentor_id", sa.String(length=36), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.Enum("PENDING", "ACCEPTED", "REJECTED", name="connectionstatus"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("responded_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id"),
        mysql_collate="utf8mb4_bin",
    )
    op.create_index(
        op.f("ix_mentoring_connection_requests_mentor_id"), "mentoring_connection_requests", ["mentor_id"], unique=False
    )
    op.create_index(
        op.f("ix_mentoring_connection_requests_requester_id"),
        "mentoring_connection_requests",
        ["requester_id"],
        unique=False,
    )
    op.create_table(
        "mentoring_bookings",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("mentor_id", sa.String(length=36), nullable=False),
        sa.Column("mentee_id", sa.String(length=36), nullable=False),
        sa.Column("slot_id", sa.String(length=36), nullable=True),
        sa.Column("start", sa.DateTime(), nullable=False),
        sa.Column("end", sa.DateTime(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "CONFIRMED", "CANCELLED", "COMPLETED", "NO_SHOW", name="bookingstatus"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["slot_id"], ["mentoring_availability_slots.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("id"),
        mysql_collate="utf8mb4_bin",
    )
    op.create_index(op.f("ix_mentoring_bookings_mentee_id"), "mentoring_bookings", ["mentee_id"], unique=False)
    op.create_index("ix_mentoring_bookings_mentor_start", "mentoring_bookings", ["mentor_id", "start"], unique=False)
    op.create_table(
        "mentoring_schedule_locks",
        sa.Column("mentor_id", sa.String(length=36), nullable=False),
        sa.Column("revision", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("mentor_id"),
        mysql_collate="utf8mb4_bin",
    )


def downgrade() -> None:
    op.drop_table("mentoring_schedule_locks")
    op.drop_index("ix_mentoring_bookings_mentor_start", table_name="mentoring_bookings")
    op.drop_index(op.f("ix_mentoring_bookings_mentee_id"), table_name="mentoring_bookings")
    op.drop_table("mentoring_bookings")
    op.drop_index(op.f("ix_mentoring_connection_requests_requester_id"), table_name="mentoring_connection_requests")
    op.drop_index(op.f("ix_mentoring_connection_requests_mentor_id"), table_name="mentoring_connection_requests")
    op.drop_table("mentoring_connection_requests")
    op.drop_index(op.f("ix_mentoring_availability_slots_mentor_id"), table_name="mentoring_availability_slots")
    op.drop_table("mentoring_availability_slots")
