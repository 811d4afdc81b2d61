"""Initial schema: events, slots, bookings, participant markers, consumed payments.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Events table
    op.create_table(
        "events",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("kind", sa.String(20), nullable=False, server_default=sa.text("'workshop'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("price", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("price >= 0", name="check_event_price_non_negative"),
        sa.CheckConstraint("kind IN ('workshop', 'game')", name="check_event_kind"),
    )

    # Slots table: the seat counter every booking increments
    op.create_table(
        "slots",
        sa.Column("event_id", sa.String(64), sa.ForeignKey("events.id"), primary_key=True),
        sa.Column("slot_id", sa.String(64), primary_key=True),
        sa.Column("time_label", sa.String(100), nullable=False),
        sa.Column("max_capacity", sa.Integer(), nullable=False),
        sa.Column("current_bookings", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_closed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("max_capacity > 0", name="check_slot_capacity_positive"),
        sa.CheckConstraint("current_bookings >= 0", name="check_slot_bookings_non_negative"),
        sa.CheckConstraint("current_bookings <= max_capacity", name="check_slot_bookings_lte_capacity"),
    )

    # Bookings table
    op.create_table(
        "bookings",
        sa.Column("event_id", sa.String(64), primary_key=True),
        sa.Column("slot_id", sa.String(64), primary_key=True),
        sa.Column("roll_number", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(10), nullable=False),
        sa.Column("extra", sa.JSON(), nullable=False),
        sa.Column("payment_ref", sa.String(128), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("processed_by", sa.String(128), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["event_id", "slot_id"],
            ["slots.event_id", "slots.slot_id"],
            name="fk_booking_slot",
        ),
        sa.CheckConstraint("status IN ('pending', 'confirmed', 'rejected')", name="check_booking_status"),
    )
    # Admin review: "pending bookings, newest first"
    op.create_index("ix_bookings_status_created", "bookings", ["status", "created_at"])

    # One row per (event, roll number); the primary key is the duplicate guard
    op.create_table(
        "participants",
        sa.Column("event_id", sa.String(64), sa.ForeignKey("events.id"), primary_key=True),
        sa.Column("roll_number", sa.String(32), primary_key=True),
        sa.Column("slot_id", sa.String(64), nullable=False),
        sa.Column("payment_ref", sa.String(128), nullable=False),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False),
    )

    # Consumed payment references
    op.create_table(
        "payments",
        sa.Column("payment_ref", sa.String(128), primary_key=True),
        sa.Column("event_id", sa.String(64), nullable=False),
        sa.Column("slot_id", sa.String(64), nullable=False),
        sa.Column("roll_number", sa.String(32), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("payments")
    op.drop_table("participants")
    op.drop_index("ix_bookings_status_created", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("slots")
    op.drop_table("events")
