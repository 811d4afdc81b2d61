"""
Booking model: one participant's seat in one slot.

Key design decisions:
- Primary key (event_id, slot_id, roll_number) makes a second booking of the
  same slot by the same roll number impossible at the DB level.
- Status moves pending -> confirmed or pending/confirmed -> rejected through
  the admin review surface only. Rejected rows are kept for audit; their
  seat is released from the slot counter.
"""

import enum

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKeyConstraint,
    Index,
    String,
    func,
)

from festival_booking.db.base import Base


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class Booking(Base):
    __tablename__ = "bookings"

    event_id = Column(String(64), primary_key=True)
    slot_id = Column(String(64), primary_key=True)
    roll_number = Column(String(32), primary_key=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(10), nullable=False)
    extra = Column(JSON, nullable=False, default=dict)

    payment_ref = Column(String(128), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    processed_by = Column(String(128), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        ForeignKeyConstraint(
            ["event_id", "slot_id"],
            ["slots.event_id", "slots.slot_id"],
            name="fk_booking_slot",
        ),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'rejected')",
            name="check_booking_status",
        ),
        # Admin review lists bookings by status, newest first
        Index("ix_bookings_status_created", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(event={self.event_id}, slot={self.slot_id}, "
            f"roll={self.roll_number}, status={self.status})>"
        )
