"""
Event-wide participant marker.

One row per (event, roll number), written in the same transaction as the
booking. Its primary key is what stops a participant from holding two
slots of the same event.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String

from festival_booking.db.base import Base


class ParticipantMarker(Base):
    __tablename__ = "participants"

    event_id = Column(String(64), ForeignKey("events.id"), primary_key=True)
    roll_number = Column(String(32), primary_key=True)
    slot_id = Column(String(64), nullable=False)
    payment_ref = Column(String(128), nullable=False)
    registered_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<ParticipantMarker(event={self.event_id}, roll={self.roll_number}, slot={self.slot_id})>"
