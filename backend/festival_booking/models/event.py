"""
Event model: a bookable workshop or game.

Events are created by administrative seeding and are read-only to the
booking flow. Inactive events are hidden from the catalogue and refuse
new bookings.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, String
from sqlalchemy.orm import relationship

from festival_booking.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    kind = Column(String(20), nullable=False, default="workshop")  # workshop, game
    is_active = Column(Boolean, nullable=False, default=True)
    price = Column(Integer, nullable=False, default=0)  # smallest currency unit

    slots = relationship(
        "Slot",
        back_populates="event",
        lazy="selectin",
        order_by="Slot.slot_id",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_event_price_non_negative"),
        CheckConstraint("kind IN ('workshop', 'game')", name="check_event_kind"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name}, active={self.is_active})>"
