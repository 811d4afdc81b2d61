"""
Slot model: a capacity-bounded time window within an event.

Key design decisions:
- `current_bookings` is a maintained counter, equal at all times to the
  number of non-rejected bookings under the slot. Occupancy checks read the
  counter, never a COUNT over bookings.
- `version` enables optimistic locking: every write to the counter, the
  capacity or the closed flag is a conditional UPDATE on the version read
  inside the same transaction.
- CHECK constraints are the final safety net for 0 <= current <= max.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from festival_booking.db.base import Base, TimestampMixin


class Slot(Base, TimestampMixin):
    __tablename__ = "slots"

    event_id = Column(String(64), ForeignKey("events.id"), primary_key=True)
    slot_id = Column(String(64), primary_key=True)
    time_label = Column(String(100), nullable=False)
    max_capacity = Column(Integer, nullable=False)
    current_bookings = Column(Integer, nullable=False, default=0)
    is_closed = Column(Boolean, nullable=False, default=False)

    # Optimistic locking version counter
    version = Column(Integer, nullable=False, default=1)

    event = relationship("Event", back_populates="slots")

    __table_args__ = (
        CheckConstraint("max_capacity > 0", name="check_slot_capacity_positive"),
        CheckConstraint("current_bookings >= 0", name="check_slot_bookings_non_negative"),
        CheckConstraint("current_bookings <= max_capacity", name="check_slot_bookings_lte_capacity"),
    )

    @property
    def remaining_seats(self) -> int:
        return max(self.max_capacity - self.current_bookings, 0)

    def __repr__(self) -> str:
        return (
            f"<Slot(event={self.event_id}, slot={self.slot_id}, "
            f"booked={self.current_bookings}/{self.max_capacity}, closed={self.is_closed})>"
        )
