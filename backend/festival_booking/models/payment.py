"""
Consumed payment reference. Keyed by the reference itself so a payment can
back at most one booking.
"""

from sqlalchemy import Column, DateTime, String

from festival_booking.db.base import Base


class PaymentRecord(Base):
    __tablename__ = "payments"

    payment_ref = Column(String(128), primary_key=True)
    event_id = Column(String(64), nullable=False)
    slot_id = Column(String(64), nullable=False)
    roll_number = Column(String(32), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<PaymentRecord(ref={self.payment_ref}, roll={self.roll_number})>"
