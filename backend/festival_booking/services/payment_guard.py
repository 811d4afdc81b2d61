"""
Payment consumption guard: a payment reference backs at most one booking.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from festival_booking.core.errors import PaymentAlreadyUsedError
from festival_booking.core.logging import get_logger
from festival_booking.models.payment import PaymentRecord

logger = get_logger(__name__)


async def ensure_payment_unused(db: AsyncSession, payment_ref: str) -> None:
    record = await db.get(PaymentRecord, payment_ref)
    if record is not None:
        logger.warning(
            "payment_reuse_blocked",
            payment_ref=payment_ref,
            used_by=record.roll_number,
            event_id=record.event_id,
        )
        raise PaymentAlreadyUsedError()


def consume_payment(
    db: AsyncSession,
    payment_ref: str,
    event_id: str,
    slot_id: str,
    roll_number: str,
    now: datetime,
) -> PaymentRecord:
    record = PaymentRecord(
        payment_ref=payment_ref,
        event_id=event_id,
        slot_id=slot_id,
        roll_number=roll_number,
        used_at=now,
    )
    db.add(record)
    return record
