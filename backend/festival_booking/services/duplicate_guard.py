"""
Duplicate guard: one booking per participant per event.

The event-wide ParticipantMarker keyed on (event_id, roll_number) is
authoritative; it blocks a second booking even in a different slot. The
per-slot booking lookup is a second check on the same rule. Both run
inside the booking transaction and the markers' primary keys make a
concurrent duplicate fail at commit.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from festival_booking.core.errors import AlreadyRegisteredError
from festival_booking.core.logging import get_logger
from festival_booking.models.booking import Booking
from festival_booking.models.participant import ParticipantMarker
from festival_booking.models.slot import Slot

logger = get_logger(__name__)


async def get_participant(
    db: AsyncSession, event_id: str, roll_number: str
) -> Optional[ParticipantMarker]:
    result = await db.execute(
        select(ParticipantMarker).where(
            ParticipantMarker.event_id == event_id,
            ParticipantMarker.roll_number == roll_number,
        )
    )
    return result.scalar_one_or_none()


async def ensure_not_registered(db: AsyncSession, event_id: str, roll_number: str) -> None:
    marker = await get_participant(db, event_id, roll_number)
    if marker is None:
        return

    held = await db.execute(
        select(Slot.time_label).where(Slot.event_id == event_id, Slot.slot_id == marker.slot_id)
    )
    slot_time = held.scalar_one_or_none() or marker.slot_id
    logger.info(
        "duplicate_registration_blocked",
        event_id=event_id,
        roll_number=roll_number,
        held_slot=marker.slot_id,
    )
    raise AlreadyRegisteredError(
        f"You have already registered for this workshop in slot: {slot_time}"
    )


async def ensure_no_slot_booking(
    db: AsyncSession, event_id: str, slot_id: str, roll_number: str
) -> None:
    existing = await db.get(Booking, (event_id, slot_id, roll_number))
    if existing is not None:
        raise AlreadyRegisteredError("Roll number already registered in this slot")


def mark_participant(
    db: AsyncSession,
    event_id: str,
    slot_id: str,
    roll_number: str,
    payment_ref: str,
    now: datetime,
) -> ParticipantMarker:
    marker = ParticipantMarker(
        event_id=event_id,
        roll_number=roll_number,
        slot_id=slot_id,
        payment_ref=payment_ref,
        registered_at=now,
    )
    db.add(marker)
    return marker


async def find_booking(db: AsyncSession, event_id: str, roll_number: str) -> Optional[Booking]:
    """The participant's booking in an event, whichever slot it is in."""
    result = await db.execute(
        select(Booking)
        .where(Booking.event_id == event_id, Booking.roll_number == roll_number)
        .order_by(Booking.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
