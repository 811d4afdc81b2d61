"""
Capacity ledger: per-slot occupancy counter with optimistic locking.

CONCURRENCY STRATEGY: Version-checked conditional UPDATE
=========================================================

Problem:
  Two registrations race for the last seat of a slot. Both read
  current_bookings = max_capacity - 1, both increment, the slot ends up
  over capacity.

Solution:
  Every write to a slot row is

    UPDATE slots SET current_bookings = current_bookings + 1, version = version + 1
    WHERE event_id = :e AND slot_id = :s AND version = :read_version
      AND current_bookings < max_capacity AND NOT is_closed

  issued inside the booking transaction, after the row was read in that same
  transaction. If another transaction got there first the version no longer
  matches, zero rows are affected, and we raise StaleSlotError. The
  transaction runner rolls back and retries with a fresh read, which then
  reports SlotFull (or succeeds if a seat is still free).

  The CHECK constraint current_bookings <= max_capacity is the final safety
  net. Administrative edits (capacity, closing, releasing a seat on
  rejection) go through the same versioned update so they race safely with
  bookings.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from festival_booking.core.errors import (
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    SlotClosedError,
    SlotFullError,
    StaleSlotError,
)
from festival_booking.core.logging import get_logger
from festival_booking.models.booking import Booking, BookingStatus
from festival_booking.models.slot import Slot

logger = get_logger(__name__)


@dataclass(frozen=True)
class SlotCapacity:
    event_id: str
    slot_id: str
    max_capacity: int
    current_bookings: int
    is_closed: bool

    @property
    def remaining_seats(self) -> int:
        return max(self.max_capacity - self.current_bookings, 0)


async def get_slot(db: AsyncSession, event_id: str, slot_id: str) -> Optional[Slot]:
    result = await db.execute(
        select(Slot).where(Slot.event_id == event_id, Slot.slot_id == slot_id)
    )
    return result.scalar_one_or_none()


async def require_slot(db: AsyncSession, event_id: str, slot_id: str) -> Slot:
    slot = await get_slot(db, event_id, slot_id)
    if slot is None:
        raise NotFoundError(f"Slot {slot_id} not found for {event_id}")
    return slot


async def get_capacity(db: AsyncSession, event_id: str, slot_id: str) -> SlotCapacity:
    slot = await require_slot(db, event_id, slot_id)
    return SlotCapacity(
        event_id=slot.event_id,
        slot_id=slot.slot_id,
        max_capacity=slot.max_capacity,
        current_bookings=slot.current_bookings,
        is_closed=slot.is_closed,
    )


def ensure_seat_available(slot: Slot) -> None:
    if slot.is_closed:
        raise SlotClosedError(f"Slot {slot.time_label} is closed for registrations.")
    if slot.current_bookings >= slot.max_capacity:
        logger.warning(
            "slot_full",
            event_id=slot.event_id,
            slot_id=slot.slot_id,
            current=slot.current_bookings,
            capacity=slot.max_capacity,
        )
        raise SlotFullError()


async def _versioned_update(db: AsyncSession, slot: Slot, *conditions, **values) -> None:
    result = await db.execute(
        update(Slot)
        .where(
            Slot.event_id == slot.event_id,
            Slot.slot_id == slot.slot_id,
            Slot.version == slot.version,
            *conditions,
        )
        .values(version=Slot.version + 1, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise StaleSlotError(slot.event_id, slot.slot_id)


async def reserve_seat(db: AsyncSession, slot: Slot) -> int:
    """Take one seat in `slot`. Returns the new occupancy."""
    ensure_seat_available(slot)
    await _versioned_update(
        db,
        slot,
        Slot.current_bookings < Slot.max_capacity,
        Slot.is_closed.is_(False),
        current_bookings=Slot.current_bookings + 1,
    )
    return slot.current_bookings + 1


async def release_seat(db: AsyncSession, slot: Slot) -> int:
    """Give one seat back (booking rejected). Returns the new occupancy."""
    if slot.current_bookings <= 0:
        logger.error("slot_release_underflow", event_id=slot.event_id, slot_id=slot.slot_id)
        raise InternalError(f"Slot {slot.slot_id} has no booked seats to release")
    await _versioned_update(
        db,
        slot,
        Slot.current_bookings > 0,
        current_bookings=Slot.current_bookings - 1,
    )
    return slot.current_bookings - 1


async def set_max_capacity(db: AsyncSession, slot: Slot, new_max: int) -> None:
    if new_max <= 0:
        raise InvalidArgumentError("Capacity must be a positive number", fields=["maxCapacity"])
    if new_max < slot.current_bookings:
        raise InvalidArgumentError(
            f"Capacity cannot go below the {slot.current_bookings} seats already booked",
            fields=["maxCapacity"],
        )
    await _versioned_update(
        db,
        slot,
        Slot.current_bookings <= new_max,
        max_capacity=new_max,
    )


async def set_closed(db: AsyncSession, slot: Slot, closed: bool) -> None:
    await _versioned_update(db, slot, is_closed=closed)


async def count_active_bookings(db: AsyncSession, event_id: str, slot_id: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Booking)
        .where(
            Booking.event_id == event_id,
            Booking.slot_id == slot_id,
            Booking.status != BookingStatus.REJECTED.value,
        )
    )
    return result.scalar_one()
