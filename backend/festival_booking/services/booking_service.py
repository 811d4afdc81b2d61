"""
Booking allocator: one seat in one slot for one participant, exactly once.

CONCURRENCY STRATEGY: one transaction, optimistic locking, bounded retry
========================================================================

Problem:
  Many registrations arrive at once. Without care we can
  - hand out the last seat twice (two readers see a free seat),
  - register the same roll number in two slots of one event,
  - turn one payment into several bookings.

Solution:
  All checks and all writes for an attempt run in a single transaction:

  1. load event, slot, participant marker, payment record, slot booking
  2. reject with a typed error if any business rule fails
  3. versioned UPDATE of the slot counter (see capacity_ledger)
  4. INSERT booking, participant marker, payment record
  5. COMMIT

  Lost races surface as a stale slot version, a primary-key collision on
  the marker/payment/booking, or a serialization failure. The transaction
  runner rolls back and retries; the fresh read then yields the definitive
  answer (usually SlotFull, AlreadyRegistered or PaymentAlreadyUsed).
  Nothing is written unless everything is.

  Validation happens before any session is opened, and notifications are
  sent only after commit, to keep the transaction short.
"""

import time
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from festival_booking.core.config import get_settings
from festival_booking.core.errors import BookingError, NotFoundError
from festival_booking.core.logging import get_logger
from festival_booking.core.metrics import booking_latency, record_booking_attempt
from festival_booking.db.base import utcnow
from festival_booking.models.booking import Booking
from festival_booking.models.event import Event
from festival_booking.schemas.booking import BookingResult, ParticipantIn
from festival_booking.services import capacity_ledger, duplicate_guard, payment_guard
from festival_booking.services.interfaces import BookingNotification, NotificationDispatcher
from festival_booking.services.notification_service import send_after_commit
from festival_booking.services.transaction import run_transaction
from festival_booking.services.validation import ValidatedBooking, validate_booking_request

logger = get_logger(__name__)


async def _load_active_event(db: AsyncSession, event_id: str) -> Event:
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()
    if event is None or not event.is_active:
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def _allocate_seat(
    db: AsyncSession,
    request: ValidatedBooking,
    now: datetime,
) -> BookingResult:
    event = await _load_active_event(db, request.event_id)
    slot = await capacity_ledger.require_slot(db, request.event_id, request.slot_id)
    if slot.is_closed:
        capacity_ledger.ensure_seat_available(slot)

    await duplicate_guard.ensure_not_registered(db, request.event_id, request.roll_number)
    await payment_guard.ensure_payment_unused(db, request.payment_ref)
    await duplicate_guard.ensure_no_slot_booking(
        db, request.event_id, request.slot_id, request.roll_number
    )

    new_occupancy = await capacity_ledger.reserve_seat(db, slot)

    status = get_settings().BOOKING_INITIAL_STATUS
    db.add(
        Booking(
            event_id=request.event_id,
            slot_id=request.slot_id,
            roll_number=request.roll_number,
            name=request.name,
            email=request.email,
            phone=request.phone,
            extra=request.extra,
            payment_ref=request.payment_ref,
            status=status,
            created_at=now,
        )
    )
    duplicate_guard.mark_participant(
        db, request.event_id, request.slot_id, request.roll_number, request.payment_ref, now
    )
    payment_guard.consume_payment(
        db, request.payment_ref, request.event_id, request.slot_id, request.roll_number, now
    )
    # Key collisions with a concurrent commit surface here, inside the retry loop
    await db.flush()

    return BookingResult(
        booking_id=request.roll_number,
        remaining_seats=slot.max_capacity - new_occupancy,
        event_id=event.id,
        slot_id=slot.slot_id,
        event_name=event.name,
        slot_time=slot.time_label,
        status=status,
    )


async def create_booking(
    session_factory: async_sessionmaker[AsyncSession],
    event_id: str,
    slot_id: str,
    participant: ParticipantIn,
    payment_ref: str,
    *,
    notifier: Optional[NotificationDispatcher] = None,
    clock: Callable[[], datetime] = utcnow,
) -> BookingResult:
    """
    Book one seat for `participant` in (event_id, slot_id), paid by `payment_ref`.

    Raises one of the BookingError subclasses on failure; on failure no
    counter, marker, payment record or booking has been written.
    """
    started = time.perf_counter()
    try:
        request = validate_booking_request(event_id, slot_id, participant, payment_ref)
        now = clock()

        async def work(db: AsyncSession) -> BookingResult:
            return await _allocate_seat(db, request, now)

        result = await run_transaction(session_factory, work, operation="create_booking")
    except BookingError as e:
        record_booking_attempt(e.kind.value)
        logger.info(
            "booking_rejected",
            event_id=event_id,
            slot_id=slot_id,
            error_kind=e.kind.value,
            reason=e.message,
        )
        raise
    finally:
        booking_latency.observe(time.perf_counter() - started)

    record_booking_attempt("success")
    logger.info(
        "booking_created",
        event_id=result.event_id,
        slot_id=result.slot_id,
        roll_number=result.booking_id,
        remaining_seats=result.remaining_seats,
        status=result.status,
    )

    await send_after_commit(
        notifier,
        BookingNotification(
            email=request.email,
            name=request.name,
            event_name=result.event_name,
            slot_time=result.slot_time,
            status=result.status,
            roll_number=result.booking_id,
        ),
    )
    return result


async def get_participant_booking(
    db: AsyncSession, event_id: str, roll_number: str
) -> Booking:
    """Verify-booking lookup: the booking a roll number holds in an event."""
    booking = await duplicate_guard.find_booking(db, event_id, roll_number.strip().upper())
    if booking is None:
        raise NotFoundError(f"No booking found for {roll_number} in {event_id}")
    return booking
