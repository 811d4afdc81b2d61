"""
Admin review surface: booking status transitions, slot administration, stats.

These are plain transactional updates, but they share the slot row with the
booking path, so every change that touches a slot goes through the same
versioned update and transaction runner as a booking does. Rejecting a
booking releases its seat: the slot counter keeps matching the number of
non-rejected bookings. The participant marker and payment record of a
rejected booking stay in place, so the roll number and the payment
reference remain used.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from festival_booking.core.errors import InvalidArgumentError, NotFoundError
from festival_booking.core.logging import get_logger
from festival_booking.core.metrics import record_admin_action
from festival_booking.db.base import utcnow
from festival_booking.models.booking import Booking, BookingStatus
from festival_booking.models.event import Event
from festival_booking.models.slot import Slot
from festival_booking.schemas.admin import BookingStats, SlotOccupancy
from festival_booking.services import capacity_ledger
from festival_booking.services.interfaces import BookingNotification, NotificationDispatcher
from festival_booking.services.notification_service import send_after_commit
from festival_booking.services.transaction import run_transaction

logger = get_logger(__name__)


@dataclass(frozen=True)
class _StatusChange:
    booking: Booking
    event_name: str
    slot_time: str


async def _load_booking(
    db: AsyncSession, event_id: str, slot_id: str, roll_number: str
) -> Booking:
    booking = await db.get(Booking, (event_id, slot_id, roll_number.strip().upper()))
    if booking is None:
        raise NotFoundError(f"Booking {roll_number} not found in {event_id}/{slot_id}")
    return booking


async def _event_and_slot_labels(db: AsyncSession, event_id: str, slot_id: str) -> tuple[str, str]:
    result = await db.execute(
        select(Event.name, Slot.time_label)
        .join(Slot, Slot.event_id == Event.id)
        .where(Event.id == event_id, Slot.slot_id == slot_id)
    )
    row = result.one_or_none()
    if row is None:
        return event_id, slot_id
    return row[0], row[1]


def _require_admin(admin_id: Optional[str]) -> str:
    admin_id = (admin_id or "").strip()
    if not admin_id:
        raise InvalidArgumentError("Admin identifier is required", fields=["X-Admin-Id"])
    return admin_id


async def _notify_status(notifier: Optional[NotificationDispatcher], change: _StatusChange) -> None:
    await send_after_commit(
        notifier,
        BookingNotification(
            email=change.booking.email,
            name=change.booking.name,
            event_name=change.event_name,
            slot_time=change.slot_time,
            status=change.booking.status,
            roll_number=change.booking.roll_number,
        ),
    )


async def confirm_booking(
    session_factory: async_sessionmaker[AsyncSession],
    event_id: str,
    slot_id: str,
    roll_number: str,
    admin_id: Optional[str],
    *,
    notifier: Optional[NotificationDispatcher] = None,
    clock: Callable[[], datetime] = utcnow,
) -> Booking:
    """pending -> confirmed. Confirming twice is a no-op."""
    admin_id = _require_admin(admin_id)

    async def work(db: AsyncSession) -> tuple[_StatusChange, bool]:
        booking = await _load_booking(db, event_id, slot_id, roll_number)
        if booking.status == BookingStatus.REJECTED.value:
            raise InvalidArgumentError("A rejected booking cannot be confirmed", fields=["status"])
        event_name, slot_time = await _event_and_slot_labels(db, event_id, slot_id)
        if booking.status == BookingStatus.CONFIRMED.value:
            return _StatusChange(booking, event_name, slot_time), False

        booking.status = BookingStatus.CONFIRMED.value
        booking.processed_by = admin_id
        booking.processed_at = clock()
        await db.flush()
        return _StatusChange(booking, event_name, slot_time), True

    change, changed = await run_transaction(session_factory, work, operation="confirm_booking")
    if changed:
        record_admin_action("confirm")
        logger.info(
            "booking_confirmed",
            event_id=event_id,
            slot_id=slot_id,
            roll_number=change.booking.roll_number,
            admin_id=admin_id,
        )
        await _notify_status(notifier, change)
    return change.booking


async def reject_booking(
    session_factory: async_sessionmaker[AsyncSession],
    event_id: str,
    slot_id: str,
    roll_number: str,
    admin_id: Optional[str],
    *,
    notifier: Optional[NotificationDispatcher] = None,
    clock: Callable[[], datetime] = utcnow,
) -> Booking:
    """pending/confirmed -> rejected, releasing the seat. Rejecting twice is a no-op."""
    admin_id = _require_admin(admin_id)

    async def work(db: AsyncSession) -> tuple[_StatusChange, bool]:
        booking = await _load_booking(db, event_id, slot_id, roll_number)
        event_name, slot_time = await _event_and_slot_labels(db, event_id, slot_id)
        if booking.status == BookingStatus.REJECTED.value:
            return _StatusChange(booking, event_name, slot_time), False

        slot = await capacity_ledger.require_slot(db, event_id, slot_id)
        await capacity_ledger.release_seat(db, slot)

        booking.status = BookingStatus.REJECTED.value
        booking.processed_by = admin_id
        booking.processed_at = clock()
        await db.flush()
        return _StatusChange(booking, event_name, slot_time), True

    change, changed = await run_transaction(session_factory, work, operation="reject_booking")
    if changed:
        record_admin_action("reject")
        logger.info(
            "booking_rejected_by_admin",
            event_id=event_id,
            slot_id=slot_id,
            roll_number=change.booking.roll_number,
            admin_id=admin_id,
        )
        await _notify_status(notifier, change)
    return change.booking


async def update_slot(
    session_factory: async_sessionmaker[AsyncSession],
    event_id: str,
    slot_id: str,
    *,
    max_capacity: Optional[int] = None,
    is_closed: Optional[bool] = None,
) -> Slot:
    """Change a slot's capacity and/or closed flag."""
    if max_capacity is None and is_closed is None:
        raise InvalidArgumentError("Nothing to update", fields=["maxCapacity", "isClosed"])

    async def work(db: AsyncSession) -> tuple[Slot, bool]:
        slot = await capacity_ledger.require_slot(db, event_id, slot_id)
        changed = False
        if max_capacity is not None and max_capacity != slot.max_capacity:
            await capacity_ledger.set_max_capacity(db, slot, max_capacity)
            # keep the in-memory version in step for a second versioned update
            slot = await _refresh_slot(db, slot)
            changed = True
        if is_closed is not None and is_closed != slot.is_closed:
            await capacity_ledger.set_closed(db, slot, is_closed)
            slot = await _refresh_slot(db, slot)
            changed = True
        return slot, changed

    slot, changed = await run_transaction(session_factory, work, operation="update_slot")
    if not changed:
        return slot
    record_admin_action("update_slot")
    logger.info(
        "slot_updated",
        event_id=event_id,
        slot_id=slot_id,
        max_capacity=slot.max_capacity,
        is_closed=slot.is_closed,
    )
    return slot


async def _refresh_slot(db: AsyncSession, slot: Slot) -> Slot:
    await db.refresh(slot)
    return slot


async def list_bookings(
    db: AsyncSession,
    status: Optional[str] = None,
    event_id: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Booking]:
    query = select(Booking)
    if status:
        if status not in {s.value for s in BookingStatus}:
            raise InvalidArgumentError(f"Unknown booking status: {status}", fields=["status"])
        query = query.where(Booking.status == status)
    if event_id:
        query = query.where(Booking.event_id == event_id)

    result = await db.execute(
        query.order_by(Booking.created_at.desc()).offset(offset).limit(limit)
    )
    return list(result.scalars().all())


async def get_stats(db: AsyncSession, event_id: Optional[str] = None) -> BookingStats:
    """Totals per status, and revenue from confirmed bookings at the event price."""
    confirmed = Booking.status == BookingStatus.CONFIRMED.value
    query = (
        select(
            func.count(),
            func.coalesce(func.sum(case((Booking.status == BookingStatus.PENDING.value, 1), else_=0)), 0),
            func.coalesce(func.sum(case((confirmed, 1), else_=0)), 0),
            func.coalesce(func.sum(case((Booking.status == BookingStatus.REJECTED.value, 1), else_=0)), 0),
            func.coalesce(func.sum(case((confirmed, Event.price), else_=0)), 0),
        )
        .select_from(Booking)
        .join(Event, Event.id == Booking.event_id)
    )
    if event_id:
        query = query.where(Booking.event_id == event_id)

    total, pending, confirmed_count, rejected, revenue = (await db.execute(query)).one()
    return BookingStats(
        total_bookings=total,
        pending_bookings=pending,
        confirmed_bookings=confirmed_count,
        rejected_bookings=rejected,
        total_revenue=revenue,
    )


async def check_occupancy(db: AsyncSession, event_id: str) -> list[SlotOccupancy]:
    """Compare each slot counter with its non-rejected booking rows."""
    result = await db.execute(
        select(Slot).where(Slot.event_id == event_id).order_by(Slot.slot_id)
    )
    slots = list(result.scalars().all())
    if not slots:
        raise NotFoundError(f"Event {event_id} has no slots")

    report = []
    for slot in slots:
        active = await capacity_ledger.count_active_bookings(db, event_id, slot.slot_id)
        report.append(
            SlotOccupancy(
                event_id=event_id,
                slot_id=slot.slot_id,
                max_capacity=slot.max_capacity,
                current_bookings=slot.current_bookings,
                active_bookings=active,
                consistent=active == slot.current_bookings,
            )
        )
    return report
