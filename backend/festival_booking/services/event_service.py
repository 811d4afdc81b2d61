"""
Event catalogue: administrative seeding and read-only listings.
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from festival_booking.core.config import get_settings
from festival_booking.core.errors import InvalidArgumentError, NotFoundError
from festival_booking.core.logging import get_logger
from festival_booking.models.event import Event
from festival_booking.models.slot import Slot
from festival_booking.schemas.event import EventCreate, SlotCreate

logger = get_logger(__name__)


def _new_slot(event_id: str, slot_data: SlotCreate) -> Slot:
    return Slot(
        event_id=event_id,
        slot_id=slot_data.slot_id,
        time_label=slot_data.time_label,
        max_capacity=slot_data.max_capacity or get_settings().DEFAULT_SLOT_CAPACITY,
        current_bookings=0,
        is_closed=False,
        version=1,
    )


async def create_event(
    session_factory: async_sessionmaker[AsyncSession],
    event_data: EventCreate,
) -> Event:
    """Create an event together with its initial slots, all seats free."""
    slot_ids = [s.slot_id for s in event_data.slots]
    if len(slot_ids) != len(set(slot_ids)):
        raise InvalidArgumentError("Slot ids must be unique within an event", fields=["slots"])

    async with session_factory() as db:
        event = Event(
            id=event_data.id,
            name=event_data.name,
            kind=event_data.kind,
            price=event_data.price,
            is_active=event_data.is_active,
        )
        db.add(event)
        for slot_data in event_data.slots:
            db.add(_new_slot(event_data.id, slot_data))
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise InvalidArgumentError(f"Event {event_data.id} already exists", fields=["id"])

    logger.info("event_created", event_id=event_data.id, name=event_data.name, slots=len(slot_ids))
    return await get_event(session_factory, event_data.id, active_only=False)


async def add_slot(
    session_factory: async_sessionmaker[AsyncSession],
    event_id: str,
    slot_data: SlotCreate,
) -> Slot:
    async with session_factory() as db:
        if await db.get(Event, event_id) is None:
            raise NotFoundError(f"Event {event_id} not found")
        slot = _new_slot(event_id, slot_data)
        db.add(slot)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise InvalidArgumentError(f"Slot {slot_data.slot_id} already exists in {event_id}", fields=["slotId"])

    logger.info("slot_created", event_id=event_id, slot_id=slot.slot_id, capacity=slot.max_capacity)
    return slot


async def get_event(
    session_factory: async_sessionmaker[AsyncSession],
    event_id: str,
    active_only: bool = True,
) -> Event:
    async with session_factory() as db:
        return await load_event(db, event_id, active_only=active_only)


async def load_event(db: AsyncSession, event_id: str, active_only: bool = True) -> Event:
    """Single event with live slot counters (never cached)."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()

    if event is None or (active_only and not event.is_active):
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def list_events(
    db: AsyncSession,
    kind: Optional[str] = None,
    active_only: bool = True,
) -> tuple[list[Event], int]:
    query = select(Event)
    if active_only:
        query = query.where(Event.is_active.is_(True))
    if kind:
        query = query.where(Event.kind == kind)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()
    result = await db.execute(query.order_by(Event.name.asc()))
    return list(result.scalars().all()), total
