"""
Admin review endpoints: seeding, booking review, slot administration.

Authentication is handled in front of this service; the acting admin is
identified by the X-Admin-Id header and recorded on every status change.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from festival_booking.db.session import get_db, get_session_factory
from festival_booking.schemas.admin import BookingStats, SlotOccupancy
from festival_booking.schemas.booking import BookingResponse
from festival_booking.schemas.event import EventCreate, EventResponse, SlotCreate, SlotResponse, SlotUpdate
from festival_booking.services import admin_service, event_service
from festival_booking.services.cache_service import invalidate_event_cache
from festival_booking.services.interfaces import NotificationDispatcher
from festival_booking.services.notification_service import get_notifier

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    event = await event_service.create_event(session_factory, event_data)
    await invalidate_event_cache()
    return event


@router.post(
    "/events/{event_id}/slots",
    response_model=SlotResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_slot_endpoint(
    event_id: str,
    slot_data: SlotCreate,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    slot = await event_service.add_slot(session_factory, event_id, slot_data)
    await invalidate_event_cache()
    return slot


@router.patch("/events/{event_id}/slots/{slot_id}", response_model=SlotResponse)
async def update_slot_endpoint(
    event_id: str,
    slot_id: str,
    changes: SlotUpdate,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Change capacity (never below current occupancy) and/or open/close the slot."""
    slot = await admin_service.update_slot(
        session_factory,
        event_id,
        slot_id,
        max_capacity=changes.max_capacity,
        is_closed=changes.is_closed,
    )
    await invalidate_event_cache()
    return slot


@router.get("/events/{event_id}/occupancy", response_model=list[SlotOccupancy])
async def occupancy_endpoint(event_id: str, db: AsyncSession = Depends(get_db)):
    """Slot counters next to their non-rejected booking counts."""
    return await admin_service.check_occupancy(db, event_id)


@router.get("/bookings", response_model=list[BookingResponse])
async def list_bookings_endpoint(
    status_filter: Optional[str] = Query(None, alias="status"),
    event_id: Optional[str] = Query(None, alias="eventId"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.list_bookings(
        db, status=status_filter, event_id=event_id, limit=limit, offset=offset
    )


@router.get("/stats", response_model=BookingStats)
async def stats_endpoint(
    event_id: Optional[str] = Query(None, alias="eventId"),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.get_stats(db, event_id=event_id)


@router.post(
    "/events/{event_id}/slots/{slot_id}/bookings/{roll_number}/confirm",
    response_model=BookingResponse,
)
async def confirm_booking_endpoint(
    event_id: str,
    slot_id: str,
    roll_number: str,
    admin_id: Optional[str] = Header(None, alias="X-Admin-Id"),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    return await admin_service.confirm_booking(
        session_factory, event_id, slot_id, roll_number, admin_id, notifier=notifier
    )


@router.post(
    "/events/{event_id}/slots/{slot_id}/bookings/{roll_number}/reject",
    response_model=BookingResponse,
)
async def reject_booking_endpoint(
    event_id: str,
    slot_id: str,
    roll_number: str,
    admin_id: Optional[str] = Header(None, alias="X-Admin-Id"),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """Reject a booking and give its seat back to the slot."""
    booking = await admin_service.reject_booking(
        session_factory, event_id, slot_id, roll_number, admin_id, notifier=notifier
    )
    await invalidate_event_cache()
    return booking
