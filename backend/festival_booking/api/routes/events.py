"""
Event catalogue endpoints with Redis caching on the listing.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from festival_booking.core.logging import get_logger
from festival_booking.db.session import get_db
from festival_booking.schemas.booking import BookingResponse
from festival_booking.schemas.event import EventListResponse, EventResponse
from festival_booking.services.booking_service import get_participant_booking
from festival_booking.services.cache_service import get_cached_events, set_cached_events
from festival_booking.services.event_service import list_events, load_event

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    kind: Optional[Literal["workshop", "game"]] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """
    Active events with their slots and remaining seats.
    Served from Redis when warm; invalidated on every booking.
    """
    cached = await get_cached_events(kind)
    if cached:
        logger.info("events_list_cache_hit", kind=kind)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await list_events(db, kind=kind)

    response = EventListResponse(
        events=[EventResponse.model_validate(e) for e in events],
        total=total,
        cached=False,
    )
    await set_cached_events(kind, response.model_dump())

    return response


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(
    event_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Single event. Not cached (needs real-time seat counts)."""
    return await load_event(db, event_id)


@router.get("/{event_id}/bookings/{roll_number}", response_model=BookingResponse)
async def verify_booking_endpoint(
    event_id: str,
    roll_number: str,
    db: AsyncSession = Depends(get_db),
):
    """Look up the booking a roll number holds in an event."""
    return await get_participant_booking(db, event_id, roll_number)
