"""
Registration endpoint: the boundary in front of the booking allocator.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from festival_booking.db.session import get_session_factory
from festival_booking.schemas.booking import BookingCreate, BookingCreatedResponse
from festival_booking.schemas.common import ErrorResponse
from festival_booking.services.booking_service import create_booking
from festival_booking.services.cache_service import invalidate_event_cache
from festival_booking.services.interfaces import NotificationDispatcher
from festival_booking.services.notification_service import get_notifier

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post(
    "/",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """
    Book one seat in a slot.

    Capacity, event-wide duplicate and payment-reuse checks run in one
    transaction; concurrent attempts for the last seat yield exactly one
    winner and SlotFull for the rest.
    """
    result = await create_booking(
        session_factory,
        booking_data.event_id,
        booking_data.slot_id,
        booking_data.participant,
        booking_data.payment_ref,
        notifier=notifier,
    )
    # Seat counts changed
    await invalidate_event_cache()
    return BookingCreatedResponse(
        booking_id=result.booking_id,
        remaining_seats=result.remaining_seats,
    )
