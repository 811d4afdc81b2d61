from festival_booking.schemas.booking import (
    BookingCreate,
    BookingCreatedResponse,
    BookingResponse,
    BookingResult,
    ParticipantIn,
)
from festival_booking.schemas.event import (
    EventCreate,
    EventListResponse,
    EventResponse,
    SlotCreate,
    SlotResponse,
    SlotUpdate,
)
from festival_booking.schemas.admin import BookingStats, SlotOccupancy
from festival_booking.schemas.common import ErrorResponse

__all__ = [
    "BookingCreate", "BookingCreatedResponse", "BookingResponse", "BookingResult", "ParticipantIn",
    "EventCreate", "EventListResponse", "EventResponse", "SlotCreate", "SlotResponse", "SlotUpdate",
    "BookingStats", "SlotOccupancy", "ErrorResponse",
]
