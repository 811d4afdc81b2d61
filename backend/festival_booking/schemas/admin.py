"""
Pydantic schemas for the admin review surface.
"""

from pydantic import Field

from festival_booking.schemas.common import CamelModel


class BookingStats(CamelModel):
    total_bookings: int = 0
    pending_bookings: int = 0
    confirmed_bookings: int = 0
    rejected_bookings: int = 0
    total_revenue: int = 0


class SlotOccupancy(CamelModel):
    event_id: str
    slot_id: str
    max_capacity: int
    current_bookings: int
    active_bookings: int = Field(..., description="Non-rejected booking rows under the slot")
    consistent: bool
