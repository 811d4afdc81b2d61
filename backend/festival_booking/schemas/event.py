"""
Pydantic schemas for events and slots.
"""

from typing import Literal, Optional

from pydantic import Field

from festival_booking.schemas.common import CamelModel


class SlotCreate(CamelModel):
    slot_id: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    time_label: str = Field(..., min_length=1, max_length=100)
    max_capacity: Optional[int] = Field(None, gt=0, le=10000)


class SlotUpdate(CamelModel):
    max_capacity: Optional[int] = Field(None, gt=0, le=10000)
    is_closed: Optional[bool] = None


class SlotResponse(CamelModel):
    slot_id: str
    time_label: str
    max_capacity: int
    current_bookings: int
    remaining_seats: int
    is_closed: bool


class EventCreate(CamelModel):
    id: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    name: str = Field(..., min_length=1, max_length=255)
    kind: Literal["workshop", "game"] = "workshop"
    price: int = Field(0, ge=0)
    is_active: bool = True
    slots: list[SlotCreate] = Field(default_factory=list)


class EventResponse(CamelModel):
    id: str
    name: str
    kind: str
    price: int
    is_active: bool
    slots: list[SlotResponse] = Field(default_factory=list)


class EventListResponse(CamelModel):
    events: list[EventResponse]
    total: int
    cached: bool = False
