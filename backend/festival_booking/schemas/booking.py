"""
Pydantic schemas for the registration request/response contract.

Fields default to empty strings on purpose: presence and format are checked
by the booking validator so that every malformed request is reported as an
InvalidArgument naming the offending fields.
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from festival_booking.schemas.common import CamelModel


class ParticipantIn(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    name: str = ""
    email: str = ""
    phone: str = ""
    roll_number: str = ""


class BookingCreate(CamelModel):
    event_id: str = ""
    slot_id: str = ""
    participant: ParticipantIn = Field(default_factory=ParticipantIn)
    payment_ref: str = ""


class BookingResult(CamelModel):
    """What the allocator hands back after a committed booking."""

    booking_id: str
    remaining_seats: int
    event_id: str
    slot_id: str
    event_name: str
    slot_time: str
    status: str


class BookingCreatedResponse(CamelModel):
    success: bool = True
    booking_id: str
    remaining_seats: int


class BookingResponse(CamelModel):
    event_id: str
    slot_id: str
    roll_number: str
    name: str
    email: str
    phone: str
    payment_ref: str
    status: str
    created_at: datetime
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
