from festival_booking.models.event import Event
from festival_booking.models.slot import Slot
from festival_booking.models.booking import Booking, BookingStatus
from festival_booking.models.participant import ParticipantMarker
from festival_booking.models.payment import PaymentRecord

__all__ = ["Event", "Slot", "Booking", "BookingStatus", "ParticipantMarker", "PaymentRecord"]
