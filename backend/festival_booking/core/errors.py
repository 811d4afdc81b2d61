"""
Typed booking errors.

Every failure that leaves the booking core is a BookingError subclass whose
`kind` is one of the ErrorKind values, so the API layer never has to
translate raw exceptions. StaleSlotError is the one exception: it only
signals the transaction runner to retry and never reaches a caller.
"""

from enum import Enum
from typing import Optional, Sequence


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "InvalidArgument"
    NOT_FOUND = "NotFound"
    SLOT_CLOSED = "SlotClosed"
    SLOT_FULL = "SlotFull"
    ALREADY_REGISTERED = "AlreadyRegistered"
    PAYMENT_ALREADY_USED = "PaymentAlreadyUsed"
    INTERNAL = "Internal"


class BookingError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"success": False, "errorKind": self.kind.value, "message": self.message}


class InvalidArgumentError(BookingError):
    kind = ErrorKind.INVALID_ARGUMENT
    status_code = 400
    default_message = "Invalid registration data. Please check your inputs."

    def __init__(self, message: Optional[str] = None, fields: Sequence[str] = ()):
        self.fields = list(fields)
        super().__init__(message)

    def to_response(self) -> dict:
        body = super().to_response()
        if self.fields:
            body["fields"] = self.fields
        return body


class NotFoundError(BookingError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Workshop or slot not found."


class SlotClosedError(BookingError):
    kind = ErrorKind.SLOT_CLOSED
    status_code = 409
    default_message = "This slot is closed for registrations."


class SlotFullError(BookingError):
    kind = ErrorKind.SLOT_FULL
    status_code = 409
    default_message = "This slot is already full. Please select another slot."


class AlreadyRegisteredError(BookingError):
    kind = ErrorKind.ALREADY_REGISTERED
    status_code = 409
    default_message = "You have already registered for this workshop."


class PaymentAlreadyUsedError(BookingError):
    kind = ErrorKind.PAYMENT_ALREADY_USED
    status_code = 409
    default_message = "This payment reference has already been used."


class InternalError(BookingError):
    kind = ErrorKind.INTERNAL
    status_code = 500
    default_message = "Booking failed due to high demand. Please try again."


class StaleSlotError(Exception):
    """The slot row changed between our read and our conditional write."""

    def __init__(self, event_id: str, slot_id: str):
        self.event_id = event_id
        self.slot_id = slot_id
        super().__init__(f"Slot {event_id}/{slot_id} was modified concurrently")
