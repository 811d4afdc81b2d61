"""
Notification dispatcher interface.
Allows swapping delivery backends without touching the booking core.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BookingNotification:
    email: str
    name: str
    event_name: str
    slot_time: str
    status: str
    roll_number: str


class NotificationDispatcher(ABC):
    """
    Receives booking outcomes after the transaction has committed.

    Implementations:
    - LoggingNotificationDispatcher: writes the message to the structured log
    - NullNotificationDispatcher: drops everything (tests, maintenance)

    A dispatcher must never be called from inside a booking transaction;
    a failure here cannot undo a committed booking.
    """

    @abstractmethod
    async def notify(self, notification: BookingNotification) -> None:
        """
        Hand one notification to the delivery backend.

        Args:
            notification: recipient and booking details
        """
        pass
