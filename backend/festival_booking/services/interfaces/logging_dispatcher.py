"""
Notification dispatchers that need no external service.
"""

from festival_booking.core.logging import get_logger
from festival_booking.services.interfaces.notification import (
    BookingNotification,
    NotificationDispatcher,
)

logger = get_logger(__name__)

_SUBJECTS = {
    "pending": "Registration received",
    "confirmed": "Registration confirmed",
    "rejected": "Registration rejected",
}


class LoggingNotificationDispatcher(NotificationDispatcher):
    """Records the message that an email sender would deliver."""

    async def notify(self, notification: BookingNotification) -> None:
        logger.info(
            "notification_dispatched",
            to=notification.email,
            subject=f"{_SUBJECTS.get(notification.status, 'Registration update')}: {notification.event_name}",
            slot_time=notification.slot_time,
            status=notification.status,
            roll_number=notification.roll_number,
        )


class NullNotificationDispatcher(NotificationDispatcher):
    async def notify(self, notification: BookingNotification) -> None:
        pass
