"""
Notification dispatcher factory and the post-commit send helper.
"""

from typing import Optional

from festival_booking.core.config import get_settings
from festival_booking.core.logging import get_logger
from festival_booking.core.metrics import notification_failures
from festival_booking.services.interfaces import (
    BookingNotification,
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    NullNotificationDispatcher,
)

logger = get_logger(__name__)


def build_dispatcher() -> NotificationDispatcher:
    """
    Build the configured dispatcher.

    NOTIFICATION_BACKEND:
    - "log" (default): LoggingNotificationDispatcher
    - "null": NullNotificationDispatcher
    """
    backend = get_settings().NOTIFICATION_BACKEND
    if backend == "null":
        return NullNotificationDispatcher()
    return LoggingNotificationDispatcher()


_dispatcher: Optional[NotificationDispatcher] = None


def get_notifier() -> NotificationDispatcher:
    """Dispatcher singleton; also the FastAPI dependency."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = build_dispatcher()
    return _dispatcher


async def send_after_commit(
    notifier: Optional[NotificationDispatcher],
    notification: BookingNotification,
) -> bool:
    """
    Deliver a notification for an already committed change.
    Failures are logged and counted; the booking stands either way.
    """
    if notifier is None:
        return False
    try:
        await notifier.notify(notification)
        return True
    except Exception as e:
        notification_failures.inc()
        logger.error(
            "notification_failed",
            to=notification.email,
            status=notification.status,
            error=str(e),
        )
        return False
