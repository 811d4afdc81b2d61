"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .notification import BookingNotification, NotificationDispatcher
from .logging_dispatcher import LoggingNotificationDispatcher, NullNotificationDispatcher

__all__ = [
    'BookingNotification',
    'NotificationDispatcher',
    'LoggingNotificationDispatcher',
    'NullNotificationDispatcher',
]
