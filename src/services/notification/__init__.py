"""Notification services."""

from .dispatcher import BroadcastRecipients, NotificationService
from .realtime import (
    NotificationEvent,
    NotificationEventPublisher,
    UnreadCountStream,
    notification_channel,
)

__all__ = [
    "BroadcastRecipients",
    "NotificationEvent",
    "NotificationEventPublisher",
    "NotificationService",
    "UnreadCountStream",
    "notification_channel",
]
