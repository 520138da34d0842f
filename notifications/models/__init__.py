"""Database models for the notifications app."""

from notifications.models.digest import DigestBatch, DigestEntry
from notifications.models.notification import Notification
from notifications.models.notification_delivery import NotificationDelivery
from notifications.models.notification_preference import NotificationPreference
from notifications.models.unread_counter import UnreadCounter

__all__ = [
    "DigestBatch",
    "DigestEntry",
    "Notification",
    "NotificationDelivery",
    "NotificationPreference",
    "UnreadCounter",
]
