"""Enumerations for the notifications app."""

from notifications.enums.notification import (
    DeliveryChannel,
    DeliveryStatus,
    DigestBatchStatus,
    DigestFrequency,
    NotificationType,
)

__all__ = [
    "DeliveryChannel",
    "DeliveryStatus",
    "DigestBatchStatus",
    "DigestFrequency",
    "NotificationType",
]
