"""Exception handling utilities for the notification hub."""

from notifications.exceptions.notification_exceptions import (
    NotificationAuthorizationError,
    NotificationError,
    NotificationNotFoundError,
    NotificationValidationError,
    TransientStoreError,
)

__all__ = [
    "NotificationAuthorizationError",
    "NotificationError",
    "NotificationNotFoundError",
    "NotificationValidationError",
    "TransientStoreError",
]
