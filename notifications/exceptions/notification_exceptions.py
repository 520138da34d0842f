"""Typed errors raised by the notification engines."""

from typing import Any


class NotificationError(Exception):
    """Base exception for notification errors.

    Attributes:
        code: Stable machine readable error code used in the envelope.
        status_code: HTTP status the error maps to.
    """

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str, detail: Any = None):
        """Initialize notification error.

        Args:
            message: Error message shown to the caller.
            detail: Optional structured detail, such as validation errors.
        """
        self.message = message
        self.detail = detail
        super().__init__(message)


class NotificationNotFoundError(NotificationError):
    """Referenced notification does not exist (404)."""

    code = "not_found"
    status_code = 404

    def __init__(self, notification_id: Any):
        """Initialize notification not found error.

        Args:
            notification_id: ID of the notification that was not found.
        """
        self.notification_id = notification_id
        super().__init__(f"Notification with ID {notification_id} not found")


class NotificationAuthorizationError(NotificationError):
    """Caller tried to act on a notification owned by someone else (403)."""

    code = "forbidden"
    status_code = 403

    def __init__(self, notification_id: Any, caller_id: Any):
        """Initialize notification authorization error.

        Args:
            notification_id: ID of the notification the caller targeted.
            caller_id: ID of the caller who does not own it.
        """
        self.notification_id = notification_id
        self.caller_id = caller_id
        super().__init__("You do not have permission to modify this notification")


class NotificationValidationError(NotificationError):
    """Malformed pagination parameters or unknown enum values (400)."""

    code = "validation_error"
    status_code = 400


class TransientStoreError(NotificationError):
    """Timeout or connection failure talking to the store (503)."""

    code = "store_unavailable"
    status_code = 503

    def __init__(self, message: str = "Notification store is temporarily unavailable"):
        """Initialize transient store error.

        Args:
            message: Error message shown to the caller.
        """
        super().__init__(message)
