"""Response schemas for notification mutations and counts."""

from uuid import UUID

from notifications.schemas.base_schema_model import BaseSchemaModel
from notifications.schemas.notification.response.notification_response import (
    NotificationResponse,
)


class UnreadCountResponse(BaseSchemaModel):
    """Unread notification count of the caller."""

    count: int


class MarkReadResponse(BaseSchemaModel):
    """Result of marking one or all notifications as read.

    ``updated`` is the number of notifications that actually changed from
    unread to read by this call.
    """

    success: bool = True
    updated: int = 0


class DeleteNotificationResponse(BaseSchemaModel):
    """Result of deleting a notification."""

    deleted: bool


class CreateNotificationResponse(BaseSchemaModel):
    """Result of a producer creating a notification.

    ``created`` is False when the recipient disabled the notification type;
    nothing was stored and ``channels`` is empty.
    """

    created: bool
    notification: NotificationResponse | None = None
    channels: list[str]


class BulkCreateNotificationResponse(BaseSchemaModel):
    """Result of a bulk fan-out."""

    created_count: int
    suppressed_count: int
    group_id: str
    notification_ids: list[UUID]
