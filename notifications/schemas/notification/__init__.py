"""Notification schemas."""

from notifications.schemas.notification.request.create_notification_request import (
    BulkCreateNotificationRequest,
    CreateNotificationRequest,
)
from notifications.schemas.notification.request.list_notifications_query import (
    ListNotificationsQuery,
)
from notifications.schemas.notification.request.mark_read_request import (
    MarkReadRequest,
)
from notifications.schemas.notification.response.mutation_responses import (
    BulkCreateNotificationResponse,
    CreateNotificationResponse,
    DeleteNotificationResponse,
    MarkReadResponse,
    UnreadCountResponse,
)
from notifications.schemas.notification.response.notification_list_response import (
    NotificationListResponse,
)
from notifications.schemas.notification.response.notification_response import (
    NotificationResponse,
)

__all__ = [
    "BulkCreateNotificationRequest",
    "BulkCreateNotificationResponse",
    "CreateNotificationRequest",
    "CreateNotificationResponse",
    "DeleteNotificationResponse",
    "ListNotificationsQuery",
    "MarkReadRequest",
    "MarkReadResponse",
    "NotificationListResponse",
    "NotificationResponse",
    "UnreadCountResponse",
]
