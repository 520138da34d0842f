"""Response schema for a page of notifications."""

from datetime import datetime

from notifications.schemas.base_schema_model import BaseSchemaModel
from notifications.schemas.notification.response.notification_response import (
    NotificationResponse,
)


class NotificationListResponse(BaseSchemaModel):
    """Paginated notifications for the caller.

    ``data`` is a flat list, or a list of groups when grouping was
    requested. ``total`` and ``total_pages`` always count notifications.
    ``snapshot_at`` can be passed back as ``before`` to page through a
    fixed snapshot.
    """

    data: list[NotificationResponse] | list[list[NotificationResponse]]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool
    snapshot_at: datetime | None = None
