"""Response schema for a single notification."""

from datetime import datetime
from uuid import UUID

from notifications.schemas.base_schema_model import BaseSchemaModel


class NotificationResponse(BaseSchemaModel):
    """A notification as returned to its recipient."""

    id: UUID
    recipient_id: UUID
    actor_id: UUID | None = None
    type: str
    content: str
    related_id: str | None = None
    group_id: str | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime
