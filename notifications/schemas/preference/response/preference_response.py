"""Response schema for notification preferences."""

from datetime import datetime
from uuid import UUID

from notifications.schemas.base_schema_model import BaseSchemaModel


class PreferenceResponse(BaseSchemaModel):
    """A user's complete notification preference record."""

    user_id: UUID
    follow_notifications: bool
    like_notifications: bool
    comment_notifications: bool
    reply_notifications: bool
    mention_notifications: bool
    system_notifications: bool
    email_notifications: bool
    push_notifications: bool
    digest_notifications: bool
    digest_frequency: str
    updated_at: datetime | None = None
