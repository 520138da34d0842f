"""Request schemas for producers creating notifications."""

from uuid import UUID

from pydantic import EmailStr, Field

from notifications.enums import NotificationType
from notifications.schemas.base_schema_model import BaseSchemaModel


class CreateNotificationRequest(BaseSchemaModel):
    """Request schema for creating a single notification.

    The producer has already decided the event deserves a notification;
    the recipient's preferences still decide whether and where it is
    delivered.
    """

    recipient_id: UUID = Field(..., description="User receiving the notification")
    actor_id: UUID | None = Field(
        None, description="User whose action produced the notification"
    )
    type: NotificationType = Field(..., description="Notification type")
    content: str = Field(
        ..., min_length=1, max_length=2000, description="Rendered notification text"
    )
    related_id: str | None = Field(
        None, max_length=255, description="Opaque id of the entity concerned"
    )
    group_id: str | None = Field(
        None, max_length=255, description="Key used to group related notifications"
    )
    recipient_email: EmailStr | None = Field(
        None, description="Address for email and digest delivery"
    )
    push_token: str | None = Field(
        None, max_length=255, description="Device token for push delivery"
    )


class BulkCreateNotificationRequest(BaseSchemaModel):
    """Request schema for fanning one notification out to many recipients.

    Recipients are deduplicated. When no ``group_id`` is given, one is
    generated and shared by every notification in the batch.
    """

    recipient_ids: list[UUID] = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Recipients of the notification",
    )
    actor_id: UUID | None = None
    type: NotificationType
    content: str = Field(..., min_length=1, max_length=2000)
    related_id: str | None = Field(None, max_length=255)
    group_id: str | None = Field(None, max_length=255)
