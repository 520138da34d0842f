"""Request schema for marking notifications as read."""

from uuid import UUID

from pydantic import ConfigDict, Field

from notifications.schemas.base_schema_model import BaseSchemaModel


class MarkReadRequest(BaseSchemaModel):
    """Body of ``POST notifications/mark-read``.

    Omitting ``notification_id`` marks every notification of the caller
    as read. ``all_notifications`` is accepted for older clients and has
    the same effect. Unknown keys are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    notification_id: UUID | None = Field(
        None, description="Notification to mark read; omit to mark all"
    )
    all_notifications: bool = False

    @property
    def marks_all(self) -> bool:
        """Whether the request targets every notification."""
        return self.all_notifications or self.notification_id is None
