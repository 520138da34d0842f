"""Request schema for partially updating notification preferences."""

from typing import Any

from pydantic import ConfigDict, field_validator

from notifications.enums import DigestFrequency
from notifications.schemas.base_schema_model import BaseSchemaModel


class PreferenceUpdateRequest(BaseSchemaModel):
    """Partial preference update.

    Only the fields present in the request are changed. Unknown fields,
    null values and unknown digest frequencies are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    follow_notifications: bool | None = None
    like_notifications: bool | None = None
    comment_notifications: bool | None = None
    reply_notifications: bool | None = None
    mention_notifications: bool | None = None
    system_notifications: bool | None = None
    email_notifications: bool | None = None
    push_notifications: bool | None = None
    digest_notifications: bool | None = None
    digest_frequency: DigestFrequency | None = None

    @field_validator("*")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        """Reject explicit nulls; omit a field to leave it unchanged."""
        if value is None:
            raise ValueError("must not be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller supplied, keyed by model field."""
        return self.model_dump(exclude_unset=True)
