"""Query parameters for listing notifications."""

from datetime import datetime

from django.conf import settings

from pydantic import Field, field_validator

from notifications.schemas.base_schema_model import BaseSchemaModel


class ListNotificationsQuery(BaseSchemaModel):
    """Validated query string of ``GET notifications``.

    Attributes:
        page: 1-based page number.
        page_size: Items per page, 1 to NOTIFICATION_MAX_PAGE_SIZE.
        unread_only: Only list unread notifications.
        grouped: Return groups of notifications instead of a flat list.
        before: Only list notifications created at or before this instant.
    """

    page: int = Field(1, ge=1)
    page_size: int = Field(default_factory=lambda: settings.NOTIFICATION_DEFAULT_PAGE_SIZE)
    unread_only: bool = False
    grouped: bool = False
    before: datetime | None = None

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, value: int) -> int:
        """Reject page sizes outside 1..NOTIFICATION_MAX_PAGE_SIZE."""
        max_page_size = settings.NOTIFICATION_MAX_PAGE_SIZE
        if not 1 <= value <= max_page_size:
            raise ValueError(f"pageSize must be between 1 and {max_page_size}")
        return value
