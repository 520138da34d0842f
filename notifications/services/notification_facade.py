"""Caller-facing operations composed from the notification engines.

The façade is the API surface used by the views. It resolves the caller
from the security context, validates input before any engine is reached,
retries idempotent operations on transient store failures and shapes the
results into response schemas.
"""

from collections.abc import Callable, Mapping
from typing import Any
from uuid import UUID

from django.conf import settings
from django.core.cache import cache

import structlog

from notifications.auth.context import require_caller_id
from notifications.constants import IDEMPOTENCY_CACHE_PREFIX
from notifications.exceptions import NotificationValidationError
from notifications.schemas.base_schema_model import BaseSchemaModel
from notifications.schemas.notification import (
    BulkCreateNotificationRequest,
    BulkCreateNotificationResponse,
    CreateNotificationRequest,
    CreateNotificationResponse,
    DeleteNotificationResponse,
    ListNotificationsQuery,
    MarkReadRequest,
    MarkReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from notifications.schemas.preference import (
    PreferenceResponse,
    PreferenceUpdateRequest,
)
from notifications.services.delivery_router import DeliveryRouter, delivery_router
from notifications.services.mutation_engine import MutationEngine, mutation_engine
from notifications.services.preference_store import PreferenceStore, preference_store
from notifications.services.query_engine import QueryEngine, query_engine
from notifications.services.store_errors import call_with_retry, translate_store_errors
from notifications.services.unread_counter import (
    UnreadCounterService,
    unread_counter_service,
)

logger = structlog.get_logger(__name__)


def _request_body(body: Any) -> Mapping[str, Any]:
    """Return a parsed request body, rejecting anything but a JSON object."""
    if body is None:
        return {}
    if not isinstance(body, Mapping):
        raise NotificationValidationError(
            f"Request body must be a JSON object, not {type(body).__name__}"
        )
    return body


class NotificationFacade:
    """Notification operations scoped to the authenticated caller."""

    def __init__(
        self,
        queries: QueryEngine | None = None,
        mutations: MutationEngine | None = None,
        counter: UnreadCounterService | None = None,
        preferences: PreferenceStore | None = None,
        router: DeliveryRouter | None = None,
    ) -> None:
        """Initialize the façade with its collaborating engines."""
        self.queries = queries or query_engine
        self.mutations = mutations or mutation_engine
        self.counter = counter or unread_counter_service
        self.preferences = preferences or preference_store
        self.router = router or delivery_router

    def get_notifications(self, params: dict[str, Any]) -> NotificationListResponse:
        """List the caller's notifications.

        Args:
            params: Raw query parameters (page, pageSize, unreadOnly,
                grouped, before).

        Returns:
            One page of notifications, flat or grouped.

        Raises:
            pydantic.ValidationError: On malformed pagination parameters.
        """
        query = ListNotificationsQuery.model_validate(params)
        caller_id = require_caller_id()

        page = call_with_retry(
            "list_notifications",
            lambda: self.queries.list(
                caller_id,
                page=query.page,
                page_size=query.page_size,
                unread_only=query.unread_only,
                grouped=query.grouped,
                before=query.before,
            ),
        )

        if query.grouped:
            data: Any = [
                [NotificationResponse.model_validate(item) for item in group]
                for group in page.data
            ]
        else:
            data = [NotificationResponse.model_validate(item) for item in page.data]

        return NotificationListResponse(
            data=data,
            total=page.total,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
            has_more=page.has_more,
            snapshot_at=page.snapshot_at,
        )

    def get_unread_count(self) -> UnreadCountResponse:
        """Return the caller's unread notification count."""
        caller_id = require_caller_id()
        count = call_with_retry("unread_count", lambda: self.counter.get(caller_id))
        return UnreadCountResponse(count=count)

    def mark_read(
        self, body: dict[str, Any], idempotency_key: str | None = None
    ) -> MarkReadResponse:
        """Mark one notification, or all of them, as read.

        Args:
            body: Request body; without ``notificationId`` every
                notification of the caller is marked read.
            idempotency_key: Optional client key; a repeated key for the same
                target replays the first result instead of acting again.

        Returns:
            Success flag and the number of notifications flipped.

        Raises:
            NotificationValidationError: If the body is not a JSON object.
            pydantic.ValidationError: On a malformed id or unknown fields.
            NotificationNotFoundError: If the notification does not exist.
            NotificationAuthorizationError: If the caller does not own it.
        """
        request = MarkReadRequest.model_validate(_request_body(body))
        caller_id = require_caller_id()

        def run() -> MarkReadResponse:
            if request.marks_all:
                updated = call_with_retry(
                    "mark_all_read", lambda: self.mutations.mark_all_read(caller_id)
                )
            else:
                flipped = call_with_retry(
                    "mark_read",
                    lambda: self.mutations.mark_read(caller_id, request.notification_id),
                )
                updated = int(flipped)
            return MarkReadResponse(success=True, updated=updated)

        target = "all" if request.marks_all else str(request.notification_id)
        return self._idempotent(
            caller_id, f"mark_read:{target}", idempotency_key, MarkReadResponse, run
        )

    def delete_notification(
        self, notification_id: str, idempotency_key: str | None = None
    ) -> DeleteNotificationResponse:
        """Delete one of the caller's notifications.

        A notification that does not exist is reported as ``deleted: false``
        rather than an error.

        Args:
            notification_id: Notification id from the URL.
            idempotency_key: Optional client key for replaying the result.

        Raises:
            NotificationValidationError: If the id is not a UUID.
            NotificationAuthorizationError: If the caller does not own it.
        """
        try:
            notification_uuid = UUID(str(notification_id))
        except ValueError as e:
            raise NotificationValidationError(
                f"Invalid notification ID: {notification_id}"
            ) from e
        caller_id = require_caller_id()

        def run() -> DeleteNotificationResponse:
            deleted = call_with_retry(
                "delete_notification",
                lambda: self.mutations.delete(caller_id, notification_uuid),
            )
            return DeleteNotificationResponse(deleted=deleted)

        return self._idempotent(
            caller_id,
            f"delete:{notification_uuid}",
            idempotency_key,
            DeleteNotificationResponse,
            run,
        )

    def get_preferences(self) -> PreferenceResponse:
        """Return the caller's preferences, materializing defaults on first read."""
        caller_id = require_caller_id()
        preference = call_with_retry(
            "get_preferences", lambda: self.preferences.get(caller_id)
        )
        return PreferenceResponse.model_validate(preference)

    def update_preferences(self, body: dict[str, Any]) -> PreferenceResponse:
        """Merge a partial update into the caller's preferences.

        Args:
            body: Preference fields to change, camelCase or snake_case.

        Raises:
            pydantic.ValidationError: On unknown fields or invalid values.
        """
        changes = PreferenceUpdateRequest.model_validate(_request_body(body)).changes()
        caller_id = require_caller_id()
        with translate_store_errors("update_preferences"):
            preference = self.preferences.update(caller_id, changes)
        return PreferenceResponse.model_validate(preference)

    def create_notification(self, body: dict[str, Any]) -> CreateNotificationResponse:
        """Create and route a notification on behalf of a producer.

        Not retried on transient failures: a retry after a commit that was
        not acknowledged would create a duplicate.

        Args:
            body: CreateNotificationRequest payload.

        Returns:
            The stored notification and its channels, or ``created: false``
            when the recipient disabled the type.
        """
        request = CreateNotificationRequest.model_validate(_request_body(body))
        with translate_store_errors("create_notification"):
            result = self.router.dispatch(
                recipient_id=request.recipient_id,
                notification_type=request.type,
                content=request.content,
                actor_id=request.actor_id,
                related_id=request.related_id,
                group_id=request.group_id,
                recipient_email=request.recipient_email,
                push_token=request.push_token,
            )

        return CreateNotificationResponse(
            created=result.created,
            notification=(
                NotificationResponse.model_validate(result.notification)
                if result.created
                else None
            ),
            channels=sorted(channel.value for channel in result.channels),
        )

    def create_bulk_notifications(
        self, body: dict[str, Any]
    ) -> BulkCreateNotificationResponse:
        """Fan one notification out to many recipients as a single group."""
        request = BulkCreateNotificationRequest.model_validate(_request_body(body))
        with translate_store_errors("create_bulk_notifications"):
            notifications, suppressed, group_id = self.router.dispatch_many(
                recipient_ids=request.recipient_ids,
                notification_type=request.type,
                content=request.content,
                actor_id=request.actor_id,
                related_id=request.related_id,
                group_id=request.group_id,
            )

        return BulkCreateNotificationResponse(
            created_count=len(notifications),
            suppressed_count=suppressed,
            group_id=group_id,
            notification_ids=[notification.id for notification in notifications],
        )

    def _idempotent(
        self,
        caller_id: UUID,
        operation: str,
        idempotency_key: str | None,
        schema: type[BaseSchemaModel],
        run: Callable[[], Any],
    ) -> Any:
        """Run a mutation once per idempotency key and replay its result."""
        if not idempotency_key:
            return run()

        cache_key = f"{IDEMPOTENCY_CACHE_PREFIX}{caller_id}:{operation}:{idempotency_key}"
        cached = cache.get(cache_key)
        if cached is not None:
            logger.info(
                "idempotent_replay",
                operation=operation,
                caller_id=str(caller_id),
                idempotency_key=idempotency_key,
            )
            return schema.model_validate(cached)

        result = run()
        cache.set(
            cache_key, result.model_dump(), settings.NOTIFICATION_IDEMPOTENCY_TTL
        )
        return result


notification_facade = NotificationFacade()
