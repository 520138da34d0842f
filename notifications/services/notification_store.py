"""Durable storage of notifications per recipient.

The store owns the unread counter side effects of inserting and deleting
notifications: both happen in the same transaction as the counter update.
"""

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

import structlog

from notifications.exceptions import NotificationNotFoundError
from notifications.models import Notification
from notifications.services.unread_counter import (
    UnreadCounterService,
    unread_counter_service,
)

logger = structlog.get_logger(__name__)

# Stable total order: newest first, ties broken by id
LISTING_ORDER = ("-created_at", "-id")


class NotificationStore:
    """Create, fetch, list and delete notifications."""

    def __init__(self, counter: UnreadCounterService | None = None) -> None:
        """Initialize the store.

        Args:
            counter: Unread counter service, defaults to the module singleton.
        """
        self.counter = counter or unread_counter_service

    def create(
        self,
        recipient_id: UUID,
        notification_type: str,
        content: str,
        actor_id: UUID | None = None,
        related_id: str | None = None,
        group_id: str | None = None,
    ) -> Notification:
        """Insert an unread notification and increment the recipient's counter.

        Args:
            recipient_id: User receiving the notification.
            notification_type: A NotificationType value.
            content: Rendered notification text.
            actor_id: User whose action produced the notification.
            related_id: Opaque id of the entity concerned.
            group_id: Optional grouping key.

        Returns:
            The stored notification.
        """
        with transaction.atomic():
            counter = self.counter.lock(recipient_id)
            notification = Notification.objects.create(
                recipient_id=recipient_id,
                actor_id=actor_id,
                type=notification_type,
                content=content,
                related_id=related_id,
                group_id=group_id,
            )
            unread = self.counter.increment(counter)

        logger.info(
            "notification_created",
            notification_id=str(notification.id),
            recipient_id=str(recipient_id),
            notification_type=notification_type,
            unread_count=unread,
        )
        return notification

    def create_many(
        self,
        recipient_ids: Iterable[UUID],
        notification_type: str,
        content: str,
        group_id: str,
        actor_id: UUID | None = None,
        related_id: str | None = None,
    ) -> list[Notification]:
        """Insert the same notification for several recipients atomically.

        Recipients are deduplicated and their counters locked in a fixed
        order so concurrent bulk writes cannot deadlock each other.

        Args:
            recipient_ids: Recipients, duplicates allowed.
            notification_type: A NotificationType value.
            content: Rendered notification text.
            group_id: Grouping key shared by the whole batch.
            actor_id: User whose action produced the notifications.
            related_id: Opaque id of the entity concerned.

        Returns:
            The stored notifications, one per distinct recipient.
        """
        notifications = []
        with transaction.atomic():
            for recipient_id in sorted(set(recipient_ids), key=str):
                counter = self.counter.lock(recipient_id)
                notifications.append(
                    Notification.objects.create(
                        recipient_id=recipient_id,
                        actor_id=actor_id,
                        type=notification_type,
                        content=content,
                        related_id=related_id,
                        group_id=group_id,
                    )
                )
                self.counter.increment(counter)

        logger.info(
            "notifications_bulk_created",
            count=len(notifications),
            notification_type=notification_type,
            group_id=group_id,
        )
        return notifications

    def get_by_id(self, notification_id: UUID) -> Notification:
        """Fetch one notification.

        Raises:
            NotificationNotFoundError: If it does not exist.
        """
        try:
            return Notification.objects.get(pk=notification_id)
        except Notification.DoesNotExist as err:
            raise NotificationNotFoundError(notification_id) from err

    def owner_of(self, notification_id: UUID) -> UUID | None:
        """Return the recipient of a notification, or None if it does not exist."""
        return (
            Notification.objects.filter(pk=notification_id)
            .values_list("recipient_id", flat=True)
            .first()
        )

    def filtered(
        self,
        recipient_id: UUID,
        unread_only: bool = False,
        before: datetime | None = None,
    ) -> QuerySet[Notification]:
        """Build the ordered queryset of a recipient's notifications.

        Args:
            recipient_id: Owner of the notifications.
            unread_only: Only include unread notifications.
            before: Only include notifications created at or before this time.

        Returns:
            Queryset in listing order, filters applied before any slicing.
        """
        queryset = Notification.objects.filter(recipient_id=recipient_id)
        if unread_only:
            queryset = queryset.filter(is_read=False)
        if before is not None:
            queryset = queryset.filter(created_at__lte=before)
        return queryset.order_by(*LISTING_ORDER)

    def list_by_recipient(
        self,
        recipient_id: UUID,
        offset: int,
        limit: int,
        unread_only: bool = False,
        before: datetime | None = None,
    ) -> list[Notification]:
        """Return one window of a recipient's notifications, newest first."""
        queryset = self.filtered(recipient_id, unread_only=unread_only, before=before)
        return list(queryset[offset : offset + limit])

    def delete(self, notification_id: UUID) -> bool:
        """Hard delete a notification, decrementing the counter if it was unread.

        Args:
            notification_id: Notification to delete.

        Returns:
            True if a row was deleted, False if it did not exist.
        """
        recipient_id = self.owner_of(notification_id)
        if recipient_id is None:
            return False

        with transaction.atomic():
            counter = self.counter.lock(recipient_id)
            notification = (
                Notification.objects.select_for_update()
                .filter(pk=notification_id)
                .first()
            )
            if notification is None:
                return False
            was_unread = not notification.is_read
            notification.delete()
            if was_unread:
                self.counter.decrement(counter)

        logger.info(
            "notification_deleted",
            notification_id=str(notification_id),
            recipient_id=str(recipient_id),
            was_unread=was_unread,
        )
        return True


notification_store = NotificationStore()
