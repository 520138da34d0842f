"""Paginated and grouped read access to a recipient's notifications."""

import math
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from django.conf import settings
from django.utils import timezone

import structlog

from notifications.enums import NotificationType
from notifications.models import Notification
from notifications.services.notification_store import (
    NotificationStore,
    notification_store,
)

logger = structlog.get_logger(__name__)


@dataclass
class NotificationPage:
    """One page of a listing.

    ``data`` holds notifications, or groups of notifications when grouping
    was requested. ``total`` and ``total_pages`` count notifications in
    both cases.
    """

    data: list[Notification] | list[list[Notification]]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool
    snapshot_at: datetime


def grouping_key(notification: Notification) -> tuple[str, ...]:
    """Key under which adjacent notifications may collapse into one group.

    A producer supplied ``group_id`` wins. Otherwise notifications about
    the same subject, ``(type, related_id)``, group together. System
    notifications without a ``group_id`` are never grouped.
    """
    if notification.group_id:
        return ("group", notification.group_id)
    if notification.type == NotificationType.SYSTEM.value:
        return ("single", str(notification.id))
    return ("subject", notification.type, notification.related_id or "")


def group_notifications(
    notifications: list[Notification], window_seconds: int
) -> list[list[Notification]]:
    """Collapse adjacent notifications that share a grouping key.

    Input must already be in listing order (newest first). A notification
    joins the current group when it has the same key and was created
    within ``window_seconds`` of the group's newest member. Order and
    membership are preserved: flattening the result gives back the input.

    Args:
        notifications: One page of notifications, newest first.
        window_seconds: Maximum age difference inside a group.

    Returns:
        Groups in listing order, each group newest first.
    """
    groups: list[list[Notification]] = []
    for notification in notifications:
        if groups:
            current = groups[-1]
            newest = current[0]
            gap = (newest.created_at - notification.created_at).total_seconds()
            same_key = grouping_key(notification) == grouping_key(newest)
            if same_key and gap <= window_seconds:
                current.append(notification)
                continue
        groups.append([notification])
    return groups


class QueryEngine:
    """Filter-then-paginate listings over the notification store."""

    def __init__(self, store: NotificationStore | None = None) -> None:
        """Initialize the query engine.

        Args:
            store: Notification store, defaults to the module singleton.
        """
        self.store = store or notification_store

    def list(
        self,
        recipient_id: UUID,
        page: int = 1,
        page_size: int = 20,
        unread_only: bool = False,
        grouped: bool = False,
        before: datetime | None = None,
    ) -> NotificationPage:
        """List a recipient's notifications, newest first.

        Pagination parameters are validated by the caller. Every listing is
        bounded by a snapshot instant (``before`` or the current time) so a
        client that passes ``snapshot_at`` back keeps a fixed page membership
        while new notifications arrive.

        The bound compares ``created_at``, stamped by the writer inside its
        create transaction. A create still in flight when the snapshot is
        taken can commit afterwards with a ``created_at`` at or before it and
        then join later pages of that snapshot. The gap is limited to one
        short create transaction (insert plus counter increment under the
        recipient's counter lock).

        Args:
            recipient_id: Owner of the notifications.
            page: 1-based page number.
            page_size: Notifications per page.
            unread_only: Only list unread notifications.
            grouped: Return groups instead of a flat list.
            before: Snapshot bound from a previous page.

        Returns:
            The requested page. Pages past the end have empty data.
        """
        snapshot_at = before or timezone.now()
        queryset = self.store.filtered(
            recipient_id, unread_only=unread_only, before=snapshot_at
        )

        total = queryset.count()
        total_pages = math.ceil(total / page_size) if total else 0
        offset = (page - 1) * page_size
        notifications = (
            list(queryset[offset : offset + page_size]) if page <= total_pages else []
        )

        data: list[Notification] | list[list[Notification]] = notifications
        if grouped:
            data = group_notifications(
                notifications, settings.NOTIFICATION_GROUP_WINDOW_SECONDS
            )

        logger.debug(
            "notifications_listed",
            recipient_id=str(recipient_id),
            page=page,
            page_size=page_size,
            unread_only=unread_only,
            grouped=grouped,
            total=total,
        )
        return NotificationPage(
            data=data,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            has_more=page < total_pages,
            snapshot_at=snapshot_at,
        )


query_engine = QueryEngine()
