"""Read-state and deletion mutations that keep the unread counter exact."""

from uuid import UUID

from django.db import transaction
from django.utils import timezone

import structlog

from notifications.exceptions import (
    NotificationAuthorizationError,
    NotificationNotFoundError,
)
from notifications.models import Notification
from notifications.services.notification_store import (
    NotificationStore,
    notification_store,
)
from notifications.services.unread_counter import (
    UnreadCounterService,
    unread_counter_service,
)

logger = structlog.get_logger(__name__)


class MutationEngine:
    """Mark notifications read and delete them on behalf of their recipient.

    Every operation verifies ownership first. Acting on a notification that
    belongs to someone else raises NotificationAuthorizationError.
    """

    def __init__(
        self,
        store: NotificationStore | None = None,
        counter: UnreadCounterService | None = None,
    ) -> None:
        """Initialize the mutation engine.

        Args:
            store: Notification store, defaults to the module singleton.
            counter: Unread counter service, defaults to the module singleton.
        """
        self.store = store or notification_store
        self.counter = counter or unread_counter_service

    def mark_read(self, caller_id: UUID, notification_id: UUID) -> bool:
        """Mark one notification as read.

        The flip is a compare-and-set on ``is_read``; only the call that
        actually moves it from False to True decrements the counter, so
        repeated or concurrent calls succeed without double counting.
        Ownership is checked under the caller's counter lock, which deletes
        also take, and a notification that vanished before the flip is
        reported as not found.

        Args:
            caller_id: Authenticated caller.
            notification_id: Notification to mark.

        Returns:
            True if this call flipped the notification, False if it was
            already read.

        Raises:
            NotificationNotFoundError: If the notification does not exist.
            NotificationAuthorizationError: If the caller does not own it.
        """
        with transaction.atomic():
            counter = self.counter.lock(caller_id)
            self._authorize(caller_id, notification_id, missing_ok=False)
            flipped = Notification.objects.filter(
                pk=notification_id, recipient_id=caller_id, is_read=False
            ).update(is_read=True, read_at=timezone.now())
            if flipped:
                unread = self.counter.decrement(counter, flipped)
            missing = (
                not flipped
                and not Notification.objects.filter(pk=notification_id).exists()
            )

        if missing:
            raise NotificationNotFoundError(notification_id)

        if flipped:
            logger.info(
                "notification_marked_read",
                notification_id=str(notification_id),
                recipient_id=str(caller_id),
                unread_count=unread,
            )
        else:
            logger.debug(
                "notification_already_read",
                notification_id=str(notification_id),
                recipient_id=str(caller_id),
            )
        return bool(flipped)

    def mark_all_read(self, caller_id: UUID) -> int:
        """Mark every notification that is unread right now as read.

        A single snapshot instant bounds the update, so a notification
        created after the snapshot stays unread. The counter is then set to
        the number of unread notifications left, all under the counter lock.

        Args:
            caller_id: Authenticated caller.

        Returns:
            Number of notifications flipped.
        """
        with transaction.atomic():
            counter = self.counter.lock(caller_id)
            snapshot = timezone.now()
            flipped = Notification.objects.filter(
                recipient_id=caller_id, is_read=False, created_at__lte=snapshot
            ).update(is_read=True, read_at=snapshot)
            remaining = Notification.objects.filter(
                recipient_id=caller_id, is_read=False
            ).count()
            if counter.count - flipped != remaining:
                self.counter.set(counter, remaining)
            else:
                self.counter.decrement(counter, flipped)

        logger.info(
            "notifications_marked_all_read",
            recipient_id=str(caller_id),
            flipped=flipped,
            unread_count=remaining,
        )
        return flipped

    def delete(self, caller_id: UUID, notification_id: UUID) -> bool:
        """Hard delete a notification owned by the caller.

        Args:
            caller_id: Authenticated caller.
            notification_id: Notification to delete.

        Returns:
            True if deleted, False if it did not exist.

        Raises:
            NotificationAuthorizationError: If the caller does not own it.
        """
        if not self._authorize(caller_id, notification_id, missing_ok=True):
            logger.info(
                "notification_delete_missing",
                notification_id=str(notification_id),
                recipient_id=str(caller_id),
            )
            return False
        return self.store.delete(notification_id)

    def _authorize(
        self, caller_id: UUID, notification_id: UUID, missing_ok: bool
    ) -> bool:
        """Check the caller owns the notification.

        Returns:
            True if it exists and is owned, False if it is missing and
            ``missing_ok`` is set.
        """
        owner = self.store.owner_of(notification_id)
        if owner is None:
            if missing_ok:
                return False
            raise NotificationNotFoundError(notification_id)
        if str(owner) != str(caller_id):
            logger.warning(
                "notification_access_denied",
                notification_id=str(notification_id),
                caller_id=str(caller_id),
            )
            raise NotificationAuthorizationError(notification_id, caller_id)
        return True


mutation_engine = MutationEngine()
