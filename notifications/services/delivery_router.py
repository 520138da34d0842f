"""Preference-driven routing of new notifications to delivery channels.

A notification whose type the recipient has disabled is not created at
all. Otherwise it is stored for in-app display and fanned out to email,
push and the digest according to the recipient's channel flags.
"""

import uuid
from dataclasses import dataclass, field
from uuid import UUID

from django.db import transaction

import django_rq
import structlog

from notifications.enums import DeliveryChannel, DeliveryStatus
from notifications.models import (
    Notification,
    NotificationDelivery,
    NotificationPreference,
)
from notifications.services.digest_scheduler import DigestScheduler, digest_scheduler
from notifications.services.notification_store import (
    NotificationStore,
    notification_store,
)
from notifications.services.preference_store import PreferenceStore, preference_store

logger = structlog.get_logger(__name__)

# Channel flag on NotificationPreference for each optional channel
CHANNEL_PREFERENCE_FIELDS: dict[DeliveryChannel, str] = {
    DeliveryChannel.EMAIL: "email_notifications",
    DeliveryChannel.PUSH: "push_notifications",
    DeliveryChannel.DIGEST: "digest_notifications",
}

# Background job for each immediately delivered channel
DELIVERY_JOBS: dict[DeliveryChannel, str] = {
    DeliveryChannel.EMAIL: "notifications.jobs.delivery_jobs.send_email_delivery_job",
    DeliveryChannel.PUSH: "notifications.jobs.delivery_jobs.send_push_delivery_job",
}


@dataclass
class DispatchResult:
    """Outcome of routing one notification.

    ``notification`` is None when the recipient disabled the type.
    """

    notification: Notification | None
    channels: set[DeliveryChannel] = field(default_factory=set)

    @property
    def created(self) -> bool:
        """Whether a notification was stored."""
        return self.notification is not None


class DeliveryRouter:
    """Decide channels from preferences and fan notifications out to them."""

    def __init__(
        self,
        store: NotificationStore | None = None,
        preferences: PreferenceStore | None = None,
        scheduler: DigestScheduler | None = None,
    ) -> None:
        """Initialize the router.

        Args:
            store: Notification store, defaults to the module singleton.
            preferences: Preference store, defaults to the module singleton.
            scheduler: Digest scheduler, defaults to the module singleton.
        """
        self.store = store or notification_store
        self.preferences = preferences or preference_store
        self.scheduler = scheduler or digest_scheduler

    @staticmethod
    def route(
        notification_type: str, preference: NotificationPreference
    ) -> set[DeliveryChannel]:
        """Return the channels a notification of this type goes to.

        Args:
            notification_type: A NotificationType value.
            preference: The recipient's preferences.

        Returns:
            Empty when the type is disabled, otherwise IN_APP plus every
            enabled optional channel.
        """
        if not preference.allows_type(notification_type):
            return set()

        channels = {DeliveryChannel.IN_APP}
        for channel, preference_field in CHANNEL_PREFERENCE_FIELDS.items():
            if getattr(preference, preference_field):
                channels.add(channel)
        return channels

    def dispatch(
        self,
        recipient_id: UUID,
        notification_type: str,
        content: str,
        actor_id: UUID | None = None,
        related_id: str | None = None,
        group_id: str | None = None,
        recipient_email: str | None = None,
        push_token: str | None = None,
    ) -> DispatchResult:
        """Route and deliver one notification.

        Background jobs for email and push are enqueued only after the
        transaction commits, so a rolled back create never sends anything.

        Args:
            recipient_id: User receiving the notification.
            notification_type: A NotificationType value.
            content: Rendered notification text.
            actor_id: User whose action produced the notification.
            related_id: Opaque id of the entity concerned.
            group_id: Optional grouping key.
            recipient_email: Address for email and digest delivery.
            push_token: Device token for push delivery.

        Returns:
            The stored notification and its channels.
        """
        preference = self.preferences.get(recipient_id)
        channels = self.route(notification_type, preference)
        if not channels:
            logger.info(
                "notification_suppressed",
                recipient_id=str(recipient_id),
                notification_type=notification_type,
            )
            return DispatchResult(notification=None)

        with transaction.atomic():
            notification = self.store.create(
                recipient_id=recipient_id,
                notification_type=notification_type,
                content=content,
                actor_id=actor_id,
                related_id=related_id,
                group_id=group_id,
            )
            self._fan_out(
                notification,
                channels,
                preference,
                recipient_email=recipient_email,
                push_token=push_token,
            )

        logger.info(
            "notification_routed",
            notification_id=str(notification.id),
            channels=sorted(channel.value for channel in channels),
        )
        return DispatchResult(notification=notification, channels=channels)

    def dispatch_many(
        self,
        recipient_ids: list[UUID],
        notification_type: str,
        content: str,
        actor_id: UUID | None = None,
        related_id: str | None = None,
        group_id: str | None = None,
    ) -> tuple[list[Notification], int, str]:
        """Route one notification to many recipients as a single group.

        Recipients are deduplicated; those who disabled the type are
        skipped. Bulk requests carry no addresses, so email deliveries are
        recorded without one and digests keep whatever address the batch
        already has.

        Returns:
            Stored notifications, number of suppressed recipients and the
            shared group id.
        """
        group_id = group_id or str(uuid.uuid4())
        unique_recipients = list(dict.fromkeys(recipient_ids))

        routed: dict[UUID, tuple[NotificationPreference, set[DeliveryChannel]]] = {}
        for recipient_id in unique_recipients:
            preference = self.preferences.get(recipient_id)
            channels = self.route(notification_type, preference)
            if channels:
                routed[recipient_id] = (preference, channels)

        with transaction.atomic():
            notifications = self.store.create_many(
                routed.keys(),
                notification_type=notification_type,
                content=content,
                group_id=group_id,
                actor_id=actor_id,
                related_id=related_id,
            )
            for notification in notifications:
                preference, channels = routed[notification.recipient_id]
                self._fan_out(notification, channels, preference)

        suppressed = len(unique_recipients) - len(notifications)
        logger.info(
            "notifications_bulk_routed",
            group_id=group_id,
            created=len(notifications),
            suppressed=suppressed,
        )
        return notifications, suppressed, group_id

    def _fan_out(
        self,
        notification: Notification,
        channels: set[DeliveryChannel],
        preference: NotificationPreference,
        recipient_email: str | None = None,
        push_token: str | None = None,
    ) -> None:
        """Record immediate deliveries and queue the digest entry."""
        addresses = {
            DeliveryChannel.EMAIL: recipient_email,
            DeliveryChannel.PUSH: push_token,
        }
        delivery_ids = []
        for channel in (DeliveryChannel.EMAIL, DeliveryChannel.PUSH):
            if channel in channels:
                delivery = NotificationDelivery.objects.create(
                    notification=notification,
                    channel=channel.value,
                    recipient_address=addresses[channel],
                )
                delivery_ids.append(delivery.id)

        if DeliveryChannel.DIGEST in channels:
            self.scheduler.enqueue(
                notification, preference.digest_frequency, recipient_email
            )

        if delivery_ids:
            transaction.on_commit(lambda: self.queue_deliveries(delivery_ids))

    def queue_deliveries(self, delivery_ids: list[int]) -> None:
        """Enqueue background jobs for pending deliveries.

        Args:
            delivery_ids: NotificationDelivery primary keys.
        """
        queue = django_rq.get_queue("default")
        for delivery in NotificationDelivery.objects.filter(pk__in=delivery_ids):
            if delivery.status != DeliveryStatus.PENDING.value:
                logger.warning(
                    "delivery_already_processed",
                    delivery_id=delivery.id,
                    status=delivery.status,
                )
                continue
            job = DELIVERY_JOBS[DeliveryChannel(delivery.channel)]
            queue.enqueue(job, delivery.id)
            delivery.mark_queued()
            logger.info(
                "delivery_queued",
                delivery_id=delivery.id,
                notification_id=str(delivery.notification_id),
                channel=delivery.channel,
            )


delivery_router = DeliveryRouter()
