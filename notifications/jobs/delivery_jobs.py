"""Background jobs for email, push and digest delivery.

These run on RQ workers. Delivery jobs are idempotent: a delivery that is
already SENT is skipped, so a job that runs twice never sends twice.
Failures are retried with exponential backoff through rq-scheduler.
"""

import smtplib
from collections.abc import Callable
from datetime import timedelta

from django.conf import settings

import django_rq
import structlog

from notifications.enums import DeliveryChannel, DeliveryStatus, NotificationType
from notifications.exceptions.delivery_exceptions import DeliveryError
from notifications.models import NotificationDelivery
from notifications.services.digest_scheduler import digest_scheduler
from notifications.services.email_service import EmailService
from notifications.services.push_service import PushService
from notifications.services.unread_counter import unread_counter_service

logger = structlog.get_logger(__name__)

NOTIFICATION_EMAIL_TEMPLATE = "notifications/email/notification.html"


def send_email_delivery_job(delivery_id: int) -> None:
    """Send one notification by email.

    Args:
        delivery_id: NotificationDelivery primary key.
    """
    delivery = _load_delivery(delivery_id, DeliveryChannel.EMAIL)
    if delivery is None:
        return

    if not delivery.recipient_address:
        logger.error("recipient_email_missing", delivery_id=delivery_id)
        delivery.mark_failed("No recipient email address")
        return

    notification = delivery.notification
    label = NotificationType(notification.type).label

    def send() -> None:
        EmailService().send_template_email(
            to_email=delivery.recipient_address,
            subject=label,
            template_name=NOTIFICATION_EMAIL_TEMPLATE,
            context={"label": label, "notification": notification},
        )

    _attempt(delivery, send, send_email_delivery_job)


def send_push_delivery_job(delivery_id: int) -> None:
    """Send one notification through the push gateway.

    Args:
        delivery_id: NotificationDelivery primary key.
    """
    delivery = _load_delivery(delivery_id, DeliveryChannel.PUSH)
    if delivery is None:
        return

    notification = delivery.notification

    def send() -> None:
        PushService().send_push(
            user_id=str(notification.recipient_id),
            title=NotificationType(notification.type).label,
            body=notification.content,
            device_token=delivery.recipient_address,
            data={
                "notificationId": str(notification.id),
                "type": notification.type,
                "relatedId": notification.related_id,
            },
        )

    _attempt(delivery, send, send_push_delivery_job)


def flush_digests_job() -> int:
    """Flush every digest batch whose period has ended.

    Returns:
        Number of digests sent.
    """
    return digest_scheduler.flush_due()


def reconcile_unread_counts_job() -> int:
    """Recompute every unread counter from the notifications table.

    Returns:
        Number of counters corrected.
    """
    return unread_counter_service.reconcile()


def _load_delivery(
    delivery_id: int, channel: DeliveryChannel
) -> NotificationDelivery | None:
    """Fetch a delivery that still needs sending, or None to skip the job."""
    delivery = (
        NotificationDelivery.objects.select_related("notification")
        .filter(pk=delivery_id, channel=channel.value)
        .first()
    )
    if delivery is None:
        # The notification was deleted and its deliveries with it
        logger.info("delivery_not_found", delivery_id=delivery_id, channel=channel.value)
        return None

    if delivery.status in (DeliveryStatus.SENT.value, DeliveryStatus.FAILED.value):
        logger.info(
            "delivery_already_processed",
            delivery_id=delivery_id,
            status=delivery.status,
        )
        return None
    return delivery


def _attempt(
    delivery: NotificationDelivery,
    send: Callable[[], None],
    job: Callable[[int], None],
) -> None:
    """Run a send, recording success or scheduling a retry.

    Retries are delayed by ``5 * 2**(retry_count - 1)`` minutes and stop
    after NOTIFICATION_MAX_DELIVERY_RETRIES attempts.
    """
    try:
        send()
    except (smtplib.SMTPException, OSError, ValueError, DeliveryError) as e:
        permanent = isinstance(e, ValueError) or getattr(e, "permanent", False)
        delivery.increment_retry()
        max_retries = settings.NOTIFICATION_MAX_DELIVERY_RETRIES

        if not permanent and delivery.can_retry(max_retries):
            delay_minutes = 5 * (2 ** (delivery.retry_count - 1))
            scheduler = django_rq.get_scheduler("default")
            scheduler.enqueue_in(timedelta(minutes=delay_minutes), job, delivery.id)
            logger.warning(
                "delivery_failed_retry_scheduled",
                delivery_id=delivery.id,
                channel=delivery.channel,
                retry_count=delivery.retry_count,
                delay_minutes=delay_minutes,
                error=str(e),
            )
            return

        delivery.mark_failed(f"Failed after {delivery.retry_count} attempts: {e!s}")
        logger.error(
            "delivery_failed_permanently",
            delivery_id=delivery.id,
            channel=delivery.channel,
            retry_count=delivery.retry_count,
            error=str(e),
        )
        return

    delivery.mark_sent()
    logger.info(
        "delivery_sent",
        delivery_id=delivery.id,
        notification_id=str(delivery.notification_id),
        channel=delivery.channel,
    )
