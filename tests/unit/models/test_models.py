"""Tests for notification model helpers."""

from uuid import uuid4

from django.test import SimpleTestCase, TestCase

from notifications.enums import DeliveryStatus
from notifications.models import NotificationDelivery, NotificationPreference
from notifications.models.notification_preference import DEFAULT_PREFERENCES
from tests.factories import make_notification


class TestNotificationPreference(SimpleTestCase):
    """Test suite for NotificationPreference.allows_type."""

    def test_defaults_allow_every_type(self):
        """Test a default record lets every type through."""
        preference = NotificationPreference(user_id=uuid4(), **DEFAULT_PREFERENCES)

        for notification_type in ("follow", "like", "comment", "reply", "mention", "system"):
            self.assertTrue(preference.allows_type(notification_type), notification_type)

    def test_disabled_type_is_blocked(self):
        """Test each type reads its own flag."""
        preference = NotificationPreference(
            user_id=uuid4(), **{**DEFAULT_PREFERENCES, "mention_notifications": False}
        )

        self.assertFalse(preference.allows_type("mention"))
        self.assertTrue(preference.allows_type("reply"))

    def test_unknown_type_raises(self):
        """Test an unknown type is rejected."""
        preference = NotificationPreference(user_id=uuid4(), **DEFAULT_PREFERENCES)

        with self.assertRaises(ValueError):
            preference.allows_type("poke")


class TestNotificationDelivery(TestCase):
    """Test suite for NotificationDelivery state helpers."""

    def setUp(self):
        """Set up test fixtures."""
        self.delivery = NotificationDelivery.objects.create(
            notification=make_notification(uuid4()),
            channel="EMAIL",
            recipient_address="user@example.com",
        )

    def test_new_delivery_is_pending(self):
        """Test deliveries start pending with no attempts."""
        self.assertEqual(self.delivery.status, DeliveryStatus.PENDING.value)
        self.assertEqual(self.delivery.retry_count, 0)

    def test_mark_queued(self):
        """Test queueing records the time."""
        self.delivery.mark_queued()

        self.delivery.refresh_from_db()
        self.assertEqual(self.delivery.status, DeliveryStatus.QUEUED.value)
        self.assertIsNotNone(self.delivery.queued_at)

    def test_mark_failed_keeps_error(self):
        """Test a failure records its message."""
        self.delivery.mark_failed("bounced")

        self.delivery.refresh_from_db()
        self.assertEqual(self.delivery.status, DeliveryStatus.FAILED.value)
        self.assertEqual(self.delivery.error_message, "bounced")

    def test_can_retry_until_limit(self):
        """Test retries stop at the configured maximum."""
        self.assertTrue(self.delivery.can_retry(2))
        self.delivery.increment_retry()
        self.delivery.increment_retry()

        self.assertFalse(self.delivery.can_retry(2))

    def test_sent_delivery_cannot_retry(self):
        """Test a sent delivery is never retried."""
        self.delivery.mark_sent()

        self.assertFalse(self.delivery.can_retry(3))
