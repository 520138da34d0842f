"""Tests for read-state and deletion mutations."""

from unittest.mock import patch
from uuid import uuid4

from django.test import TestCase

from notifications.exceptions import (
    NotificationAuthorizationError,
    NotificationNotFoundError,
)
from notifications.models import Notification, UnreadCounter
from notifications.services.mutation_engine import MutationEngine, mutation_engine
from notifications.services.notification_store import (
    NotificationStore,
    notification_store,
)
from notifications.services.unread_counter import unread_counter_service
from tests.factories import make_notification


class TestMutationEngine(TestCase):
    """Test suite for MutationEngine."""

    def setUp(self):
        """Set up test fixtures."""
        self.engine = MutationEngine()
        self.owner_id = uuid4()
        self.other_id = uuid4()

    def _unread(self):
        return unread_counter_service.get(self.owner_id)

    def _actual_unread(self):
        return Notification.objects.filter(recipient_id=self.owner_id, is_read=False).count()

    def test_mark_read_flips_and_decrements(self):
        """Test marking an unread notification read decrements the counter."""
        notification = make_notification(self.owner_id)
        make_notification(self.owner_id)

        self.assertTrue(self.engine.mark_read(self.owner_id, notification.id))

        notification.refresh_from_db()
        self.assertTrue(notification.is_read)
        self.assertIsNotNone(notification.read_at)
        self.assertEqual(self._unread(), 1)

    def test_mark_read_twice_decrements_once(self):
        """Test a repeated mark-read is a successful no-op."""
        notification = make_notification(self.owner_id)

        self.assertTrue(self.engine.mark_read(self.owner_id, notification.id))
        self.assertFalse(self.engine.mark_read(self.owner_id, notification.id))

        self.assertEqual(self._unread(), 0)
        self.assertEqual(self._unread(), self._actual_unread())

    def test_mark_read_unknown_raises_not_found(self):
        """Test marking an unknown id read is an explicit error."""
        with self.assertRaises(NotificationNotFoundError):
            self.engine.mark_read(self.owner_id, uuid4())

    def test_mark_read_other_users_notification_is_forbidden(self):
        """Test callers cannot mark someone else's notification read."""
        notification = make_notification(self.owner_id)

        with self.assertRaises(NotificationAuthorizationError):
            self.engine.mark_read(self.other_id, notification.id)

        notification.refresh_from_db()
        self.assertFalse(notification.is_read)
        self.assertEqual(self._unread(), 1)

    def test_mark_all_read(self):
        """Test every unread notification is flipped and the counter zeroed."""
        make_notification(self.owner_id, minutes_ago=2)
        make_notification(self.owner_id, minutes_ago=1)
        other = make_notification(self.other_id, minutes_ago=1)

        self.assertEqual(self.engine.mark_all_read(self.owner_id), 2)

        self.assertEqual(self._unread(), 0)
        other.refresh_from_db()
        self.assertFalse(other.is_read)

    def test_mark_all_read_spares_notifications_after_snapshot(self):
        """Test a notification stamped after the snapshot stays unread."""
        make_notification(self.owner_id, minutes_ago=5)
        later = make_notification(self.owner_id, minutes_ago=-5)

        self.assertEqual(self.engine.mark_all_read(self.owner_id), 1)

        later.refresh_from_db()
        self.assertFalse(later.is_read)
        self.assertEqual(self._unread(), 1)

    def test_mark_all_read_repairs_drifted_counter(self):
        """Test mark-all leaves the counter equal to the real unread set."""
        make_notification(self.owner_id, minutes_ago=5)
        make_notification(self.owner_id, minutes_ago=-5)
        UnreadCounter.objects.filter(recipient_id=self.owner_id).update(count=9)

        self.engine.mark_all_read(self.owner_id)

        self.assertEqual(self._unread(), self._actual_unread())

    def test_delete_owned_notification(self):
        """Test deleting an owned unread notification."""
        notification = make_notification(self.owner_id)

        self.assertTrue(self.engine.delete(self.owner_id, notification.id))

        self.assertEqual(self._unread(), 0)

    def test_delete_missing_returns_false(self):
        """Test deleting an unknown notification is not an error."""
        self.assertFalse(self.engine.delete(self.owner_id, uuid4()))

    def test_delete_other_users_notification_is_forbidden(self):
        """Test callers cannot delete someone else's notification."""
        notification = make_notification(self.owner_id)

        with self.assertRaises(NotificationAuthorizationError):
            self.engine.delete(self.other_id, notification.id)

        self.assertTrue(Notification.objects.filter(pk=notification.id).exists())

    def test_counter_matches_after_mixed_operations(self):
        """Test the counter equals the unread set after every operation."""
        first = make_notification(self.owner_id, minutes_ago=3)
        second = make_notification(self.owner_id, minutes_ago=2)
        third = make_notification(self.owner_id, minutes_ago=1)

        steps = [
            lambda: self.engine.mark_read(self.owner_id, second.id),
            lambda: self.engine.delete(self.owner_id, second.id),
            lambda: self.engine.delete(self.owner_id, first.id),
            lambda: make_notification(self.owner_id),
            lambda: self.engine.mark_all_read(self.owner_id),
            lambda: self.engine.delete(self.owner_id, third.id),
        ]
        for step in steps:
            step()
            self.assertEqual(self._unread(), self._actual_unread())

    def test_concurrent_mark_read_decrements_once(self):
        """Test a mark-read that lands between the ownership check and the flip."""
        notification = make_notification(self.owner_id)
        make_notification(self.owner_id)
        engine = MutationEngine(store=NotificationStore())

        def owner_then_competing_mark(notification_id):
            mutation_engine.mark_read(self.owner_id, notification_id)
            return self.owner_id

        with patch.object(
            engine.store, "owner_of", side_effect=owner_then_competing_mark
        ):
            self.assertFalse(engine.mark_read(self.owner_id, notification.id))

        notification.refresh_from_db()
        self.assertTrue(notification.is_read)
        self.assertEqual(self._unread(), 1)
        self.assertEqual(self._unread(), self._actual_unread())

    def test_mark_read_of_notification_deleted_mid_flight_is_not_found(self):
        """Test a notification deleted after the ownership check is not found."""
        notification = make_notification(self.owner_id)
        engine = MutationEngine(store=NotificationStore())

        def owner_then_delete(notification_id):
            notification_store.delete(notification_id)
            return self.owner_id

        with patch.object(engine.store, "owner_of", side_effect=owner_then_delete):
            with self.assertRaises(NotificationNotFoundError):
                engine.mark_read(self.owner_id, notification.id)

        self.assertFalse(Notification.objects.filter(pk=notification.id).exists())
        self.assertEqual(self._unread(), 0)
