"""Tests for management commands."""

from io import StringIO
from unittest.mock import patch
from uuid import uuid4

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from notifications.jobs.delivery_jobs import flush_digests_job
from notifications.models import UnreadCounter
from notifications.services.unread_counter import unread_counter_service
from tests.factories import make_notification


class TestReconcileUnreadCountsCommand(TestCase):
    """Test suite for the reconcile_unread_counts command."""

    def test_reconciles_drifted_counter(self):
        """Test the command repairs a drifted counter."""
        recipient_id = uuid4()
        make_notification(recipient_id)
        UnreadCounter.objects.filter(recipient_id=recipient_id).update(count=5)
        out = StringIO()

        call_command("reconcile_unread_counts", "--recipient", str(recipient_id), stdout=out)

        self.assertIn("Corrected 1", out.getvalue())
        self.assertEqual(unread_counter_service.get(recipient_id), 1)

    def test_invalid_recipient(self):
        """Test a malformed recipient id is rejected."""
        with self.assertRaises(CommandError):
            call_command("reconcile_unread_counts", "--recipient", "nope", stdout=StringIO())


class TestFlushDigestsCommand(TestCase):
    """Test suite for the flush_digests command."""

    @patch("notifications.management.commands.flush_digests.digest_scheduler")
    def test_flushes_due_batches(self, mock_scheduler):
        """Test the command flushes and reports."""
        mock_scheduler.due_batch_ids.return_value = [1, 2]
        mock_scheduler.flush_due.return_value = 2
        out = StringIO()

        call_command("flush_digests", stdout=out)

        mock_scheduler.flush_due.assert_called_once_with()
        self.assertIn("Flushed 2 digest(s)", out.getvalue())


class TestScheduleDigestFlushCommand(TestCase):
    """Test suite for the schedule_digest_flush command."""

    @patch("notifications.management.commands.schedule_digest_flush.django_rq.get_scheduler")
    def test_schedules_repeating_job(self, mock_get_scheduler):
        """Test the flush job is scheduled to repeat forever."""
        scheduler = mock_get_scheduler.return_value
        scheduler.__contains__.return_value = True

        call_command("schedule_digest_flush", stdout=StringIO())

        scheduler.cancel.assert_called_once_with("notification-hub:flush-digests")
        kwargs = scheduler.schedule.call_args.kwargs
        self.assertIs(kwargs["func"], flush_digests_job)
        self.assertEqual(kwargs["interval"], 3600)
        self.assertIsNone(kwargs["repeat"])
