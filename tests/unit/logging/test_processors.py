"""Tests for the structlog processors."""

from unittest.mock import Mock, patch

from django.test import SimpleTestCase

from notifications.auth.context import clear_current_user, set_current_user
from notifications.auth.oauth2 import OAuth2User
from notifications.logging import clear_request_id, set_request_id
from notifications.logging.processors import (
    add_job_context,
    add_process_info,
    add_request_context,
    add_service_context,
    console_renderer,
)


class TestProcessors(SimpleTestCase):
    """Test suite for the custom processors."""

    def tearDown(self):
        """Clean up after test."""
        clear_request_id()
        clear_current_user()

    def test_request_context_adds_request_and_caller(self):
        """Test request id and caller id are attached when known."""
        set_request_id("req-1")
        set_current_user(OAuth2User(user_id="user-1", client_id="c", scopes=[]))

        event = add_request_context(None, "info", {"event": "x"})

        self.assertEqual(event["request_id"], "req-1")
        self.assertEqual(event["caller_id"], "user-1")

    def test_request_context_outside_request(self):
        """Test nothing is added outside a request."""
        event = add_request_context(None, "info", {"event": "x"})

        self.assertNotIn("request_id", event)
        self.assertNotIn("caller_id", event)

    @patch("notifications.logging.processors.get_current_job")
    def test_job_context_inside_worker(self, mock_get_current_job):
        """Test worker log events carry the RQ job id and function."""
        mock_get_current_job.return_value = Mock(
            id="job-1", func_name="notifications.jobs.delivery_jobs.flush_digests_job"
        )

        event = add_job_context(None, "info", {})

        self.assertEqual(event["job_id"], "job-1")
        self.assertTrue(event["job"].endswith("flush_digests_job"))

    @patch("notifications.logging.processors.get_current_job", return_value=None)
    def test_job_context_outside_worker(self, _mock_get_current_job):
        """Test nothing is added outside a worker."""
        self.assertEqual(add_job_context(None, "info", {}), {})

    def test_service_and_process_info(self):
        """Test service metadata and process ids are attached."""
        event = add_process_info(None, "info", add_service_context(None, "info", {}))

        self.assertEqual(event["service_name"], "notification-hub")
        self.assertIn("process_id", event)
        self.assertIn("thread_id", event)

    def test_console_renderer_includes_extra_fields(self):
        """Test the console line carries the event and its extra fields."""
        line = console_renderer(
            None,
            "info",
            {
                "level": "info",
                "event": "delivery_sent",
                "request_id": "req-2",
                "delivery_id": 7,
            },
        )

        self.assertIn("delivery_sent", line)
        self.assertIn("req-2", line)
        self.assertIn("delivery_id=7", line)

    def test_console_renderer_lists_correlation_keys_first(self):
        """Test correlation ids come before other context on the console."""
        line = console_renderer(
            None,
            "info",
            {"event": "delivery_failed", "error": "timeout", "delivery_id": 3},
        )

        self.assertLess(line.index("delivery_id=3"), line.index("error=timeout"))
