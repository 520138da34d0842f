"""Unit tests for project wiring: URLs, app config and entry points."""

import unittest
from unittest.mock import patch

from django.apps import apps
from django.test import SimpleTestCase
from django.urls import resolve

import run_local
import start_server
from notifications import views
from notifications.apps import NotificationsConfig


class TestURLPatterns(SimpleTestCase):
    """Tests for API URL routing."""

    def _view(self, url):
        return resolve(url).func.cls

    def test_collection_routes(self):
        """Test fixed paths resolve to their views."""
        prefix = "/api/v1/notification/notifications"
        self.assertIs(self._view(prefix), views.NotificationListView)
        self.assertIs(self._view(f"{prefix}/bulk"), views.NotificationBulkCreateView)
        self.assertIs(self._view(f"{prefix}/unread-count"), views.UnreadCountView)
        self.assertIs(self._view(f"{prefix}/mark-read"), views.MarkReadView)
        self.assertIs(self._view(f"{prefix}/preferences"), views.PreferenceView)

    def test_detail_route_captures_id(self):
        """Test the detail path passes the notification id through."""
        resolved = resolve("/api/v1/notification/notifications/abc-123")

        self.assertIs(resolved.func.cls, views.NotificationDetailView)
        self.assertEqual(resolved.kwargs["notification_id"], "abc-123")


class TestAppConfig(SimpleTestCase):
    """Tests for the notifications app registration."""

    def test_app_is_installed(self):
        """Test the notifications app is registered with Django."""
        self.assertIsInstance(apps.get_app_config("notifications"), NotificationsConfig)


class TestEntryPoints(unittest.TestCase):
    """Tests for the run_local and start_server scripts."""

    @patch("run_local.execute_from_command_line")
    def test_run_local_calls_runlocal(self, mock_execute):
        """Test run_local starts the runlocal command."""
        run_local.main()

        self.assertIn("runlocal", mock_execute.call_args.args[0])

    @patch("start_server.run")
    def test_start_server_targets_wsgi_app(self, mock_run):
        """Test start_server hands the WSGI application to gunicorn."""
        with patch("start_server.sys") as mock_sys:
            start_server.main()

            self.assertIn("notification_hub.wsgi:application", mock_sys.argv)
        mock_run.assert_called_once()
