"""Unit tests for SecurityContextMiddleware."""

import unittest

from django.http import HttpRequest, HttpResponse

from notifications.auth.context import get_current_user, set_current_user
from notifications.auth.oauth2 import OAuth2User
from notifications.middleware.security_context import SecurityContextMiddleware


class TestSecurityContextMiddleware(unittest.TestCase):
    """Test cases for SecurityContextMiddleware."""

    def setUp(self):
        """Set up test fixtures."""
        self.user = OAuth2User(user_id="u1", client_id="c", scopes=["notification:user"])
        self.seen_users = []

        def get_response(_request):
            self.seen_users.append(get_current_user())
            set_current_user(self.user)
            return HttpResponse("OK")

        self.middleware = SecurityContextMiddleware(get_response)

    def test_stale_user_is_cleared_before_request(self):
        """Test a user left over from a previous request is not visible."""
        set_current_user(self.user)

        self.middleware(HttpRequest())

        self.assertEqual(self.seen_users, [None])

    def test_user_is_cleared_after_request(self):
        """Test the user published during the request is cleared afterwards."""
        self.middleware(HttpRequest())

        self.assertIsNone(get_current_user())
