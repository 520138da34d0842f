"""Tests for the per-thread caller context."""

import threading
from uuid import uuid4

from django.test import SimpleTestCase
from rest_framework.exceptions import AuthenticationFailed

from notifications.auth.context import (
    clear_current_user,
    get_current_user,
    require_caller_id,
    set_current_user,
)
from notifications.auth.oauth2 import OAuth2User


class TestSecurityContext(SimpleTestCase):
    """Test suite for the caller context helpers."""

    def tearDown(self):
        """Clean up after test."""
        clear_current_user()

    def test_require_caller_id_returns_uuid(self):
        """Test the caller's subject is returned as a UUID."""
        user_id = uuid4()
        set_current_user(OAuth2User(user_id=str(user_id), client_id="c", scopes=[]))

        self.assertEqual(require_caller_id(), user_id)

    def test_require_caller_id_without_caller(self):
        """Test an unauthenticated context is rejected."""
        with self.assertRaises(AuthenticationFailed):
            require_caller_id()

    def test_require_caller_id_rejects_service_subject(self):
        """Test a token subject that is not a user id is rejected."""
        set_current_user(OAuth2User(user_id="recipe-service", client_id="c", scopes=[]))

        with self.assertRaises(AuthenticationFailed):
            require_caller_id()

    def test_context_is_per_thread(self):
        """Test a caller bound in one thread is invisible to another."""
        set_current_user(OAuth2User(user_id=str(uuid4()), client_id="c", scopes=[]))
        seen = []

        thread = threading.Thread(target=lambda: seen.append(get_current_user()))
        thread.start()
        thread.join()

        self.assertEqual(seen, [None])
