"""Unit tests for the envelope exception handler."""

import unittest
from unittest.mock import Mock, patch
from uuid import uuid4

from pydantic import ValidationError
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, NotFound, PermissionDenied
from rest_framework.views import APIView

from notifications.exceptions import (
    NotificationAuthorizationError,
    NotificationNotFoundError,
    NotificationValidationError,
    TransientStoreError,
)
from notifications.exceptions.handlers import custom_exception_handler
from notifications.schemas.notification import ListNotificationsQuery


class TestCustomExceptionHandler(unittest.TestCase):
    """Test cases for custom exception handler."""

    def setUp(self):
        """Set up test fixtures."""
        self.mock_request = Mock()
        self.mock_request.path = "/api/v1/notification/notifications"
        self.mock_request.method = "GET"

        self.mock_view = Mock(spec=APIView)
        self.mock_view.request = self.mock_request

        self.context = {"view": self.mock_view, "request": self.mock_request}

        patcher = patch(
            "notifications.exceptions.handlers.get_request_id",
            return_value="test-request-id",
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def _handle(self, exc):
        return custom_exception_handler(exc, self.context)

    def test_not_found_envelope(self):
        """Test NotificationNotFoundError maps to a 404 envelope."""
        response = self._handle(NotificationNotFoundError(uuid4()))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["error"]["code"], "not_found")
        self.assertEqual(response.data["error"]["requestId"], "test-request-id")
        self.assertEqual(response["X-Request-ID"], "test-request-id")

    def test_authorization_error_is_distinct_from_not_found(self):
        """Test ownership violations map to 403, not 404."""
        response = self._handle(NotificationAuthorizationError(uuid4(), uuid4()))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"]["code"], "forbidden")

    def test_validation_error(self):
        """Test NotificationValidationError maps to 400."""
        response = self._handle(NotificationValidationError("bad page"))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "validation_error")

    def test_transient_store_error_sets_retry_after(self):
        """Test store outages map to 503 with a Retry-After header."""
        response = self._handle(TransientStoreError())

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data["error"]["code"], "store_unavailable")
        self.assertEqual(response["Retry-After"], "1")

    def test_pydantic_validation_error(self):
        """Test pydantic validation errors map to 400 with details."""
        try:
            ListNotificationsQuery.model_validate({"page": 0})
        except ValidationError as exc:
            response = self._handle(exc)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "validation_error")
        self.assertTrue(response.data["error"]["details"])

    def test_drf_errors_are_wrapped(self):
        """Test DRF's own exceptions use the same envelope."""
        cases = [
            (NotAuthenticated(), status.HTTP_401_UNAUTHORIZED, "unauthorized"),
            (PermissionDenied("nope"), status.HTTP_403_FORBIDDEN, "forbidden"),
            (NotFound(), status.HTTP_404_NOT_FOUND, "not_found"),
        ]
        for exc, expected_status, expected_code in cases:
            with self.subTest(exc=type(exc).__name__):
                response = self._handle(exc)

                self.assertEqual(response.status_code, expected_status)
                self.assertFalse(response.data["success"])
                self.assertEqual(response.data["error"]["code"], expected_code)

    def test_unexpected_exception_is_internal_error(self):
        """Test anything else becomes a 500 without leaking details."""
        response = self._handle(RuntimeError("database exploded"))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"]["code"], "internal_error")
        self.assertNotIn("exploded", response.data["error"]["message"])
