"""Tests for the per-thread correlation id."""

import uuid

from django.test import SimpleTestCase

from notifications.logging.context import (
    get_request_id,
    normalize_request_id,
    request_scope,
)


class TestRequestScope(SimpleTestCase):
    """Test suite for request_scope."""

    def test_binds_and_clears(self):
        """Test the id is bound inside the scope only."""
        with request_scope("req-1") as request_id:
            self.assertEqual(request_id, "req-1")
            self.assertEqual(get_request_id(), "req-1")

        self.assertIsNone(get_request_id())

    def test_generates_id_when_omitted(self):
        """Test a fresh UUID is bound when no id is given."""
        with request_scope() as request_id:
            uuid.UUID(request_id)

    def test_nested_scope_restores_outer_id(self):
        """Test leaving an inner scope restores the outer id."""
        with request_scope("outer"):
            with request_scope("inner"):
                self.assertEqual(get_request_id(), "inner")
            self.assertEqual(get_request_id(), "outer")

    def test_clears_on_error(self):
        """Test the id is unbound when the scope exits with an exception."""
        with self.assertRaises(RuntimeError):
            with request_scope("req-2"):
                raise RuntimeError("boom")

        self.assertIsNone(get_request_id())


class TestNormalizeRequestId(SimpleTestCase):
    """Test suite for normalize_request_id."""

    def test_keeps_safe_ids(self):
        """Test well-formed ids from upstream services are kept."""
        self.assertEqual(normalize_request_id("gw:1234-abcd.5"), "gw:1234-abcd.5")

    def test_replaces_missing_or_unsafe_ids(self):
        """Test missing and unsafe ids are replaced by UUIDs."""
        for candidate in (None, "", "a b", "x" * 129):
            uuid.UUID(normalize_request_id(candidate))
