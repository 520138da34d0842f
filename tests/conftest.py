"""Pytest configuration and shared fixtures."""

import os

from django.test import Client

import pytest

# Configure Django settings for tests
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "notification_hub.settings_test")


@pytest.fixture
def api_client():
    """Provide Django test client."""
    return Client()
