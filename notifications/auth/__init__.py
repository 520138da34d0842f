"""Authentication for the notification hub API."""
