"""Notification storage, querying, mutation and delivery routing."""
