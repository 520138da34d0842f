"""Notification hub Django project."""
