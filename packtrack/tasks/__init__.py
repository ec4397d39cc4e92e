"""Celery tasks package."""

from packtrack.tasks import notifications, reminders

__all__ = ["notifications", "reminders"]
