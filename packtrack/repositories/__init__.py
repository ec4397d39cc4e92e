"""Persistence adapters for reminders and push subscriptions."""

from packtrack.repositories.push_subscriptions import PushSubscriptionRepository
from packtrack.repositories.reminders import ReminderRepository

__all__ = ["PushSubscriptionRepository", "ReminderRepository"]
