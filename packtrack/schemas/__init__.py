"""Pydantic schemas package."""

from packtrack.schemas.notification import (
    NotificationAction,
    NotificationPayload,
    PushSubscriptionCreate,
    SubscriptionKeys,
    UserNotification,
)
from packtrack.schemas.reminder import ReminderCreate, ReminderRead, ReminderUpdate

__all__ = [
    "NotificationAction",
    "NotificationPayload",
    "PushSubscriptionCreate",
    "SubscriptionKeys",
    "UserNotification",
    "ReminderCreate",
    "ReminderRead",
    "ReminderUpdate",
]
