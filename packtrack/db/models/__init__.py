"""Database models package."""
from packtrack.db.models.user import User
from packtrack.db.models.pack import Animal, Pack, pack_members
from packtrack.db.models.task import TaskLog, TaskType
from packtrack.db.models.reminder import Reminder
from packtrack.db.models.push_subscription import PushSubscription

__all__ = [
    "User",
    "Pack",
    "pack_members",
    "Animal",
    "TaskType",
    "TaskLog",
    "Reminder",
    "PushSubscription",
]
