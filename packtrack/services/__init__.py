"""Service layer package."""

from packtrack.services.notification_service import DeliveryReport, NotificationService
from packtrack.services.push_transport import DeliveryResult, DeliveryTarget, WebPushTransport
from packtrack.services.reminder_job import JobSummary, ReminderProcessingJob
from packtrack.services.reminders import DueReminderScanner, ReminderService

__all__ = [
    "DeliveryReport",
    "DeliveryResult",
    "DeliveryTarget",
    "DueReminderScanner",
    "JobSummary",
    "NotificationService",
    "ReminderProcessingJob",
    "ReminderService",
    "WebPushTransport",
]
