"""Celery task that processes due reminders."""
from __future__ import annotations

from loguru import logger

from packtrack.celery_app import celery_app
from packtrack.db.session import SessionLocal
from packtrack.services.notification_service import NotificationService
from packtrack.services.reminder_job import ReminderProcessingJob


@celery_app.task(name="packtrack.tasks.reminders.process_due_reminders")
def process_due_reminders() -> dict[str, int]:
    """Notify pack members about due reminders and advance them."""

    db = SessionLocal()
    try:
        job = ReminderProcessingJob(db, NotificationService(db))
        summary = job.run_due_pass()
        if summary.errors:
            logger.warning("Some reminders could not be processed", errors=summary.errors)
        return summary.as_dict()
    finally:
        db.close()
