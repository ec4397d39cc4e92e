"""One pass over due reminders: notify, then advance."""
from __future__ import annotations

from dataclasses import asdict, dataclass

from loguru import logger
from sqlalchemy.orm import Session

from packtrack.core.clock import ClockSource, default_clock
from packtrack.repositories.reminders import ReminderRepository
from packtrack.services.notification_service import NotificationService
from packtrack.services.reminder_lifecycle import plan_advance
from packtrack.services.reminders import DueReminderScanner


@dataclass(slots=True)
class JobSummary:
    processed: int = 0
    notified: int = 0
    errors: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class ReminderProcessingJob:
    """Dispatch every due reminder and move it to its next occurrence.

    Reminders are handled one at a time on the calling thread, so the same
    reminder is never read and advanced concurrently. A failure for one
    reminder rolls back that reminder's work only; its schedule is left as
    it was so the next pass picks it up again.
    """

    def __init__(
        self,
        db: Session,
        notifications: NotificationService,
        *,
        clock: ClockSource | None = None,
        repository: ReminderRepository | None = None,
    ) -> None:
        self.db = db
        self.notifications = notifications
        self.clock = clock or default_clock()
        self.repository = repository or ReminderRepository(db)
        self.scanner = DueReminderScanner(self.repository)

    def run_due_pass(self) -> JobSummary:
        now = self.clock.now()
        summary = JobSummary()
        due = self.scanner.find_due(now)
        logger.info("Due reminders found", count=len(due), now=now.isoformat())

        seen = set()
        for reminder in due:
            if reminder.id in seen:
                continue
            seen.add(reminder.id)
            reminder_id = str(reminder.id)

            try:
                # A schedule that cannot advance must fail before anything is sent
                is_active, next_occurrence = plan_advance(reminder, now)
                report = self.notifications.dispatch_for_reminder(reminder)
                # Advance whatever the delivery outcome, or it would fire forever
                reminder.is_active, reminder.next_occurrence = is_active, next_occurrence
                self.repository.save(reminder)
            except Exception:
                self.db.rollback()
                summary.errors += 1
                logger.exception("Failed to process reminder", reminder_id=reminder_id)
                continue

            summary.processed += 1
            if report.success_count > 0:
                summary.notified += 1
            logger.info(
                "Reminder processed",
                reminder_id=reminder_id,
                sent=report.success_count,
                failed=report.failure_count,
                expired=len(report.expired_endpoints),
                next_occurrence=reminder.next_occurrence,
            )

        logger.info("Due reminder pass completed", **summary.as_dict())
        return summary
