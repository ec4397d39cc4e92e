"""Reminder workflows backed by the database."""
from __future__ import annotations

import uuid
from datetime import datetime

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from packtrack.config import settings
from packtrack.core.clock import ClockSource, default_clock
from packtrack.db.models.reminder import Reminder
from packtrack.db.models.task import TaskLog
from packtrack.repositories.reminders import ReminderRepository
from packtrack.services import reminder_lifecycle
from packtrack.services.reminder_lifecycle import Fields
from packtrack.utils.exceptions import RepositoryError


class DueReminderScanner:
    """Read-only view over reminders that are due or coming up."""

    def __init__(self, repository: ReminderRepository) -> None:
        self.repository = repository

    def find_due(self, now: datetime) -> list[Reminder]:
        return self.repository.find_due(now)

    def find_upcoming(self, user_id: uuid.UUID, within_days: int, now: datetime) -> list[Reminder]:
        if within_days < 0:
            raise ValueError("within_days must not be negative")
        return self.repository.find_upcoming(user_id, within_days, now)


class ReminderService:
    """Create, edit, toggle, complete and delete reminders."""

    def __init__(
        self,
        db: Session,
        *,
        clock: ClockSource | None = None,
        repository: ReminderRepository | None = None,
    ) -> None:
        self.db = db
        self.clock = clock or default_clock()
        self.repository = repository or ReminderRepository(db)
        self.scanner = DueReminderScanner(self.repository)

    def create(self, fields: Fields) -> Reminder:
        reminder = reminder_lifecycle.create_reminder(fields, self.clock.now())
        self.repository.save(reminder)
        logger.info(
            "Reminder created",
            reminder_id=str(reminder.id),
            frequency=reminder.frequency,
            next_occurrence=reminder.next_occurrence,
        )
        return reminder

    def update(self, reminder: Reminder, fields: Fields) -> Reminder:
        reminder_lifecycle.update_reminder(reminder, fields, self.clock.now())
        return self.repository.save(reminder)

    def toggle(self, reminder: Reminder) -> Reminder:
        reminder_lifecycle.toggle_reminder(reminder, self.clock.now())
        return self.repository.save(reminder)

    def delete(self, reminder: Reminder) -> None:
        self.repository.delete(reminder)

    def complete(
        self,
        reminder: Reminder,
        *,
        user_id: uuid.UUID,
        completed_at: datetime | None = None,
        notes: str | None = None,
    ) -> TaskLog:
        """Log the reminder's task as done and advance the reminder."""

        now = self.clock.now()
        log = TaskLog(
            animal_id=reminder.animal_id,
            task_type_id=reminder.task_type_id,
            user_id=user_id,
            reminder_id=reminder.id,
            completed_at=completed_at or now,
            notes=notes,
        )
        reminder_lifecycle.advance_after_firing(reminder, now)
        try:
            self.db.add(log)
            self.db.add(reminder)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError("Failed to record task completion", details={"error": str(exc)}) from exc
        return log

    def upcoming(self, user_id: uuid.UUID, within_days: int | None = None) -> list[Reminder]:
        days = settings.UPCOMING_REMINDER_DAYS if within_days is None else within_days
        return self.scanner.find_upcoming(user_id, days, self.clock.now())

    def for_pack(self, pack_id: uuid.UUID) -> list[Reminder]:
        return self.repository.for_pack(pack_id)
