"""SQLAlchemy-backed reminder repository."""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from packtrack.db.models.pack import Animal, pack_members
from packtrack.db.models.reminder import Reminder
from packtrack.db.models.task import TaskLog
from packtrack.utils.exceptions import RepositoryError


class ReminderRepository:
    """Reads and writes reminder rows. Never changes scheduling fields itself."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _with_context(self):
        return select(Reminder).options(
            joinedload(Reminder.animal).joinedload(Animal.pack),
            joinedload(Reminder.task_type),
        )

    def get(self, reminder_id: uuid.UUID) -> Reminder | None:
        stmt = self._with_context().where(Reminder.id == reminder_id)
        return self.db.scalars(stmt).first()

    def find_due(self, now: datetime) -> list[Reminder]:
        """Active reminders whose next occurrence is at or before ``now``."""

        stmt = (
            self._with_context()
            .where(Reminder.is_active.is_(True))
            .where(Reminder.next_occurrence.is_not(None))
            .where(Reminder.next_occurrence <= now)
            .order_by(Reminder.next_occurrence, Reminder.id)
        )
        try:
            return list(self.db.scalars(stmt).unique().all())
        except SQLAlchemyError as exc:
            raise RepositoryError("Failed to load due reminders", details={"error": str(exc)}) from exc

    def find_upcoming(self, user_id: uuid.UUID, within_days: int, now: datetime) -> list[Reminder]:
        """Active reminders in any of the user's packs due within the window."""

        stmt = (
            self._with_context()
            .join(Animal, Animal.id == Reminder.animal_id)
            .join(pack_members, pack_members.c.pack_id == Animal.pack_id)
            .where(pack_members.c.user_id == user_id)
            .where(Reminder.is_active.is_(True))
            .where(Reminder.next_occurrence >= now)
            .where(Reminder.next_occurrence <= now + timedelta(days=within_days))
            .order_by(Reminder.next_occurrence, Reminder.id)
        )
        try:
            return list(self.db.scalars(stmt).unique().all())
        except SQLAlchemyError as exc:
            raise RepositoryError("Failed to load upcoming reminders", details={"error": str(exc)}) from exc

    def for_pack(self, pack_id: uuid.UUID) -> list[Reminder]:
        """Active reminders for every animal of a pack."""

        stmt = (
            self._with_context()
            .join(Animal, Animal.id == Reminder.animal_id)
            .where(Animal.pack_id == pack_id)
            .where(Reminder.is_active.is_(True))
            .order_by(Reminder.next_occurrence, Reminder.id)
        )
        return list(self.db.scalars(stmt).unique().all())

    def save(self, reminder: Reminder) -> Reminder:
        try:
            self.db.add(reminder)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError("Failed to save reminder", details={"error": str(exc)}) from exc
        return reminder

    def delete(self, reminder: Reminder) -> None:
        """Delete a reminder, keeping its task logs with a null reference."""

        try:
            self.db.execute(
                update(TaskLog).where(TaskLog.reminder_id == reminder.id).values(reminder_id=None)
            )
            self.db.delete(reminder)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RepositoryError("Failed to delete reminder", details={"error": str(exc)}) from exc
