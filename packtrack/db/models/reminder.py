"""Reminder database model."""
import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from packtrack.db.base import Base
from packtrack.db.types import UTCDateTime


class Reminder(Base):
    """A recurring or one-shot care obligation for one animal.

    Schedule fields are only read and written through
    ``packtrack.services.reminder_lifecycle``; the model holds no logic.
    """

    __tablename__ = "reminders"
    __table_args__ = (
        Index("ix_reminders_active_next", "is_active", "next_occurrence"),
        Index("ix_reminders_animal_active", "animal_id", "is_active"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    animal_id = Column(
        UUID(as_uuid=True), ForeignKey("animals.id", ondelete="CASCADE"), nullable=False
    )
    task_type_id = Column(
        UUID(as_uuid=True), ForeignKey("task_types.id", ondelete="CASCADE"), nullable=False
    )
    created_by = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    title = Column(String(255), nullable=False)
    description = Column(Text)

    frequency = Column(String(10), nullable=False, default="once")  # once, daily, weekly, monthly
    day_of_week = Column(Integer)  # 0 = Sunday
    day_of_month = Column(Integer)
    time_of_day = Column(Time, nullable=False)
    specific_date = Column(Date)

    is_active = Column(Boolean, nullable=False, default=True)
    next_occurrence = Column(UTCDateTime)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    animal = relationship("Animal", back_populates="reminders")
    task_type = relationship("TaskType")
    creator = relationship("User")
    task_logs = relationship("TaskLog", back_populates="reminder", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Reminder {self.id} {self.frequency} next={self.next_occurrence}>"
