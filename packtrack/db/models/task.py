"""Task types and completed task logs."""
import uuid

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from packtrack.db.base import Base
from packtrack.db.types import UTCDateTime


class TaskType(Base):
    """Kind of care task (feeding, walk, medication, ...)."""

    __tablename__ = "task_types"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    key = Column(String(50), unique=True, nullable=False)
    name = Column(String(255), nullable=False)


class TaskLog(Base):
    """A task someone completed, optionally on behalf of a reminder."""

    __tablename__ = "task_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    animal_id = Column(
        UUID(as_uuid=True), ForeignKey("animals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    task_type_id = Column(UUID(as_uuid=True), ForeignKey("task_types.id"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Logs outlive the reminder that produced them
    reminder_id = Column(
        UUID(as_uuid=True), ForeignKey("reminders.id", ondelete="SET NULL"), nullable=True, index=True
    )
    completed_at = Column(UTCDateTime, nullable=False)
    notes = Column(Text)

    reminder = relationship("Reminder", back_populates="task_logs")
