"""User database model."""
import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from packtrack.db.base import Base


class User(Base):
    """A person who belongs to packs and receives reminders."""

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255))

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    packs = relationship("Pack", secondary="pack_members", back_populates="members")
    push_subscriptions = relationship(
        "PushSubscription", back_populates="user", cascade="all, delete-orphan"
    )
