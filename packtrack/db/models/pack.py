"""Pack, membership and animal models."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Table
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from packtrack.db.base import Base

pack_members = Table(
    "pack_members",
    Base.metadata,
    Column("pack_id", UUID(as_uuid=True), ForeignKey("packs.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("is_admin", Boolean, nullable=False, default=False),
)


class Pack(Base):
    """A group of users caring for the same animals."""

    __tablename__ = "packs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    members = relationship("User", secondary=pack_members, back_populates="packs")
    animals = relationship("Animal", back_populates="pack", cascade="all, delete-orphan")


class Animal(Base):
    """An animal owned by a pack."""

    __tablename__ = "animals"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    pack_id = Column(
        UUID(as_uuid=True), ForeignKey("packs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    pack = relationship("Pack", back_populates="animals")
    reminders = relationship("Reminder", back_populates="animal", cascade="all, delete-orphan")
