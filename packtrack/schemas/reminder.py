"""Pydantic models for reminder input and output."""
from __future__ import annotations

import uuid
from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from packtrack.core.recurrence import Frequency


class ReminderBase(BaseModel):
    """Shared reminder properties."""

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    frequency: Frequency
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    time_of_day: time
    specific_date: Optional[date] = None


class ReminderCreate(ReminderBase):
    """Schema for a new reminder."""

    animal_id: uuid.UUID
    task_type_id: uuid.UUID
    created_by: uuid.UUID


class ReminderUpdate(BaseModel):
    """Schema for partial reminder updates; only set fields are applied."""

    task_type_id: Optional[uuid.UUID] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    frequency: Optional[Frequency] = None
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    time_of_day: Optional[time] = None
    specific_date: Optional[date] = None


class ReminderRead(ReminderBase):
    """Reminder as returned to callers."""

    id: uuid.UUID
    animal_id: uuid.UUID
    task_type_id: uuid.UUID
    created_by: uuid.UUID
    is_active: bool
    next_occurrence: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)
