"""Mutation rules for reminders.

These functions only touch attributes of the reminder they are given; they
never open a session or read the clock. Callers pass ``now`` explicitly and
persist the result themselves.
"""
from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from packtrack.core.recurrence import (
    REQUIRED_FIELD,
    SCHEDULE_FIELDS,
    Frequency,
    compute_next_occurrence,
    parse_frequency,
    validate_schedule,
)
from packtrack.db.models.reminder import Reminder

Fields = Union[BaseModel, Mapping[str, Any]]

EDITABLE_FIELDS = frozenset(
    {
        "animal_id",
        "task_type_id",
        "created_by",
        "title",
        "description",
        "frequency",
        "day_of_week",
        "day_of_month",
        "time_of_day",
        "specific_date",
    }
)


def _as_dict(fields: Fields, *, only_set: bool) -> dict[str, Any]:
    if isinstance(fields, BaseModel):
        data = fields.model_dump(exclude_unset=only_set)
    else:
        data = dict(fields)
    if isinstance(data.get("frequency"), Frequency):
        data["frequency"] = data["frequency"].value
    return {key: value for key, value in data.items() if key in EDITABLE_FIELDS}


def _normalize_schedule(reminder: Reminder) -> None:
    """Clear schedule fields the reminder's frequency does not use."""

    frequency = parse_frequency(reminder.frequency)
    reminder.frequency = frequency.value
    keep = REQUIRED_FIELD.get(frequency)
    for field in SCHEDULE_FIELDS:
        if field != keep:
            setattr(reminder, field, None)
    if reminder.time_of_day is not None:
        reminder.time_of_day = reminder.time_of_day.replace(second=0, microsecond=0, tzinfo=None)


def _refresh(reminder: Reminder, now: datetime) -> None:
    reminder.next_occurrence = compute_next_occurrence(reminder, now)


def create_reminder(fields: Fields, now: datetime) -> Reminder:
    """Build a new active reminder with its first occurrence computed."""

    reminder = Reminder(**_as_dict(fields, only_set=False))
    validate_schedule(reminder)
    _normalize_schedule(reminder)
    reminder.is_active = True
    _refresh(reminder, now)
    return reminder


def update_reminder(reminder: Reminder, fields: Fields, now: datetime) -> Reminder:
    """Apply edits and recompute the schedule.

    The next occurrence is recomputed on every update, including edits that
    only touch the title or description.
    """

    changes = _as_dict(fields, only_set=True)
    schedule = {field: getattr(reminder, field) for field in ("frequency", "time_of_day", *SCHEDULE_FIELDS)}
    schedule.update((key, value) for key, value in changes.items() if key in schedule)
    # Nothing on the reminder changes unless the merged schedule is valid
    validate_schedule(SimpleNamespace(**schedule))

    for key, value in changes.items():
        setattr(reminder, key, value)
    _normalize_schedule(reminder)
    _refresh(reminder, now)
    return reminder


def toggle_reminder(reminder: Reminder, now: datetime) -> Reminder:
    """Flip ``is_active``; re-activation recomputes the next occurrence."""

    reminder.is_active = not reminder.is_active
    if reminder.is_active:
        _refresh(reminder, now)
    return reminder


def plan_advance(reminder: Reminder, now: datetime) -> tuple[bool, Optional[datetime]]:
    """Return the (is_active, next_occurrence) the reminder moves to after firing.

    Raises ``ValidationError`` for a schedule that cannot be advanced, without
    touching the reminder.
    """

    if parse_frequency(reminder.frequency) is Frequency.ONCE:
        return False, None
    return reminder.is_active, compute_next_occurrence(reminder, now)


def advance_after_firing(reminder: Reminder, now: datetime) -> Reminder:
    """Move a reminder past the occurrence that just fired or was completed."""

    reminder.is_active, reminder.next_occurrence = plan_advance(reminder, now)
    return reminder
