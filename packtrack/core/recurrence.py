"""Recurrence rules for reminders.

Computes the next firing instant of a reminder from its frequency rule and
a reference time. Everything here is pure: the caller supplies ``now`` and
the result carries ``now``'s tzinfo, so all calendar math happens in a
single zone.

Weekdays follow the convention stored on reminders: 0 = Sunday ... 6 = Saturday.
"""
from __future__ import annotations

import calendar
import datetime as dt
from enum import Enum
from typing import Any, Optional, Protocol

from packtrack.utils.exceptions import ValidationError


class Frequency(str, Enum):
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# Schedule field each frequency needs in addition to time_of_day
REQUIRED_FIELD = {
    Frequency.ONCE: "specific_date",
    Frequency.WEEKLY: "day_of_week",
    Frequency.MONTHLY: "day_of_month",
}
SCHEDULE_FIELDS = ("specific_date", "day_of_week", "day_of_month")


class Schedule(Protocol):
    """Attributes the calculator reads from a reminder."""

    frequency: Any
    day_of_week: Optional[int]
    day_of_month: Optional[int]
    time_of_day: Optional[dt.time]
    specific_date: Optional[dt.date]


def parse_frequency(value: Any) -> Frequency:
    try:
        return Frequency(value)
    except ValueError as exc:
        raise ValidationError(
            f"Unknown frequency: {value!r}",
            details={"frequency": f"must be one of {[f.value for f in Frequency]}"},
        ) from exc


def sunday_based_weekday(moment: dt.date) -> int:
    """Return 0 for Sunday through 6 for Saturday."""

    return moment.isoweekday() % 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def validate_schedule(schedule: Schedule) -> Frequency:
    """Check the frequency-conditional fields of a schedule.

    Raises ``ValidationError`` naming every problem at once; returns the
    parsed frequency otherwise.
    """

    frequency = parse_frequency(schedule.frequency)
    problems: dict[str, str] = {}

    if schedule.time_of_day is None:
        problems["time_of_day"] = "is required"

    required = REQUIRED_FIELD.get(frequency)
    if required and getattr(schedule, required) is None:
        problems[required] = f"is required for {frequency.value} reminders"

    if schedule.day_of_week is not None and not 0 <= schedule.day_of_week <= 6:
        problems["day_of_week"] = "must be between 0 and 6"
    if schedule.day_of_month is not None and not 1 <= schedule.day_of_month <= 31:
        problems["day_of_month"] = "must be between 1 and 31"

    if problems:
        raise ValidationError("Invalid reminder schedule", details=problems)
    return frequency


def _at(day: dt.date, time_of_day: dt.time, tz: Optional[dt.tzinfo]) -> dt.datetime:
    return dt.datetime(day.year, day.month, day.day, time_of_day.hour, time_of_day.minute, tzinfo=tz)


def _next_once(schedule: Schedule, now: dt.datetime) -> Optional[dt.datetime]:
    if schedule.specific_date is None:
        return None
    candidate = _at(schedule.specific_date, schedule.time_of_day, now.tzinfo)
    return candidate if candidate > now else None


def _next_daily(schedule: Schedule, now: dt.datetime) -> dt.datetime:
    candidate = _at(now.date(), schedule.time_of_day, now.tzinfo)
    if candidate <= now:
        candidate = _at(now.date() + dt.timedelta(days=1), schedule.time_of_day, now.tzinfo)
    return candidate


def _next_weekly(schedule: Schedule, now: dt.datetime) -> dt.datetime:
    today = now.date()
    delta_days = (schedule.day_of_week - sunday_based_weekday(today) + 7) % 7
    if delta_days == 0 and _at(today, schedule.time_of_day, now.tzinfo) <= now:
        delta_days = 7
    return _at(today + dt.timedelta(days=delta_days), schedule.time_of_day, now.tzinfo)


def _next_monthly(schedule: Schedule, now: dt.datetime) -> dt.datetime:
    year, month = now.year, now.month
    day = min(schedule.day_of_month, days_in_month(year, month))
    candidate = _at(dt.date(year, month, day), schedule.time_of_day, now.tzinfo)
    if candidate <= now:
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
        # Clamp again: the following month may be shorter or longer.
        day = min(schedule.day_of_month, days_in_month(year, month))
        candidate = _at(dt.date(year, month, day), schedule.time_of_day, now.tzinfo)
    return candidate


_CALCULATORS = {
    Frequency.ONCE: _next_once,
    Frequency.DAILY: _next_daily,
    Frequency.WEEKLY: _next_weekly,
    Frequency.MONTHLY: _next_monthly,
}


def compute_next_occurrence(schedule: Schedule, now: dt.datetime) -> Optional[dt.datetime]:
    """Return the next firing instant after ``now``, or None when terminal.

    Only one-shot reminders can be terminal. The schedule is validated first
    so malformed input never yields a silently wrong date.
    """

    frequency = validate_schedule(schedule)
    return _CALCULATORS[frequency](schedule, now)
