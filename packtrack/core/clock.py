"""Clock sources used by reminder scheduling.

Every scheduling component receives "now" from one of these objects instead
of reading the wall clock itself, so calendar behaviour can be replayed at
any instant in tests or from the CLI.
"""
from __future__ import annotations

import threading
from datetime import datetime, timedelta, tzinfo
from typing import Protocol

from packtrack.config import settings


class ClockSource(Protocol):
    """Anything that can tell the current instant."""

    def now(self) -> datetime:  # pragma: no cover - protocol
        ...


class SystemClock:
    """Wall clock expressed in the deployment's reminder time zone."""

    def __init__(self, tz: tzinfo | None = None) -> None:
        self.tz = tz or settings.reminder_tz

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FrozenClock:
    """Clock pinned to a fixed instant that only moves when told to."""

    def __init__(self, at: datetime, tz: tzinfo | None = None) -> None:
        self.tz = tz or settings.reminder_tz
        self._lock = threading.Lock()
        self._now = self._localize(at)

    def _localize(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self.tz)
        return value.astimezone(self.tz)

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, at: datetime) -> None:
        with self._lock:
            self._now = self._localize(at)

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward and return the new instant."""

        if delta < timedelta(0):
            raise ValueError("delta must not be negative")
        with self._lock:
            self._now = self._now + delta
            return self._now


def default_clock() -> ClockSource:
    return SystemClock()
