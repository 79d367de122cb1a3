"""Reference clock - the only place "today" comes from.

The resolver and validator never read the wall clock; callers obtain
``today`` from a ReferenceClock and pass it in.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Protocol
from zoneinfo import ZoneInfo


class ReferenceClock(Protocol):
    def today(self) -> date: ...

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock, with "today" taken as the civil date in the plan timezone."""

    def __init__(self, timezone_name: str = "UTC") -> None:
        self.tz = ZoneInfo(timezone_name)

    def today(self) -> date:
        return datetime.now(self.tz).date()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Frozen clock for tests and deterministic replays."""

    def __init__(self, today: date, now: datetime | None = None) -> None:
        self._today = today
        self._now = now or datetime(today.year, today.month, today.day, 12, 0, tzinfo=timezone.utc)

    def today(self) -> date:
        return self._today

    def now(self) -> datetime:
        return self._now

    def advance(self, **delta: float) -> None:
        """Move ``now`` forward, e.g. ``clock.advance(minutes=16)``."""
        self._now = self._now + timedelta(**delta)
