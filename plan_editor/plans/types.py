"""Canonical schedule types.

The CanonicalSchedule is the single source of truth for a plan: an ordered,
date-keyed array of DayRecords plus an optimistic-concurrency version.

Invariants:
- ``date`` values are unique within a schedule
- ``days`` is sorted ascending by date
- a DayRecord with ``completed=True`` is never changed by a plan edit
- ``version`` increments exactly once per committed edit
"""

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from plan_editor.dates.weeks import week_number_for


class Category(StrEnum):
    REST = "REST"
    ACTIVE = "ACTIVE"
    EVENT = "EVENT"


class DayRecord(BaseModel):
    """One calendar date's schedule entry.

    Attributes:
        date: Civil date, unique key within a schedule
        label: Description of the scheduled activity ("Easy 5 mi")
        annotations: Ordered free-text notes
        category: REST, ACTIVE or EVENT
        completed: Once true, the record is immutable to plan edits
        tag: Optional classification (e.g. "calibration")
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    label: str
    annotations: list[str] = Field(default_factory=list)
    category: Category = Category.ACTIVE
    completed: bool = False
    tag: str | None = None


class CanonicalSchedule(BaseModel):
    """Ordered, date-keyed day records plus the concurrency version."""

    model_config = ConfigDict(frozen=True)

    plan_id: str
    anchor_date: dt.date
    version: int = Field(default=1, ge=1)
    days: list[DayRecord] = Field(default_factory=list)

    @field_validator("days")
    @classmethod
    def validate_days(cls, days: list[DayRecord]) -> list[DayRecord]:
        """Reject duplicate dates and keep days sorted ascending."""
        seen: set[dt.date] = set()
        duplicates: set[dt.date] = set()
        for day in days:
            if day.date in seen:
                duplicates.add(day.date)
            seen.add(day.date)
        if duplicates:
            raise ValueError(f"Duplicate dates in schedule: {', '.join(d.isoformat() for d in sorted(duplicates))}")
        return sorted(days, key=lambda d: d.date)

    def get_day(self, target: dt.date) -> DayRecord | None:
        for day in self.days:
            if day.date == target:
                return day
        return None

    def date_set(self) -> set[dt.date]:
        return {day.date for day in self.days}

    def week_number_for(self, target: dt.date) -> int | None:
        """Rolling week (1-based, anchor-relative) containing ``target``."""
        return week_number_for(target, self.anchor_date)
