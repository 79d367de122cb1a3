"""Plans module - canonical schedule and plan edit engines."""

from plan_editor.plans.types import CanonicalSchedule, Category, DayRecord

__all__ = [
    "CanonicalSchedule",
    "Category",
    "DayRecord",
]
