"""Rolling-week arithmetic.

Week 1 starts exactly on the plan anchor date, whatever weekday that is.
Week n covers ``anchor + (n - 1) * 7`` through ``anchor + (n - 1) * 7 + 6``.
This is NOT a Monday-Sunday calendar week.
"""

from datetime import date, timedelta

from plan_editor.dates.constants import DAYS_PER_WEEK, WEEKDAY_ABBREVIATIONS, WEEKDAY_INDEX


def parse_weekday(name: str) -> int | None:
    """Parse a weekday name ("Tue", "tuesday", "Thurs") to its index (Monday=0).

    Returns:
        Weekday index, or None for an unknown name
    """
    key = name.strip().lower().rstrip(".")
    key = WEEKDAY_ABBREVIATIONS.get(key, key)
    return WEEKDAY_INDEX.get(key)


def week_start(week_number: int, anchor: date) -> date:
    """First date of a rolling week."""
    return anchor + timedelta(days=(week_number - 1) * DAYS_PER_WEEK)


def resolve_week_weekday(week_number: int, weekday_name: str, anchor: date) -> date | None:
    """Resolve a (week, weekday) pair to a calendar date.

    Scans the seven dates of the rolling week and returns the one whose
    actual weekday matches. For a Wednesday anchor, (1, "Tue") is
    ``anchor + 6`` days, not ``anchor + 1``.

    Args:
        week_number: 1-based rolling week number
        weekday_name: Weekday name, full or abbreviated
        anchor: Plan anchor date (first day of week 1)

    Returns:
        The matching date, or None if the week number or weekday is invalid
        or the week falls outside the representable calendar
    """
    if week_number < 1:
        return None

    weekday = parse_weekday(weekday_name)
    if weekday is None:
        return None

    try:
        start = week_start(week_number, anchor)
        for offset in range(DAYS_PER_WEEK):
            candidate = start + timedelta(days=offset)
            if candidate.weekday() == weekday:
                return candidate
    except OverflowError:
        return None
    return None


def week_number_for(target: date, anchor: date) -> int | None:
    """Rolling week containing ``target`` (None before the anchor)."""
    days_since_anchor = (target - anchor).days
    if days_since_anchor < 0:
        return None
    return days_since_anchor // DAYS_PER_WEEK + 1
