"""Tests for multi-day range resolution."""

from datetime import date

import pytest

from plan_editor.dates.resolver import resolve_range
from plan_editor.dates.types import DateRange, UnrecognizedPhrase

WEDNESDAY = date(2025, 2, 12)
SATURDAY = date(2025, 2, 15)
SUNDAY = date(2025, 2, 16)


@pytest.mark.parametrize(
    ("phrase", "today", "start", "end"),
    [
        ("this weekend", WEDNESDAY, date(2025, 2, 15), date(2025, 2, 16)),
        ("this weekend", SATURDAY, date(2025, 2, 15), date(2025, 2, 16)),
        ("this weekend", SUNDAY, date(2025, 2, 15), date(2025, 2, 16)),
        ("next weekend", WEDNESDAY, date(2025, 2, 22), date(2025, 2, 23)),
        ("this week", WEDNESDAY, date(2025, 2, 10), date(2025, 2, 16)),
        ("next week", WEDNESDAY, date(2025, 2, 17), date(2025, 2, 23)),
        ("rest of the week", WEDNESDAY, date(2025, 2, 13), date(2025, 2, 16)),
        ("rest of week", SUNDAY, date(2025, 2, 17), date(2025, 2, 23)),
        ("next 3 days", WEDNESDAY, date(2025, 2, 13), date(2025, 2, 15)),
        ("next 1 day", WEDNESDAY, date(2025, 2, 13), date(2025, 2, 13)),
        ("next 2 weeks", WEDNESDAY, date(2025, 2, 13), date(2025, 2, 26)),
    ],
)
def test_range_bounds(phrase: str, today: date, start: date, end: date) -> None:
    """Each range phrase covers a consecutive run of dates."""
    result = resolve_range(phrase, today)

    assert isinstance(result, DateRange)
    assert result.start == start
    assert result.end == end
    assert [t.date for t in result.targets][0] == start
    assert [t.date for t in result.targets][-1] == end
    assert len(result.targets) == (end - start).days + 1


def test_range_display_label() -> None:
    """Range label names both ends."""
    result = resolve_range("This Weekend", WEDNESDAY)

    assert isinstance(result, DateRange)
    assert result.display_label == "Feb 15 to Feb 16"


def test_range_targets_carry_week_numbers() -> None:
    """With an anchor, each day of the range knows its rolling week."""
    result = resolve_range("next 3 days", WEDNESDAY, anchor=date(2025, 2, 9))

    assert isinstance(result, DateRange)
    assert [t.week_number for t in result.targets] == [1, 1, 1]


@pytest.mark.parametrize("phrase", ["next 0 days", "the weekend after", "tuesday"])
def test_unrecognized_ranges(phrase: str) -> None:
    """Zero counts and single-day phrases are not ranges."""
    assert isinstance(resolve_range(phrase, WEDNESDAY), UnrecognizedPhrase)


@pytest.mark.parametrize("phrase", ["next 367 days", "next 53 weeks", "next 999999999 days", "next 1234567890123 weeks"])
def test_oversized_ranges_are_unrecognized(phrase: str) -> None:
    """Counts beyond a year are refused rather than expanded."""
    assert isinstance(resolve_range(phrase, WEDNESDAY), UnrecognizedPhrase)


def test_largest_ranges_still_resolve() -> None:
    """The caps themselves are inclusive."""
    days = resolve_range("next 366 days", WEDNESDAY)
    weeks = resolve_range("next 52 weeks", WEDNESDAY)

    assert isinstance(days, DateRange)
    assert len(days.targets) == 366
    assert isinstance(weeks, DateRange)
    assert weeks.end == date(2026, 2, 11)
