"""Phrase normalization and classification.

Every reference phrase is classified into exactly one variant of a closed
set. Resolution dispatches on the variant, so adding a phrase class means
adding a variant here and a branch in the resolver, and anything that fits
no pattern lands on the explicit Unrecognized variant.
"""

import re
from dataclasses import dataclass
from datetime import date

from plan_editor.dates.constants import (
    ISO_DATE_RE,
    MAX_RANGE_DAYS,
    MAX_RANGE_WEEKS,
    WEEKDAY_ABBREVIATIONS,
    WEEKDAY_INDEX,
)

_WEEKDAY_ALTERNATION = "|".join(WEEKDAY_INDEX)

_NEXT_WEEKDAY_RE = re.compile(rf"^next ({_WEEKDAY_ALTERNATION})$")
_LAST_WEEKDAY_RE = re.compile(rf"^last ({_WEEKDAY_ALTERNATION})$")
_BARE_WEEKDAY_RE = re.compile(rf"^({_WEEKDAY_ALTERNATION})$")
_NEXT_N_DAYS_RE = re.compile(r"^next (\d{1,9}) days?$")
_NEXT_N_WEEKS_RE = re.compile(r"^next (\d{1,9}) weeks?$")


def normalize_phrase(phrase: str) -> str:
    """Normalize a reference phrase for matching.

    Lowercases, strips commas and apostrophes, collapses whitespace, expands
    weekday abbreviations and drops plural/possessive "s" from weekday names
    ("Tue's" -> "tuesday").
    """
    normalized = phrase.lower().strip()
    normalized = re.sub(r"['’]s\b", "", normalized)
    normalized = re.sub(r"[',’]", "", normalized)
    normalized = re.sub(r"\s+", " ", normalized)

    for abbrev, full in WEEKDAY_ABBREVIATIONS.items():
        normalized = re.sub(rf"\b{abbrev}\b", full, normalized)

    for weekday in WEEKDAY_INDEX:
        normalized = re.sub(rf"\b{weekday}s\b", weekday, normalized)

    return normalized.strip()


@dataclass(frozen=True)
class Today:
    pass


@dataclass(frozen=True)
class Yesterday:
    pass


@dataclass(frozen=True)
class Tomorrow:
    pass


@dataclass(frozen=True)
class NextWeekday:
    weekday: int


@dataclass(frozen=True)
class LastWeekday:
    weekday: int


@dataclass(frozen=True)
class BareWeekday:
    weekday: int


@dataclass(frozen=True)
class ExplicitDate:
    value: date


@dataclass(frozen=True)
class Unrecognized:
    text: str


DayPhrase = Today | Yesterday | Tomorrow | NextWeekday | LastWeekday | BareWeekday | ExplicitDate | Unrecognized


def classify_phrase(phrase: str) -> DayPhrase:
    """Classify a single-day reference phrase.

    Args:
        phrase: Raw phrase, e.g. "next Tue", "yesterday", "2025-02-18"

    Returns:
        The matching DayPhrase variant (Unrecognized if nothing matches)
    """
    normalized = normalize_phrase(phrase)

    if normalized == "today":
        return Today()
    if normalized == "yesterday":
        return Yesterday()
    if normalized == "tomorrow":
        return Tomorrow()

    if match := _NEXT_WEEKDAY_RE.match(normalized):
        return NextWeekday(WEEKDAY_INDEX[match.group(1)])
    if match := _LAST_WEEKDAY_RE.match(normalized):
        return LastWeekday(WEEKDAY_INDEX[match.group(1)])
    if match := _BARE_WEEKDAY_RE.match(normalized):
        return BareWeekday(WEEKDAY_INDEX[match.group(1)])

    if ISO_DATE_RE.match(normalized):
        try:
            return ExplicitDate(date.fromisoformat(normalized))
        except ValueError:
            return Unrecognized(normalized)

    return Unrecognized(normalized)


@dataclass(frozen=True)
class ThisWeekend:
    pass


@dataclass(frozen=True)
class NextWeekend:
    pass


@dataclass(frozen=True)
class ThisWeek:
    pass


@dataclass(frozen=True)
class NextWeek:
    pass


@dataclass(frozen=True)
class RestOfWeek:
    pass


@dataclass(frozen=True)
class NextDays:
    count: int


@dataclass(frozen=True)
class NextWeeks:
    count: int


RangePhrase = ThisWeekend | NextWeekend | ThisWeek | NextWeek | RestOfWeek | NextDays | NextWeeks | Unrecognized


def classify_range_phrase(phrase: str) -> RangePhrase:
    """Classify a multi-day reference phrase ("this weekend", "next 3 days")."""
    normalized = normalize_phrase(phrase)

    if normalized == "this weekend":
        return ThisWeekend()
    if normalized == "next weekend":
        return NextWeekend()
    if normalized == "this week":
        return ThisWeek()
    if normalized == "next week":
        return NextWeek()
    if normalized in {"rest of week", "rest of the week"}:
        return RestOfWeek()

    if match := _NEXT_N_DAYS_RE.match(normalized):
        count = int(match.group(1))
        return NextDays(count) if 0 < count <= MAX_RANGE_DAYS else Unrecognized(normalized)
    if match := _NEXT_N_WEEKS_RE.match(normalized):
        count = int(match.group(1))
        return NextWeeks(count) if 0 < count <= MAX_RANGE_WEEKS else Unrecognized(normalized)

    return Unrecognized(normalized)
