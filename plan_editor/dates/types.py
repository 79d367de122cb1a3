"""Date resolution result types.

A phrase resolves to exactly one of:
- ResolvedTarget: one concrete calendar date
- Ambiguity: a question plus candidate dates (not an error)
- UnrecognizedPhrase: hard failure, the phrase must be rephrased
"""

import datetime as dt
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from plan_editor.dates.constants import DEFAULT_AMBIGUITY_FUTURE_WINDOW_DAYS, DEFAULT_AMBIGUITY_PAST_WINDOW_DAYS


class Relativity(StrEnum):
    PAST = "PAST"
    TODAY = "TODAY"
    FUTURE = "FUTURE"


class ResolvedTarget(BaseModel):
    """A phrase resolved to a single calendar date.

    Attributes:
        date: Resolved civil date
        weekday_name: Full English weekday name of ``date``
        relativity: PAST, TODAY or FUTURE relative to the reference today
        days_from_today: Signed whole-calendar-day offset from today
        display_label: Human label, e.g. "Tue, Feb 18 (in 6 days)"
        week_number: Rolling week of ``date`` relative to the plan anchor, if known
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["resolved"] = "resolved"
    date: dt.date
    weekday_name: str
    relativity: Relativity
    days_from_today: int
    display_label: str
    week_number: int | None = None


class Ambiguity(BaseModel):
    """A phrase that names more than one plausible date."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["ambiguous"] = "ambiguous"
    question: str
    candidates: list[ResolvedTarget]


class UnrecognizedPhrase(BaseModel):
    """A phrase that matches no known pattern."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unrecognized"] = "unrecognized"
    phrase: str
    message: str


ResolutionResult = ResolvedTarget | Ambiguity | UnrecognizedPhrase


class DateRange(BaseModel):
    """A multi-day phrase ("this weekend", "next 3 days") resolved to consecutive dates."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["range"] = "range"
    start: dt.date
    end: dt.date
    targets: list[ResolvedTarget]
    display_label: str


class DatePhrase(BaseModel):
    """A date reference found inside a free-text message."""

    model_config = ConfigDict(frozen=True)

    phrase: str
    normalized_phrase: str
    start_index: int
    end_index: int
    is_ambiguous: bool


class ResolverPolicy(BaseModel):
    """Thresholds for deciding when a bare weekday needs clarification.

    A bare weekday is ambiguous when its past occurrence is within
    ``past_window_days`` AND its future occurrence is within
    ``future_window_days``.
    """

    model_config = ConfigDict(frozen=True)

    past_window_days: int = DEFAULT_AMBIGUITY_PAST_WINDOW_DAYS
    future_window_days: int = DEFAULT_AMBIGUITY_FUTURE_WINDOW_DAYS


DEFAULT_POLICY = ResolverPolicy()
