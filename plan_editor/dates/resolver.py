"""Date Resolution Engine.

Converts relative reference phrases ("last Tuesday", "tomorrow") into
concrete calendar dates against a caller-supplied ``today``. Pure and
deterministic: the wall clock is never read here.

All arithmetic is whole-calendar-day arithmetic on ``date`` objects, so
day boundaries and DST transitions cannot shift a result.
"""

from datetime import date, timedelta
from typing import assert_never

from plan_editor.dates.constants import DAYS_PER_WEEK, MONTH_NAMES_SHORT, WEEKDAY_NAMES, WEEKDAY_NAMES_SHORT
from plan_editor.dates.phrases import (
    BareWeekday,
    ExplicitDate,
    LastWeekday,
    NextDays,
    NextWeek,
    NextWeekday,
    NextWeekend,
    NextWeeks,
    RestOfWeek,
    ThisWeek,
    ThisWeekend,
    Today,
    Tomorrow,
    Unrecognized,
    Yesterday,
    classify_phrase,
    classify_range_phrase,
)
from plan_editor.dates.types import (
    DEFAULT_POLICY,
    Ambiguity,
    DateRange,
    Relativity,
    ResolutionResult,
    ResolvedTarget,
    ResolverPolicy,
    UnrecognizedPhrase,
)
from plan_editor.dates.weeks import week_number_for

SATURDAY = 5
SUNDAY = 6


def format_short_date(value: date) -> str:
    """Format as "Feb 12" independent of process locale."""
    return f"{MONTH_NAMES_SHORT[value.month - 1]} {value.day}"


def _display_label(value: date, relativity: Relativity, days_from_today: int) -> str:
    formatted = format_short_date(value)
    short_weekday = WEEKDAY_NAMES_SHORT[value.weekday()]

    if relativity == Relativity.TODAY:
        return f"Today, {formatted}"
    if relativity == Relativity.PAST:
        if days_from_today == -1:
            return f"Yesterday, {formatted}"
        return f"{short_weekday}, {formatted} ({abs(days_from_today)} days ago)"
    if days_from_today == 1:
        return f"Tomorrow, {formatted}"
    return f"{short_weekday}, {formatted} (in {days_from_today} days)"


def build_target(value: date, today: date, anchor: date | None = None) -> ResolvedTarget:
    """Describe ``value`` relative to ``today`` (and to the plan anchor, if given)."""
    days_from_today = (value - today).days

    if days_from_today < 0:
        relativity = Relativity.PAST
    elif days_from_today == 0:
        relativity = Relativity.TODAY
    else:
        relativity = Relativity.FUTURE

    return ResolvedTarget(
        date=value,
        weekday_name=WEEKDAY_NAMES[value.weekday()],
        relativity=relativity,
        days_from_today=days_from_today,
        display_label=_display_label(value, relativity, days_from_today),
        week_number=week_number_for(value, anchor) if anchor is not None else None,
    )


def next_weekday(today: date, weekday: int) -> date:
    """Soonest strictly-future occurrence of ``weekday``."""
    days_ahead = (weekday - today.weekday()) % DAYS_PER_WEEK
    if days_ahead == 0:
        days_ahead = DAYS_PER_WEEK
    return today + timedelta(days=days_ahead)


def last_weekday(today: date, weekday: int) -> date:
    """Most recent strictly-past occurrence of ``weekday``."""
    days_back = (today.weekday() - weekday) % DAYS_PER_WEEK
    if days_back == 0:
        days_back = DAYS_PER_WEEK
    return today - timedelta(days=days_back)


def _resolve_bare_weekday(
    weekday: int,
    today: date,
    anchor: date | None,
    policy: ResolverPolicy,
) -> ResolvedTarget | Ambiguity:
    past = build_target(last_weekday(today, weekday), today, anchor)
    future = build_target(next_weekday(today, weekday), today, anchor)
    ambiguity = Ambiguity(
        question=f"Which {WEEKDAY_NAMES[weekday]} did you mean?",
        candidates=[past, future],
    )

    if today.weekday() == weekday:
        return ambiguity

    if (
        abs(past.days_from_today) <= policy.past_window_days
        and abs(future.days_from_today) <= policy.future_window_days
    ):
        return ambiguity

    if abs(past.days_from_today) < abs(future.days_from_today):
        return past
    return future


def resolve(
    phrase: str,
    today: date,
    anchor: date | None = None,
    *,
    policy: ResolverPolicy = DEFAULT_POLICY,
) -> ResolutionResult:
    """Resolve a reference phrase to a date, an ambiguity, or a hard failure.

    Args:
        phrase: Reference phrase ("today", "next Monday", "Tuesday", ...)
        today: Reference date supplied by a trusted clock
        anchor: Optional plan anchor date, used to fill ``week_number``
        policy: Ambiguity thresholds for bare weekdays

    Returns:
        ResolvedTarget, Ambiguity, or UnrecognizedPhrase
    """
    classified = classify_phrase(phrase)

    if isinstance(classified, Today):
        return build_target(today, today, anchor)
    if isinstance(classified, Yesterday):
        return build_target(today - timedelta(days=1), today, anchor)
    if isinstance(classified, Tomorrow):
        return build_target(today + timedelta(days=1), today, anchor)
    if isinstance(classified, NextWeekday):
        return build_target(next_weekday(today, classified.weekday), today, anchor)
    if isinstance(classified, LastWeekday):
        return build_target(last_weekday(today, classified.weekday), today, anchor)
    if isinstance(classified, BareWeekday):
        return _resolve_bare_weekday(classified.weekday, today, anchor, policy)
    if isinstance(classified, ExplicitDate):
        return build_target(classified.value, today, anchor)
    if isinstance(classified, Unrecognized):
        return UnrecognizedPhrase(
            phrase=phrase,
            message=(
                f'Could not understand the date "{phrase}". Please be more specific '
                '(e.g., "next Tuesday", "last Friday", "tomorrow").'
            ),
        )
    assert_never(classified)


def _date_range(start: date, end: date, today: date, anchor: date | None) -> DateRange:
    span = (end - start).days
    targets = [build_target(start + timedelta(days=offset), today, anchor) for offset in range(span + 1)]
    return DateRange(
        start=start,
        end=end,
        targets=targets,
        display_label=f"{format_short_date(start)} to {format_short_date(end)}",
    )


def resolve_range(phrase: str, today: date, anchor: date | None = None) -> DateRange | UnrecognizedPhrase:
    """Resolve a multi-day phrase to a consecutive run of dates.

    Calendar-week phrases ("this week", "next week") use Monday-Sunday
    weeks, since that is what a user means by them; plan weeks are
    anchor-relative and handled by ``resolve_week_weekday``.
    """
    classified = classify_range_phrase(phrase)
    weekday = today.weekday()
    monday = today - timedelta(days=weekday)

    if isinstance(classified, ThisWeekend):
        if weekday == SATURDAY:
            return _date_range(today, today + timedelta(days=1), today, anchor)
        if weekday == SUNDAY:
            return _date_range(today - timedelta(days=1), today, today, anchor)
        saturday = today + timedelta(days=SATURDAY - weekday)
        return _date_range(saturday, saturday + timedelta(days=1), today, anchor)
    if isinstance(classified, NextWeekend):
        saturday = monday + timedelta(days=SATURDAY + DAYS_PER_WEEK)
        return _date_range(saturday, saturday + timedelta(days=1), today, anchor)
    if isinstance(classified, ThisWeek):
        return _date_range(monday, monday + timedelta(days=SUNDAY), today, anchor)
    if isinstance(classified, NextWeek):
        next_monday = monday + timedelta(days=DAYS_PER_WEEK)
        return _date_range(next_monday, next_monday + timedelta(days=SUNDAY), today, anchor)
    if isinstance(classified, RestOfWeek):
        return _date_range(today + timedelta(days=1), next_weekday(today, SUNDAY), today, anchor)
    if isinstance(classified, NextDays):
        return _date_range(today + timedelta(days=1), today + timedelta(days=classified.count), today, anchor)
    if isinstance(classified, NextWeeks):
        return _date_range(
            today + timedelta(days=1),
            today + timedelta(days=classified.count * DAYS_PER_WEEK),
            today,
            anchor,
        )
    if isinstance(classified, Unrecognized):
        return UnrecognizedPhrase(
            phrase=phrase,
            message=f'Could not understand the date range "{phrase}".',
        )
    assert_never(classified)
