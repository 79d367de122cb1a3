"""Date Resolution Engine - phrases to concrete calendar dates."""

from plan_editor.dates.clock import FixedClock, ReferenceClock, SystemClock
from plan_editor.dates.extraction import extract_phrases, has_ambiguous_reference, requires_date_resolution
from plan_editor.dates.resolver import build_target, resolve, resolve_range
from plan_editor.dates.types import (
    DEFAULT_POLICY,
    Ambiguity,
    DatePhrase,
    DateRange,
    Relativity,
    ResolutionResult,
    ResolvedTarget,
    ResolverPolicy,
    UnrecognizedPhrase,
)
from plan_editor.dates.weeks import parse_weekday, resolve_week_weekday, week_number_for

__all__ = [
    "DEFAULT_POLICY",
    "Ambiguity",
    "DatePhrase",
    "DateRange",
    "FixedClock",
    "ReferenceClock",
    "Relativity",
    "ResolutionResult",
    "ResolvedTarget",
    "ResolverPolicy",
    "SystemClock",
    "UnrecognizedPhrase",
    "build_target",
    "extract_phrases",
    "has_ambiguous_reference",
    "parse_weekday",
    "requires_date_resolution",
    "resolve",
    "resolve_range",
    "resolve_week_weekday",
    "week_number_for",
]
