"""Extract date references from a free-text user message.

Used by the presentation layer to decide which phrases to send through
``resolve`` and whether the message needs a clarification round first.
"""

import re

from plan_editor.dates.phrases import normalize_phrase
from plan_editor.dates.types import DatePhrase

_WEEKDAY_FULL = "(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday)"
_WEEKDAY_ABBREV = "(?:mon|tues|tue|wed|thurs|thur|thu|fri|sat|sun)"
_POSSESSIVE_SUFFIX = "(?:'s|’s|s)?"

# Unqualified "sat", "sun", "wed" and "mon" are usually ordinary words
_WEEKDAY_ABBREV_BARE = "(?:tues|tue|thurs|thur|thu|fri)"
_ABBREV_POSSESSIVE_SUFFIX = "(?:'s|’s)?"

_QUALIFIED_PATTERNS = [
    re.compile(rf"\b(?:next|last)\s+{_WEEKDAY_FULL}{_POSSESSIVE_SUFFIX}(?!\w)", re.IGNORECASE),
    re.compile(rf"\b(?:next|last)\s+{_WEEKDAY_ABBREV}{_POSSESSIVE_SUFFIX}(?!\w)", re.IGNORECASE),
    re.compile(r"\b(?:today|tomorrow|yesterday)\b", re.IGNORECASE),
    re.compile(r"\b(?:this|next)\s+(?:week|weekend)\b", re.IGNORECASE),
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
]

_AMBIGUOUS_PATTERNS = [
    re.compile(rf"\b{_WEEKDAY_FULL}{_POSSESSIVE_SUFFIX}(?!\w)", re.IGNORECASE),
    re.compile(rf"\b{_WEEKDAY_ABBREV_BARE}{_ABBREV_POSSESSIVE_SUFFIX}(?!\w)", re.IGNORECASE),
]

MODIFICATION_KEYWORDS = (
    "move",
    "swap",
    "change",
    "switch",
    "shift",
    "cancel",
    "skip",
    "delete",
    "remove",
    "replace",
    "reschedule",
)


def extract_phrases(message: str) -> list[DatePhrase]:
    """Find date references in ``message``, in order of appearance.

    Qualified phrases ("next Tuesday", "tomorrow") are captured first; a bare
    weekday mention that is not part of a qualified phrase is flagged as
    ambiguous.
    """
    phrases: list[DatePhrase] = []

    def _overlaps(start: int, end: int) -> bool:
        return any(start < p.end_index and end > p.start_index for p in phrases)

    for is_ambiguous, patterns in ((False, _QUALIFIED_PATTERNS), (True, _AMBIGUOUS_PATTERNS)):
        for pattern in patterns:
            for match in pattern.finditer(message):
                if _overlaps(match.start(), match.end()):
                    continue
                phrases.append(
                    DatePhrase(
                        phrase=match.group(0),
                        normalized_phrase=normalize_phrase(match.group(0)),
                        start_index=match.start(),
                        end_index=match.end(),
                        is_ambiguous=is_ambiguous,
                    )
                )

    return sorted(phrases, key=lambda p: p.start_index)


def has_ambiguous_reference(message: str) -> bool:
    return any(p.is_ambiguous for p in extract_phrases(message))


def requires_date_resolution(message: str) -> bool:
    """True when the message asks for a change and mentions at least one date."""
    lowered = message.lower()
    has_modification_intent = any(keyword in lowered for keyword in MODIFICATION_KEYWORDS)
    return has_modification_intent and bool(extract_phrases(message))
