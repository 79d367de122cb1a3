"""Calendar constants - single source of truth for weekday names and date formats.

Weekday indices follow ``date.weekday()``: Monday is 0, Sunday is 6.
"""

import re

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
WEEKDAY_NAMES_SHORT = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

WEEKDAY_INDEX = {name.lower(): index for index, name in enumerate(WEEKDAY_NAMES)}

WEEKDAY_ABBREVIATIONS = {
    "mon": "monday",
    "tue": "tuesday",
    "tues": "tuesday",
    "wed": "wednesday",
    "thu": "thursday",
    "thur": "thursday",
    "thurs": "thursday",
    "fri": "friday",
    "sat": "saturday",
    "sun": "sunday",
}

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MONTH_NAMES_SHORT = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

DAYS_PER_WEEK = 7

DEFAULT_AMBIGUITY_PAST_WINDOW_DAYS = 3
DEFAULT_AMBIGUITY_FUTURE_WINDOW_DAYS = 7

# Upper bounds for "next N days" / "next N weeks"
MAX_RANGE_DAYS = 366
MAX_RANGE_WEEKS = 52
