"""Date-time parsing and formatting for session timestamps.

ISO 8601 input (what the session form and both exports produce) is parsed
directly. Anything else goes through dateparser in strict mode, so free-form
dates like "Jan 5 2024 10:00" are accepted while fragments and relative
phrases ("yesterday") are not.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import dateparser

_DATEPARSER_SETTINGS = {
    "STRICT_PARSING": True,
    "PREFER_DATES_FROM": "past",
    # no relative-time: "yesterday" or "2 hours ago" are not session dates
    "PARSERS": ["timestamp", "custom-formats", "absolute-time"],
}


def parse_datetime(value: object) -> Optional[datetime]:
    """Parse a session datetime string.

    Returns None if the value is not a string or cannot be parsed.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass

    try:
        return dateparser.parse(text, settings=_DATEPARSER_SETTINGS)
    except (ValueError, OverflowError):
        # huge digit runs overflow int conversion inside dateparser
        return None


def is_valid_datetime(value: object) -> bool:
    return parse_datetime(value) is not None


def to_local_datetime_string(moment: datetime) -> str:
    """Format as the form's local date-time value: YYYY-MM-DDTHH:MM.

    Timezone-aware values are converted to local time first.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment.strftime("%Y-%m-%dT%H:%M")


def normalize_datetime(value: object) -> Optional[str]:
    """Parse and re-format to the local date-time form, or None if invalid."""
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return to_local_datetime_string(parsed)


def now_local_string() -> str:
    """Default value for a new session's datetime field."""
    return to_local_datetime_string(datetime.now())


def format_display_datetime(value: str) -> str:
    """Format a session datetime for cards: "2024-01-05 @ 02:30 PM".

    Unparseable values are returned unchanged.
    """
    parsed = parse_datetime(value)
    if parsed is None:
        return value
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return f"{parsed:%Y-%m-%d} @ {parsed:%I:%M %p}"
