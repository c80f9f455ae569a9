"""12-hour clock parsing and display helpers."""

import re
from datetime import time
from typing import Optional

# "9am", "9 am", "2:30pm", "11:05 PM"
CLOCK_TIME = r"\d{1,2}(?::\d{2})?\s*(?:am|pm)\b"

_CLOCK_PARTS = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(am|pm)$", re.IGNORECASE)


def parse_clock_time(value: str) -> Optional[time]:
    """Convert a 12-hour clock token to a time.

    Args:
        value: Token such as "9am" or "2:30 pm"

    Returns:
        Parsed time, or None if the token is not a valid clock time
    """
    match = _CLOCK_PARTS.match(value.strip())
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    period = match.group(3).lower()

    if hour > 12 or minute > 59:
        return None

    if period == "pm" and hour != 12:
        hour += 12
    elif period == "am" and hour == 12:
        hour = 0

    return time(hour, minute)


def one_hour_after(value: time) -> time:
    """Return the time one hour later, capped at the 23rd hour."""
    return time(min(value.hour + 1, 23), value.minute)


def format_time_for_display(value: time) -> str:
    """Format a time for display, e.g. 14:30 -> "2:30 PM"."""
    period = "PM" if value.hour >= 12 else "AM"
    hour12 = value.hour % 12 or 12
    return f"{hour12}:{value.minute:02d} {period}"
