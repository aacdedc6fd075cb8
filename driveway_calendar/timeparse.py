import logging
import re
from datetime import date, datetime
from typing import Union

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_TWELVE_HOUR = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*([ap])\.?\s*m\.?$", re.IGNORECASE)
_TWENTY_FOUR_HOUR = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time(value: Union[str, int]) -> int:
    """Normalizes a time-of-day input to minutes since midnight.

    Accepts:
        - ints already in minutes (0..1440)
        - 24-hour strings, "9:00", "17:30", "24:00" for end of day
        - 12-hour strings, "9 AM", "9:00am", "12:30 PM", "5:15 p.m."

    Raises:
        ValueError if the input is empty or not a valid time of day.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid time value: {value!r}")

    if isinstance(value, int):
        if not 0 <= value <= MINUTES_PER_DAY:
            raise ValueError(f"Minutes out of range: {value}")
        return value

    if not isinstance(value, str) or not value.strip():
        raise ValueError("Time is required")

    text = value.strip()

    match = _TWELVE_HOUR.match(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if not 1 <= hour <= 12 or minute > 59:
            raise ValueError(f"Invalid 12-hour time: {value!r}")
        # 12 AM is midnight, 12 PM is noon
        hour = hour % 12
        if match.group(3).lower() == "p":
            hour += 12
        return hour * 60 + minute

    match = _TWENTY_FOUR_HOUR.match(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2))
        if hour == 24 and minute == 0:
            return MINUTES_PER_DAY
        if hour > 23 or minute > 59:
            raise ValueError(f"Invalid 24-hour time: {value!r}")
        return hour * 60 + minute

    raise ValueError(f"Unrecognized time format: {value!r}")


def format_time(minutes: int) -> str:
    """Renders minutes since midnight as HH:MM."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def date_key(year: int, month: int, day: int) -> str:
    """Builds an ISO date key from a 0-based month."""
    return f"{year:04d}-{month + 1:02d}-{day:02d}"


def parse_date_key(value: Union[str, date]) -> str:
    """Validates a date key and returns it in YYYY-MM-DD form."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date().isoformat()
    except (AttributeError, ValueError):
        raise ValueError(f"Date must be in YYYY-MM-DD format, got {value!r}")
