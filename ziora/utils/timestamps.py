# ziora/utils/timestamps.py
"""
Timestamp parsing and relative formatting for comments.

Comment timestamps arrive in several shapes: BSON dates from the comments
API, Extended-JSON ``{"$date": ...}`` from exported documents, ISO strings,
and browser locale strings written by older clients, e.g.
``22/06/2025, 00:46:48`` or ``6/22/2025, 12:46:48 AM``.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional
from dateutil import parser as dateutil_parser

from ziora.core.config import settings

logger = logging.getLogger(__name__)

UNKNOWN_TIME = "Unknown time"
INVALID_DATE = "Invalid date"

_LOCALE_PATTERN = re.compile(
    r"^\s*(\d{1,2})/(\d{1,2})/(\d{4}),?\s+"
    r"(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])?\s*$"
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_locale_string(text: str) -> Optional[datetime]:
    """
    Parse ``D/M/YYYY, HH:mm[:ss] [AM|PM]``.

    The first component is the day when it is above 12, the month when the
    second one is above 12, and the day otherwise.

    Only this shape and ISO 8601 are accepted. Free-form parsing would fill
    missing parts from today, turning strings like "Monday" or "7" into
    recent dates.
    """
    match = _LOCALE_PATTERN.match(text)
    if not match:
        return None

    first, second, year, hour, minute, second_of_minute, meridiem = match.groups()
    first, second = int(first), int(second)

    if first > 12:
        day, month = first, second
    elif second > 12:
        month, day = first, second
    else:
        day, month = first, second

    hour = int(hour)
    if meridiem:
        if hour < 1 or hour > 12:
            return None
        hour = hour % 12
        if meridiem.lower() == "pm":
            hour += 12

    try:
        return datetime(
            int(year), month, day, hour, int(minute), int(second_of_minute or 0),
            tzinfo=timezone.utc,
        )
    except ValueError:
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Resolve a stored timestamp to an aware UTC datetime, or None"""
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, dict) and "$date" in value:
        return parse_timestamp(value["$date"])

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    text = value.strip()

    parsed = _parse_locale_string(text)
    if parsed:
        return parsed

    try:
        return _as_utc(dateutil_parser.isoparse(text))
    except (ValueError, OverflowError):
        logger.debug(f"Unparseable comment timestamp: {value!r}")
        return None


def timestamp_sort_key(value: Any) -> float:
    """Sort key, newest largest; unparseable timestamps sort last"""
    parsed = parse_timestamp(value)
    if parsed is None:
        return float("-inf")
    return parsed.timestamp()


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_relative(value: Any, now: Optional[datetime] = None) -> str:
    """Render a timestamp as ``Just now`` / ``N minutes ago`` / ... / ``DD/MM/YYYY``"""
    if value is None or value == "":
        return UNKNOWN_TIME

    parsed = parse_timestamp(value)
    if parsed is None:
        return INVALID_DATE

    now = _as_utc(now) if now else datetime.now(timezone.utc)
    diff_in_minutes = int((now - parsed).total_seconds() // 60)

    if diff_in_minutes < 1:
        return "Just now"
    if diff_in_minutes < 60:
        return _plural(diff_in_minutes, "minute")

    diff_in_hours = diff_in_minutes // 60
    if diff_in_hours < 24:
        return _plural(diff_in_hours, "hour")

    diff_in_days = diff_in_hours // 24
    if diff_in_days < settings.RELATIVE_TIME_MAX_DAYS:
        return _plural(diff_in_days, "day")

    return parsed.strftime("%d/%m/%Y")
