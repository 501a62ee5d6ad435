"""Resolve time tokens such as "7pm", "11am-6pm" or "(10p-2a)" into TimeRanges."""
import re
from typing import List, Optional, Tuple

from processor.exceptions import MalformedTimeToken
from processor.models import TimeOfDay, TimeRange

_CLOCK = r"\d{1,2}(?::\d{2})?"
_QUALIFIER = r"(?:am|pm|a|p)"

# The trailing qualifier is mandatory so bare numbers in prose never read as times.
TIME_PATTERN = (
    rf"(?<![\d/:-])\(?{_CLOCK}{_QUALIFIER}?(?:-{_CLOCK})?{_QUALIFIER}(?![a-z])\)?"
)
TIME_REGEX = re.compile(TIME_PATTERN, re.IGNORECASE)

_SIDE_REGEX = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<qualifier>am|pm|a|p)?$",
    re.IGNORECASE
)


def find_time_tokens(text: str) -> List[str]:
    """Return every time token in text, in order of appearance."""
    return [match.group(0) for match in TIME_REGEX.finditer(text)]


def parse_time(token: str) -> TimeRange:
    """
    Parse a time or time-range token.

    A side without an AM/PM qualifier borrows the other side's; when
    neither side states one the time is taken as PM. A range whose end
    is earlier than its start carries over to the next day.

    Args:
        token: Token like "7pm", "7:30p", "11am-6pm" or "(10pm-2am)"

    Returns:
        TimeRange with 24-hour start and optional end

    Raises:
        MalformedTimeToken: If the token is empty or out of range
    """
    if not token or not token.strip():
        raise MalformedTimeToken("Empty time token", matched=token)

    cleaned = token.replace('(', '').replace(')', '').strip()
    parts = cleaned.split('-')
    if len(parts) > 2:
        raise MalformedTimeToken(f"Too many '-' in time token: {token}", matched=token)

    start_hour, start_minute, start_qualifier = _split_side(parts[0], token)

    end_side = None
    if len(parts) == 2:
        end_side = _split_side(parts[1], token)

    end_qualifier = end_side[2] if end_side else None
    start = TimeOfDay(
        hour=_to_24_hour(start_hour, _is_pm(start_qualifier or end_qualifier)),
        minute=start_minute
    )

    if end_side is None:
        return TimeRange(start=start)

    end_hour, end_minute, _ = end_side
    end = TimeOfDay(
        hour=_to_24_hour(end_hour, _is_pm(end_qualifier or start_qualifier)),
        minute=end_minute
    )

    return TimeRange(
        start=start,
        end=end,
        carries_to_next_day=(end.hour, end.minute) < (start.hour, start.minute)
    )


def _split_side(side: str, token: str) -> Tuple[int, int, Optional[str]]:
    match = _SIDE_REGEX.match(side.strip())
    if not match:
        raise MalformedTimeToken(f"Unparseable time: {token}", matched=token)

    hour = int(match.group('hour'))
    minute = int(match.group('minute') or 0)
    if not 1 <= hour <= 12:
        raise MalformedTimeToken(f"Hour out of range in time: {token}", matched=token)
    if not 0 <= minute <= 59:
        raise MalformedTimeToken(f"Minute out of range in time: {token}", matched=token)

    qualifier = match.group('qualifier')
    return hour, minute, qualifier.lower() if qualifier else None


def _is_pm(qualifier: Optional[str]) -> bool:
    return qualifier is None or qualifier.startswith('p')


def _to_24_hour(hour: int, pm: bool) -> int:
    return ((12 + hour) % 12) + (12 if pm else 0)
