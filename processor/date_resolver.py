"""Resolve date tokens ("sat", "6/14", "fri-sun", "6/1-15", "thru 6/30") into DateSpans."""
import re
from datetime import date, timedelta
from types import MappingProxyType
from typing import Tuple

from processor.exceptions import MalformedDateToken, UnknownWeekdayName
from processor.models import DateSpan

WEEKDAY_NAMES = (
    'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday'
)

# Indexes follow date.weekday(): Monday is 0.
WEEKDAY_ALIASES = MappingProxyType({
    **{name: index for index, name in enumerate(WEEKDAY_NAMES)},
    'mon': 0,
    'tue': 1, 'tues': 1,
    'wed': 2, 'weds': 2,
    'thu': 3, 'thur': 3, 'thurs': 3,
    'fri': 4,
    'sat': 5,
    'sun': 6,
})

_WEEKDAY_ALTERNATION = '|'.join(
    sorted(WEEKDAY_ALIASES, key=len, reverse=True)
)
_RANGE_SEPARATOR = r"(?:\s*-\s*|\s+thru\s+)"

WEEKDAY_PATTERN = rf"\b(?:{_WEEKDAY_ALTERNATION})\b"
WEEKDAY_RANGE_PATTERN = rf"{WEEKDAY_PATTERN}(?:{_RANGE_SEPARATOR}{WEEKDAY_PATTERN})?"
MONTH_DAY_PATTERN = (
    rf"(?<![\d/])\d{{1,2}}/\d{{1,2}}"
    rf"(?:{_RANGE_SEPARATOR}\d{{1,2}}(?:/\d{{1,2}})?)?(?![\d/])"
)
DATE_PATTERN = rf"(?:{WEEKDAY_RANGE_PATTERN}|{MONTH_DAY_PATTERN})"

_RANGE_SPLIT_REGEX = re.compile(_RANGE_SEPARATOR, re.IGNORECASE)
_OPEN_RANGE_REGEX = re.compile(r"^thru\s+(?P<end>.+)$", re.IGNORECASE)


def weekday_index(name: str) -> int:
    """
    Look up a weekday name or abbreviation.

    Raises:
        UnknownWeekdayName: If name is not a recognized weekday
    """
    key = name.strip().rstrip('.').lower()
    if key not in WEEKDAY_ALIASES:
        raise UnknownWeekdayName(f"Unexpected day of week: {name}", matched=name)
    return WEEKDAY_ALIASES[key]


def next_weekday(anchor: date, index: int) -> date:
    """Return the first date on or after anchor that falls on the given weekday."""
    return anchor + timedelta(days=(7 + index - anchor.weekday()) % 7)


def parse_date(token: str, anchor: date) -> DateSpan:
    """
    Parse a date token relative to an anchor date.

    Weekday names resolve to their next occurrence on or after the anchor.
    Month/day dates in a month before the anchor's month belong to the
    following year. A range end given as a bare day number inherits the
    start's month. "thru X" starts at the anchor itself.

    Args:
        token: Date token, e.g. "sat-sun", "6/1-15", "thru sunday"
        anchor: Reference date for relative resolution

    Returns:
        DateSpan with start_date <= end_date

    Raises:
        UnknownWeekdayName: If a weekday name is not recognized
        MalformedDateToken: If a month/day is invalid or runs backwards
    """
    text = token.strip()

    open_range = _OPEN_RANGE_REGEX.match(text)
    if open_range:
        start = anchor
        end = _resolve_end(open_range.group('end'), start, anchor, token)
    else:
        parts = _RANGE_SPLIT_REGEX.split(text, maxsplit=1)
        start = _resolve_single(parts[0], anchor, token)
        end = start
        if len(parts) == 2:
            end = _resolve_end(parts[1], start, anchor, token)

    if end < start:
        raise MalformedDateToken(
            f"Date range ends before it starts: {token}", matched=token
        )

    return DateSpan(start_date=start, end_date=end)


def _resolve_single(text: str, anchor: date, token: str) -> date:
    if '/' in text:
        month, day = _split_month_day(text, token)
        return _month_day_to_date(month, day, anchor, token)
    return next_weekday(anchor, weekday_index(text))


def _resolve_end(text: str, start: date, anchor: date, token: str) -> date:
    text = text.strip()

    if '/' in text:
        return _resolve_single(text, anchor, token)

    if text.isdigit():
        # Bare day number, e.g. the "15" in "6/1-15"
        return _month_day_to_date(start.month, int(text), anchor, token)

    end = next_weekday(anchor, weekday_index(text))
    while end < start:
        end += timedelta(weeks=1)
    return end


def _split_month_day(text: str, token: str) -> Tuple[int, int]:
    month, _, day = text.strip().partition('/')
    if not (month.isdigit() and day.isdigit()):
        raise MalformedDateToken(f"Unparseable date: {token}", matched=token)
    return int(month), int(day)


def _month_day_to_date(month: int, day: int, anchor: date, token: str) -> date:
    year = anchor.year + 1 if month < anchor.month else anchor.year
    try:
        return date(year, month, day)
    except ValueError as e:
        raise MalformedDateToken(f"Invalid date {token}: {e}", matched=token) from e
