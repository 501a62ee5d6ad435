"""Expand DateSpans into individual days, optionally filtered by weekday."""
import re
from datetime import date, timedelta
from typing import Callable, Iterator, Optional

from processor.date_resolver import WEEKDAY_PATTERN, weekday_index
from processor.models import DateSpan

DayPredicate = Callable[[date], bool]

_ONE_DAY = timedelta(days=1)


def weekends(day: date) -> bool:
    return day.weekday() >= 5


def weekdays(day: date) -> bool:
    return day.weekday() < 5


def on_weekday(index: int) -> DayPredicate:
    """Predicate matching a single weekday (Monday is 0)."""
    def predicate(day: date) -> bool:
        return day.weekday() == index
    return predicate


FILTER_PATTERN = (
    r"\b(?:weekends?|weekdays"
    r"|(?:mon|tues|wednes|thurs|fri|satur|sun)days"
    rf"|every\s+{WEEKDAY_PATTERN})"
)
_EVERY_REGEX = re.compile(r"^every\s+(?P<day>\S+)$", re.IGNORECASE)


def predicate_for_keyword(keyword: str) -> DayPredicate:
    """
    Map a filter keyword to a day predicate.

    Accepts "weekend(s)", "weekdays", plural weekday names ("saturdays")
    and "every <weekday>".
    """
    text = keyword.strip().lower()

    if text.startswith('weekend'):
        return weekends
    if text == 'weekdays':
        return weekdays

    every = _EVERY_REGEX.match(text)
    if every:
        return on_weekday(weekday_index(every.group('day')))

    return on_weekday(weekday_index(text[:-1] if text.endswith('s') else text))


def expand(span: DateSpan, predicate: Optional[DayPredicate] = None) -> Iterator[date]:
    """
    Yield each day of span in ascending order, inclusive of both ends.

    Args:
        span: Range to expand
        predicate: Optional filter; only days it accepts are yielded

    Returns:
        Generator of dates
    """
    day = span.start_date
    while day <= span.end_date:
        if predicate is None or predicate(day):
            yield day
        day += _ONE_DAY
