"""Ordered cascade of date/time grammar rules applied to event text."""
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from re import Match, Pattern
from typing import Callable, Iterable, List, Optional, Tuple

from processor.date_resolver import DATE_PATTERN, WEEKDAY_PATTERN, parse_date
from processor.exceptions import ParseError
from processor.models import Occurrence, TimeRange
from processor.range_expander import FILTER_PATTERN, expand, predicate_for_keyword
from processor.time_resolver import TIME_PATTERN, parse_time

logger = logging.getLogger(__name__)

DEFAULT_DURATION = timedelta(hours=1)
_ONE_DAY = timedelta(days=1)

_TERMINATOR = r"(?=[.:,;)\s]|$)"
_PUNCTUATION_END = r"(?=[.:,;)]|$)"
_TIME_LEAD_IN = r"(?:at\s+|from\s+)?"
_DATE_BEFORE_REGEX = re.compile(
    rf"(?:{WEEKDAY_PATTERN}|\d{{1,2}}/\d{{1,2}})\s*$", re.IGNORECASE
)

Builder = Callable[[Match, date, str], List[Occurrence]]


@dataclass(frozen=True)
class PatternRule:
    """A recognition pattern paired with the function that builds its occurrences."""
    name: str
    regex: Pattern
    build: Builder
    guard: Optional[Callable[[Match], bool]] = None

    def first_match(self, text: str) -> Optional[Match]:
        for match in self.regex.finditer(text):
            if self.guard is None or self.guard(match):
                return match
        return None


def timed_occurrence(day: date, time_range: TimeRange, rule: str) -> Occurrence:
    """
    Build a timed occurrence on day.

    The end lands on the following day when the range carries past
    midnight, and defaults to one hour after the start when absent.
    """
    start = datetime(day.year, day.month, day.day, time_range.start.hour, time_range.start.minute)

    if time_range.end is None:
        end = start + DEFAULT_DURATION
    else:
        end_day = day + _ONE_DAY if time_range.carries_to_next_day else day
        end = datetime(
            end_day.year, end_day.month, end_day.day,
            time_range.end.hour, time_range.end.minute
        )

    return Occurrence(start=start, end=end, has_time=True, matched_rule=rule)


def all_day_occurrence(first_day: date, last_day: date, rule: str) -> Occurrence:
    """Build an all-day occurrence with an exclusive end."""
    return Occurrence(start=first_day, end=last_day + _ONE_DAY, has_time=False, matched_rule=rule)


def _occurrences_for_days(
    days: Iterable[date],
    time_token: Optional[str],
    rule: str
) -> List[Occurrence]:
    if not time_token:
        return [all_day_occurrence(day, day, rule) for day in days]

    time_range = parse_time(time_token)
    return [timed_occurrence(day, time_range, rule) for day in days]


def _not_after_date(match: Match) -> bool:
    return not _DATE_BEFORE_REGEX.search(match.string[:match.start()])


def _build_open_ended(match: Match, anchor: date, rule: str) -> List[Occurrence]:
    span = parse_date(f"thru {match.group('date')}", anchor)
    return [all_day_occurrence(span.start_date, span.end_date, rule)]


def _build_date_two_times(match: Match, anchor: date, rule: str) -> List[Occurrence]:
    span = parse_date(match.group('date'), anchor)

    occurrences = []
    for token in (match.group('first'), match.group('second')):
        occurrences.extend(_occurrences_for_days(expand(span), token, rule))
    return occurrences


def _build_two_dates(match: Match, anchor: date, rule: str) -> List[Occurrence]:
    first = parse_date(match.group('first'), anchor)
    second = parse_date(match.group('second'), anchor)

    days = sorted(set(expand(first)) | set(expand(second)))
    return _occurrences_for_days(days, match.group('time'), rule)


def _build_filtered(match: Match, anchor: date, rule: str) -> List[Occurrence]:
    span = parse_date(match.group('date'), anchor)
    predicate = predicate_for_keyword(match.group('filter'))

    return _occurrences_for_days(expand(span, predicate), match.group('time'), rule)


def _build_date_time(match: Match, anchor: date, rule: str) -> List[Occurrence]:
    span = parse_date(match.group('date'), anchor)

    if not match.group('time'):
        return [all_day_occurrence(span.start_date, span.end_date, rule)]

    return _occurrences_for_days(expand(span), match.group('time'), rule)


def _compile(pattern: str) -> Pattern:
    return re.compile(pattern, re.IGNORECASE)


# Most specific first. Several patterns can match overlapping text, so
# the order decides which rule owns a fragment.
RULES: Tuple[PatternRule, ...] = (
    PatternRule(
        name='open_ended_range',
        regex=_compile(rf"(?<![\w-])thru\s+(?P<date>{DATE_PATTERN}){_TERMINATOR}"),
        build=_build_open_ended,
        guard=_not_after_date
    ),
    PatternRule(
        name='date_two_times',
        regex=_compile(
            rf"(?P<date>{DATE_PATTERN})\s+(?P<first>{TIME_PATTERN})"
            rf"\s*\+\s*(?P<second>{TIME_PATTERN})"
        ),
        build=_build_date_two_times
    ),
    PatternRule(
        name='two_dates_shared_time',
        regex=_compile(
            rf"(?P<first>{DATE_PATTERN})\s*\+\s*(?P<second>{DATE_PATTERN})"
            rf"(?:\s+{_TIME_LEAD_IN}(?P<time>{TIME_PATTERN})|{_PUNCTUATION_END})"
        ),
        build=_build_two_dates
    ),
    PatternRule(
        name='filtered_time_then_date',
        regex=_compile(
            rf"(?P<filter>{FILTER_PATTERN})[\s,]+(?P<time>{TIME_PATTERN})"
            rf"[\s,]+(?:from\s+)?(?P<date>{DATE_PATTERN})"
        ),
        build=_build_filtered
    ),
    PatternRule(
        name='filtered_date_then_time',
        regex=_compile(
            rf"(?P<filter>{FILTER_PATTERN})[\s,]+(?:from\s+)?(?P<date>{DATE_PATTERN})"
            rf"(?:[\s,]+{_TIME_LEAD_IN}(?P<time>{TIME_PATTERN})|{_PUNCTUATION_END})"
        ),
        build=_build_filtered
    ),
    PatternRule(
        name='time_then_date',
        regex=_compile(rf"(?P<time>{TIME_PATTERN})\s+(?:on\s+)?(?P<date>{DATE_PATTERN})"),
        build=_build_date_time
    ),
    PatternRule(
        name='date_then_time',
        regex=_compile(
            rf"(?P<date>{DATE_PATTERN})"
            rf"(?:\s+{_TIME_LEAD_IN}(?P<time>{TIME_PATTERN})|(?=[.:,;]))"
        ),
        build=_build_date_time
    ),
)


class PatternCascade:
    """Tries each rule in order; the first rule that matches owns the fragment."""

    def __init__(self, rules: Tuple[PatternRule, ...] = RULES):
        self.rules = rules

    def resolve(self, text: str, anchor: date) -> List[Occurrence]:
        """
        Resolve the occurrences described in text.

        Only the first match of the first matching rule is used.

        Args:
            text: Fragment text
            anchor: Reference date for relative expressions

        Returns:
            List of Occurrence objects, empty if no rule matches

        Raises:
            ParseError: If the owning rule's tokens cannot be resolved
        """
        for rule in self.rules:
            match = rule.first_match(text)
            if match is None:
                continue

            logger.debug(f"Rule '{rule.name}' matched '{match.group(0)}'")
            try:
                return rule.build(match, anchor, rule.name)
            except ParseError as e:
                e.rule = rule.name
                e.matched = match.group(0)
                raise

        return []
