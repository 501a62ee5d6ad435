"""Errors raised while turning event text into occurrences."""
from typing import Optional


class ParseError(ValueError):
    """
    Base class for per-fragment parse failures.

    Carries the cascade rule that was being applied and the text it matched,
    when known, so callers can report a useful diagnostic.
    """

    def __init__(
        self,
        message: str,
        rule: Optional[str] = None,
        matched: Optional[str] = None
    ):
        super().__init__(message)
        self.rule = rule
        self.matched = matched


class MalformedTimeToken(ParseError):
    """Time token has no parseable hour or minute."""


class UnknownWeekdayName(ParseError):
    """Token is not one of the seven recognized weekday names."""


class MalformedDateToken(ParseError):
    """Month/day token is not a real date or its range runs backwards."""


class NoPatternMatched(ParseError):
    """Fragment matched none of the cascade rules."""


class MissingTitle(ParseError):
    """Fragment has no title."""


class MissingDateToken(ParseError):
    """Fragment has no date to resolve."""
