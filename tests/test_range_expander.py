"""Unit tests for the range expander."""
from datetime import date

import pytest

from processor.exceptions import UnknownWeekdayName
from processor.models import DateSpan
from processor.range_expander import (
    expand,
    on_weekday,
    predicate_for_keyword,
    weekdays,
    weekends,
)


class TestExpand:
    """Test cases for expand."""

    def test_three_day_span(self):
        """Test that a 3-day span yields 3 ascending dates with no gaps."""
        span = DateSpan(date(2024, 6, 7), date(2024, 6, 9))

        assert list(expand(span)) == [
            date(2024, 6, 7),
            date(2024, 6, 8),
            date(2024, 6, 9),
        ]

    def test_single_day_span(self):
        """Test that a single-day span yields exactly one date."""
        span = DateSpan(date(2024, 6, 7), date(2024, 6, 7))

        assert list(expand(span)) == [date(2024, 6, 7)]

    def test_weekends_over_a_week(self):
        """Test that the weekend filter keeps only Saturday and Sunday."""
        span = DateSpan(date(2024, 6, 3), date(2024, 6, 9))

        assert list(expand(span, weekends)) == [date(2024, 6, 8), date(2024, 6, 9)]

    def test_weekdays_over_a_week(self):
        """Test that the weekday filter drops the weekend."""
        span = DateSpan(date(2024, 6, 3), date(2024, 6, 9))

        assert len(list(expand(span, weekdays))) == 5

    def test_single_weekday_filter(self):
        """Test filtering to one named weekday."""
        span = DateSpan(date(2024, 6, 1), date(2024, 6, 30))

        assert list(expand(span, on_weekday(6))) == [
            date(2024, 6, 2),
            date(2024, 6, 9),
            date(2024, 6, 16),
            date(2024, 6, 23),
            date(2024, 6, 30),
        ]

    def test_restartable(self):
        """Test that expanding the same span twice gives the same days."""
        span = DateSpan(date(2024, 6, 7), date(2024, 6, 12))

        assert list(expand(span)) == list(expand(span))

    def test_long_span(self):
        """Test a span of several months."""
        span = DateSpan(date(2024, 1, 1), date(2024, 6, 30))

        days = list(expand(span))

        assert len(days) == 182
        assert days[0] == date(2024, 1, 1)
        assert days[-1] == date(2024, 6, 30)


class TestPredicateForKeyword:
    """Test cases for filter keyword lookup."""

    @pytest.mark.parametrize("keyword", ["weekends", "Weekend"])
    def test_weekend_keywords(self, keyword):
        """Test the weekend keywords."""
        predicate = predicate_for_keyword(keyword)

        assert predicate(date(2024, 6, 8))
        assert not predicate(date(2024, 6, 7))

    def test_weekdays_keyword(self):
        """Test the weekdays keyword."""
        predicate = predicate_for_keyword("weekdays")

        assert predicate(date(2024, 6, 7))
        assert not predicate(date(2024, 6, 8))

    @pytest.mark.parametrize("keyword", ["saturdays", "Saturdays", "every sat", "every Saturday"])
    def test_single_weekday_keywords(self, keyword):
        """Test plural and 'every' weekday keywords."""
        predicate = predicate_for_keyword(keyword)

        assert predicate(date(2024, 6, 8))
        assert not predicate(date(2024, 6, 9))

    def test_unknown_keyword(self):
        """Test that an unknown keyword raises UnknownWeekdayName."""
        with pytest.raises(UnknownWeekdayName):
            predicate_for_keyword("fortnightly")
