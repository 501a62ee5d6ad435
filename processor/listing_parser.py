"""Parse plain-text weekly listings where entries name only a weekday."""
import logging
import re
from datetime import date, timedelta
from typing import List, Optional, Sequence

from processor.date_resolver import WEEKDAY_NAMES, next_weekday
from processor.exceptions import MissingDateToken, MissingTitle, ParseError
from processor.models import (
    EventDraft,
    ParseDiagnostic,
    ParseReport,
    WeekTrackingState,
)
from processor.pattern_cascade import all_day_occurrence, timed_occurrence
from processor.time_resolver import find_time_tokens, parse_time

logger = logging.getLogger(__name__)

TIMED_RULE = 'listing_time'
ALL_DAY_RULE = 'listing_all_day'


def find_weekday(line: str) -> Optional[int]:
    """Return the index of the first full weekday name contained in line."""
    lowered = line.lower()
    for index, name in enumerate(WEEKDAY_NAMES):
        if name in lowered:
            return index
    return None


class ListingParser:
    """
    Parser for listings made of blocks like::

        ["FRIDAY, JUNE 7", "Rooftop Film Night", "...", "Some Roof\\n123 Main St\\n8p-11p; $10"]

    Listings repeat weekday names across several weeks without restating
    the week, so blocks must be parsed in order.
    """

    TIME_LINE_MARKER = ';'
    PRICE_MARKER = '$'
    UPCOMING_REGEX = re.compile(r"\bupcoming\b", re.IGNORECASE)

    def parse_blocks(self, blocks: Sequence[Sequence[str]], anchor: date) -> ParseReport:
        """
        Parse every block of a listing in source order.

        Args:
            blocks: Listing entries, each a list of text elements
            anchor: Date of the listing

        Returns:
            ParseReport with parsed events and a diagnostic per skipped block
        """
        report = ParseReport()
        state = WeekTrackingState()

        for block in blocks:
            date_line = block[0] if block else ''

            weekday = find_weekday(date_line)
            if weekday is not None:
                state.observe(weekday)

            if self.UPCOMING_REGEX.search(date_line):
                state.reset()

            try:
                report.events.append(
                    self.parse_block(block, anchor, state.week_increment)
                )
            except ParseError as e:
                logger.warning(f"Skipping listing block ({type(e).__name__}): {e}")
                report.diagnostics.append(ParseDiagnostic(
                    fragment="\n\n".join(block),
                    error_type=type(e).__name__,
                    message=str(e),
                    rule=e.rule,
                    matched=e.matched
                ))

        logger.info(
            f"Parsed {len(report.events)} listing events "
            f"({report.occurrence_count} occurrences), "
            f"skipped {len(report.diagnostics)} blocks"
        )
        return report

    def parse_block(
        self,
        block: Sequence[str],
        anchor: date,
        week_increment: int = 0
    ) -> EventDraft:
        """
        Parse one listing block.

        Args:
            block: [date line, title line, ..., location and time]
            anchor: Date of the listing
            week_increment: Weeks past the anchor's week the block falls in

        Returns:
            EventDraft with timed occurrences, or one all-day occurrence
            when the block lists no times

        Raises:
            MissingTitle: If the block has no title line
            MissingDateToken: If the date line names no weekday
        """
        if len(block) < 2:
            raise MissingTitle("Listing block has no title line")
        if len(block) < 3:
            logger.warning(
                f"Unsure how to handle block of length {len(block)}: {block[0]}"
            )

        date_line = block[0]
        weekday = find_weekday(date_line)
        if weekday is None:
            raise MissingDateToken(
                f"Block does not have valid date string: {date_line}",
                matched=date_line
            )

        day = next_weekday(anchor, weekday) + timedelta(weeks=week_increment)
        location, time_lines = self._split_location_and_time(block[-1])

        time_tokens = find_time_tokens("\n".join(time_lines))
        if time_tokens:
            occurrences = [
                timed_occurrence(day, parse_time(token), TIMED_RULE)
                for token in time_tokens
            ]
        else:
            occurrences = [all_day_occurrence(day, day, ALL_DAY_RULE)]

        return EventDraft(
            title=block[1].strip(),
            description="\n\n".join(block),
            location=location,
            occurrences=occurrences
        )

    def _split_location_and_time(self, text: str):
        """Collect time lines, and location lines up to the first price line."""
        time_lines: List[str] = []
        location_lines: List[str] = []
        collecting_location = True

        for line in text.split("\n"):
            if self.TIME_LINE_MARKER in line:
                time_lines.append(line)
            if self.PRICE_MARKER in line:
                collecting_location = False
            if collecting_location:
                location_lines.append(line)

        location = "\n".join(location_lines).strip()
        return location or None, time_lines
