"""Event processor for flattening parsed events into storable records."""
import hashlib
import logging
import time
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

from processor.models import EventDraft, Occurrence, ProcessedEvent

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor for validating and normalizing parsed events."""

    MAX_TITLE_LENGTH = 200
    MAX_DESCRIPTION_LENGTH = 2000
    TTL_DAYS = 90

    def __init__(self, time_zone: str = 'America/New_York'):
        """
        Initialize the processor.

        Args:
            time_zone: Zone every timed occurrence is expressed in
        """
        self.time_zone = time_zone

    def process_drafts(self, drafts: List[EventDraft]) -> List[ProcessedEvent]:
        """
        Produce one ProcessedEvent per occurrence of every draft.

        Args:
            drafts: EventDraft objects from the parsers

        Returns:
            List of ProcessedEvent objects
        """
        processed_events = []
        occurrence_total = 0

        for draft in drafts:
            occurrence_total += len(draft.occurrences)

            if not self._validate_required_fields(draft):
                continue

            for occurrence in draft.occurrences:
                processed_events.append(
                    self._process_single_occurrence(draft, occurrence)
                )

        logger.info(
            f"Processed {len(processed_events)} occurrences out of "
            f"{occurrence_total} parsed from {len(drafts)} events"
        )
        return processed_events

    def _process_single_occurrence(
        self,
        draft: EventDraft,
        occurrence: Occurrence
    ) -> ProcessedEvent:
        """
        Process a single occurrence of an event.

        Args:
            draft: Event the occurrence belongs to
            occurrence: Occurrence to store

        Returns:
            ProcessedEvent object
        """
        # Truncate fields to maximum length
        title = draft.title[:self.MAX_TITLE_LENGTH]
        description = draft.description[:self.MAX_DESCRIPTION_LENGTH]
        location = draft.location.strip() if draft.location else None

        start = self._format_instant(occurrence.start, occurrence.has_time)
        end = self._format_instant(occurrence.end, occurrence.has_time)

        event_id = self.generate_event_id(
            title=title,
            location=location,
            start=start,
            end=end
        )

        return ProcessedEvent(
            event_id=event_id,
            title=title,
            description=description,
            location=location,
            start=start,
            end=end,
            all_day=not occurrence.has_time,
            time_zone=self.time_zone,
            matched_rule=occurrence.matched_rule,
            last_updated=int(time.time()),
            ttl=self._calculate_ttl(occurrence.end)
        )

    def _validate_required_fields(self, draft: EventDraft) -> bool:
        """
        Validate that required fields are present and non-empty.

        Args:
            draft: EventDraft to validate

        Returns:
            True if valid, False otherwise
        """
        if not draft.title or not draft.title.strip():
            logger.warning("Event missing required field: title")
            return False

        if not draft.occurrences:
            logger.warning(f"Event '{draft.title}' has no occurrences")
            return False

        return True

    def _format_instant(self, value: Union[date, datetime], has_time: bool) -> str:
        """
        Format an occurrence bound for the calendar.

        All-day bounds use a date-only representation, timed bounds a
        date-time representation without offset (the zone is stored alongside).
        """
        if has_time:
            return value.strftime('%Y-%m-%dT%H:%M:%S')
        return value.strftime('%Y-%m-%d')

    def _calculate_ttl(self, end: Union[date, datetime]) -> int:
        """
        Calculate TTL as 90 days after the occurrence ends.

        Args:
            end: Occurrence end

        Returns:
            Unix timestamp for TTL
        """
        end_day = datetime(end.year, end.month, end.day)
        ttl_date = end_day + timedelta(days=self.TTL_DAYS)
        return int(ttl_date.timestamp())

    def generate_event_id(
        self,
        title: str,
        location: Optional[str],
        start: str,
        end: str
    ) -> str:
        """
        Generate identifier from title, location, start and end.

        Two occurrences with the same identifier are the same calendar event.

        Args:
            title: Event title
            location: Event location, if any
            start: Formatted start
            end: Formatted end

        Returns:
            Unique event ID (SHA256 hash)
        """
        # Create composite string
        composite = f"{title}|{location or ''}|{start}|{end}"

        # Generate SHA256 hash
        hash_obj = hashlib.sha256(composite.encode('utf-8'))
        return hash_obj.hexdigest()
