"""Unit tests for EventProcessor."""
from datetime import date, datetime, timedelta

from processor.event_processor import EventProcessor
from processor.models import EventDraft, Occurrence


def timed_draft(title="Pier Party", location="the Pier (Brooklyn)"):
    return EventDraft(
        title=title,
        description="Sat-Sun 11am-6pm at the Pier (Brooklyn).",
        location=location,
        occurrences=[
            Occurrence(
                start=datetime(2024, 6, 8, 11, 0),
                end=datetime(2024, 6, 8, 18, 0),
                has_time=True,
                matched_rule='date_then_time'
            ),
            Occurrence(
                start=datetime(2024, 6, 9, 11, 0),
                end=datetime(2024, 6, 9, 18, 0),
                has_time=True,
                matched_rule='date_then_time'
            ),
        ]
    )


def all_day_draft():
    return EventDraft(
        title="Art Show",
        description="open daily thru Sunday.",
        location=None,
        occurrences=[
            Occurrence(
                start=date(2024, 6, 5),
                end=date(2024, 6, 10),
                has_time=False,
                matched_rule='open_ended_range'
            )
        ]
    )


class TestEventProcessor:
    """Test cases for EventProcessor class."""

    def test_process_timed_event(self):
        """Test that each timed occurrence becomes one processed event."""
        processor = EventProcessor()

        processed = processor.process_drafts([timed_draft()])

        assert len(processed) == 2
        event = processed[0]

        assert event.title == "Pier Party"
        assert event.location == "the Pier (Brooklyn)"
        assert event.start == "2024-06-08T11:00:00"
        assert event.end == "2024-06-08T18:00:00"
        assert event.all_day is False
        assert event.time_zone == "America/New_York"
        assert event.matched_rule == 'date_then_time'
        assert event.event_id is not None
        assert event.last_updated > 0
        assert event.ttl > 0
        assert processed[1].start == "2024-06-09T11:00:00"
        assert processed[0].event_id != processed[1].event_id

    def test_process_all_day_event(self):
        """Test that all-day occurrences use date-only bounds."""
        processor = EventProcessor(time_zone="America/Chicago")

        processed = processor.process_drafts([all_day_draft()])

        assert len(processed) == 1
        assert processed[0].start == "2024-06-05"
        assert processed[0].end == "2024-06-10"
        assert processed[0].all_day is True
        assert processed[0].location is None
        assert processed[0].time_zone == "America/Chicago"

    def test_skips_drafts_missing_title_or_occurrences(self):
        """Test that invalid drafts are skipped."""
        processor = EventProcessor()
        no_title = timed_draft(title="  ")
        no_occurrences = EventDraft(title="Empty", description="", location=None)

        processed = processor.process_drafts([no_title, no_occurrences, all_day_draft()])

        assert [event.title for event in processed] == ["Art Show"]

    def test_generate_event_id_consistency(self):
        """Test that event_id generation is consistent for same inputs."""
        processor = EventProcessor()

        event_id_1 = processor.generate_event_id(
            title="Test Event",
            location="Park (queens)",
            start="2024-06-08T19:00:00",
            end="2024-06-08T20:00:00"
        )
        event_id_2 = processor.generate_event_id(
            title="Test Event",
            location="Park (queens)",
            start="2024-06-08T19:00:00",
            end="2024-06-08T20:00:00"
        )

        assert event_id_1 == event_id_2
        assert len(event_id_1) == 64  # SHA256 produces 64 character hex string

    def test_generate_event_id_uniqueness(self):
        """Test that title, location, start and end all distinguish events."""
        processor = EventProcessor()
        base = dict(
            title="Event A",
            location="Park (queens)",
            start="2024-06-08T19:00:00",
            end="2024-06-08T20:00:00"
        )

        ids = {
            processor.generate_event_id(**base),
            processor.generate_event_id(**{**base, 'title': "Event B"}),
            processor.generate_event_id(**{**base, 'location': None}),
            processor.generate_event_id(**{**base, 'start': "2024-06-08T18:00:00"}),
            processor.generate_event_id(**{**base, 'end': "2024-06-08T21:00:00"}),
        }

        assert len(ids) == 5

    def test_calculate_ttl(self):
        """Test TTL calculation (90 days after the occurrence ends)."""
        processor = EventProcessor()

        ttl = processor._calculate_ttl(datetime(2024, 1, 15, 22, 0))

        expected_ttl = int((datetime(2024, 1, 15) + timedelta(days=90)).timestamp())
        assert ttl == expected_ttl

    def test_truncates_long_fields(self):
        """Test that long title and description are truncated."""
        processor = EventProcessor()
        draft = all_day_draft()
        draft.title = "A" * 300  # Exceeds MAX_TITLE_LENGTH (200)
        draft.description = "B" * 3000  # Exceeds MAX_DESCRIPTION_LENGTH (2000)

        processed = processor.process_drafts([draft])

        assert len(processed[0].title) == 200
        assert len(processed[0].description) == 2000
