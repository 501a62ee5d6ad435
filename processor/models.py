"""Data models for event parsing and processing."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Union


@dataclass(frozen=True)
class TimeOfDay:
    """Clock time in 24-hour form."""
    hour: int
    minute: int = 0


@dataclass(frozen=True)
class TimeRange:
    """Start time with an optional end time."""
    start: TimeOfDay
    end: Optional[TimeOfDay] = None
    carries_to_next_day: bool = False


@dataclass(frozen=True)
class DateSpan:
    """Inclusive range of civil dates."""
    start_date: date
    end_date: date


@dataclass(frozen=True)
class Occurrence:
    """
    One concrete calendar instance of an event.

    Timed occurrences carry naive datetimes in the calendar's fixed zone.
    All-day occurrences carry dates and their end is exclusive.
    """
    start: Union[date, datetime]
    end: Union[date, datetime]
    has_time: bool
    matched_rule: str


@dataclass
class EventDraft:
    """Parsed event with all of its occurrences."""
    title: str
    description: str
    location: Optional[str]
    occurrences: List[Occurrence] = field(default_factory=list)


@dataclass
class WeekTrackingState:
    """Tracks which calendar week a bare weekday name in a listing refers to."""
    first_weekday_seen: Optional[int] = None
    has_seen_different_weekday: bool = False
    week_increment: int = 0

    def observe(self, weekday: int) -> None:
        """Record a weekday, moving to the next week when the first one repeats."""
        if self.first_weekday_seen is None:
            self.first_weekday_seen = weekday
        elif weekday == self.first_weekday_seen:
            if self.has_seen_different_weekday:
                self.has_seen_different_weekday = False
                self.week_increment += 1
        else:
            self.has_seen_different_weekday = True

    def reset(self) -> None:
        self.first_weekday_seen = None
        self.has_seen_different_weekday = False
        self.week_increment = 0


@dataclass(frozen=True)
class ParseDiagnostic:
    """Why a fragment was skipped."""
    fragment: str
    error_type: str
    message: str
    rule: Optional[str] = None
    matched: Optional[str] = None


@dataclass
class ParseReport:
    """Result of parsing a batch of fragments."""
    events: List[EventDraft] = field(default_factory=list)
    diagnostics: List[ParseDiagnostic] = field(default_factory=list)

    @property
    def occurrence_count(self) -> int:
        return sum(len(event.occurrences) for event in self.events)


@dataclass
class ProcessedEvent:
    """Storable record for a single occurrence."""
    event_id: str
    title: str
    description: str
    location: Optional[str]
    start: str
    end: str
    all_day: bool
    time_zone: str
    matched_rule: str
    last_updated: int
    ttl: int


@dataclass
class SyncResult:
    """Result of sync operation."""
    added: int
    existing: int
    errors: list[str]
