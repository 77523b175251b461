"""Calendar data types and start-time normalization."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from gcal_agenda.calendar.exceptions import EventParseError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class Calendar:
    """Represents a Google Calendar."""

    id: str
    summary: str = ""
    description: str = ""

    @property
    def display_name(self) -> str:
        """Trimmed description; empty when the calendar has none."""
        return self.description.strip()

    @property
    def name(self) -> str:
        """Display name, falling back to the calendar ID."""
        return self.display_name or self.id


@dataclass
class Event:
    """Represents a Google Calendar event as returned by the API.

    Exactly one of ``start_date`` (all-day, ``YYYY-MM-DD``) and
    ``start_date_time`` (RFC 3339 with offset) is set.
    """

    id: str
    summary: str
    start_date: str | None = None
    start_date_time: str | None = None
    calendar_id: str | None = None

    @property
    def is_all_day(self) -> bool:
        """Check if event is all-day (date-only start)."""
        return not self.start_date_time


@dataclass(frozen=True)
class NormalizedEvent:
    """An event reduced to what the formatters print."""

    summary: str
    start: datetime
    iso_week: int
    calendar_name: str = ""


def resolve_start(event: Event) -> datetime:
    """Turn an event's start marker into a datetime.

    All-day events resolve to a naive datetime at local midnight. Timed events
    keep the offset they were given, so their wall-clock time is the one in
    the API response whatever the local timezone is.

    Raises:
        EventParseError: If neither start marker can be parsed.
    """
    if event.start_date_time:
        # 2025-01-05T10:00:00-05:00
        try:
            start = datetime.fromisoformat(event.start_date_time.replace("Z", "+00:00"))
        except ValueError as e:
            raise EventParseError(
                f"Event {event.id}: invalid start time {event.start_date_time!r}"
            ) from e
        if start.tzinfo is None:
            raise EventParseError(
                f"Event {event.id}: start time {event.start_date_time!r} has no UTC offset"
            )
        return start

    # 2025-01-05
    if event.start_date and DATE_RE.match(event.start_date):
        try:
            return datetime.strptime(event.start_date, "%Y-%m-%d")
        except ValueError as e:
            raise EventParseError(
                f"Event {event.id}: invalid start date {event.start_date!r}"
            ) from e

    raise EventParseError(f"Event {event.id}: no usable start date ({event.start_date!r})")


def normalize(event: Event, calendar_name: str = "") -> NormalizedEvent:
    """Resolve the start of an event and compute its ISO-8601 week."""
    start = resolve_start(event)
    return NormalizedEvent(
        summary=event.summary.strip(),
        start=start,
        iso_week=start.isocalendar()[1],
        calendar_name=calendar_name,
    )
