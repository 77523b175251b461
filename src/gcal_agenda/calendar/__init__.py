"""Read-only Google Calendar access.

Usage:
    from gcal_agenda.calendar import CalendarClient, normalize
    from gcal_agenda.google import GoogleOAuth

    auth = GoogleOAuth()
    auth.ensure_authorized()
    client = CalendarClient(auth)

    for calendar in client.list_calendars():
        for event in client.list_upcoming_events(calendar.id, "1w"):
            print(normalize(event, calendar.display_name))
"""

from __future__ import annotations

from gcal_agenda.calendar.client import CalendarClient
from gcal_agenda.calendar.events import Calendar, Event, NormalizedEvent, normalize
from gcal_agenda.calendar.exceptions import (
    CalendarAPIError,
    CalendarError,
    EventParseError,
    InvalidDurationError,
)
from gcal_agenda.calendar.window import DURATIONS, event_window

__all__ = [
    "CalendarClient",
    "Calendar",
    "Event",
    "NormalizedEvent",
    "normalize",
    "event_window",
    "DURATIONS",
    "CalendarError",
    "CalendarAPIError",
    "EventParseError",
    "InvalidDurationError",
]
