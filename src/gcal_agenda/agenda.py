"""Agenda driver: calendars in, dialect text out."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TextIO

from gcal_agenda.calendar import CalendarClient, normalize
from gcal_agenda.config import Settings
from gcal_agenda.formatting import format_event, preamble

logger = logging.getLogger(__name__)


def write_agenda(
    client: CalendarClient,
    settings: Settings,
    out: TextIO,
    now: datetime | None = None,
) -> int:
    """Write every upcoming event of every calendar to ``out``.

    Calendars are processed one after another in listing order. Calendars
    without a display name are skipped unless
    ``settings.include_empty_calendars`` is set.

    Args:
        client: Calendar client to read from.
        settings: Run configuration.
        out: Stream receiving the agenda text.
        now: Reference time for the event window.

    Returns:
        Number of events written.

    Raises:
        CalendarError: On the first failing calendar; later calendars are
            not processed.
    """
    calendars = client.list_calendars()

    header = preamble(settings.output_format)
    if header is not None:
        out.write(header + "\n")

    written = 0
    for calendar in calendars:
        if not calendar.display_name and not settings.include_empty_calendars:
            logger.debug(f"Skipping calendar {calendar.id}: description is empty")
            continue

        events = client.list_upcoming_events(calendar.id, settings.duration, now)
        logger.debug(
            f'Upcoming events from calendar, duration {settings.duration}, "{calendar.name}": '
            f"{len(events)}"
        )

        for event in events:
            normalized = normalize(event, calendar.display_name)
            out.write(format_event(settings.output_format, normalized) + "\n")
            written += 1

    return written
