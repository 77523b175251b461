"""Agenda output dialects.

remind:
    REM Jan 05 AT 12:30 MSG %"Lunch%" %b, %2

org:
    * Lunch <2025-01-05 Sun 12:30:00>
      #+PROPERTY: week=1
      #+PROPERTY: calendar=Work
"""

from __future__ import annotations

from enum import Enum

from gcal_agenda.calendar.events import NormalizedEvent

# English names whatever the process locale; remind and org expect them.
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

ORG_PREAMBLE = "# -*- mode: org -*-"


class OutputFormat(str, Enum):
    """Supported output dialects."""

    REMIND = "remind"
    ORG = "org"

    def __str__(self) -> str:
        return self.value


def preamble(fmt: OutputFormat) -> str | None:
    """Line written once before any event, if the dialect has one."""
    if fmt is OutputFormat.ORG:
        return ORG_PREAMBLE
    return None


def format_remind(event: NormalizedEvent) -> str:
    start = event.start
    return (
        f"REM {MONTHS[start.month - 1]} {start.day:02d} "
        f"AT {start.hour:02d}:{start.minute:02d} "
        f'MSG %"{event.summary}%" %b, %2'
    )


def format_org(event: NormalizedEvent) -> str:
    start = event.start
    timestamp = (
        f"{start.year:04d}-{start.month:02d}-{start.day:02d} "
        f"{WEEKDAYS[start.weekday()]} "
        f"{start.hour:02d}:{start.minute:02d}:{start.second:02d}"
    )
    lines = [
        f"* {event.summary} <{timestamp}>",
        f"  #+PROPERTY: week={event.iso_week}",
    ]
    if event.calendar_name:
        lines.append(f"  #+PROPERTY: calendar={event.calendar_name}")
    return "\n".join(lines)


def format_event(fmt: OutputFormat, event: NormalizedEvent) -> str:
    """Render one event in the given dialect, without a trailing newline.

    Raises:
        ValueError: If the dialect is not supported.
    """
    if fmt is OutputFormat.REMIND:
        return format_remind(event)
    if fmt is OutputFormat.ORG:
        return format_org(event)
    raise ValueError(f"Unsupported output format: {fmt!r}")
