"""Calendar exceptions."""

from __future__ import annotations


class CalendarError(Exception):
    """Base exception for calendar errors."""


class CalendarAPIError(CalendarError):
    """Raised when the Calendar API request fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class InvalidDurationError(CalendarError, ValueError):
    """Raised for a duration selector other than 1d, 1w or 1m."""

    def __init__(self, duration: str):
        self.duration = duration
        super().__init__(f"Invalid duration: {duration!r} (expected 1d, 1w or 1m)")


class EventParseError(CalendarError, ValueError):
    """Raised when an event start is neither a date nor an RFC 3339 timestamp."""
