"""Event window computation.

The window is the half-open interval ``[start, end)`` of events to fetch.
It always starts at local midnight today; the duration selector picks the end.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from gcal_agenda.calendar.exceptions import InvalidDurationError

DURATIONS = ("1d", "1w", "1m")


def _add_month(day: date) -> date:
    """Same day-of-month in the following month.

    Days missing from that month roll over into the next one, so
    January 31 becomes March 3 (March 2 in a leap year).
    """
    year = day.year + day.month // 12
    month = day.month % 12 + 1
    return date(year, month, 1) + timedelta(days=day.day - 1)


def _local_midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day).astimezone()


def event_window(duration: str, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Compute the fetch window for a duration selector.

    Args:
        duration: One of "1d" (until next midnight), "1w" (seven days) or
            "1m" (same day next month).
        now: Reference time; defaults to the current local time.

    Returns:
        Timezone-aware local ``(start, end)`` datetimes, both at midnight.

    Raises:
        InvalidDurationError: If the selector is not recognized.
    """
    if now is None:
        now = datetime.now().astimezone()
    today = now.date()

    if duration == "1d":
        end = today + timedelta(days=1)
    elif duration == "1w":
        end = today + timedelta(days=7)
    elif duration == "1m":
        end = _add_month(today)
    else:
        raise InvalidDurationError(duration)

    return _local_midnight(today), _local_midnight(end)
