"""Google Calendar API client implementation (read-only)."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httplib2
from google.auth.exceptions import RefreshError, TransportError
from googleapiclient.errors import HttpError

from gcal_agenda.calendar.events import Calendar, Event
from gcal_agenda.calendar.exceptions import CalendarAPIError
from gcal_agenda.calendar.window import event_window
from gcal_agenda.google import GoogleOAuth

logger = logging.getLogger(__name__)


class CalendarClient:
    """Google Calendar API client with OAuth authentication.

    Provides read access to the user's calendar list and events.

    Usage:
        auth = GoogleOAuth()
        auth.ensure_authorized()
        client = CalendarClient(auth)

        # List calendars
        calendars = client.list_calendars()

        # List events until next midnight
        events = client.list_upcoming_events(calendars[0].id, "1d")

    Every API failure is raised as CalendarAPIError; deciding whether it
    ends the run is up to the caller.
    """

    def __init__(
        self,
        auth: GoogleOAuth | None = None,
        service: Any = None,
    ) -> None:
        """Initialize Calendar client.

        Args:
            auth: Authorized GoogleOAuth used to build the service lazily.
            service: Pre-built Calendar v3 service; takes precedence over auth.
        """
        if auth is None and service is None:
            raise ValueError("CalendarClient needs either auth or service")
        self._auth = auth
        self._service = service

    def _get_service(self) -> Any:
        """Get or create Calendar API service."""
        if self._service is None:
            self._service = self._auth.build_service("calendar", "v3")
        return self._service

    def _execute(self, request: Any, what: str) -> dict:
        try:
            return request.execute()
        except HttpError as e:
            raise CalendarAPIError(
                f"Unable to {what}: {e.reason}", status_code=e.resp.status
            ) from e
        except (RefreshError, TransportError, httplib2.HttpLib2Error) as e:
            raise CalendarAPIError(f"Unable to {what}: {e}") from e

    # =========================================================================
    # Calendars
    # =========================================================================

    def list_calendars(self) -> list[Calendar]:
        """List all calendars on the user's calendar list.

        Returns:
            List of Calendar objects, in listing order.

        Raises:
            CalendarAPIError: If the request fails.
        """
        service = self._get_service()
        kwargs: dict[str, Any] = {}
        calendars = []
        while True:
            results = self._execute(service.calendarList().list(**kwargs), "list calendars")
            calendars.extend(self._parse_calendar(item) for item in results.get("items", []))
            page_token = results.get("nextPageToken")
            if not page_token:
                break
            kwargs["pageToken"] = page_token

        logger.debug(f"Found {len(calendars)} calendars")
        return calendars

    def _parse_calendar(self, data: dict) -> Calendar:
        """Parse calendar from API response."""
        return Calendar(
            id=data["id"],
            summary=data.get("summary", ""),
            description=data.get("description", ""),
        )

    # =========================================================================
    # Events
    # =========================================================================

    def list_events(
        self,
        calendar_id: str,
        time_min: datetime | str,
        time_max: datetime | str,
    ) -> list[Event]:
        """List events in a calendar within ``[time_min, time_max)``.

        Deleted events are excluded and recurring events are expanded into
        single occurrences, ordered by start time.

        Args:
            calendar_id: Calendar ID or "primary" for the main calendar.
            time_min: Start of time range (inclusive).
            time_max: End of time range (exclusive).

        Returns:
            List of Event objects.

        Raises:
            CalendarAPIError: If the request fails.
        """
        service = self._get_service()
        time_min_str = self._format_datetime(time_min)
        time_max_str = self._format_datetime(time_max)
        logger.debug(
            f"Querying calendar {calendar_id} for events from {time_min_str} to {time_max_str}"
        )

        kwargs: dict[str, Any] = {
            "calendarId": calendar_id,
            "showDeleted": False,
            "singleEvents": True,
            "orderBy": "startTime",
            "timeMin": time_min_str,
            "timeMax": time_max_str,
        }

        events = []
        while True:
            results = self._execute(
                service.events().list(**kwargs),
                f"retrieve events from calendar {calendar_id}",
            )
            events.extend(self._parse_event(item, calendar_id) for item in results.get("items", []))
            page_token = results.get("nextPageToken")
            if not page_token:
                break
            kwargs["pageToken"] = page_token

        if events:
            logger.debug(f"Found {len(events)} events")
        else:
            logger.debug("No upcoming events found.")
        return events

    def list_upcoming_events(
        self,
        calendar_id: str,
        duration: str,
        now: datetime | None = None,
    ) -> list[Event]:
        """List events from local midnight today to the end of the duration.

        Args:
            calendar_id: Calendar ID.
            duration: "1d", "1w" or "1m".
            now: Reference time; defaults to the current local time.

        Raises:
            InvalidDurationError: If the duration is not recognized.
            CalendarAPIError: If the request fails.
        """
        time_min, time_max = event_window(duration, now)
        return self.list_events(calendar_id, time_min, time_max)

    def _format_datetime(self, dt: datetime | str) -> str:
        """Format datetime for API."""
        if isinstance(dt, str):
            return dt
        return dt.isoformat() + "Z" if dt.tzinfo is None else dt.isoformat()

    def _parse_event(self, data: dict, calendar_id: str | None = None) -> Event:
        """Parse event from API response."""
        start_data = data.get("start", {})
        return Event(
            id=data.get("id", ""),
            summary=data.get("summary", "").strip(),
            start_date=start_data.get("date"),
            start_date_time=start_data.get("dateTime"),
            calendar_id=calendar_id,
        )
