"""
Pytest configuration and shared fixtures.
"""

import json
from unittest.mock import MagicMock

import pytest

CALENDAR_READONLY = "https://www.googleapis.com/auth/calendar.readonly"


@pytest.fixture
def mock_credentials(tmp_path):
    """Create a mock client secret file."""
    creds = {
        "installed": {
            "client_id": "test-client-id.apps.googleusercontent.com",
            "client_secret": "test-client-secret",
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }
    creds_path = tmp_path / "credentials.json"
    with open(creds_path, "w") as f:
        json.dump(creds, f)
    return creds_path


@pytest.fixture
def mock_token(tmp_path):
    """Create a mock token file with calendar read access."""
    token = {
        "token": "test-access-token",
        "refresh_token": "test-refresh-token",
        "token_uri": "https://oauth2.googleapis.com/token",
        "client_id": "test-client-id.apps.googleusercontent.com",
        "client_secret": "test-client-secret",
        "scopes": [CALENDAR_READONLY],
        "type": "Bearer",
        "expiry": "2099-01-01T00:00:00Z",
    }
    token_path = tmp_path / "token.json"
    with open(token_path, "w") as f:
        json.dump(token, f)
    return token_path


def make_service(calendars, events_by_calendar=None):
    """Build a fake Calendar v3 service.

    Args:
        calendars: calendarList items, returned as a single page.
        events_by_calendar: Mapping of calendar ID to event items.
    """
    events_by_calendar = events_by_calendar or {}
    service = MagicMock()
    service.calendarList.return_value.list.return_value.execute.return_value = {
        "items": calendars
    }

    def list_events(**kwargs):
        request = MagicMock()
        request.execute.return_value = {
            "items": events_by_calendar.get(kwargs["calendarId"], [])
        }
        return request

    service.events.return_value.list.side_effect = list_events
    return service


@pytest.fixture
def sample_calendars():
    """Calendar list with a named, an unnamed and a whitespace-named calendar."""
    return [
        {"id": "work@example.com", "summary": "Work", "description": "Work"},
        {"id": "holidays@example.com", "summary": "Holidays"},
        {"id": "blank@example.com", "summary": "Blank", "description": "   "},
    ]


@pytest.fixture
def sample_events():
    """Events keyed by calendar ID."""
    return {
        "work@example.com": [
            {
                "id": "evt1",
                "summary": "  Lunch ",
                "start": {"dateTime": "2025-01-05T12:30:00-05:00"},
            },
            {
                "id": "evt2",
                "summary": "Offsite",
                "start": {"date": "2025-01-06"},
            },
        ],
        "holidays@example.com": [
            {"id": "evt3", "summary": "Holiday", "start": {"date": "2025-01-06"}},
        ],
        "blank@example.com": [
            {"id": "evt4", "summary": "Hidden", "start": {"date": "2025-01-07"}},
        ],
    }


@pytest.fixture
def service_factory():
    """Factory for fake Calendar v3 services."""
    return make_service
