"""Errors raised while authorizing access to the user's calendars."""

from __future__ import annotations


class GoogleAuthError(Exception):
    """The calendar credential store could not produce usable credentials."""


class CredentialsNotFoundError(GoogleAuthError):
    """The OAuth client secret file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Credentials file not found at {path}. Create a desktop OAuth client with "
            "Calendar API access in the Google Cloud Console and save its client secret there."
        )


class TokenError(GoogleAuthError):
    """No cached token could be authorized, exchanged or refreshed."""


class ScopeMismatchError(GoogleAuthError):
    """A token grant did not include calendar read access."""

    def __init__(self, missing_scopes: set[str]):
        self.missing_scopes = missing_scopes
        scopes = ", ".join(sorted(missing_scopes))
        super().__init__(f"Token grant is missing calendar scopes: {scopes}")
