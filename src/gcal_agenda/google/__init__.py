"""Google OAuth for the Calendar API."""

from gcal_agenda.google.exceptions import (
    CredentialsNotFoundError,
    GoogleAuthError,
    ScopeMismatchError,
    TokenError,
)
from gcal_agenda.google.oauth import GoogleOAuth, console_prompt

__all__ = [
    "GoogleOAuth",
    "console_prompt",
    "GoogleAuthError",
    "CredentialsNotFoundError",
    "TokenError",
    "ScopeMismatchError",
]
