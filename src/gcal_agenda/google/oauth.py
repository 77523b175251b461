"""Google OAuth management using Authlib.

This module provides the read-only OAuth 2.0 credential store used to talk to
the Google Calendar API:
- Client configuration loaded from the client secret file
- Token cache on local disk, written with owner-only permissions
- One-time interactive authorization through a pluggable prompt
- Automatic token refresh

Files (see gcal_agenda.config for how the paths are resolved):
    credentials.json - OAuth client credentials
    token.json       - OAuth tokens
"""

import json
import logging
import os
import sys
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

import requests
from authlib.integrations.requests_client import OAuth2Session, OAuthError
from authlib.oauth2 import OAuth2Error
from google.oauth2.credentials import Credentials as GoogleCredentials
from googleapiclient.discovery import build

from gcal_agenda.config import DEFAULT_CREDENTIALS, DEFAULT_TOKEN
from gcal_agenda.google.exceptions import (
    CredentialsNotFoundError,
    GoogleAuthError,
    ScopeMismatchError,
    TokenError,
)

logger = logging.getLogger(__name__)


SCOPES = {
    "calendar_readonly": "https://www.googleapis.com/auth/calendar.readonly",
}

# Takes the authorization URL, returns the pasted code or redirect URL.
AuthorizationPrompt = Callable[[str], str]


def console_prompt(authorization_url: str) -> str:
    """Ask for an authorization code on standard input.

    The URL goes to the log (stderr) so standard output stays reserved for
    agenda text.
    """
    logger.info(
        "Go to the following link in your browser, then paste the "
        f"authorization code (or the full redirect URL):\n{authorization_url}"
    )
    line = sys.stdin.readline()
    if not line:
        raise TokenError("Unable to read authorization code: end of input")
    return line.strip()


class GoogleOAuth:
    """Google OAuth management using Authlib.

    Handles the authorization code flow, token caching and refresh, and
    Google API service creation.

    Example:
        >>> auth = GoogleOAuth(credentials_path="credentials.json")
        >>> auth.ensure_authorized(console_prompt)
        >>> calendar_service = auth.build_service("calendar", "v3")
    """

    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    REDIRECT_URI = "http://localhost"

    def __init__(
        self,
        scopes: list[str] | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        token_path: str | Path | None = None,
        credentials_path: str | Path | None = None,
    ):
        """Initialize Google OAuth.

        Args:
            scopes: List of scope names (e.g., ["calendar_readonly"]) or full URLs.
                   If None, defaults to ["calendar_readonly"].
            client_id: OAuth client ID (loaded from credentials file if not provided).
            client_secret: OAuth client secret (loaded from credentials file if not provided).
            token_path: Path to store/load tokens. Defaults to ./token.json.
            credentials_path: Path to OAuth credentials file. Defaults to ./credentials.json.

        Raises:
            CredentialsNotFoundError: If the credentials file does not exist.
            GoogleAuthError: If the credentials file cannot be parsed.
        """
        self.token_path = Path(token_path) if token_path else DEFAULT_TOKEN
        self.credentials_path = Path(credentials_path) if credentials_path else DEFAULT_CREDENTIALS

        self.required_scopes = self._resolve_scopes(scopes or ["calendar_readonly"])

        if not client_id or not client_secret:
            client_id, client_secret = self._load_client_credentials()

        self.client_id = client_id
        self.client_secret = client_secret

        self.session = OAuth2Session(
            client_id=self.client_id,
            client_secret=self.client_secret,
            scope=" ".join(self.required_scopes),
            redirect_uri=self.REDIRECT_URI,
            token=self._load_token(),
            update_token=self._save_token,
            token_endpoint=self.TOKEN_URL,
            grant_type="refresh_token",
            token_endpoint_auth_method="client_secret_post",
        )

    def _resolve_scopes(self, scopes: list[str]) -> list[str]:
        """Resolve scope names to full URLs."""
        resolved = []
        for scope in scopes:
            if scope.startswith("https://"):
                resolved.append(scope)
            elif scope in SCOPES:
                resolved.append(SCOPES[scope])
            else:
                raise ValueError(
                    f"Unknown scope: {scope}. Use full URL or one of: {list(SCOPES.keys())}"
                )
        return resolved

    def _load_client_credentials(self) -> tuple[str, str]:
        """Load OAuth client credentials from file."""
        if not self.credentials_path.exists():
            raise CredentialsNotFoundError(str(self.credentials_path))

        try:
            with open(self.credentials_path) as f:
                creds = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise GoogleAuthError(
                f"Unable to read client secret file {self.credentials_path}: {e}"
            ) from e

        # Handle both web and installed app credential formats
        if "installed" in creds:
            app_creds = creds["installed"]
        elif "web" in creds:
            app_creds = creds["web"]
        else:
            raise GoogleAuthError(
                "Invalid credentials.json format. Expected 'installed' or 'web' key."
            )

        try:
            return app_creds["client_id"], app_creds["client_secret"]
        except KeyError as e:
            raise GoogleAuthError(f"Client secret file is missing {e}") from e

    def _load_token(self) -> dict[str, Any] | None:
        """Load token from storage.

        A missing, unreadable or under-scoped token file is treated as no
        token at all, which sends the caller through authorization again.
        """
        if not self.token_path.exists():
            logger.info(f"No cached token at {self.token_path}")
            return None

        try:
            with open(self.token_path) as f:
                token_data = json.load(f)

            # Convert expiry to timestamp if in ISO format
            expiry = token_data.get("expiry")
            if expiry and isinstance(expiry, str):
                dt = datetime.fromisoformat(expiry.replace("Z", "+00:00"))
                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=timezone.utc)
                expires_at = dt.timestamp()
            else:
                expires_at = expiry

            # Convert Google token format to Authlib format
            authlib_token = {
                "access_token": token_data["token"],
                "refresh_token": token_data.get("refresh_token"),
                "token_type": token_data.get("type", "Bearer"),
                "expires_at": expires_at,
                "scope": " ".join(token_data.get("scopes", [])),
            }
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to load token from {self.token_path}: {e}")
            return None

        current_scopes = set(token_data.get("scopes", []))
        missing = set(self.required_scopes) - current_scopes
        if missing:
            logger.warning(f"Cached token missing required scopes: {missing}")
            return None

        logger.debug(f"Loaded token with scopes: {current_scopes}")
        return authlib_token

    def _save_token(
        self,
        token: dict[str, Any],
        refresh_token: str | None = None,
        access_token: str | None = None,
    ):
        """Save token to storage (Authlib callback)."""
        if access_token:
            token["access_token"] = access_token
        if refresh_token and not token.get("refresh_token"):
            token["refresh_token"] = refresh_token

        token_scopes = set(token.get("scope", "").split())
        missing = set(self.required_scopes) - token_scopes
        if missing:
            raise ScopeMismatchError(missing)

        expires_at = token.get("expires_at")
        expiry = (
            datetime.fromtimestamp(expires_at, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
            if expires_at
            else None
        )

        # Google "authorized user" layout, readable by google-auth as well
        google_token = {
            "token": token["access_token"],
            "refresh_token": token.get("refresh_token"),
            "token_uri": self.TOKEN_URL,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scopes": sorted(token_scopes),
            "type": token.get("token_type", "Bearer"),
            "expiry": expiry,
        }

        logger.debug(f"Saving credential file to: {self.token_path}")
        fd = os.open(self.token_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            json.dump(google_token, f, indent=2)
        # os.open only applies the mode when it creates the file
        os.chmod(self.token_path, 0o600)

    def is_authorized(self) -> bool:
        """Check if we have a token carrying the required scopes."""
        if not self.session.token:
            return False

        token_scopes = set(self.session.token.get("scope", "").split())
        return set(self.required_scopes).issubset(token_scopes)

    def get_authorization_url(self) -> str:
        """Build the URL the user visits to grant access.

        Returns:
            Authorization URL requesting offline access.
        """
        authorization_url, _state = self.session.create_authorization_url(
            self.AUTHORIZE_URL,
            access_type="offline",
            prompt="consent",
        )
        return authorization_url

    def exchange_code(self, response: str) -> dict[str, Any]:
        """Exchange an authorization code for a token and cache it.

        Args:
            response: The bare authorization code, or the full redirect URL
                carrying it in its query string.

        Returns:
            The fetched OAuth token dict.

        Raises:
            TokenError: If no code can be found or the exchange fails.
        """
        code = self._extract_code(response)
        try:
            token = self.session.fetch_token(
                self.TOKEN_URL,
                grant_type="authorization_code",
                code=code,
                client_secret=self.client_secret,
            )
        except (OAuthError, OAuth2Error, requests.RequestException) as e:
            raise TokenError(f"Unable to retrieve token from web: {e}") from e

        # Written only once the exchange has succeeded
        self._save_token(token)
        return token

    def _extract_code(self, response: str) -> str:
        response = response.strip()
        if not response.startswith(("http://", "https://")):
            return response

        query = parse_qs(urlparse(response).query)
        if "error" in query:
            raise TokenError(f"Authorization was not granted: {query['error'][0]}")
        codes = query.get("code")
        if not codes:
            raise TokenError("Redirect URL does not contain an authorization code")
        return codes[0]

    def ensure_authorized(self, prompt: AuthorizationPrompt = console_prompt) -> None:
        """Run the interactive authorization flow if no usable token is cached.

        Args:
            prompt: Callable receiving the authorization URL and returning the
                code (or redirect URL) the user obtained.

        Raises:
            TokenError: If no code is supplied or the exchange fails.
        """
        if self.is_authorized():
            return

        url = self.get_authorization_url()
        response = prompt(url)
        if not response or not response.strip():
            raise TokenError("No authorization code provided")

        self.exchange_code(response)
        logger.info(f"Authorization complete, token cached at {self.token_path}")

    def get_credentials(self) -> GoogleCredentials:
        """Get Google Credentials object for API client libraries.

        Returns:
            Google Credentials object with current token.

        Raises:
            TokenError: If not authorized or token refresh fails.
        """
        if not self.is_authorized():
            raise TokenError("Not authorized or missing required scopes")

        # Refresh if expired
        expires_at = self.session.token.get("expires_at", 0)
        if expires_at and expires_at < datetime.now().timestamp():
            logger.debug("Token expired, refreshing...")
            try:
                self.session.refresh_token(
                    self.TOKEN_URL,
                    refresh_token=self.session.token.get("refresh_token"),
                )
            except (OAuthError, OAuth2Error, requests.RequestException) as e:
                raise TokenError(f"Failed to refresh token: {e}") from e

        return GoogleCredentials(
            token=self.session.token["access_token"],
            refresh_token=self.session.token.get("refresh_token"),
            token_uri=self.TOKEN_URL,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=self.required_scopes,
        )

    def build_service(self, service_name: str = "calendar", version: str = "v3"):
        """Build a Google API service with current credentials.

        Args:
            service_name: Name of the service.
            version: API version.

        Returns:
            Google API service object.
        """
        creds = self.get_credentials()
        return build(service_name, version, credentials=creds)
