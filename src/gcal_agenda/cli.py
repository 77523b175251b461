"""CLI for gcal-agenda - print upcoming Google Calendar events.

Usage:
    gcal-agenda --format remind                 # Today's events as remind(1) lines
    gcal-agenda --format org --duration 1w      # Next seven days as an org outline
    gcal-agenda --format org --emptycal         # Include calendars without a description
    gcal-agenda --format remind --debug         # Verbose logging on stderr

The first run asks for an authorization code on standard input and caches
the resulting token; later runs are non-interactive.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from typing import TextIO

from gcal_agenda.agenda import write_agenda
from gcal_agenda.calendar import DURATIONS, CalendarClient, CalendarError
from gcal_agenda.config import (
    CREDENTIALS_ENV,
    DEFAULT_CREDENTIALS,
    DEFAULT_DURATION,
    DEFAULT_TOKEN,
    TOKEN_ENV,
    Settings,
    load_env_file,
    resolve_path,
)
from gcal_agenda.formatting import OutputFormat
from gcal_agenda.google import GoogleAuthError, GoogleOAuth, console_prompt
from gcal_agenda.google.oauth import AuthorizationPrompt

logger = logging.getLogger("gcal_agenda")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(filename)s:%(lineno)d] %(message)s"


class LogFormatter(logging.Formatter):
    """Local timestamps with milliseconds and UTC offset (2025-01-05 08:00:00.123+0100)."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        created = datetime.fromtimestamp(record.created).astimezone()
        return f"{created:%Y-%m-%d %H:%M:%S}.{int(record.msecs):03d}{created:%z}"


def configure_logging(debug: bool = False) -> None:
    """Send timestamped log lines to stderr.

    Only this package logs at INFO/DEBUG; third-party loggers stay at WARNING.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(LogFormatter(LOG_FORMAT))
    logging.basicConfig(level=logging.WARNING, handlers=[handler])
    logger.setLevel(logging.DEBUG if debug else logging.INFO)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gcal-agenda",
        description="Print upcoming Google Calendar events for remind or org-mode",
    )
    parser.add_argument(
        "--format",
        type=OutputFormat,
        choices=list(OutputFormat),
        required=True,
        help="Output format (remind|org)",
    )
    parser.add_argument(
        "--duration",
        type=str,
        default=DEFAULT_DURATION,
        help=f"Duration from now to check ({'|'.join(DURATIONS)}, default: {DEFAULT_DURATION})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Debug logging",
    )
    parser.add_argument(
        "--emptycal",
        action="store_true",
        help="Include calendars with an empty description",
    )
    parser.add_argument(
        "--credentials",
        type=str,
        default=None,
        help=f"OAuth client secret file (env {CREDENTIALS_ENV}, default: {DEFAULT_CREDENTIALS})",
    )
    parser.add_argument(
        "--token",
        type=str,
        default=None,
        help=f"Cached token file (env {TOKEN_ENV}, default: {DEFAULT_TOKEN})",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Build the run configuration from parsed arguments and the environment."""
    return Settings(
        output_format=args.format,
        duration=args.duration,
        debug=args.debug,
        include_empty_calendars=args.emptycal,
        credentials_path=resolve_path(args.credentials, CREDENTIALS_ENV, DEFAULT_CREDENTIALS),
        token_path=resolve_path(args.token, TOKEN_ENV, DEFAULT_TOKEN),
    )


def run(
    settings: Settings,
    prompt: AuthorizationPrompt = console_prompt,
    out: TextIO | None = None,
) -> int:
    """Authenticate, then write the agenda.

    Returns:
        0 on success, 1 on any fatal error.
    """
    out = out or sys.stdout

    try:
        auth = GoogleOAuth(
            credentials_path=settings.credentials_path,
            token_path=settings.token_path,
        )
        auth.ensure_authorized(prompt)
        client = CalendarClient(auth)
        count = write_agenda(client, settings, out)
    except (GoogleAuthError, CalendarError, OSError) as e:
        logger.error(str(e))
        return 1

    logger.debug(f"Wrote {count} events")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv or sys.argv[1:])

    load_env_file()
    settings = settings_from_args(args)
    configure_logging(settings.debug)

    return run(settings)


if __name__ == "__main__":
    sys.exit(main())
