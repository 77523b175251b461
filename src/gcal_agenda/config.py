"""Run configuration.

Credential files live in the working directory by default:
    credentials.json - Google OAuth client credentials
    token.json       - cached OAuth token (created on first authorization)

Both locations can be moved with environment variables, which may also be
placed in a .env file in the working directory:
    GCAL_AGENDA_CREDENTIALS=/path/to/credentials.json
    GCAL_AGENDA_TOKEN=/path/to/token.json

Command-line options take precedence over both.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gcal_agenda.formatting import OutputFormat

ENV_FILE = Path(".env")
DEFAULT_CREDENTIALS = Path("credentials.json")
DEFAULT_TOKEN = Path("token.json")

CREDENTIALS_ENV = "GCAL_AGENDA_CREDENTIALS"
TOKEN_ENV = "GCAL_AGENDA_TOKEN"

DEFAULT_DURATION = "1d"


@dataclass(frozen=True)
class Settings:
    """Everything a single run needs, built once at startup."""

    output_format: OutputFormat
    duration: str = DEFAULT_DURATION
    debug: bool = False
    include_empty_calendars: bool = False
    credentials_path: Path = DEFAULT_CREDENTIALS
    token_path: Path = DEFAULT_TOKEN


def load_env_file(env_path: Path = ENV_FILE) -> dict[str, str]:
    """Load environment variables from a file.

    Variables already present in the environment are left untouched.

    Args:
        env_path: Path to .env file.

    Returns:
        Dictionary of loaded variables.
    """
    loaded = {}
    if not env_path.exists():
        return loaded

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()

            # Remove surrounding quotes
            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]

            if key and key not in os.environ:
                os.environ[key] = value
                loaded[key] = value

    return loaded


def resolve_path(override: str | Path | None, env_var: str, default: Path) -> Path:
    """Pick a file location: explicit override, then environment, then default."""
    if override:
        return Path(override).expanduser()
    from_env = os.environ.get(env_var)
    if from_env:
        return Path(from_env).expanduser()
    return default
