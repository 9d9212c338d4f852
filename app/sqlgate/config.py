"""
Environment configuration for the database MCP server.

Values are read from the process environment, with a ``.env`` file in the
working directory loaded first when one exists.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping

from dotenv import load_dotenv

DEFAULT_DATABASE_PATH = os.path.join("data", "app.db")
DEFAULT_MAX_RECORD_COUNT = 100
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Resolved server settings."""

    database_path: str
    read_only: bool
    max_record_count: int
    log_level: str


def _parse_max_record_count(raw: str | None) -> int:
    if raw is None:
        return DEFAULT_MAX_RECORD_COUNT
    try:
        value = int(raw.strip())
    except ValueError:
        return DEFAULT_MAX_RECORD_COUNT
    return value if value > 0 else DEFAULT_MAX_RECORD_COUNT


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from an environment mapping (``os.environ`` by default).

    Args:
        environ: Mapping to read variables from.

    Returns:
        A frozen Settings instance.
    """
    env = os.environ if environ is None else environ
    return Settings(
        database_path=env.get("DATABASE_PATH", DEFAULT_DATABASE_PATH),
        read_only=env.get("READONLY", "").strip().lower() == "true",
        max_record_count=_parse_max_record_count(env.get("MAX_RESULT_SET")),
        log_level=env.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loading ``.env`` on first use."""
    load_dotenv()
    return load_settings()
