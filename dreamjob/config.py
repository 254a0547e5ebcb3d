"""
Runtime settings read from the environment (and .env).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .env import load_env
from .errors import ConfigError

DEFAULT_DATABASE_URL = "sqlite:///data/dreamjob.db"
DEFAULT_DB_TIMEOUT = 5.0
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    db_timeout: float = DEFAULT_DB_TIMEOUT
    log_level: str = "INFO"
    log_dir: Path = Path("logs")


def _parse_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigError(f"DREAMJOB_DB_TIMEOUT must be a number, got {raw!r}")
    if timeout <= 0:
        raise ConfigError(f"DREAMJOB_DB_TIMEOUT must be positive, got {raw!r}")
    return timeout


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build settings from environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ`` (no .env loading then)

    Returns:
        Settings instance

    Raises:
        ConfigError: If a value is malformed
    """
    if environ is None:
        load_env()
        environ = os.environ

    level = environ.get("DREAMJOB_LOG_LEVEL", "INFO").upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"DREAMJOB_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")

    return Settings(
        database_url=environ.get("DREAMJOB_DATABASE_URL", DEFAULT_DATABASE_URL),
        db_timeout=_parse_timeout(environ.get("DREAMJOB_DB_TIMEOUT", str(DEFAULT_DB_TIMEOUT))),
        log_level=level,
        log_dir=Path(environ.get("DREAMJOB_LOG_DIR", "logs")),
    )
