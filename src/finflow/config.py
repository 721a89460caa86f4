"""Application settings read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_DB_PATH = Path.home() / ".finflow" / "finflow.db"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got '{value}'") from e


@dataclass(frozen=True)
class Settings:
    """Runtime settings for finflow.

    Attributes:
        database_path: SQLite database file
        log_level: Name of the console/file log level
        log_file: Optional path of the rotating JSON log file
        schedule_hour: Hour of the daily due-payment job
        schedule_minute: Minute of the daily due-payment job
    """

    database_path: str
    log_level: str = "INFO"
    log_file: Optional[str] = None
    schedule_hour: int = 5
    schedule_minute: int = 0


def load_settings() -> Settings:
    """Build Settings from FINFLOW_* environment variables.

    Raises:
        ValueError: If a numeric setting is malformed or out of range
    """
    settings = Settings(
        database_path=os.getenv("FINFLOW_DB_PATH") or str(DEFAULT_DB_PATH),
        log_level=(os.getenv("FINFLOW_LOG_LEVEL") or "INFO").upper(),
        log_file=os.getenv("FINFLOW_LOG_FILE") or None,
        schedule_hour=_env_int("FINFLOW_SCHEDULE_HOUR", 5),
        schedule_minute=_env_int("FINFLOW_SCHEDULE_MINUTE", 0),
    )
    if not 0 <= settings.schedule_hour <= 23:
        raise ValueError(f"FINFLOW_SCHEDULE_HOUR must be 0-23, got {settings.schedule_hour}")
    if not 0 <= settings.schedule_minute <= 59:
        raise ValueError(
            f"FINFLOW_SCHEDULE_MINUTE must be 0-59, got {settings.schedule_minute}"
        )
    return settings
