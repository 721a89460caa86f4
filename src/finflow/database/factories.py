"""Factories for database instances."""

from pathlib import Path
from typing import Optional

from sqlalchemy.engine import make_url

from finflow.config import load_settings
from finflow.database.sqlalchemy_db import SQLAlchemyDatabase
from finflow.logging_config import get_logger

logger = get_logger(__name__)


def create_database(database_url: str) -> SQLAlchemyDatabase:
    """Create a database for any SQLAlchemy URL, e.g. postgresql://user@host/finflow."""
    logger.debug("Opening database %s", make_url(database_url).render_as_string(hide_password=True))
    return SQLAlchemyDatabase(database_url)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Database file. Defaults to the configured path
            (FINFLOW_DB_PATH, else ~/.finflow/finflow.db), whose directory
            is created if missing.

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        path = Path(load_settings().database_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        database_path = str(path)
    return create_database(f"sqlite:///{database_path}")
