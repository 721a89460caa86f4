"""Persistence for finflow: the Database interface and its SQLAlchemy backend."""

from finflow.database.base import Database
from finflow.database.factories import create_database, create_sqlite_database
from finflow.database.sqlalchemy_db import SQLAlchemyDatabase

__all__ = ["Database", "SQLAlchemyDatabase", "create_database", "create_sqlite_database"]
