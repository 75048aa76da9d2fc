"""Database layer for flipbudget application."""

from flipbudget.database.base import Database
from flipbudget.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
