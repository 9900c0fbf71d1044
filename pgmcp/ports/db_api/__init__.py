"""DB-API adapter, dialect, and pool exports."""

from .database import Database
from .dialects import Dialect, PostgresDialect, SQLiteDialect
from .pool_connector import ConnectionPool

__all__ = [
    "ConnectionPool",
    "Database",
    "Dialect",
    "PostgresDialect",
    "SQLiteDialect",
]
