"""Public port exports for concrete adapter implementations."""

from .db_api import ConnectionPool, Database, Dialect, PostgresDialect, SQLiteDialect

__all__ = [
    "ConnectionPool",
    "Database",
    "Dialect",
    "PostgresDialect",
    "SQLiteDialect",
]
