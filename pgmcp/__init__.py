"""PostgreSQL database tools exposed over the Model Context Protocol."""

from .core import (
    ConnectionInfo,
    DatabaseConnectionError,
    InvalidParameters,
    QueryExecutionError,
    ToolDispatcher,
    ToolError,
    ToolResponse,
    TypedValue,
    ValueShapeError,
    mask_password,
)
from .ports import ConnectionPool, Database, PostgresDialect, SQLiteDialect

__version__ = "0.1.0"

__all__ = [
    "ConnectionInfo",
    "ConnectionPool",
    "Database",
    "DatabaseConnectionError",
    "InvalidParameters",
    "PostgresDialect",
    "QueryExecutionError",
    "SQLiteDialect",
    "ToolDispatcher",
    "ToolError",
    "ToolResponse",
    "TypedValue",
    "ValueShapeError",
    "mask_password",
]
