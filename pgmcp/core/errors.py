"""Error kinds surfaced to tool callers."""

from __future__ import annotations


class ToolError(Exception):
    """Base class for failures reported back to the invoking client.

    Attributes:
        kind: Stable error kind name placed in the failure envelope.
    """

    kind: str = "ToolError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DatabaseConnectionError(ToolError):
    """Raised when no connection can be obtained from the provider."""

    kind = "ConnectionError"


class InvalidParameters(ToolError):
    """Raised when a tool argument is missing or has the wrong shape."""

    kind = "InvalidParameters"


class ValueShapeError(InvalidParameters):
    """Raised when a value cannot be coerced into a bound parameter."""

    kind = "ValueShapeError"


class QueryExecutionError(ToolError):
    """Raised when the database rejects a statement."""

    kind = "QueryExecutionError"
