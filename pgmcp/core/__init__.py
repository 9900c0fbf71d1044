"""Public core API for tool decoding, statement building, and dispatch."""

from .conditions import Assignment, C, Condition
from .conninfo import ConnectionInfo, mask_password
from .dispatcher import TOOL_CATALOG, ToolDispatcher, ToolResponse, ToolSpec
from .errors import (
    DatabaseConnectionError,
    InvalidParameters,
    QueryExecutionError,
    ToolError,
    ValueShapeError,
)
from .executor import Executor
from .marshal import marshal
from .params import PARAMS_BY_TOOL, ToolParams, decode
from .results import Column, ExecutionOutcome, ResultSet, RowsAffected, RowsReturned
from .statements import Statement
from .values import TypedValue, TypeFamily, ValueKind, from_column, to_bound

__all__ = [
    "Assignment",
    "C",
    "Condition",
    "Column",
    "ConnectionInfo",
    "DatabaseConnectionError",
    "ExecutionOutcome",
    "Executor",
    "InvalidParameters",
    "PARAMS_BY_TOOL",
    "QueryExecutionError",
    "ResultSet",
    "RowsAffected",
    "RowsReturned",
    "Statement",
    "TOOL_CATALOG",
    "ToolDispatcher",
    "ToolError",
    "ToolParams",
    "ToolResponse",
    "ToolSpec",
    "TypeFamily",
    "TypedValue",
    "ValueKind",
    "ValueShapeError",
    "decode",
    "from_column",
    "marshal",
    "mask_password",
    "to_bound",
]
