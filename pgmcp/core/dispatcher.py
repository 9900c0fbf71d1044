"""Tool name dispatch: decode, build, execute, marshal, respond.

Each invocation walks `received -> decoded -> built -> executed ->
marshalled -> responded`, or stops at `failed` as soon as a stage raises a
`ToolError`. Nothing is retried and no state survives the call.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Type

from . import statements
from .contracts import SessionProvider
from .conninfo import ConnectionInfo
from .errors import QueryExecutionError, ToolError
from .executor import Executor
from .marshal import first_value, marshal
from .params import (
    ColumnExistsParams,
    CountRowsParams,
    DeleteDataParams,
    ExecuteRawQueryParams,
    InsertParams,
    NoParams,
    QueryParams,
    RelationshipsParams,
    SchemaParams,
    TableNameParams,
    TableSampleParams,
    ToolParams,
    UpdateDataParams,
    decode,
)
from .results import ExecutionOutcome, ResultSet, RowsAffected, RowsReturned
from .types import RawArguments, Records

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    """One catalog entry."""

    name: str
    description: str
    params: Type[ToolParams]

    def input_schema(self) -> dict[str, Any]:
        return self.params.json_schema()


TOOL_CATALOG: tuple[ToolSpec, ...] = (
    ToolSpec("query_data", "Execute a SELECT query and return results as JSON", QueryParams),
    ToolSpec("get_schema", "Get column information for database tables", SchemaParams),
    ToolSpec("insert_data", "Insert a row into a database table", InsertParams),
    ToolSpec("list_tables", "List all tables in the database", NoParams),
    ToolSpec(
        "describe_table",
        "Get detailed information about a table including indexes and constraints",
        TableNameParams,
    ),
    ToolSpec("count_rows", "Count rows in a table with optional WHERE conditions", CountRowsParams),
    ToolSpec("table_exists", "Check if a table exists in the database", TableNameParams),
    ToolSpec("column_exists", "Check if a column exists in a table", ColumnExistsParams),
    ToolSpec("get_table_sample", "Get a sample of rows from a table", TableSampleParams),
    ToolSpec(
        "update_data",
        "Update rows in a table with specified values and conditions",
        UpdateDataParams,
    ),
    ToolSpec("delete_data", "Delete rows from a table based on specified conditions", DeleteDataParams),
    ToolSpec(
        "execute_raw_query",
        "Execute any SQL query including INSERT, UPDATE, DELETE (use with caution)",
        ExecuteRawQueryParams,
    ),
    ToolSpec("get_relationships", "Get foreign key relationships for tables", RelationshipsParams),
    ToolSpec("get_connection_status", "Get database connection status and basic info", NoParams),
)


@dataclass(frozen=True)
class ToolResponse:
    """Success or failure envelope handed back to the transport.

    Attributes:
        tool: Invoked tool name.
        ok: Whether the invocation reached `responded`.
        payload: JSON-ready result (success only).
        error_kind: `ToolError.kind` of the failure (failure only).
        message: Human-readable failure message (failure only).
    """

    tool: str
    ok: bool
    payload: Any = None
    error_kind: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, tool: str, payload: Any) -> ToolResponse:
        return cls(tool=tool, ok=True, payload=payload)

    @classmethod
    def failure(cls, tool: str, error: ToolError) -> ToolResponse:
        return cls(tool=tool, ok=False, error_kind=error.kind, message=error.message)

    @property
    def text(self) -> str:
        """Render the envelope as the text content sent to the client."""

        if not self.ok:
            return f"{self.error_kind}: {self.message}"
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload, indent=2, default=str)


class ToolDispatcher:
    """Maps tool names onto the decode/build/execute/marshal pipeline."""

    def __init__(
        self,
        provider: SessionProvider,
        *,
        connection_info: Optional[ConnectionInfo] = None,
    ):
        self.dialect = provider.dialect
        self.executor = Executor(provider)
        self.connection_info = connection_info or ConnectionInfo()
        self._handlers: dict[str, Callable[[Any], Any]] = {
            "query_data": self._query_data,
            "get_schema": self._get_schema,
            "insert_data": self._insert_data,
            "list_tables": self._list_tables,
            "describe_table": self._describe_table,
            "count_rows": self._count_rows,
            "table_exists": self._table_exists,
            "column_exists": self._column_exists,
            "get_table_sample": self._get_table_sample,
            "update_data": self._update_data,
            "delete_data": self._delete_data,
            "execute_raw_query": self._execute_raw_query,
            "get_relationships": self._get_relationships,
            "get_connection_status": self._get_connection_status,
        }

    @staticmethod
    def catalog() -> tuple[ToolSpec, ...]:
        return TOOL_CATALOG

    def dispatch(self, tool: str, raw_arguments: Optional[RawArguments] = None) -> ToolResponse:
        """Run one tool invocation and wrap its outcome or failure."""

        logger.debug("%s: received", tool)
        try:
            params = decode(tool, raw_arguments)
            logger.debug("%s: decoded %r", tool, type(params).__name__)
            payload = self._handlers[tool](params)
        except ToolError as exc:
            logger.warning("%s failed with %s: %s", tool, exc.kind, exc.message)
            return ToolResponse.failure(tool, exc)
        logger.debug("%s: responded", tool)
        return ToolResponse.success(tool, payload)

    def _execute(self, statement: statements.Statement) -> ExecutionOutcome:
        logger.debug("built: %s (%d bound value(s))", statement.sql, len(statement.values))
        outcome = self.executor.execute(statement)
        logger.debug("executed: %s", type(outcome).__name__)
        return outcome

    def _rows(self, statement: statements.Statement) -> ResultSet:
        outcome = self._execute(statement)
        if not isinstance(outcome, RowsReturned):
            raise QueryExecutionError("Statement did not return rows.")
        return outcome.result_set

    def _affected(self, statement: statements.Statement) -> int:
        outcome = self._execute(statement)
        if not isinstance(outcome, RowsAffected):
            raise QueryExecutionError("Statement did not report an affected-row count.")
        logger.debug("marshalled: %d row(s) affected", outcome.count)
        return outcome.count

    @staticmethod
    def _records(result_set: ResultSet) -> Records:
        records = marshal(result_set)
        logger.debug("marshalled: %d record(s)", len(records))
        return records

    @staticmethod
    def _scalar(result_set: ResultSet) -> Any:
        value = first_value(result_set)
        logger.debug("marshalled: scalar %s", type(value).__name__)
        return value

    def _query_data(self, params: QueryParams) -> Any:
        rows = self._records(self._rows(statements.build_query(params)))
        return {"rows": rows, "row_count": len(rows)}

    def _get_schema(self, params: SchemaParams) -> Any:
        return self._records(self._rows(statements.build_schema(self.dialect, params.table_name)))

    def _insert_data(self, params: InsertParams) -> Any:
        self._affected(statements.build_insert(self.dialect, params))
        return f"Successfully inserted into {params.table_name}"

    def _list_tables(self, params: NoParams) -> Any:
        result_set = self._rows(statements.build_list_tables(self.dialect))
        return [next(iter(record.values())) for record in self._records(result_set)]

    def _describe_table(self, params: TableNameParams) -> Any:
        columns = self._records(self._rows(statements.build_describe_columns(self.dialect, params.table_name)))
        indexes = self._records(self._rows(statements.build_describe_indexes(self.dialect, params.table_name)))
        return {"table_name": params.table_name, "columns": columns, "indexes": indexes}

    def _count_rows(self, params: CountRowsParams) -> Any:
        count = self._scalar(self._rows(statements.build_count(self.dialect, params)))
        return {"table_name": params.table_name, "count": int(count or 0)}

    def _table_exists(self, params: TableNameParams) -> Any:
        exists = self._scalar(self._rows(statements.build_table_exists(self.dialect, params.table_name)))
        return {"table_name": params.table_name, "exists": bool(exists)}

    def _column_exists(self, params: ColumnExistsParams) -> Any:
        statement = statements.build_column_exists(
            self.dialect, params.table_name, params.column_name
        )
        exists = self._scalar(self._rows(statement))
        return {
            "table_name": params.table_name,
            "column_name": params.column_name,
            "exists": bool(exists),
        }

    def _get_table_sample(self, params: TableSampleParams) -> Any:
        rows = self._records(self._rows(statements.build_sample(self.dialect, params)))
        return {"table_name": params.table_name, "rows": rows, "count": len(rows)}

    def _update_data(self, params: UpdateDataParams) -> Any:
        count = self._affected(statements.build_update(self.dialect, params))
        return {"table_name": params.table_name, "rows_affected": count}

    def _delete_data(self, params: DeleteDataParams) -> Any:
        count = self._affected(statements.build_delete(self.dialect, params))
        return {"table_name": params.table_name, "rows_affected": count}

    def _execute_raw_query(self, params: ExecuteRawQueryParams) -> Any:
        if params.params:
            logger.warning(
                "execute_raw_query ignores %d supplied parameter(s); values are not bound",
                len(params.params),
            )
        outcome = self._execute(statements.build_raw(params))
        if isinstance(outcome, RowsReturned):
            rows = self._records(outcome.result_set)
            return {"rows": rows, "count": len(rows)}
        return {"rows_affected": outcome.count}

    def _get_relationships(self, params: RelationshipsParams) -> Any:
        return self._records(self._rows(statements.build_relationships(self.dialect, params.table_name)))

    def _get_connection_status(self, params: NoParams) -> Any:
        version = self._scalar(self._rows(statements.build_version(self.dialect)))
        info = self.connection_info
        return {
            "connected": True,
            "database": info.database,
            "user": info.user,
            "host": info.host,
            "version": version,
        }
