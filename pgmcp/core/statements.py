"""Statement construction for every tool operation.

Builders take a dialect plus the typed parameters of one tool and return a
`Statement`: SQL text whose identifiers were validated and quoted, the
ordered bound values for its placeholders, and whether the statement
yields rows. Data values never enter the SQL text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from . import catalog
from .conditions import assignments_from_mapping, conditions_from_mapping
from .contracts import DialectPort
from .errors import InvalidParameters
from .params import (
    CountRowsParams,
    DeleteDataParams,
    ExecuteRawQueryParams,
    InsertParams,
    QueryParams,
    TableSampleParams,
    UpdateDataParams,
)
from .query_builder import (
    CompiledFragment,
    clamp_limit,
    compile_set,
    compile_where,
    join_fragments,
    quote_column,
    quote_table,
    split_table_name,
)
from .types import QueryParams as DriverParams
from .values import TypedValue, to_bound

SAMPLE_DEFAULT_LIMIT = 10
SAMPLE_MAX_LIMIT = 100
WRITE_DEFAULT_LIMIT = 1000

_LEADING_KEYWORD = re.compile(r"^\s*([A-Za-z]+)")


@dataclass(frozen=True)
class Statement:
    """SQL text plus its bound values, in placeholder order.

    Attributes:
        sql: Statement text containing only validated identifiers and placeholders.
        values: Bound values, one per placeholder.
        returns_rows: Whether the executor should fetch rows or count affected rows.
    """

    sql: str
    values: Tuple[TypedValue, ...] = ()
    returns_rows: bool = True

    @property
    def params(self) -> DriverParams:
        """Driver-level positional parameters, or `None` when nothing is bound."""

        if not self.values:
            return None
        return [item.value for item in self.values]


def _bind(*raw: str) -> Tuple[TypedValue, ...]:
    return tuple(to_bound(item) for item in raw)


def _from_fragment(fragment: CompiledFragment, *, returns_rows: bool) -> Statement:
    return Statement(fragment.sql, fragment.values, returns_rows=returns_rows)


def build_query(params: QueryParams) -> Statement:
    """Caller-authored read query, run as-is."""

    return Statement(params.query, returns_rows=True)


def build_sample(dialect: DialectPort, params: TableSampleParams) -> Statement:
    limit = clamp_limit(params.limit, default=SAMPLE_DEFAULT_LIMIT, maximum=SAMPLE_MAX_LIMIT)
    table_sql = quote_table(params.table_name, dialect)
    return Statement(f"SELECT * FROM {table_sql} LIMIT {int(limit)}")


def build_insert(dialect: DialectPort, params: InsertParams) -> Statement:
    table_sql = quote_table(params.table_name, dialect)
    if not params.data:
        return Statement(f"INSERT INTO {table_sql} DEFAULT VALUES", returns_rows=False)

    column_sql = ", ".join(quote_column(name, dialect) for name in params.data)
    placeholders = ", ".join(dialect.placeholder() for _ in params.data)
    values = tuple(to_bound(value, field_name=name) for name, value in params.data.items())
    return Statement(
        f"INSERT INTO {table_sql} ({column_sql}) VALUES ({placeholders})",
        values,
        returns_rows=False,
    )


def build_count(dialect: DialectPort, params: CountRowsParams) -> Statement:
    table_sql = quote_table(params.table_name, dialect)
    where = compile_where(conditions_from_mapping(params.where_conditions), dialect)
    head = CompiledFragment(f"SELECT COUNT(*) AS count FROM {table_sql}")
    return _from_fragment(join_fragments(head, where), returns_rows=True)


def _bounded_target(dialect: DialectPort, table_sql: str, where: CompiledFragment, limit: int) -> CompiledFragment:
    """`WHERE <locator> IN (SELECT <locator> FROM t WHERE ... LIMIT ?)` capping touched rows."""

    locator = dialect.row_locator
    return join_fragments(
        CompiledFragment(f" WHERE {locator} IN (SELECT {locator} FROM {table_sql}"),
        where,
        CompiledFragment(f" LIMIT {dialect.placeholder()})", (to_bound(limit),)),
    )


def build_update(dialect: DialectPort, params: UpdateDataParams) -> Statement:
    table_sql = quote_table(params.table_name, dialect)
    set_clause = compile_set(assignments_from_mapping(params.values), dialect)
    where = compile_where(conditions_from_mapping(params.where_conditions), dialect)
    limit = params.limit if params.limit is not None else WRITE_DEFAULT_LIMIT
    fragment = join_fragments(
        CompiledFragment(f"UPDATE {table_sql}"),
        set_clause,
        _bounded_target(dialect, table_sql, where, limit),
    )
    return _from_fragment(fragment, returns_rows=False)


def build_delete(dialect: DialectPort, params: DeleteDataParams) -> Statement:
    table_sql = quote_table(params.table_name, dialect)
    where = compile_where(conditions_from_mapping(params.where_conditions), dialect)
    limit = params.limit if params.limit is not None else WRITE_DEFAULT_LIMIT
    fragment = join_fragments(
        CompiledFragment(f"DELETE FROM {table_sql}"),
        _bounded_target(dialect, table_sql, where, limit),
    )
    return _from_fragment(fragment, returns_rows=False)


def is_row_returning(sql: str) -> bool:
    """Classify raw SQL by its first keyword: only `SELECT` returns rows."""

    match = _LEADING_KEYWORD.match(sql)
    return bool(match) and match.group(1).upper() == "SELECT"


def build_raw(params: ExecuteRawQueryParams) -> Statement:
    return Statement(params.query, returns_rows=is_row_returning(params.query))


def _catalog_binds(dialect: DialectPort, table_name: str, *rest: str) -> Tuple[TypedValue, ...]:
    """Bound values for a per-table catalog query: `[schema,] table, *rest`."""

    schema, table = split_table_name(table_name, default_schema=dialect.default_schema)
    if catalog.binds_schema(dialect):
        return _bind(schema, table, *rest)
    if schema != dialect.default_schema:
        raise InvalidParameters(
            f"Invalid table name {table_name!r}: "
            f"only the {dialect.default_schema!r} schema can be inspected."
        )
    return _bind(table, *rest)


def build_list_tables(dialect: DialectPort) -> Statement:
    return Statement(catalog.list_tables_sql(dialect))


def build_schema(dialect: DialectPort, table_name: Optional[str]) -> Statement:
    if table_name is None:
        return Statement(catalog.schema_sql(dialect, filtered=False))
    return Statement(catalog.schema_sql(dialect, filtered=True), _catalog_binds(dialect, table_name))


def build_describe_columns(dialect: DialectPort, table_name: str) -> Statement:
    return Statement(catalog.describe_columns_sql(dialect), _catalog_binds(dialect, table_name))


def build_describe_indexes(dialect: DialectPort, table_name: str) -> Statement:
    return Statement(catalog.describe_indexes_sql(dialect), _catalog_binds(dialect, table_name))


def build_table_exists(dialect: DialectPort, table_name: str) -> Statement:
    return Statement(catalog.table_exists_sql(dialect), _catalog_binds(dialect, table_name))


def build_column_exists(dialect: DialectPort, table_name: str, column_name: str) -> Statement:
    return Statement(
        catalog.column_exists_sql(dialect), _catalog_binds(dialect, table_name, column_name)
    )


def build_relationships(dialect: DialectPort, table_name: Optional[str]) -> Statement:
    if table_name is None:
        return Statement(catalog.relationships_sql(dialect, filtered=False))
    return Statement(
        catalog.relationships_sql(dialect, filtered=True), _catalog_binds(dialect, table_name)
    )


def build_version(dialect: DialectPort) -> Statement:
    return Statement(catalog.version_sql(dialect))
