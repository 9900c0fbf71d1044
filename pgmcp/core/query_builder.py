"""SQL fragment builders for identifiers, filtering, assignment, and limits.

This module centralizes SQL string compilation from typed inputs. Every
caller-supplied identifier is checked against an allow-pattern before
the dialect quotes it, and every data value becomes a placeholder with
its `TypedValue` carried alongside the fragment, in placeholder order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence, Tuple

from .conditions import Assignment, Condition
from .contracts import DialectPort
from .errors import InvalidParameters
from .values import TypedValue

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")
MAX_IDENTIFIER_LENGTH = 63


@dataclass(frozen=True)
class CompiledFragment:
    """Represents a compiled SQL fragment with its bound values."""

    sql: str
    values: Tuple[TypedValue, ...] = ()


def validate_identifier(ident: str, *, what: str = "identifier") -> str:
    """Return `ident` unchanged when it is a plain SQL identifier.

    Raises:
        InvalidParameters: When the name is empty, too long, or contains
            characters outside `[A-Za-z0-9_$]` (or starts with a digit/`$`).
    """

    if not isinstance(ident, str) or not IDENTIFIER_PATTERN.match(ident):
        raise InvalidParameters(f"Invalid {what} {ident!r}.")
    if len(ident) > MAX_IDENTIFIER_LENGTH:
        raise InvalidParameters(
            f"Invalid {what} {ident!r}: longer than {MAX_IDENTIFIER_LENGTH} characters."
        )
    return ident


def quote_table(name: str, dialect: DialectPort) -> str:
    """Validate and quote a table name, optionally schema-qualified (`schema.table`)."""

    parts = name.split(".") if isinstance(name, str) else [name]
    if len(parts) > 2:
        raise InvalidParameters(f"Invalid table name {name!r}.")
    return ".".join(dialect.q(validate_identifier(part, what="table name")) for part in parts)


def split_table_name(name: str, *, default_schema: str) -> tuple[str, str]:
    """Split `schema.table` into its parts; a bare name lives in `default_schema`."""

    parts = name.split(".")
    if len(parts) > 2 or not all(parts):
        raise InvalidParameters(f"Invalid table name {name!r}.")
    if len(parts) == 1:
        return default_schema, name
    return parts[0], parts[1]


def quote_column(name: str, dialect: DialectPort) -> str:
    """Validate and quote a column name."""

    return dialect.q(validate_identifier(name, what="column name"))


def compile_where(conditions: Sequence[Condition], dialect: DialectPort) -> CompiledFragment:
    """Compile equality conditions into a SQL `WHERE` fragment.

    Multiple conditions are combined using `AND`.

    Args:
        conditions: Conditions in filter-map order; may be empty.
        dialect: SQL dialect used for identifier quoting and placeholders.

    Returns:
        A compiled fragment (leading space included) or an empty fragment.
    """

    if not conditions:
        return CompiledFragment("")

    clauses: list[str] = []
    values: list[TypedValue] = []
    for condition in conditions:
        col_sql = quote_column(condition.col, dialect)
        if condition.is_unary:
            clauses.append(f"{col_sql} {condition.op}")
            continue
        clauses.append(f"{col_sql} {condition.op} {dialect.placeholder()}")
        values.append(condition.value)

    return CompiledFragment(f" WHERE {' AND '.join(clauses)}", tuple(values))


def compile_set(assignments: Sequence[Assignment], dialect: DialectPort) -> CompiledFragment:
    """Compile assignments into a SQL `SET` fragment."""

    if not assignments:
        raise InvalidParameters("UPDATE requires at least one column value.")

    clauses = [
        f"{quote_column(item.col, dialect)} = {dialect.placeholder()}" for item in assignments
    ]
    return CompiledFragment(
        f" SET {', '.join(clauses)}", tuple(item.value for item in assignments)
    )


def join_fragments(*fragments: CompiledFragment) -> CompiledFragment:
    """Concatenate fragments, keeping bound values in text order."""

    sql = "".join(fragment.sql for fragment in fragments)
    values: list[TypedValue] = []
    for fragment in fragments:
        values.extend(fragment.values)
    return CompiledFragment(sql, tuple(values))


def clamp_limit(limit: int | None, *, default: int, maximum: int) -> int:
    """Clamp a requested row limit into `[1, maximum]`; non-positive or absent means `default`."""

    if limit is None or limit < 1:
        return default
    return min(limit, maximum)
