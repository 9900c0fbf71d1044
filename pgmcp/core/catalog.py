"""Fixed system-catalog queries per dialect.

Every query takes table/column names as bound parameters. PostgreSQL queries
also bind the schema ahead of the table name; SQLite queries only see `main`.
Placeholders come from the dialect so the same text shape works for `%s` and `?` styles.
Result column labels are identical across dialects so callers can read rows
by position without caring which engine answered.
"""

from __future__ import annotations

from .contracts import DialectPort

_PG_FK_SELECT = (
    "SELECT tc.table_name, kcu.column_name, "
    "ccu.table_name AS foreign_table_name, ccu.column_name AS foreign_column_name "
    "FROM information_schema.table_constraints AS tc "
    "JOIN information_schema.key_column_usage AS kcu "
    "ON tc.constraint_name = kcu.constraint_name AND tc.table_schema = kcu.table_schema "
    "JOIN information_schema.constraint_column_usage AS ccu "
    "ON ccu.constraint_name = tc.constraint_name AND ccu.table_schema = tc.table_schema "
    "WHERE tc.constraint_type = 'FOREIGN KEY'"
)

_SQLITE_USER_TABLES = "m.type = 'table' AND m.name NOT LIKE 'sqlite_%'"


def _is_sqlite(dialect: DialectPort) -> bool:
    return getattr(dialect, "name", "").lower() == "sqlite"


def binds_schema(dialect: DialectPort) -> bool:
    """Whether per-table queries take a leading schema parameter before the table name."""

    return not _is_sqlite(dialect)


def list_tables_sql(dialect: DialectPort) -> str:
    if _is_sqlite(dialect):
        return (
            "SELECT m.name AS tablename FROM sqlite_master AS m "
            f"WHERE {_SQLITE_USER_TABLES} ORDER BY m.name"
        )
    return "SELECT tablename FROM pg_tables WHERE schemaname = 'public' ORDER BY tablename"


def schema_sql(dialect: DialectPort, *, filtered: bool) -> str:
    """Columns of every public table, or of one table when `filtered`."""

    ph = dialect.placeholder()
    if _is_sqlite(dialect):
        where = f"m.name = {ph}" if filtered else _SQLITE_USER_TABLES
        return (
            "SELECT m.name AS table_name, p.name AS column_name, p.type AS data_type, "
            "CASE WHEN p.\"notnull\" THEN 'NO' ELSE 'YES' END AS is_nullable "
            "FROM sqlite_master AS m JOIN pragma_table_info(m.name) AS p "
            f"WHERE {where} ORDER BY m.name, p.cid"
        )
    if filtered:
        return (
            "SELECT table_name, column_name, data_type, is_nullable "
            "FROM information_schema.columns "
            f"WHERE table_schema = {ph} AND table_name = {ph} ORDER BY ordinal_position"
        )
    return (
        "SELECT table_name, column_name, data_type, is_nullable "
        "FROM information_schema.columns "
        "WHERE table_schema = 'public' ORDER BY table_name, ordinal_position"
    )


def describe_columns_sql(dialect: DialectPort) -> str:
    """Column details of one table."""

    ph = dialect.placeholder()
    if _is_sqlite(dialect):
        return (
            "SELECT p.name AS column_name, p.type AS data_type, "
            "CASE WHEN p.\"notnull\" THEN 'NO' ELSE 'YES' END AS is_nullable, "
            "p.dflt_value AS column_default "
            f"FROM pragma_table_info({ph}) AS p ORDER BY p.cid"
        )
    return (
        "SELECT column_name, data_type, is_nullable, column_default "
        "FROM information_schema.columns "
        f"WHERE table_schema = {ph} AND table_name = {ph} ORDER BY ordinal_position"
    )


def describe_indexes_sql(dialect: DialectPort) -> str:
    """Index names and definitions of one table."""

    ph = dialect.placeholder()
    if _is_sqlite(dialect):
        return (
            "SELECT m.name AS index_name, m.sql AS definition FROM sqlite_master AS m "
            f"WHERE m.type = 'index' AND m.tbl_name = {ph} ORDER BY m.name"
        )
    return (
        "SELECT indexname AS index_name, indexdef AS definition FROM pg_indexes "
        f"WHERE schemaname = {ph} AND tablename = {ph} ORDER BY indexname"
    )


def table_exists_sql(dialect: DialectPort) -> str:
    """Single boolean-ish `exists` column."""

    ph = dialect.placeholder()
    if _is_sqlite(dialect):
        return (
            "SELECT EXISTS (SELECT 1 FROM sqlite_master AS m "
            f"WHERE m.type = 'table' AND m.name = {ph}) AS \"exists\""
        )
    return (
        "SELECT EXISTS (SELECT 1 FROM pg_tables "
        f"WHERE schemaname = {ph} AND tablename = {ph}) AS \"exists\""
    )


def column_exists_sql(dialect: DialectPort) -> str:
    """Single boolean-ish `exists` column; the column name is the last parameter."""

    ph = dialect.placeholder()
    if _is_sqlite(dialect):
        return (
            f"SELECT EXISTS (SELECT 1 FROM pragma_table_info({ph}) AS p "
            f"WHERE p.name = {ph}) AS \"exists\""
        )
    return (
        "SELECT EXISTS (SELECT 1 FROM information_schema.columns "
        f"WHERE table_schema = {ph} AND table_name = {ph} AND column_name = {ph}) AS \"exists\""
    )


def relationships_sql(dialect: DialectPort, *, filtered: bool) -> str:
    """Foreign keys of every public table, or of one table when `filtered`."""

    ph = dialect.placeholder()
    if _is_sqlite(dialect):
        where = f"m.type = 'table' AND m.name = {ph}" if filtered else _SQLITE_USER_TABLES
        return (
            "SELECT m.name AS table_name, f.\"from\" AS column_name, "
            "f.\"table\" AS foreign_table_name, f.\"to\" AS foreign_column_name "
            "FROM sqlite_master AS m JOIN pragma_foreign_key_list(m.name) AS f "
            f"WHERE {where} ORDER BY m.name, f.id, f.seq"
        )
    if filtered:
        return f"{_PG_FK_SELECT} AND tc.table_schema = {ph} AND tc.table_name = {ph}"
    return f"{_PG_FK_SELECT} AND tc.table_schema = 'public'"


def version_sql(dialect: DialectPort) -> str:
    if _is_sqlite(dialect):
        return "SELECT 'SQLite ' || sqlite_version() AS version"
    return "SELECT version() AS version"
