from __future__ import annotations

import unittest

from pgmcp.core import statements
from pgmcp.core.errors import InvalidParameters, ValueShapeError
from pgmcp.core.params import decode
from pgmcp.core.values import ValueKind
from pgmcp.ports.db_api.dialects import PostgresDialect, SQLiteDialect


def _build(tool: str, dialect, raw):  # noqa: ANN001,ANN202
    params = decode(tool, raw)
    builders = {
        "insert_data": statements.build_insert,
        "count_rows": statements.build_count,
        "get_table_sample": statements.build_sample,
        "update_data": statements.build_update,
        "delete_data": statements.build_delete,
    }
    return builders[tool](dialect, params)


class InsertStatementTests(unittest.TestCase):
    def test_insert_binds_every_value(self) -> None:
        statement = _build(
            "insert_data",
            SQLiteDialect(),
            {
                "table_name": "users",
                "data": {"name": "O'Brien", "age": 30, "active": True, "score": 9.5, "note": None},
            },
        )
        self.assertEqual(
            statement.sql,
            'INSERT INTO "users" ("name", "age", "active", "score", "note") '
            "VALUES (?, ?, ?, ?, ?)",
        )
        self.assertEqual(
            [item.kind for item in statement.values],
            [ValueKind.TEXT, ValueKind.INTEGER, ValueKind.BOOLEAN, ValueKind.FLOAT, ValueKind.NULL],
        )
        self.assertEqual(statement.params, ["O'Brien", 30, True, 9.5, None])
        self.assertFalse(statement.returns_rows)
        self.assertNotIn("O'Brien", statement.sql)

    def test_insert_postgres_placeholders(self) -> None:
        statement = _build(
            "insert_data", PostgresDialect(), {"table_name": "public.users", "data": {"a": 1}}
        )
        self.assertEqual(statement.sql, 'INSERT INTO "public"."users" ("a") VALUES (%s)')

    def test_insert_empty_data_uses_default_values(self) -> None:
        statement = _build("insert_data", SQLiteDialect(), {"table_name": "users", "data": {}})
        self.assertEqual(statement.sql, 'INSERT INTO "users" DEFAULT VALUES')
        self.assertIsNone(statement.params)

    def test_insert_rejects_bad_identifiers_and_values(self) -> None:
        with self.assertRaises(InvalidParameters):
            _build("insert_data", SQLiteDialect(), {"table_name": "users", "data": {"a b": 1}})
        with self.assertRaises(InvalidParameters):
            _build(
                "insert_data",
                SQLiteDialect(),
                {"table_name": "users; DROP TABLE users", "data": {"a": 1}},
            )
        with self.assertRaises(ValueShapeError):
            _build(
                "insert_data", SQLiteDialect(), {"table_name": "users", "data": {"a": {"x": 1}}}
            )


class FilteredStatementTests(unittest.TestCase):
    def test_count_without_filter(self) -> None:
        statement = _build("count_rows", SQLiteDialect(), {"table_name": "users"})
        self.assertEqual(statement.sql, 'SELECT COUNT(*) AS count FROM "users"')
        self.assertIsNone(statement.params)
        self.assertTrue(statement.returns_rows)

    def test_count_with_filter(self) -> None:
        statement = _build(
            "count_rows",
            PostgresDialect(),
            {"table_name": "users", "where_conditions": {"role": "admin", "deleted_at": None}},
        )
        self.assertEqual(
            statement.sql,
            'SELECT COUNT(*) AS count FROM "users" WHERE "role" = %s AND "deleted_at" IS NULL',
        )
        self.assertEqual(statement.params, ["admin"])

    def test_update_is_bounded_by_row_locator(self) -> None:
        statement = _build(
            "update_data",
            SQLiteDialect(),
            {"table_name": "users", "values": {"age": 31}, "where_conditions": {"name": "alice"}},
        )
        self.assertEqual(
            statement.sql,
            'UPDATE "users" SET "age" = ? WHERE rowid IN '
            '(SELECT rowid FROM "users" WHERE "name" = ? LIMIT ?)',
        )
        self.assertEqual(statement.params, [31, "alice", statements.WRITE_DEFAULT_LIMIT])
        self.assertFalse(statement.returns_rows)

    def test_delete_postgres_uses_ctid(self) -> None:
        statement = _build(
            "delete_data",
            PostgresDialect(),
            {"table_name": "users", "where_conditions": {"id": 1, "role": "admin"}, "limit": 5},
        )
        self.assertEqual(
            statement.sql,
            'DELETE FROM "users" WHERE ctid IN '
            '(SELECT ctid FROM "users" WHERE "id" = %s AND "role" = %s LIMIT %s)',
        )
        self.assertEqual(statement.params, [1, "admin", 5])

    def test_placeholder_count_matches_bound_values(self) -> None:
        cases = [
            ("insert_data", {"table_name": "t", "data": {"a": 1, "b": "x", "c": None}}),
            ("count_rows", {"table_name": "t", "where_conditions": {"a": 1, "b": None}}),
            ("update_data", {"table_name": "t", "values": {"a": 2}, "where_conditions": {"b": None}}),
            ("delete_data", {"table_name": "t", "where_conditions": {"a": 1, "b": "y"}, "limit": 3}),
        ]
        for dialect, marker in ((SQLiteDialect(), "?"), (PostgresDialect(), "%s")):
            for tool, raw in cases:
                with self.subTest(dialect=dialect.name, tool=tool):
                    statement = _build(tool, dialect, raw)
                    self.assertEqual(statement.sql.count(marker), len(statement.values))


class SampleStatementTests(unittest.TestCase):
    def test_limit_is_clamped_and_inlined(self) -> None:
        samples = [(None, 10), (0, 10), (-3, 10), (5, 5), (100, 100), (500, 100)]
        for requested, expected in samples:
            with self.subTest(requested=requested):
                raw = {"table_name": "users"}
                if requested is not None:
                    raw["limit"] = requested
                statement = _build("get_table_sample", SQLiteDialect(), raw)
                self.assertEqual(statement.sql, f'SELECT * FROM "users" LIMIT {expected}')
                self.assertIsNone(statement.params)


class RawStatementTests(unittest.TestCase):
    def test_select_classification(self) -> None:
        samples = [
            ("SELECT 1", True),
            ("  select 1", True),
            ("\n\tSeLeCt 1", True),
            ("UPDATE t SET x = 1", False),
            ("INSERT INTO t VALUES (1)", False),
            ("WITH x AS (SELECT 1) SELECT * FROM x", False),
            ("SELECTED", False),
            ("", False),
        ]
        for sql, expected in samples:
            with self.subTest(sql=sql):
                self.assertEqual(statements.is_row_returning(sql), expected)

    def test_raw_text_is_not_parameterized(self) -> None:
        statement = statements.build_raw(
            decode("execute_raw_query", {"query": "SELECT '%s' AS x", "params": [1]})
        )
        self.assertEqual(statement.sql, "SELECT '%s' AS x")
        self.assertIsNone(statement.params)
        self.assertTrue(statement.returns_rows)

    def test_query_data_runs_text_as_is(self) -> None:
        statement = statements.build_query(decode("query_data", {"query": "UPDATE t SET x = 1"}))
        self.assertTrue(statement.returns_rows)
        self.assertIsNone(statement.params)


class CatalogStatementTests(unittest.TestCase):
    def test_names_are_bound_not_interpolated(self) -> None:
        for dialect in (SQLiteDialect(), PostgresDialect()):
            with self.subTest(dialect=dialect.name):
                schema = [dialect.default_schema] if dialect.name == "postgres" else []
                exists = statements.build_table_exists(dialect, "users")
                self.assertEqual(exists.params, [*schema, "users"])
                self.assertNotIn("users", exists.sql)

                column = statements.build_column_exists(dialect, "users", "email")
                self.assertEqual(column.params, [*schema, "users", "email"])
                self.assertEqual(column.sql.count(dialect.placeholder()), len(schema) + 2)

                described = statements.build_describe_columns(dialect, "users")
                self.assertEqual(described.params, [*schema, "users"])

    def test_unfiltered_catalog_queries_bind_nothing(self) -> None:
        for dialect in (SQLiteDialect(), PostgresDialect()):
            with self.subTest(dialect=dialect.name):
                self.assertIsNone(statements.build_list_tables(dialect).params)
                self.assertIsNone(statements.build_schema(dialect, None).params)
                self.assertIsNone(statements.build_relationships(dialect, None).params)
                self.assertIsNone(statements.build_version(dialect).params)
                schema = [dialect.default_schema] if dialect.name == "postgres" else []
                self.assertEqual(statements.build_schema(dialect, "t").params, [*schema, "t"])
                self.assertEqual(statements.build_relationships(dialect, "t").params, [*schema, "t"])

    def test_schema_qualified_names_bind_schema_separately(self) -> None:
        dialect = PostgresDialect()
        for build in (
            statements.build_table_exists,
            statements.build_describe_columns,
            statements.build_describe_indexes,
            statements.build_schema,
            statements.build_relationships,
        ):
            with self.subTest(builder=build.__name__):
                statement = build(dialect, "sales.orders")
                self.assertEqual(statement.params, ["sales", "orders"])
                self.assertNotIn("'public'", statement.sql)
        column = statements.build_column_exists(dialect, "sales.orders", "total")
        self.assertEqual(column.params, ["sales", "orders", "total"])

    def test_sqlite_catalog_accepts_only_main_schema(self) -> None:
        dialect = SQLiteDialect()
        self.assertEqual(statements.build_table_exists(dialect, "main.users").params, ["users"])
        self.assertEqual(
            statements.build_column_exists(dialect, "main.users", "email").params, ["users", "email"]
        )
        with self.assertRaises(InvalidParameters) as ctx:
            statements.build_describe_columns(dialect, "other.users")
        self.assertIn("'main'", ctx.exception.message)

    def test_malformed_dotted_names_are_rejected(self) -> None:
        for dialect in (SQLiteDialect(), PostgresDialect()):
            for name in ("a.b.c", ".users", "users.", "."):
                with self.subTest(dialect=dialect.name, name=name):
                    with self.assertRaises(InvalidParameters):
                        statements.build_table_exists(dialect, name)


if __name__ == "__main__":
    unittest.main()
