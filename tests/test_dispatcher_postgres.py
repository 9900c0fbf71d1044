from __future__ import annotations

import importlib
import os
import unittest
from typing import Any

from pgmcp.core.conninfo import ConnectionInfo
from pgmcp.core.dispatcher import ToolDispatcher
from pgmcp.ports.db_api.dialects import PostgresDialect
from pgmcp.ports.db_api.pool_connector import ConnectionPool


def _load_connect() -> Any:
    try:
        module = importlib.import_module("psycopg")
    except (ModuleNotFoundError, ImportError):
        return None
    return getattr(module, "connect", None)


POSTGRES_CONNECT = _load_connect()
HAS_POSTGRES_DRIVER = POSTGRES_CONNECT is not None


def _conninfo() -> str:
    password = os.getenv(
        "PGMCP_PG_PASSWORD",
        os.getenv("PGPASSWORD", os.getenv("POSTGRES_PASSWORD", "password")),
    )
    params = {
        "host": os.getenv("PGMCP_PG_HOST", os.getenv("PGHOST", "localhost")),
        "port": os.getenv("PGMCP_PG_PORT", os.getenv("PGPORT", "5432")),
        "user": os.getenv("PGMCP_PG_USER", os.getenv("PGUSER", "postgres")),
        "password": password,
        "dbname": os.getenv("PGMCP_PG_DATABASE", os.getenv("PGDATABASE", "postgres")),
    }
    return " ".join(f"{key}={value}" for key, value in params.items())


@unittest.skipUnless(HAS_POSTGRES_DRIVER, "psycopg is not installed")
class PostgresDispatcherTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.conninfo = _conninfo()
        try:
            connection = POSTGRES_CONNECT(cls.conninfo, connect_timeout=3)
        except Exception as exc:
            raise unittest.SkipTest(
                f"PostgreSQL is not reachable with configured credentials: {exc}"
            ) from exc
        connection.close()

        cls.pool = ConnectionPool(
            POSTGRES_CONNECT, cls.conninfo, dialect=PostgresDialect(), max_size=2
        )
        cls.dispatcher = ToolDispatcher(
            cls.pool, connection_info=ConnectionInfo.parse(cls.conninfo)
        )

    @classmethod
    def tearDownClass(cls) -> None:
        pool = getattr(cls, "pool", None)
        if pool is not None:
            pool.close()

    def setUp(self) -> None:
        with self.pool.session() as db:
            with db.transaction():
                db.execute('DROP TABLE IF EXISTS "pgmcp_orders"')
                db.execute('DROP TABLE IF EXISTS "pgmcp_users"')
                db.execute(
                    'CREATE TABLE "pgmcp_users" ('
                    '"id" SERIAL PRIMARY KEY, '
                    '"name" VARCHAR(100) NOT NULL, '
                    '"role" TEXT, '
                    '"age" INTEGER, '
                    '"big" BIGINT, '
                    '"score" DOUBLE PRECISION, '
                    '"active" BOOLEAN, '
                    '"price" NUMERIC(10, 2), '
                    '"created_at" TIMESTAMP DEFAULT now())'
                )
                db.execute(
                    'CREATE TABLE "pgmcp_orders" ('
                    '"id" SERIAL PRIMARY KEY, '
                    '"user_id" INTEGER REFERENCES "pgmcp_users" ("id"))'
                )

    def tearDown(self) -> None:
        with self.pool.session() as db:
            with db.transaction():
                db.execute('DROP TABLE IF EXISTS "pgmcp_orders"')
                db.execute('DROP TABLE IF EXISTS "pgmcp_users"')

    def ok(self, tool: str, arguments=None):  # noqa: ANN001,ANN201
        response = self.dispatcher.dispatch(tool, arguments)
        self.assertTrue(response.ok, response.text)
        return response.payload

    def test_typed_values_round_trip(self) -> None:
        self.ok(
            "insert_data",
            {
                "table_name": "pgmcp_users",
                "data": {
                    "name": "O'Brien",
                    "age": 41,
                    "big": 2**62,
                    "score": 0.1,
                    "active": False,
                    "role": None,
                },
            },
        )

        payload = self.ok(
            "query_data",
            {"query": 'SELECT "name", "age", "big", "score", "active", "role", "price" FROM "pgmcp_users"'},
        )

        self.assertEqual(
            payload["rows"],
            [
                {
                    "name": "O'Brien",
                    "age": 41,
                    "big": 2**62,
                    "score": 0.1,
                    "active": False,
                    "role": None,
                    "price": None,
                }
            ],
        )

    def test_other_types_render_as_text(self) -> None:
        with self.pool.session() as db:
            with db.transaction():
                db.execute(
                    'INSERT INTO "pgmcp_users" ("name", "price", "created_at") VALUES (%s, %s, %s)',
                    ["a", "12.50", "2024-01-02 03:04:05"],
                )
        row = self.ok("get_table_sample", {"table_name": "pgmcp_users"})["rows"][0]
        self.assertEqual(row["price"], "12.50")
        self.assertEqual(row["created_at"], "2024-01-02T03:04:05")

    def test_update_delete_with_limit(self) -> None:
        for index in range(5):
            self.ok(
                "insert_data",
                {"table_name": "pgmcp_users", "data": {"name": f"u{index}", "role": "user"}},
            )

        updated = self.ok(
            "update_data",
            {
                "table_name": "pgmcp_users",
                "values": {"age": 7},
                "where_conditions": {"role": "user"},
                "limit": 2,
            },
        )
        deleted = self.ok(
            "delete_data",
            {"table_name": "pgmcp_users", "where_conditions": {"role": "user", "age": 7}},
        )

        self.assertEqual(updated["rows_affected"], 2)
        self.assertEqual(deleted["rows_affected"], 2)
        self.assertEqual(self.ok("count_rows", {"table_name": "pgmcp_users"})["count"], 3)

    def test_catalog_tools(self) -> None:
        self.assertIn("pgmcp_users", self.ok("list_tables"))
        self.assertTrue(self.ok("table_exists", {"table_name": "pgmcp_users"})["exists"])
        self.assertTrue(
            self.ok("column_exists", {"table_name": "pgmcp_users", "column_name": "age"})["exists"]
        )

        described = self.ok("describe_table", {"table_name": "pgmcp_users"})
        self.assertEqual(described["columns"][0]["column_name"], "id")
        self.assertIn("pgmcp_users_pkey", [index["index_name"] for index in described["indexes"]])

        relationships = self.ok("get_relationships", {"table_name": "pgmcp_orders"})
        self.assertEqual(relationships[0]["foreign_table_name"], "pgmcp_users")

    def test_catalog_tools_accept_schema_qualified_names(self) -> None:
        with self.pool.session() as db:
            with db.transaction():
                db.execute('DROP SCHEMA IF EXISTS "pgmcp_audit" CASCADE')
                db.execute('CREATE SCHEMA "pgmcp_audit"')
                db.execute('CREATE TABLE "pgmcp_audit"."events" ("id" SERIAL PRIMARY KEY, "kind" TEXT)')
        self.addCleanup(self._drop_audit_schema)

        self.assertTrue(self.ok("table_exists", {"table_name": "public.pgmcp_users"})["exists"])
        self.assertTrue(self.ok("table_exists", {"table_name": "pgmcp_audit.events"})["exists"])
        self.assertFalse(self.ok("table_exists", {"table_name": "events"})["exists"])
        self.assertTrue(
            self.ok("column_exists", {"table_name": "pgmcp_audit.events", "column_name": "kind"})["exists"]
        )

        described = self.ok("describe_table", {"table_name": "pgmcp_audit.events"})
        self.assertEqual([column["column_name"] for column in described["columns"]], ["id", "kind"])
        self.assertEqual(len(described["indexes"]), 1)
        schema = self.ok("get_schema", {"table_name": "pgmcp_audit.events"})
        self.assertEqual({row["table_name"] for row in schema}, {"events"})

    def _drop_audit_schema(self) -> None:
        with self.pool.session() as db:
            with db.transaction():
                db.execute('DROP SCHEMA IF EXISTS "pgmcp_audit" CASCADE')

    def test_raw_query_and_status(self) -> None:
        self.assertEqual(self.ok("execute_raw_query", {"query": "select 1"})["count"], 1)
        self.assertEqual(
            self.ok("execute_raw_query", {"query": 'UPDATE "pgmcp_users" SET "age" = 1'}),
            {"rows_affected": 0},
        )

        response = self.dispatcher.dispatch("get_connection_status", {})
        self.assertTrue(response.ok)
        self.assertTrue(response.payload["version"].startswith("PostgreSQL"))
        self.assertNotIn("password", response.text)


if __name__ == "__main__":
    unittest.main()
