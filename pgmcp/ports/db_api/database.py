"""`Database` adapter: one DB-API connection seen through the `DatabasePort` contract."""

from __future__ import annotations

import contextlib
from typing import Any, Iterator

from ...core.results import Column, ResultSet
from ...core.types import QueryParams
from .dialects import Dialect


class Database:
    """Thin DB-API wrapper that normalizes execute, fetch, and transactions."""

    def __init__(self, conn: Any, dialect: Dialect):
        """Wrap one borrowed connection.

        Args:
            conn: Open DB-API connection object.
            dialect: Dialect used to type result columns.
        """

        self.conn = conn
        self.dialect = dialect

    def _should_begin_sqlite_transaction(self) -> bool:
        if self.dialect.name != "sqlite":
            return False
        if getattr(self.conn, "isolation_level", None) is not None:
            return False
        return not bool(getattr(self.conn, "in_transaction", False))

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """Commit when the block succeeds, roll back when it raises."""

        if self._should_begin_sqlite_transaction():
            self.conn.execute("BEGIN")
        try:
            yield
        except BaseException:
            self.conn.rollback()
            raise
        else:
            self.conn.commit()

    @contextlib.contextmanager
    def _cursor(self, sql: str, params: QueryParams) -> Iterator[Any]:
        cur = self.conn.cursor()
        try:
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(sql, params)
            yield cur
        finally:
            close = getattr(cur, "close", None)
            if callable(close):
                close()

    def query(self, sql: str, params: QueryParams = None) -> ResultSet:
        """Execute a row-returning statement and fetch every row."""

        with self._cursor(sql, params) as cur:
            desc = getattr(cur, "description", None)
            if not desc:
                return ResultSet(columns=())
            columns = tuple(
                Column(name=str(item[0]), family=self.dialect.column_family(item[1]))
                for item in desc
            )
            rows = tuple(tuple(row) for row in cur.fetchall())
        return ResultSet(columns=columns, rows=rows)

    def execute(self, sql: str, params: QueryParams = None) -> int:
        """Execute a row-affecting statement and return the driver row count."""

        with self._cursor(sql, params) as cur:
            return int(getattr(cur, "rowcount", -1))
