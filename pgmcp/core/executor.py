"""Statement execution against one provider-scoped session."""

from __future__ import annotations

import contextlib
import logging

from .contracts import DatabasePort, SessionProvider
from .errors import DatabaseConnectionError, QueryExecutionError
from .results import ExecutionOutcome, RowsAffected, RowsReturned
from .statements import Statement

logger = logging.getLogger(__name__)


class Executor:
    """Runs statements, each on its own borrowed session.

    The session is held only for the duration of one `execute()` call and
    is released on every exit path, including errors.
    """

    def __init__(self, provider: SessionProvider):
        self.provider = provider

    def execute(self, statement: Statement) -> ExecutionOutcome:
        """Execute one statement and return rows or an affected-row count.

        Raises:
            DatabaseConnectionError: No session could be acquired.
            QueryExecutionError: The database rejected the statement.
        """

        with contextlib.ExitStack() as stack:
            try:
                db = stack.enter_context(self.provider.session())
            except Exception as exc:
                raise DatabaseConnectionError(f"DB connection failed: {exc}") from exc
            return self._run(db, statement)

    def _run(self, db: DatabasePort, statement: Statement) -> ExecutionOutcome:
        logger.debug(
            "Executing %s statement with %d bound value(s): %s",
            "row-returning" if statement.returns_rows else "row-affecting",
            len(statement.values),
            statement.sql,
        )
        try:
            with db.transaction():
                if statement.returns_rows:
                    return RowsReturned(db.query(statement.sql, statement.params))
                count = db.execute(statement.sql, statement.params)
        except Exception as exc:
            raise QueryExecutionError(f"Query failed: {exc}") from exc
        return RowsAffected(max(count, 0))
