"""Core port contracts used by adapters, executor, and dispatcher."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Optional, Protocol

from .results import ResultSet
from .types import QueryParams
from .values import TypeFamily


class DialectPort(Protocol):
    """Dialect behavior required by statement building and row decoding."""

    name: str
    paramstyle: str
    row_locator: str
    default_schema: str

    def q(self, ident: str) -> str: ...

    def placeholder(self) -> str: ...

    def column_family(self, type_code: Any) -> Optional[TypeFamily]: ...


class DatabasePort(Protocol):
    """One borrowed connection able to run a query or a row-affecting statement."""

    dialect: DialectPort

    def transaction(self) -> AbstractContextManager[None]: ...

    def query(self, sql: str, params: QueryParams = None) -> ResultSet: ...

    def execute(self, sql: str, params: QueryParams = None) -> int: ...


class SessionProvider(Protocol):
    """Supplies a `DatabasePort` for the duration of one `with` block.

    Implementations must support concurrent `session()` calls from
    several threads.
    """

    dialect: DialectPort

    def session(self) -> AbstractContextManager[DatabasePort]: ...
