"""Bounded DB-API connection pool acting as the executor's session provider."""

from __future__ import annotations

import contextlib
import logging
import threading
import time
from collections import deque
from collections.abc import Callable, Iterator
from typing import Any

from .database import Database
from .dialects import Dialect

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Lends DB-API connections to tool invocations, one per `session()`.

    Connections open lazily up to `max_size`; further borrowers wait on a
    condition variable until one comes back, or until `timeout` seconds
    pass. A connection returned with an open transaction is rolled back
    before anyone else can borrow it; one that cannot be rolled back is
    closed and its slot freed.
    """

    def __init__(
        self,
        connect: Callable[..., Any],
        *connect_args: Any,
        dialect: Dialect,
        max_size: int = 5,
        timeout: float | None = None,
        **connect_kwargs: Any,
    ):
        if max_size < 1:
            raise ValueError(f"Pool size must be >= 1, got {max_size}.")
        if max_size > 1 and _opens_private_sqlite_memory(connect, connect_args, connect_kwargs):
            raise ValueError(
                "A private SQLite :memory: database is visible to one connection only; "
                "use max_size=1 or a shared-cache URI."
            )

        self.dialect = dialect
        self.max_size = max_size
        self.timeout = timeout
        self._opener = lambda: connect(*connect_args, **connect_kwargs)

        self._lock = threading.Condition()
        self._free: deque[Any] = deque()
        self._lent: dict[int, Any] = {}
        self._opened = 0
        self._closed = False

    @property
    def size(self) -> int:
        """Connections currently open (lent or free)."""

        return self._opened

    def acquire(self, timeout: float | None = None) -> Any:
        """Borrow a connection, opening a new one when a slot is free.

        Raises:
            TimeoutError: No connection came back within `timeout` seconds.
            RuntimeError: The pool was closed.
        """

        wait_for = self.timeout if timeout is None else timeout
        give_up_at = None if wait_for is None else time.monotonic() + wait_for

        with self._lock:
            while True:
                if self._closed:
                    raise RuntimeError("Connection pool is closed.")
                if self._free:
                    return self._lend(self._free.popleft())
                if self._opened < self.max_size:
                    self._opened += 1
                    break
                left = None if give_up_at is None else give_up_at - time.monotonic()
                if left is not None and left <= 0:
                    raise TimeoutError(
                        f"No database connection became free within {wait_for} seconds."
                    )
                self._lock.wait(left)

        # Slot reserved above; open outside the lock so others are not blocked.
        try:
            conn = self._opener()
        except BaseException:
            with self._lock:
                self._opened -= 1
                self._lock.notify()
            raise

        with self._lock:
            self._lend(conn)
        logger.debug("Opened database connection %d of %d", self._opened, self.max_size)
        return conn

    def release(self, conn: Any) -> None:
        """Give a borrowed connection back, rolling back any open transaction."""

        with self._lock:
            if self._lent.pop(id(conn), None) is None:
                raise ValueError("Connection is not currently lent out by this pool.")

        healthy = True
        if _has_open_transaction(conn):
            try:
                conn.rollback()
            except Exception:
                logger.warning("Rollback on release failed; dropping connection", exc_info=True)
                healthy = False

        with self._lock:
            keep = healthy and not self._closed
            if keep:
                self._free.append(conn)
            else:
                self._opened -= 1
            self._lock.notify()

        if not keep:
            _close_quietly(conn)

    @contextlib.contextmanager
    def connection(self, timeout: float | None = None) -> Iterator[Any]:
        """Raw DB-API connection for the duration of the `with` block."""

        conn = self.acquire(timeout=timeout)
        try:
            yield conn
        finally:
            self.release(conn)

    @contextlib.contextmanager
    def session(self) -> Iterator[Database]:
        """`Database` adapter over one borrowed connection."""

        with self.connection() as conn:
            yield Database(conn, self.dialect)

    def close(self) -> None:
        """Close free connections now and lent ones as they come back."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            free = list(self._free)
            self._free.clear()
            self._opened -= len(free)
            self._lock.notify_all()

        for conn in free:
            _close_quietly(conn)
        logger.debug("Connection pool closed (%d connection(s) still lent)", len(self._lent))

    def __enter__(self) -> ConnectionPool:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def _lend(self, conn: Any) -> Any:
        self._lent[id(conn)] = conn
        return conn


def _has_open_transaction(conn: Any) -> bool:
    # sqlite3 exposes `in_transaction`; psycopg exposes `info.transaction_status`.
    flag = getattr(conn, "in_transaction", None)
    if isinstance(flag, bool):
        return flag
    status = getattr(getattr(conn, "info", None), "transaction_status", None)
    if status is None:
        return False
    return int(status) != 0  # 0 = IDLE


def _close_quietly(conn: Any) -> None:
    close = getattr(conn, "close", None)
    if not callable(close):
        return
    try:
        close()
    except Exception:
        logger.debug("Error closing database connection", exc_info=True)


def _opens_private_sqlite_memory(
    connect: Callable[..., Any],
    connect_args: tuple[Any, ...],
    connect_kwargs: dict[str, Any],
) -> bool:
    module = getattr(connect, "__module__", None) or ""
    if module.lstrip("_").split(".")[0] != "sqlite3":
        return False
    target = connect_args[0] if connect_args else connect_kwargs.get("database")
    if not isinstance(target, str):
        return False
    if target == ":memory:":
        return True
    uri = target.lower()
    return uri.startswith("file:") and "mode=memory" in uri and "cache=shared" not in uri
