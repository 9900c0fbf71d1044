"""Command line entry point for the stdio MCP server."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional, Sequence

import psycopg

from .config import ConfigurationError, Settings, load_settings
from .core.dispatcher import ToolDispatcher
from .ports.db_api import ConnectionPool, PostgresDialect
from .server import serve_stdio

logger = logging.getLogger("pgmcp")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Send logs to stderr; stdout carries the MCP message stream."""

    logging.basicConfig(stream=sys.stderr, level=level, format=LOG_FORMAT, force=True)


def build_dispatcher(settings: Settings) -> tuple[ToolDispatcher, ConnectionPool]:
    pool = ConnectionPool(
        psycopg.connect,
        settings.conninfo,
        dialect=PostgresDialect(),
        max_size=settings.pool_size,
    )
    dispatcher = ToolDispatcher(pool, connection_info=settings.connection_info)
    return dispatcher, pool


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = load_settings(argv)
    except ConfigurationError as exc:
        print(f"pgmcp: {exc}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    logger.info("Starting PostgreSQL MCP server")
    logger.info("Database config: %s", settings.masked_conninfo)

    dispatcher, pool = build_dispatcher(settings)
    try:
        asyncio.run(serve_stdio(dispatcher))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        pool.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
