"""Process configuration from command line, environment, and `.env`."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from dotenv import load_dotenv

from .core.conninfo import ConnectionInfo, mask_password

CONNECTION_ENV = "POSTGRES_CONNECTION_STRING"
POOL_SIZE_ENV = "PGMCP_POOL_SIZE"
LOG_LEVEL_ENV = "PGMCP_LOG_LEVEL"

DEFAULT_POOL_SIZE = 5
DEFAULT_LOG_LEVEL = "INFO"


class ConfigurationError(ValueError):
    """Raised when required settings are missing or malformed."""


@dataclass(frozen=True)
class Settings:
    """Resolved server settings.

    Attributes:
        conninfo: libpq keyword/value connection string (may contain a password).
        pool_size: Maximum number of pooled connections.
        log_level: Root log level name.
    """

    conninfo: str
    pool_size: int = DEFAULT_POOL_SIZE
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def masked_conninfo(self) -> str:
        return mask_password(self.conninfo)

    @property
    def connection_info(self) -> ConnectionInfo:
        return ConnectionInfo.parse(self.conninfo)

    def __repr__(self) -> str:
        return (
            f"Settings(conninfo={self.masked_conninfo!r}, "
            f"pool_size={self.pool_size!r}, log_level={self.log_level!r})"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pgmcp",
        description="PostgreSQL MCP server speaking over stdio.",
    )
    parser.add_argument(
        "--db-config",
        dest="db_config",
        help=f"PostgreSQL connection string (overrides ${CONNECTION_ENV}).",
    )
    parser.add_argument(
        "--pool-size",
        dest="pool_size",
        type=int,
        help=f"Maximum pooled connections (default: ${POOL_SIZE_ENV} or {DEFAULT_POOL_SIZE}).",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        help=f"Log level (default: ${LOG_LEVEL_ENV} or {DEFAULT_LOG_LEVEL}).",
    )
    return parser


def load_settings(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    *,
    dotenv: bool = True,
) -> Settings:
    """Resolve settings: CLI arguments first, then environment variables.

    Args:
        argv: Command line arguments without the program name.
        environ: Environment mapping; defaults to `os.environ`.
        dotenv: Load `.env` from the working directory into `os.environ`
            first, without overriding variables that are already set.

    Raises:
        ConfigurationError: No connection string, or a malformed number.
    """

    if dotenv and environ is None:
        load_dotenv(override=False)
    env = os.environ if environ is None else environ
    args = build_parser().parse_args(argv)

    conninfo = args.db_config or env.get(CONNECTION_ENV)
    if not conninfo or not conninfo.strip():
        raise ConfigurationError(
            "Database connection string not provided. "
            f"Set {CONNECTION_ENV} environment variable or use --db-config argument"
        )

    pool_size = args.pool_size
    if pool_size is None:
        raw_size = env.get(POOL_SIZE_ENV, str(DEFAULT_POOL_SIZE))
        try:
            pool_size = int(raw_size)
        except ValueError as exc:
            raise ConfigurationError(f"{POOL_SIZE_ENV} must be an integer, got {raw_size!r}.") from exc
    if pool_size < 1:
        raise ConfigurationError("Pool size must be >= 1.")

    log_level = (args.log_level or env.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    return Settings(conninfo=conninfo.strip(), pool_size=pool_size, log_level=log_level)
