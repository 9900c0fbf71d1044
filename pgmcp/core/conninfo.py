"""Keyword/value connection string helpers (`host=... user=... dbname=...`)."""

from __future__ import annotations

import re
from dataclasses import dataclass

PASSWORD_MASK = "***"

# `password` and `sslpassword` keys at a token boundary, with libpq's optional
# spaces around `=` and single-quoted values.
_SECRET_VALUE = re.compile(r"(^|\s)((?:ssl)?password\s*=\s*)('(?:[^'\\]|\\.)*'|\S+)")


def mask_password(conninfo: str) -> str:
    """Replace every password value in `conninfo` with `***`."""

    return _SECRET_VALUE.sub(rf"\1\2{PASSWORD_MASK}", conninfo)


def _token(conninfo: str, key: str) -> str | None:
    prefix = f"{key}="
    for part in conninfo.split():
        if part.startswith(prefix):
            return part[len(prefix):]
    return None


@dataclass(frozen=True)
class ConnectionInfo:
    """Non-secret facts about the configured database, for status reporting."""

    database: str = "unknown"
    user: str = "unknown"
    host: str = "localhost"

    @classmethod
    def parse(cls, conninfo: str) -> ConnectionInfo:
        return cls(
            database=_token(conninfo, "dbname") or "unknown",
            user=_token(conninfo, "user") or "unknown",
            host=_token(conninfo, "host") or "localhost",
        )
