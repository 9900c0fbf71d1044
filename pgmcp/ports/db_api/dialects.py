"""SQLite and PostgreSQL dialects: quoting, placeholders, row locators, column families."""

from __future__ import annotations

from typing import Any, Optional

from ...core.values import TypeFamily


class Dialect:
    """Base dialect that defines quoting, placeholders, and column typing."""

    name: str = "generic"
    paramstyle: str = "qmark"
    quote_char: str = '"'
    row_locator: str = "rowid"
    default_schema: str = "public"

    def q(self, ident: str) -> str:
        """Quote an already validated identifier, doubling embedded quote characters."""

        escaped = ident.replace(self.quote_char, self.quote_char * 2)
        return f"{self.quote_char}{escaped}{self.quote_char}"

    def placeholder(self) -> str:
        """Return positional parameter placeholder for current param style."""

        if self.paramstyle == "qmark":
            return "?"
        if self.paramstyle == "format":
            return "%s"
        raise ValueError(f"Unsupported paramstyle: {self.paramstyle}")

    def column_family(self, type_code: Any) -> Optional[TypeFamily]:
        """Map a cursor `description` type code to a type family.

        Returns `None` when the driver reports no usable type, in which case
        the family is inferred from each value.
        """

        return None


class SQLiteDialect(Dialect):
    """SQLite dialect (`?` parameters, untyped cursor descriptions)."""

    name = "sqlite"
    paramstyle = "qmark"
    row_locator = "rowid"
    default_schema = "main"


# Built-in PostgreSQL type OIDs (pg_type.oid) grouped by family.
_PG_FAMILIES: dict[int, TypeFamily] = {
    20: TypeFamily.INTEGER,  # int8
    21: TypeFamily.INTEGER,  # int2
    23: TypeFamily.INTEGER,  # int4
    26: TypeFamily.INTEGER,  # oid
    700: TypeFamily.FLOAT,  # float4
    701: TypeFamily.FLOAT,  # float8
    16: TypeFamily.BOOLEAN,  # bool
    18: TypeFamily.TEXT,  # char
    19: TypeFamily.TEXT,  # name
    25: TypeFamily.TEXT,  # text
    1042: TypeFamily.TEXT,  # bpchar
    1043: TypeFamily.TEXT,  # varchar
}


class PostgresDialect(Dialect):
    """PostgreSQL dialect (`%s` positional parameters, OID-typed columns)."""

    name = "postgres"
    paramstyle = "format"
    row_locator = "ctid"

    def column_family(self, type_code: Any) -> Optional[TypeFamily]:
        if not isinstance(type_code, int) or isinstance(type_code, bool):
            return None
        return _PG_FAMILIES.get(type_code, TypeFamily.OTHER)
