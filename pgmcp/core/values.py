"""Scalar codec between JSON-like tool values and database parameters/columns."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Optional

from .errors import ValueShapeError

logger = logging.getLogger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class ValueKind(str, Enum):
    """Tag of one scalar carried by `TypedValue`."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"


class TypeFamily(str, Enum):
    """Coarse classification of a column's database type."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TEXT = "text"
    OTHER = "other"


@dataclass(frozen=True)
class TypedValue:
    """Tagged scalar used for bound parameters and decoded columns.

    Attributes:
        kind: Scalar tag.
        value: Python value matching `kind` (`None` for `NULL`).
    """

    kind: ValueKind
    value: Any = None

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL


NULL = TypedValue(ValueKind.NULL)


def to_bound(value: Any, *, field_name: Optional[str] = None) -> TypedValue:
    """Convert one dynamic value into a bindable `TypedValue`.

    Args:
        value: JSON-like scalar taken from tool arguments.
        field_name: Column the value belongs to, used in error messages.

    Returns:
        Tagged value with precision preserved.

    Raises:
        ValueShapeError: For arrays, objects, out-of-range integers, and
            any other non-scalar shape.
    """

    if value is None:
        return NULL
    # bool is a subclass of int and must be tagged first.
    if isinstance(value, bool):
        return TypedValue(ValueKind.BOOLEAN, value)
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueShapeError(
                f"Integer {value} for {_describe(field_name)} is outside the signed 64-bit range."
            )
        return TypedValue(ValueKind.INTEGER, value)
    if isinstance(value, float):
        return TypedValue(ValueKind.FLOAT, value)
    if isinstance(value, str):
        return TypedValue(ValueKind.TEXT, value)
    raise ValueShapeError(
        f"Unsupported value of type {type(value).__name__} for {_describe(field_name)}; "
        "expected null, boolean, number, or string."
    )


def from_column(family: TypeFamily, raw: Any, *, column: str = "?") -> Any:
    """Decode one raw driver value according to its column type family.

    Conversion failures yield `None` so a single unreadable column never
    aborts the row it belongs to.
    """

    if raw is None:
        return None
    try:
        if family is TypeFamily.INTEGER:
            return int(raw)
        if family is TypeFamily.FLOAT:
            return float(raw)
        if family is TypeFamily.BOOLEAN:
            return _to_bool(raw)
        if family is TypeFamily.TEXT:
            return raw if isinstance(raw, str) else _to_text(raw)
        return _to_text(raw)
    except (TypeError, ValueError, OverflowError, UnicodeDecodeError) as exc:
        logger.debug(
            "Column %r value of type %s could not be decoded as %s: %s",
            column,
            type(raw).__name__,
            family.value,
            exc,
        )
        return None


def decode_column(family: TypeFamily, raw: Any, *, column: str = "?") -> TypedValue:
    """Decode one raw driver value into its tagged form."""

    value = from_column(family, raw, column=column)
    if value is None:
        return NULL
    if isinstance(value, bool):
        return TypedValue(ValueKind.BOOLEAN, value)
    if isinstance(value, int):
        return TypedValue(ValueKind.INTEGER, value)
    if isinstance(value, float):
        return TypedValue(ValueKind.FLOAT, value)
    return TypedValue(ValueKind.TEXT, value)


def family_for_value(raw: Any) -> TypeFamily:
    """Infer a type family from a Python value when the driver reports none."""

    if isinstance(raw, bool):
        return TypeFamily.BOOLEAN
    if isinstance(raw, int):
        return TypeFamily.INTEGER
    if isinstance(raw, float):
        return TypeFamily.FLOAT
    if isinstance(raw, str):
        return TypeFamily.TEXT
    return TypeFamily.OTHER


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        return raw != 0
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in {"t", "true", "1", "yes", "on"}:
            return True
        if lowered in {"f", "false", "0", "no", "off"}:
            return False
    raise ValueError(f"not a boolean: {raw!r}")


def _to_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (datetime, date, time)):
        return raw.isoformat()
    if isinstance(raw, timedelta):
        return str(raw)
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw).hex()
    if isinstance(raw, (dict, list)):
        return json.dumps(raw, default=str)
    return str(raw)


def _describe(field_name: Optional[str]) -> str:
    return f"field {field_name!r}" if field_name else "value"
