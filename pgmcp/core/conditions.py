"""Equality condition primitives for filter maps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .values import NULL, TypedValue, to_bound


@dataclass(frozen=True)
class Condition:
    """Represents one SQL condition expression.

    Attributes:
        col: Raw column name.
        op: SQL operator (`=` or `IS NULL`).
        value: Bound value for binary operators.
        is_unary: Whether the operator takes no value.
    """

    col: str
    op: str
    value: TypedValue = NULL
    is_unary: bool = False


@dataclass(frozen=True)
class Assignment:
    """Represents one `col = value` pair of an `UPDATE ... SET` clause."""

    col: str
    value: TypedValue


class C:
    """Condition factory methods."""

    @staticmethod
    def eq(col: str, val: Any) -> Condition:
        """Build `col = value`; a null value becomes `col IS NULL`."""

        bound = val if isinstance(val, TypedValue) else to_bound(val, field_name=col)
        if bound.is_null:
            return C.is_null(col)
        return Condition(col=col, op="=", value=bound)

    @staticmethod
    def is_null(col: str) -> Condition:
        """Build `col IS NULL` condition."""

        return Condition(col=col, op="IS NULL", is_unary=True)


def conditions_from_mapping(filters: Optional[Mapping[str, Any]]) -> list[Condition]:
    """Turn a `{column: value}` filter map into equality conditions, in map order."""

    if not filters:
        return []
    return [C.eq(col, val) for col, val in filters.items()]


def assignments_from_mapping(values: Mapping[str, Any]) -> list[Assignment]:
    """Turn a `{column: value}` map into `SET` assignments, in map order."""

    return [Assignment(col, to_bound(val, field_name=col)) for col, val in values.items()]
