"""Result containers produced by the executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from .types import RawRow
from .values import TypeFamily


@dataclass(frozen=True)
class Column:
    """One result-set column.

    Attributes:
        name: Column label reported by the driver.
        family: Declared type family, or `None` when the driver reports no type.
    """

    name: str
    family: Optional[TypeFamily] = None


@dataclass(frozen=True)
class ResultSet:
    """Ordered rows sharing one column layout."""

    columns: tuple[Column, ...]
    rows: tuple[RawRow, ...] = field(default_factory=tuple)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class RowsReturned:
    """Outcome of a row-returning statement."""

    result_set: ResultSet


@dataclass(frozen=True)
class RowsAffected:
    """Outcome of a row-affecting statement."""

    count: int


ExecutionOutcome = Union[RowsReturned, RowsAffected]
