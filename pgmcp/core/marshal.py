"""Row set to JSON-ready record conversion."""

from __future__ import annotations

from .results import Column, ResultSet
from .types import Record, Records
from .values import family_for_value, from_column


def marshal(result_set: ResultSet) -> Records:
    """Convert every row into a `{column: value}` record, keeping column order.

    A column name that repeats within the row set gets a `_2`, `_3`, ...
    suffix so every column keeps its own key.
    """

    columns = result_set.columns
    keys = record_keys(columns)
    return [_marshal_row(columns, keys, row) for row in result_set.rows]


def record_keys(columns: tuple[Column, ...]) -> tuple[str, ...]:
    """One distinct record key per column, in column order."""

    taken = {column.name for column in columns}
    seen: set[str] = set()
    keys = []
    for column in columns:
        key = column.name
        if key in seen:
            n = 2
            while f"{column.name}_{n}" in taken:
                n += 1
            key = f"{column.name}_{n}"
            taken.add(key)
        seen.add(key)
        keys.append(key)
    return tuple(keys)


def _marshal_row(columns: tuple[Column, ...], keys: tuple[str, ...], row) -> Record:  # noqa: ANN001
    record: Record = {}
    for column, key, raw in zip(columns, keys, row):
        family = column.family if column.family is not None else family_for_value(raw)
        record[key] = from_column(family, raw, column=column.name)
    return record


def first_value(result_set: ResultSet):  # noqa: ANN201
    """Decoded value of the first column of the first row, or `None`."""

    records = marshal(ResultSet(result_set.columns, result_set.rows[:1]))
    if not records:
        return None
    return next(iter(records[0].values()), None)
