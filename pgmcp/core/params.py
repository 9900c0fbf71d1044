"""Typed parameter records decoded from raw tool arguments.

Each tool has one frozen dataclass. Field annotations drive runtime shape
checks, field metadata carries constraints (`non_empty`, `min`, `non_empty_map`)
plus the human description that also feeds the published JSON schema.

Usage:
    params = decode("count_rows", {"table_name": "users"})
"""

from __future__ import annotations

import types
from collections.abc import Mapping, Sequence
from dataclasses import MISSING, Field, dataclass, field, fields
from functools import lru_cache
from typing import Any, Dict, List, Optional, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from .errors import InvalidParameters
from .types import RawArguments

P = TypeVar("P", bound="ToolParams")


def _field(description: str, default: Any = MISSING, **constraints: Any) -> Any:
    metadata = {"description": description, **constraints}
    if default is MISSING:
        return field(metadata=metadata)
    return field(default=default, metadata=metadata)


class ToolParams:
    """Base class for tool parameter dataclasses with runtime shape checks."""

    def __post_init__(self) -> None:
        hints = _type_hints(type(self))
        for item in fields(self):  # type: ignore[arg-type]
            value = getattr(self, item.name)
            _validate_type(item.name, value, hints.get(item.name, Any))
            _validate_constraints(item.name, value, dict(item.metadata))
        self.model_validate()

    def model_validate(self) -> None:
        """Hook for cross-field checks after per-field validation."""

    @classmethod
    def from_arguments(cls: Type[P], raw: Optional[RawArguments]) -> P:
        """Build the record from a raw argument map, ignoring unknown keys."""

        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise InvalidParameters(
                f"Arguments must be a JSON object, got {_json_type(raw)}."
            )

        kwargs: dict[str, Any] = {}
        for item in fields(cls):  # type: ignore[arg-type]
            if item.name in raw:
                kwargs[item.name] = raw[item.name]
            elif _is_required(item):
                raise InvalidParameters(f"Missing required parameter '{item.name}'.")
        return cls(**kwargs)

    @classmethod
    def json_schema(cls) -> dict[str, Any]:
        """Describe the record as a JSON schema object for tool listings."""

        hints = _type_hints(cls)
        properties: dict[str, Any] = {}
        required: list[str] = []
        for item in fields(cls):  # type: ignore[arg-type]
            prop = _schema_for(hints.get(item.name, Any))
            description = item.metadata.get("description")
            if description:
                prop["description"] = description
            properties[item.name] = prop
            if _is_required(item):
                required.append(item.name)
        return {"type": "object", "properties": properties, "required": required}


@dataclass(frozen=True)
class NoParams(ToolParams):
    """Tools that take no arguments."""


@dataclass(frozen=True)
class QueryParams(ToolParams):
    query: str = _field("SQL SELECT query to execute", non_empty=True)


@dataclass(frozen=True)
class SchemaParams(ToolParams):
    table_name: Optional[str] = _field("Optional table name to filter schema", None)


@dataclass(frozen=True)
class InsertParams(ToolParams):
    table_name: str = _field("Table name to insert into", non_empty=True)
    data: Dict[str, Any] = _field("Data to insert as JSON object")


@dataclass(frozen=True)
class TableNameParams(ToolParams):
    table_name: str = _field("Name of the table", non_empty=True)


@dataclass(frozen=True)
class CountRowsParams(ToolParams):
    table_name: str = _field("Name of the table to count rows from", non_empty=True)
    where_conditions: Optional[Dict[str, Any]] = _field(
        "Optional WHERE conditions as JSON object", None
    )


@dataclass(frozen=True)
class ColumnExistsParams(ToolParams):
    table_name: str = _field("Name of the table", non_empty=True)
    column_name: str = _field("Name of the column to check", non_empty=True)


@dataclass(frozen=True)
class TableSampleParams(ToolParams):
    table_name: str = _field("Name of the table to sample", non_empty=True)
    limit: Optional[int] = _field("Number of rows to return (default: 10, max: 100)", None)


@dataclass(frozen=True)
class UpdateDataParams(ToolParams):
    table_name: str = _field("Name of the table to update", non_empty=True)
    values: Dict[str, Any] = _field(
        "Object with column names as keys and new values", non_empty_map=True
    )
    where_conditions: Dict[str, Any] = _field(
        "Object with column names as keys and values to match for WHERE clause",
        non_empty_map=True,
    )
    limit: Optional[int] = _field(
        "Maximum number of rows to update (safety limit, default: 1000)", None, min=1
    )


@dataclass(frozen=True)
class DeleteDataParams(ToolParams):
    table_name: str = _field("Name of the table to delete from", non_empty=True)
    where_conditions: Dict[str, Any] = _field(
        "Object with column names as keys and values to match for WHERE clause",
        non_empty_map=True,
    )
    limit: Optional[int] = _field(
        "Maximum number of rows to delete (safety limit, default: 1000)", None, min=1
    )


@dataclass(frozen=True)
class ExecuteRawQueryParams(ToolParams):
    query: str = _field("SQL query to execute (use with caution)", non_empty=True)
    params: Optional[List[Any]] = _field(
        "Optional array of parameters for parameterized queries", None
    )


@dataclass(frozen=True)
class RelationshipsParams(ToolParams):
    table_name: Optional[str] = _field("Optional table name to filter relationships", None)


PARAMS_BY_TOOL: dict[str, Type[ToolParams]] = {
    "query_data": QueryParams,
    "get_schema": SchemaParams,
    "insert_data": InsertParams,
    "list_tables": NoParams,
    "describe_table": TableNameParams,
    "count_rows": CountRowsParams,
    "table_exists": TableNameParams,
    "column_exists": ColumnExistsParams,
    "get_table_sample": TableSampleParams,
    "update_data": UpdateDataParams,
    "delete_data": DeleteDataParams,
    "execute_raw_query": ExecuteRawQueryParams,
    "get_relationships": RelationshipsParams,
    "get_connection_status": NoParams,
}


def decode(tool: str, raw: Optional[RawArguments]) -> ToolParams:
    """Decode raw arguments for `tool` into its typed parameter record.

    Raises:
        InvalidParameters: Unknown tool, missing field, or wrong shape.
    """

    params_cls = PARAMS_BY_TOOL.get(tool)
    if params_cls is None:
        raise InvalidParameters(f"Unknown tool '{tool}'.")
    return params_cls.from_arguments(raw)


@lru_cache(maxsize=None)
def _type_hints(cls: type) -> dict[str, Any]:
    return dict(get_type_hints(cls))


def _is_required(item: Field[Any]) -> bool:
    return item.default is MISSING and item.default_factory is MISSING


def _validate_type(name: str, value: Any, annotation: Any) -> None:
    if annotation is Any:
        return
    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin in (Union, types.UnionType):
        if value is None and type(None) in args:
            return
        for option in args:
            if option is type(None):
                continue
            try:
                _validate_type(name, value, option)
                return
            except InvalidParameters:
                continue
        raise InvalidParameters(
            f"Parameter '{name}' expects {_annotation_name(annotation)}, got {_json_type(value)}."
        )

    if origin in (dict, Mapping):
        if not isinstance(value, Mapping):
            raise InvalidParameters(
                f"Parameter '{name}' must be a JSON object, got {_json_type(value)}."
            )
        for key in value:
            if not isinstance(key, str):
                raise InvalidParameters(f"Parameter '{name}' keys must be strings.")
        return

    if origin in (list, Sequence):
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise InvalidParameters(
                f"Parameter '{name}' must be an array, got {_json_type(value)}."
            )
        return

    if isinstance(annotation, type):
        if value is None:
            raise InvalidParameters(f"Parameter '{name}' cannot be null.")
        if annotation is int and isinstance(value, bool):
            raise InvalidParameters(f"Parameter '{name}' expects integer, got boolean.")
        if not isinstance(value, annotation):
            raise InvalidParameters(
                f"Parameter '{name}' expects {_annotation_name(annotation)}, got {_json_type(value)}."
            )


def _validate_constraints(name: str, value: Any, metadata: dict[str, Any]) -> None:
    if value is None:
        return

    if metadata.get("non_empty") and isinstance(value, str) and not value.strip():
        raise InvalidParameters(f"Parameter '{name}' must be non-empty.")

    if metadata.get("non_empty_map") and isinstance(value, Mapping) and not value:
        raise InvalidParameters(f"Parameter '{name}' must contain at least one column.")

    if "min" in metadata and value < metadata["min"]:
        raise InvalidParameters(f"Parameter '{name}' must be >= {metadata['min']!r}.")


def _schema_for(annotation: Any) -> dict[str, Any]:
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        options = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(options) == 1:
            return _schema_for(options[0])
        return {}
    if origin in (dict, Mapping):
        return {"type": "object"}
    if origin in (list, Sequence):
        return {"type": "array"}
    if annotation is str:
        return {"type": "string"}
    if annotation is int:
        return {"type": "integer"}
    return {}


def _annotation_name(annotation: Any) -> str:
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        return " or ".join(_annotation_name(arg) for arg in get_args(annotation))
    if origin in (dict, Mapping):
        return "object"
    if origin in (list, Sequence):
        return "array"
    return {str: "string", int: "integer", type(None): "null"}.get(annotation, str(annotation))


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, Sequence):
        return "array"
    return type(value).__name__
