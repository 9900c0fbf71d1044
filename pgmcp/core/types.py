"""Shared core type aliases used across contracts, executor, and ports."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

PositionalParams = List[Any]
QueryParams = Optional[PositionalParams]

RawArguments = Mapping[str, Any]
RawRow = Sequence[Any]
Record = Dict[str, Any]
Records = List[Record]
