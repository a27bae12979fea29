"""Shared core type aliases used across the store, executor, and serializer."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence, Union

ConfigSet = Dict[str, str]
ConfigValues = Mapping[str, str]

ColumnRef = Union[int, str]
RawParams = Optional[Sequence[Any]]
