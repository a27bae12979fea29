"""Typed statement parameters.

`SqlParam` is a closed variant: its `kind` is always one of `ParamKind`, and
the binder in `ports.db_api.statement` handles every member explicitly.
Raw Python values are lifted with `to_param()`.
"""

from __future__ import annotations

import datetime as dt
import math
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import UnsupportedParameterError

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_FLOAT32_MAX = 3.4028234663852886e38


class ParamKind(str, Enum):
    """Supported parameter kinds."""

    STRING = "string"
    BOOLEAN = "boolean"
    LONG = "long"
    INT = "int"
    DOUBLE = "double"
    FLOAT = "float"
    TIMESTAMP = "timestamp"
    TIME = "time"
    DATE = "date"
    BYTES = "bytes"
    NULL = "null"


@dataclass(frozen=True)
class SqlParam:
    """One positional statement parameter tagged with its kind.

    The value is checked against the kind on construction, so a `SqlParam`
    that exists can always be bound. DOUBLE and FLOAT values are stored as
    `float` (FLOAT rounded to single precision) and BYTES values as `bytes`.

    Raises:
        UnsupportedParameterError: `kind` is not a `ParamKind`, or `value`
            does not fit it.
    """

    kind: ParamKind
    value: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ParamKind):
            raise UnsupportedParameterError(None, repr(self.kind), None, "unknown kind")
        reason = _VALUE_CHECKS[self.kind](self.value)
        if reason:
            raise UnsupportedParameterError(
                None, _type_name(self.value), None, f"{self.kind.value}: {reason}"
            )
        if self.kind is ParamKind.DOUBLE:
            object.__setattr__(self, "value", float(self.value))
        elif self.kind is ParamKind.FLOAT:
            object.__setattr__(self, "value", _single_precision(self.value))
        elif self.kind is ParamKind.BYTES:
            object.__setattr__(self, "value", bytes(self.value))

    @classmethod
    def string(cls, value: str) -> SqlParam:
        return cls(ParamKind.STRING, value)

    @classmethod
    def boolean(cls, value: bool) -> SqlParam:
        return cls(ParamKind.BOOLEAN, bool(value))

    @classmethod
    def long(cls, value: int) -> SqlParam:
        return cls(ParamKind.LONG, value)

    @classmethod
    def int32(cls, value: int) -> SqlParam:
        return cls(ParamKind.INT, value)

    @classmethod
    def double(cls, value: float) -> SqlParam:
        return cls(ParamKind.DOUBLE, value)

    @classmethod
    def float32(cls, value: float) -> SqlParam:
        """Single-precision float; the value is rounded to 32 bits."""

        return cls(ParamKind.FLOAT, value)

    @classmethod
    def timestamp(cls, value: dt.datetime) -> SqlParam:
        return cls(ParamKind.TIMESTAMP, value)

    @classmethod
    def time(cls, value: dt.time) -> SqlParam:
        return cls(ParamKind.TIME, value)

    @classmethod
    def date(cls, value: dt.date) -> SqlParam:
        return cls(ParamKind.DATE, value)

    @classmethod
    def bytes(cls, value: bytes | bytearray | memoryview) -> SqlParam:
        return cls(ParamKind.BYTES, value)

    @classmethod
    def null(cls) -> SqlParam:
        return cls(ParamKind.NULL, None)


def to_param(value: Any, index: int = 0, sql: Optional[str] = None) -> SqlParam:
    """Lift a raw Python value into a `SqlParam`.

    Already-typed parameters are returned unchanged. `bool` is checked before
    `int` and `datetime` before `date` because of subclassing.
    """

    if isinstance(value, SqlParam):
        return value
    if value is None:
        return SqlParam.null()
    if isinstance(value, bool):
        return SqlParam.boolean(value)
    if isinstance(value, int):
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise UnsupportedParameterError(index, "int", sql, "out of 64-bit range")
        return SqlParam.long(value)
    if isinstance(value, float):
        return SqlParam.double(value)
    if isinstance(value, str):
        return SqlParam.string(value)
    if isinstance(value, dt.datetime):
        return SqlParam.timestamp(value)
    if isinstance(value, dt.time):
        return SqlParam.time(value)
    if isinstance(value, dt.date):
        return SqlParam.date(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return SqlParam.bytes(value)
    raise UnsupportedParameterError(index, _type_name(value), sql)


def to_params(values: Optional[Iterable[Any]], sql: Optional[str] = None) -> List[SqlParam]:
    """Lift a parameter sequence; `None` means no parameters.

    Raises:
        UnsupportedParameterError: `values` is a single string or bytes value
            rather than a sequence, or one of its items is unsupported.
    """

    if values is None:
        return []
    if isinstance(values, (str, bytes, bytearray, memoryview)):
        raise UnsupportedParameterError(
            None,
            _type_name(values),
            sql,
            "params must be a sequence of values, not a single string/bytes value",
        )
    return [to_param(value, index, sql) for index, value in enumerate(values)]


def _integer_check(low: int, high: int, label: str) -> Callable[[Any], Optional[str]]:
    def check(value: Any) -> Optional[str]:
        if isinstance(value, bool) or not isinstance(value, int):
            return f"expected {label} integer"
        if not low <= value <= high:
            return f"out of {label} range"
        return None

    return check


def _number_check(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "expected a number"
    try:
        float(value)
    except OverflowError:
        return "out of double range"
    return None


def _float32_check(value: Any) -> Optional[str]:
    reason = _number_check(value)
    if reason is None and math.isfinite(value) and abs(float(value)) > _FLOAT32_MAX:
        return "out of 32-bit float range"
    return reason


def _instance_check(*types: type, exclude: tuple[type, ...] = ()) -> Callable[[Any], Optional[str]]:
    expected = " or ".join(tp.__name__ for tp in types)

    def check(value: Any) -> Optional[str]:
        if not isinstance(value, types) or isinstance(value, exclude):
            return f"expected {expected}"
        return None

    return check


def _null_check(value: Any) -> Optional[str]:
    return None if value is None else "expected None"


_VALUE_CHECKS: Dict[ParamKind, Callable[[Any], Optional[str]]] = {
    ParamKind.STRING: _instance_check(str),
    ParamKind.BOOLEAN: _instance_check(bool),
    ParamKind.LONG: _integer_check(_INT64_MIN, _INT64_MAX, "64-bit"),
    ParamKind.INT: _integer_check(_INT32_MIN, _INT32_MAX, "32-bit"),
    ParamKind.DOUBLE: _number_check,
    ParamKind.FLOAT: _float32_check,
    ParamKind.TIMESTAMP: _instance_check(dt.datetime),
    ParamKind.TIME: _instance_check(dt.time),
    ParamKind.DATE: _instance_check(dt.date, exclude=(dt.datetime,)),
    ParamKind.BYTES: _instance_check(bytes, bytearray, memoryview),
    ParamKind.NULL: _null_check,
}


def _single_precision(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def _type_name(value: Any) -> str:
    tp = type(value)
    module = tp.__module__
    if module == "builtins":
        return tp.__qualname__
    return f"{module}.{tp.__qualname__}"
