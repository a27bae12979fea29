"""Exception types raised by the configuration store and the query executor."""

from __future__ import annotations

from typing import Optional


class _WrappedError(Exception):
    """Base for errors that carry an optional message and an optional cause."""

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        if message is None and cause is not None:
            message = f"{type(cause).__name__}: {cause}"
        super().__init__(message or "")
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class DbHelperError(_WrappedError):
    """Raised for driver, connection, statement, and cursor failures."""


class NoResultError(DbHelperError):
    """Raised by strict single-result lookups when the query yields no row."""


class ResultTypeError(DbHelperError):
    """Raised when a single result does not have the expected runtime type."""

    def __init__(self, actual: type, expected: type):
        super().__init__(
            f"Wrong result type: result is {_qualname(actual)}, expected {_qualname(expected)}"
        )
        self.actual = actual
        self.expected = expected


class ConfigHelperError(_WrappedError):
    """Raised when a configuration file exists but cannot be read or parsed."""


class UnsupportedParameterError(TypeError):
    """Raised when a statement parameter is outside the supported kinds.

    This is a caller bug, not a runtime fault: fix the call site. `index` is
    the 0-based position in the parameter list, or None when the value was
    rejected while building a `SqlParam` outside of any list.
    """

    def __init__(
        self,
        index: Optional[int],
        actual_type: str,
        sql: Optional[str] = None,
        reason: str = "",
    ):
        text = "Illegal parameter" if index is None else f"Illegal parameter #{index}"
        text += f": {actual_type}"
        if reason:
            text += f" ({reason})"
        if sql is not None:
            text += f". SQL is {sql!r}"
        super().__init__(text)
        self.index = index
        self.actual_type = actual_type
        self.sql = sql


def _qualname(tp: type) -> str:
    module = getattr(tp, "__module__", "")
    if module in ("builtins", ""):
        return tp.__qualname__
    return f"{module}.{tp.__qualname__}"
