"""Prepared statement emulation on top of a DB-API cursor."""

from __future__ import annotations

import datetime as dt
from typing import Any, List, Optional, Sequence

from ...core.errors import DbHelperError, UnsupportedParameterError
from ...core.params import ParamKind, SqlParam, to_params
from ...utils.logger import get_logger
from .dialects import Dialect

logger = get_logger(__name__)


class PreparedStatement:
    """SQL template plus positional values collected by typed `set_*` calls.

    Indexes are 1-based. Templates use `?` markers, which the dialect rewrites
    to the driver's paramstyle when the statement runs with values; the
    values are handed to `cursor.execute()` as one tuple.
    """

    def __init__(self, cursor: Any, sql: str, dialect: Dialect, driver: Any = None):
        self.cursor = cursor
        self.sql = sql
        self.dialect = dialect
        self.driver = driver
        self._values: List[Any] = []

    @property
    def values(self) -> tuple[Any, ...]:
        return tuple(self._values)

    def _set(self, index: int, value: Any) -> None:
        if index < 1:
            raise IndexError(f"Parameter index must be >= 1, got {index}.")
        while len(self._values) < index:
            self._values.append(None)
        self._values[index - 1] = value

    def set_null(self, index: int) -> None:
        self._set(index, None)

    def set_string(self, index: int, value: str) -> None:
        self._set(index, value)

    def set_boolean(self, index: int, value: bool) -> None:
        self._set(index, self.dialect.bind_boolean(value))

    def set_long(self, index: int, value: int) -> None:
        self._set(index, int(value))

    def set_int(self, index: int, value: int) -> None:
        self._set(index, int(value))

    def set_double(self, index: int, value: float) -> None:
        self._set(index, float(value))

    def set_float(self, index: int, value: float) -> None:
        self._set(index, float(value))

    def set_timestamp(self, index: int, value: dt.datetime) -> None:
        self._set(index, self.dialect.bind_timestamp(value))

    def set_time(self, index: int, value: dt.time) -> None:
        self._set(index, self.dialect.bind_time(value))

    def set_date(self, index: int, value: dt.date) -> None:
        self._set(index, self.dialect.bind_date(value))

    def set_bytes(self, index: int, value: bytes) -> None:
        self._set(index, self.dialect.bind_bytes(self.driver, value))

    def bind_parameters(self, params: Optional[Sequence[Any]]) -> None:
        """Bind every parameter to its typed setter, in positional order.

        Raises:
            UnsupportedParameterError: `params` is a bare string or bytes
                value, or a parameter is not one of `ParamKind`.
        """

        for index, param in enumerate(to_params(params, self.sql), start=1):
            self.bind(index, param)

    def bind(self, index: int, param: SqlParam) -> None:
        kind = param.kind
        value = param.value
        logger.debug(
            "Parameter #%d for SQL %r is %s: %r",
            index - 1,
            self.sql,
            getattr(kind, "value", kind),
            value,
        )

        if kind is ParamKind.NULL:
            self.set_null(index)
        elif kind is ParamKind.STRING:
            self.set_string(index, value)
        elif kind is ParamKind.BOOLEAN:
            self.set_boolean(index, value)
        elif kind is ParamKind.LONG:
            self.set_long(index, value)
        elif kind is ParamKind.INT:
            self.set_int(index, value)
        elif kind is ParamKind.DOUBLE:
            self.set_double(index, value)
        elif kind is ParamKind.FLOAT:
            self.set_float(index, value)
        elif kind is ParamKind.TIMESTAMP:
            self.set_timestamp(index, value)
        elif kind is ParamKind.TIME:
            self.set_time(index, value)
        elif kind is ParamKind.DATE:
            self.set_date(index, value)
        elif kind is ParamKind.BYTES:
            self.set_bytes(index, value)
        else:
            raise UnsupportedParameterError(index - 1, repr(kind), self.sql)

    def execute_query(self) -> Any:
        """Run the statement and return the DB-API cursor positioned before row one."""

        self._execute("query")
        return self.cursor

    def execute_update(self) -> int:
        """Run the statement as a mutation and return the affected row count."""

        self._execute("update")
        rowcount = getattr(self.cursor, "rowcount", None)
        if rowcount is None or rowcount < 0:
            return 0
        return int(rowcount)

    def close(self) -> None:
        close = getattr(self.cursor, "close", None)
        if callable(close):
            close()

    def _execute(self, action: str) -> None:
        logger.debug("Executing %s for SQL %r", action, self.sql)
        try:
            if self._values:
                self.cursor.execute(self.dialect.render_sql(self.sql, self.driver), self.values)
            else:
                self.cursor.execute(self.sql)
        except Exception as exc:
            raise DbHelperError(
                f"Failed to execute {action} for SQL {self.sql!r}", exc
            ) from exc

    def __enter__(self) -> PreparedStatement:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
